class HerdbookError(ValueError):
    pass


class DataIntegrityError(HerdbookError):
    pass


class UnknownPaymentModelError(HerdbookError):
    pass


class RecordNotFoundError(HerdbookError):
    pass
