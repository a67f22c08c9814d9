from __future__ import annotations

from pydantic import BaseModel, Field


class AnimalInput(BaseModel):
    id: str
    status: str
    purchasePrice: float = Field(ge=0)
    purchaseDate: str | None = None
    salePrice: float | None = Field(default=None, ge=0)
    saleDate: str | None = None
    caretakerId: str | None = None
    tagNumber: str | None = None
    currentWeight: float | None = Field(default=None, ge=0)


class ExpenseInput(BaseModel):
    id: str
    amount: float = Field(gt=0)
    date: str
    category: str = "Other"
    goatId: str | None = None


class HealthEventInput(BaseModel):
    id: str
    goatId: str
    cost: float = Field(default=0, ge=0)
    date: str
    type: str | None = None


class CaretakerInput(BaseModel):
    id: str
    name: str = ""


class PaymentModelInput(BaseModel):
    type: str
    amount: float = Field(ge=0)


class SnapshotRequest(BaseModel):
    animals: list[AnimalInput] = Field(default_factory=list)
    expenses: list[ExpenseInput] = Field(default_factory=list)
    healthEvents: list[HealthEventInput] = Field(default_factory=list)
    caretakers: list[CaretakerInput] = Field(default_factory=list)
    paymentModel: PaymentModelInput | None = None


class PortfolioRequest(SnapshotRequest):
    start: str | None = None
    end: str | None = None


class CombinedPortfolioRequest(BaseModel):
    businesses: list[SnapshotRequest] = Field(default_factory=list)
    start: str | None = None
    end: str | None = None


class MonthlySeriesRequest(SnapshotRequest):
    referenceDate: str
    windowMonths: int | None = Field(default=None, ge=1, le=12)


class SaleQuoteRequest(SnapshotRequest):
    salePrice: float = Field(gt=0)


class SaleRequest(SaleQuoteRequest):
    saleDate: str


class SuggestedPriceRequest(SnapshotRequest):
    asOf: str


class HerdCountsOutput(BaseModel):
    total: int
    active: int
    sold: int
    deceased: int
    caretakers: int


class PortfolioSummaryResponse(BaseModel):
    totalInvestment: float
    totalRevenue: float
    totalExpenses: float
    generalExpenses: float
    healthCosts: float
    netProfit: float
    profitMargin: float
    roi: float
    averageProfitPerSale: float
    salesCount: int
    caretakerPayout: float
    ownerEarnings: float
    herd: HerdCountsOutput


class CostBreakdownOutput(BaseModel):
    specific: float
    sharedShare: float
    health: float
    total: float


class AnimalProfitResponse(BaseModel):
    animalId: str
    status: str
    salePrice: float
    purchasePrice: float
    costs: CostBreakdownOutput
    profit: float
    returnPct: float


class CaretakerEarningsResponse(BaseModel):
    caretakerId: str
    name: str
    paymentModel: str
    goatsAssigned: int
    goatsActive: int
    goatsManaged: int
    earnings: float
    averageEarningsPerSale: float


class CaretakerRosterResponse(BaseModel):
    caretakers: list[CaretakerEarningsResponse]
    totalEarnings: float


class MonthBucketOutput(BaseModel):
    label: str
    year: int
    month: int
    periodStart: str
    periodEnd: str
    investment: float
    revenue: float
    expenses: float
    profit: float
    cumulativeInvestment: float
    cumulativeRevenue: float
    cumulativeExpenses: float
    cumulativeProfit: float


class MonthlySeriesResponse(BaseModel):
    months: list[MonthBucketOutput]


class ExpenseCategoryOutput(BaseModel):
    category: str
    amount: float


class ExpenseBreakdownResponse(BaseModel):
    categories: list[ExpenseCategoryOutput]
    total: float


class HealthTypeOutput(BaseModel):
    type: str
    records: int
    cost: float


class HealthBreakdownResponse(BaseModel):
    types: list[HealthTypeOutput]
    totalRecords: int
    totalHealthCosts: float


class SaleQuoteResponse(BaseModel):
    animalId: str
    salePrice: float
    totalCosts: float
    netProfit: float
    profitMargin: float
    ownerShare: float
    caretakerShare: float


class AnimalOutput(BaseModel):
    id: str
    status: str
    purchasePrice: float
    purchaseDate: str | None = None
    salePrice: float | None = None
    saleDate: str | None = None
    caretakerId: str | None = None
    tagNumber: str | None = None


class SaleReceiptResponse(BaseModel):
    animal: AnimalOutput
    quote: SaleQuoteResponse


class SuggestedPriceResponse(BaseModel):
    animalId: str
    suggestedPrice: float


class PerformanceResponse(BaseModel):
    time: str
    memory: str
    threads: int
