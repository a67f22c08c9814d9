from __future__ import annotations

import logging
import os
import threading
import time
from typing import Callable, TypeVar

import psutil
from fastapi import FastAPI, HTTPException, Request

from herdbook.core.allocation import CostBreakdown
from herdbook.core.compensation import CaretakerEarnings
from herdbook.core.config import get_settings
from herdbook.core.engine import (
    SaleQuote,
    compute_animal_profit,
    compute_caretaker_earnings,
    compute_caretaker_roster,
    compute_combined_summary,
    compute_expense_breakdown,
    compute_health_breakdown,
    compute_monthly_series,
    compute_portfolio_summary,
    finalize_sale,
    quote_sale,
    suggest_sale_price,
)
from herdbook.core.errors import DataIntegrityError, RecordNotFoundError
from herdbook.core.finance import money, total
from herdbook.core.profit import PortfolioSummary
from herdbook.core.records import Animal, InMemoryRecordStore, Snapshot
from herdbook.core.time_utils import format_date, parse_date, parse_optional_date
from herdbook.models.schemas import (
    AnimalOutput,
    AnimalProfitResponse,
    CaretakerEarningsResponse,
    CaretakerRosterResponse,
    CombinedPortfolioRequest,
    CostBreakdownOutput,
    ExpenseBreakdownResponse,
    ExpenseCategoryOutput,
    HealthBreakdownResponse,
    HealthTypeOutput,
    HerdCountsOutput,
    MonthBucketOutput,
    MonthlySeriesRequest,
    MonthlySeriesResponse,
    PerformanceResponse,
    PortfolioRequest,
    PortfolioSummaryResponse,
    SaleQuoteRequest,
    SaleQuoteResponse,
    SaleReceiptResponse,
    SaleRequest,
    SnapshotRequest,
    SuggestedPriceRequest,
    SuggestedPriceResponse,
)

T = TypeVar("T")

logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Herdbook Finance API",
    version="1.0.0",
)

app.state.last_request_ms = 0.0

_SNAPSHOT_FIELDS = {"animals", "expenses", "healthEvents", "caretakers", "paymentModel"}


@app.middleware("http")
async def collect_request_metrics(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start_time) * 1000.0
    app.state.last_request_ms = elapsed_ms
    return response


def _snapshot(payload: SnapshotRequest) -> Snapshot:
    return Snapshot.from_dict(payload.model_dump(include=_SNAPSHOT_FIELDS))


def _run(call: Callable[[], T]) -> T:
    try:
        return call()
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except DataIntegrityError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _summary_output(summary: PortfolioSummary) -> PortfolioSummaryResponse:
    return PortfolioSummaryResponse(
        totalInvestment=money(summary.total_investment),
        totalRevenue=money(summary.total_revenue),
        totalExpenses=money(summary.total_expenses),
        generalExpenses=money(summary.general_expenses),
        healthCosts=money(summary.health_costs),
        netProfit=money(summary.net_profit),
        profitMargin=money(summary.profit_margin),
        roi=money(summary.roi),
        averageProfitPerSale=money(summary.average_profit_per_sale),
        salesCount=summary.sales_count,
        caretakerPayout=money(summary.caretaker_payout),
        ownerEarnings=money(summary.owner_earnings),
        herd=HerdCountsOutput(
            total=summary.herd.total,
            active=summary.herd.active,
            sold=summary.herd.sold,
            deceased=summary.herd.deceased,
            caretakers=summary.herd.caretakers,
        ),
    )


def _costs_output(costs: CostBreakdown) -> CostBreakdownOutput:
    return CostBreakdownOutput(
        specific=money(costs.specific),
        sharedShare=money(costs.shared_share),
        health=money(costs.health),
        total=money(costs.total),
    )


def _earnings_output(entry: CaretakerEarnings) -> CaretakerEarningsResponse:
    return CaretakerEarningsResponse(
        caretakerId=entry.caretaker_id,
        name=entry.name,
        paymentModel=entry.model.value,
        goatsAssigned=entry.goats_assigned,
        goatsActive=entry.goats_active,
        goatsManaged=entry.goats_managed,
        earnings=money(entry.earnings),
        averageEarningsPerSale=money(entry.average_earnings_per_sale),
    )


def _quote_output(quote: SaleQuote) -> SaleQuoteResponse:
    return SaleQuoteResponse(
        animalId=quote.animal_id,
        salePrice=money(quote.sale_price),
        totalCosts=money(quote.total_costs),
        netProfit=money(quote.net_profit),
        profitMargin=money(quote.profit_margin),
        ownerShare=money(quote.owner_share),
        caretakerShare=money(quote.caretaker_share),
    )


def _animal_output(animal: Animal) -> AnimalOutput:
    return AnimalOutput(
        id=animal.id,
        status=animal.status.value,
        purchasePrice=money(animal.purchase_price),
        purchaseDate=format_date(animal.purchase_date) if animal.purchase_date else None,
        salePrice=money(animal.sale_price) if animal.sale_price is not None else None,
        saleDate=format_date(animal.sale_date) if animal.sale_date else None,
        caretakerId=animal.caretaker_id,
        tagNumber=animal.tag_number,
    )


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post(
    "/herdbook/v1/portfolio:summary",
    response_model=PortfolioSummaryResponse,
)
def portfolio_summary_endpoint(payload: PortfolioRequest) -> PortfolioSummaryResponse:
    summary = _run(
        lambda: compute_portfolio_summary(
            _snapshot(payload),
            parse_optional_date(payload.start),
            parse_optional_date(payload.end),
        )
    )
    return _summary_output(summary)


@app.post(
    "/herdbook/v1/portfolio:combine",
    response_model=PortfolioSummaryResponse,
)
def combined_summary_endpoint(payload: CombinedPortfolioRequest) -> PortfolioSummaryResponse:
    summary = _run(
        lambda: compute_combined_summary(
            [_snapshot(business) for business in payload.businesses],
            parse_optional_date(payload.start),
            parse_optional_date(payload.end),
        )
    )
    return _summary_output(summary)


@app.post(
    "/herdbook/v1/animals/{animal_id}:profit",
    response_model=AnimalProfitResponse,
)
def animal_profit_endpoint(animal_id: str, payload: SnapshotRequest) -> AnimalProfitResponse:
    report = _run(lambda: compute_animal_profit(_snapshot(payload), animal_id))
    return AnimalProfitResponse(
        animalId=report.animal_id,
        status=report.status.value,
        salePrice=money(report.sale_price),
        purchasePrice=money(report.purchase_price),
        costs=_costs_output(report.costs),
        profit=money(report.profit),
        returnPct=money(report.return_pct),
    )


@app.post(
    "/herdbook/v1/animals/{animal_id}:quote",
    response_model=SaleQuoteResponse,
)
def sale_quote_endpoint(animal_id: str, payload: SaleQuoteRequest) -> SaleQuoteResponse:
    quote = _run(lambda: quote_sale(_snapshot(payload), animal_id, payload.salePrice))
    return _quote_output(quote)


@app.post(
    "/herdbook/v1/animals/{animal_id}:suggest-price",
    response_model=SuggestedPriceResponse,
)
def suggested_price_endpoint(
    animal_id: str, payload: SuggestedPriceRequest
) -> SuggestedPriceResponse:
    price = _run(
        lambda: suggest_sale_price(_snapshot(payload), animal_id, parse_date(payload.asOf))
    )
    return SuggestedPriceResponse(animalId=animal_id, suggestedPrice=money(price))


@app.post(
    "/herdbook/v1/animals/{animal_id}:sell",
    response_model=SaleReceiptResponse,
)
def sell_animal_endpoint(animal_id: str, payload: SaleRequest) -> SaleReceiptResponse:
    def _sell():
        store = InMemoryRecordStore.from_snapshot(_snapshot(payload))
        return finalize_sale(store, animal_id, payload.salePrice, parse_date(payload.saleDate))

    receipt = _run(_sell)
    return SaleReceiptResponse(
        animal=_animal_output(receipt.animal),
        quote=_quote_output(receipt.quote),
    )


@app.post(
    "/herdbook/v1/caretakers/{caretaker_id}:earnings",
    response_model=CaretakerEarningsResponse,
)
def caretaker_earnings_endpoint(
    caretaker_id: str, payload: SnapshotRequest
) -> CaretakerEarningsResponse:
    entry = _run(lambda: compute_caretaker_earnings(_snapshot(payload), caretaker_id))
    return _earnings_output(entry)


@app.post(
    "/herdbook/v1/caretakers:roster",
    response_model=CaretakerRosterResponse,
)
def caretaker_roster_endpoint(payload: SnapshotRequest) -> CaretakerRosterResponse:
    roster = _run(lambda: compute_caretaker_roster(_snapshot(payload)))
    return CaretakerRosterResponse(
        caretakers=[_earnings_output(entry) for entry in roster],
        totalEarnings=money(total(entry.earnings for entry in roster)),
    )


@app.post(
    "/herdbook/v1/reports:monthly",
    response_model=MonthlySeriesResponse,
)
def monthly_series_endpoint(payload: MonthlySeriesRequest) -> MonthlySeriesResponse:
    buckets = _run(
        lambda: compute_monthly_series(
            _snapshot(payload), parse_date(payload.referenceDate), payload.windowMonths
        )
    )
    return MonthlySeriesResponse(
        months=[
            MonthBucketOutput(
                label=bucket.label,
                year=bucket.year,
                month=bucket.month,
                periodStart=format_date(bucket.period_start),
                periodEnd=format_date(bucket.period_end),
                investment=money(bucket.investment),
                revenue=money(bucket.revenue),
                expenses=money(bucket.expenses),
                profit=money(bucket.profit),
                cumulativeInvestment=money(bucket.cumulative_investment),
                cumulativeRevenue=money(bucket.cumulative_revenue),
                cumulativeExpenses=money(bucket.cumulative_expenses),
                cumulativeProfit=money(bucket.cumulative_profit),
            )
            for bucket in buckets
        ]
    )


@app.post(
    "/herdbook/v1/reports:expenses",
    response_model=ExpenseBreakdownResponse,
)
def expense_breakdown_endpoint(payload: PortfolioRequest) -> ExpenseBreakdownResponse:
    breakdown = _run(
        lambda: compute_expense_breakdown(
            _snapshot(payload),
            parse_optional_date(payload.start),
            parse_optional_date(payload.end),
        )
    )
    return ExpenseBreakdownResponse(
        categories=[
            ExpenseCategoryOutput(category=category, amount=money(amount))
            for category, amount in breakdown.items()
        ],
        total=money(total(breakdown.values())),
    )


@app.post(
    "/herdbook/v1/reports:health",
    response_model=HealthBreakdownResponse,
)
def health_breakdown_endpoint(payload: PortfolioRequest) -> HealthBreakdownResponse:
    breakdown = _run(
        lambda: compute_health_breakdown(
            _snapshot(payload),
            parse_optional_date(payload.start),
            parse_optional_date(payload.end),
        )
    )
    return HealthBreakdownResponse(
        types=[
            HealthTypeOutput(type=kind, records=entry.records, cost=money(entry.cost))
            for kind, entry in breakdown.items()
        ],
        totalRecords=sum(entry.records for entry in breakdown.values()),
        totalHealthCosts=money(total(entry.cost for entry in breakdown.values())),
    )


@app.get(
    "/herdbook/v1/performance",
    response_model=PerformanceResponse,
)
def performance_report() -> PerformanceResponse:
    process = psutil.Process(os.getpid())
    memory_mb = process.memory_info().rss / (1024 * 1024)
    threads = threading.active_count()
    return PerformanceResponse(
        time=f"{app.state.last_request_ms:.3f} ms",
        memory=f"{memory_mb:.2f} MB",
        threads=threads,
    )
