"""
POS Reports Router

Dashboard and report figures computed from the backend's
catalog, transaction history and stock logs.
"""
import asyncio
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from pos_retail.errors import PosError
from pos_retail.services import reports
from pos_retail.services.money import to_float
from .cart import raise_http
from .deps import get_backend_lazy

router = APIRouter(tags=["pos-reports"])


def _today() -> date:
    return datetime.now(timezone.utc).date()


@router.get("/dashboard")
async def get_dashboard(backend=Depends(get_backend_lazy)):
    """Headline stats, 7-day revenue, category sales, recent sales and low stock."""
    try:
        products, transactions = await asyncio.gather(
            backend.list_products(),
            backend.list_transactions(),
        )
    except PosError as e:
        raise_http(e)

    today = _today()
    stats = reports.dashboard_stats(products, transactions, today)

    return {
        "stats": {
            key: to_float(value) if key.endswith(("income", "percent")) else value
            for key, value in stats.items()
        },
        "revenue_by_day": [
            {"date": point["date"].isoformat(), "revenue": to_float(point["revenue"])}
            for point in reports.revenue_by_day(transactions, today)
        ],
        "sales_by_category": {
            reports.format_category(category): to_float(total)
            for category, total in reports.sales_by_category(transactions).items()
        },
        "recent_transactions": [
            t.model_dump(mode="json") for t in reports.recent(transactions, 5)
        ],
        "low_stock": [
            {**p.model_dump(mode="json"), "status": reports.stock_status(p)}
            for p in reports.low_stock_products(products)[:4]
        ],
    }


@router.get("/reports/summary")
async def get_report_summary(
    period: str = "all",
    start: Optional[date] = None,
    end: Optional[date] = None,
    backend=Depends(get_backend_lazy),
):
    """Sales summary for a period (all, today, yesterday, week, month, year, custom)."""
    if period not in reports.PERIODS:
        raise HTTPException(status_code=400, detail=f"Unknown period: {period}")

    try:
        transactions = await backend.list_transactions()
    except PosError as e:
        raise_http(e)

    selected = reports.filter_by_period(transactions, period, _today(), start, end)
    summary = reports.report_summary(selected)

    return {
        "period": period,
        "total_sales": to_float(summary["total_sales"]),
        "total_transactions": summary["total_transactions"],
        "total_items_sold": summary["total_items_sold"],
        "total_profit": to_float(summary["total_profit"]),
        "transactions": [t.model_dump(mode="json") for t in reports.recent(selected, len(selected))],
    }

