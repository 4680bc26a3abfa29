"""
Reports - dashboard and period statistics.

Pure functions over local copies of the catalog, transaction history
and stock logs. Nothing here mutates its inputs; sorting always works
on a new list.
"""
import calendar
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from pos_retail.services.money import multiply, round_money, sum_money, to_decimal
from pos_retail.services.models import PersistedTransaction, Product

DEFAULT_CATEGORIES = ("makanan", "minuman", "sembako", "jajan")

CATEGORY_LABELS = {
    "makanan": "Makanan",
    "minuman": "Minuman",
    "sembako": "Sembako",
    "jajan": "Jajan",
}

# Estimated gross margin used for profit figures
PROFIT_MARGIN = Decimal("0.3")

PERIODS = ("all", "today", "yesterday", "week", "month", "year", "custom")

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def format_category(category: str) -> str:
    return CATEGORY_LABELS.get(category, category)


def _created_on(record) -> Optional[date]:
    created_at = getattr(record, "created_at", None)
    return created_at.date() if created_at else None


def _subtract_months(day: date, months: int) -> date:
    month_index = day.year * 12 + day.month - 1 - months
    year, month = divmod(month_index, 12)
    month += 1
    # 31 March minus one month is the last day of February
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


# ==================== PRODUCTS ====================

def stock_status(product: Product) -> str:
    """``out`` at zero stock, ``low`` at or below min_stock, else ``normal``."""
    if product.stock <= 0:
        return "out"
    if product.stock <= product.min_stock:
        return "low"
    return "normal"


def low_stock_products(products: Iterable[Product]) -> List[Product]:
    """Products at or below their minimum stock, including sold-out ones."""
    return [p for p in products if p.stock <= p.min_stock]


def filter_products(
    products: Iterable[Product],
    category: Optional[str] = None,
    stock_filter: Optional[str] = None,
) -> List[Product]:
    """
    Restock screen filters.

    Args:
        category: exact category match, ignored when empty
        stock_filter: ``low`` (0 < stock <= min), ``empty`` (stock == 0),
            ``normal`` (stock > min), ignored when empty
    """
    result = list(products)
    if category:
        result = [p for p in result if p.category == category]
    if stock_filter == "low":
        result = [p for p in result if 0 < p.stock <= p.min_stock]
    elif stock_filter == "empty":
        result = [p for p in result if p.stock == 0]
    elif stock_filter == "normal":
        result = [p for p in result if p.stock > p.min_stock]
    return result


def search_products(products: Iterable[Product], term: str) -> List[Product]:
    """Case-insensitive match on name or category."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(products)
    return [
        p for p in products
        if needle in p.name.lower()
        or needle in p.category.lower()
        or needle in format_category(p.category).lower()
    ]


# ==================== TRANSACTIONS ====================

def recent(records: Iterable, limit: int = 5) -> list:
    """Newest first by created_at; records without a timestamp sort last."""
    ordered = sorted(records, key=lambda r: r.created_at or _EPOCH, reverse=True)
    return ordered[:limit]


def transactions_on(transactions: Iterable[PersistedTransaction], day: date) -> List[PersistedTransaction]:
    return [t for t in transactions if _created_on(t) == day]


def filter_by_period(
    transactions: Iterable[PersistedTransaction],
    period: str,
    today: date,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[PersistedTransaction]:
    """
    Select transactions for a report period.

    ``week``, ``month`` and ``year`` are rolling windows ending today.
    ``custom`` is inclusive on both ends and returns everything when
    either bound is missing.
    """
    if period not in PERIODS:
        raise ValueError(f"Unknown report period: {period}")

    items = list(transactions)
    if period == "all":
        return items
    if period == "today":
        return transactions_on(items, today)
    if period == "yesterday":
        return transactions_on(items, today - timedelta(days=1))

    if period == "custom":
        if not start or not end:
            return items
        return [t for t in items if _created_on(t) and start <= _created_on(t) <= end]

    if period == "week":
        since = today - timedelta(days=7)
    elif period == "month":
        since = _subtract_months(today, 1)
    else:
        since = _subtract_months(today, 12)
    return [t for t in items if _created_on(t) and _created_on(t) >= since]


def income(transactions: Iterable[PersistedTransaction]) -> Decimal:
    return sum_money(t.total for t in transactions)


def report_summary(transactions: Sequence[PersistedTransaction]) -> Dict[str, object]:
    """Totals for the report page; profit is estimated at PROFIT_MARGIN."""
    total_sales = income(transactions)
    return {
        "total_sales": total_sales,
        "total_transactions": len(transactions),
        "total_items_sold": sum(item.quantity for t in transactions for item in t.items),
        "total_profit": round_money(multiply(total_sales, PROFIT_MARGIN)),
    }


def revenue_by_day(
    transactions: Iterable[PersistedTransaction],
    today: date,
    days: int = 7,
) -> List[Dict[str, object]]:
    """Daily revenue series, oldest day first, ending today."""
    items = list(transactions)
    series = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        series.append({"date": day, "revenue": income(transactions_on(items, day))})
    return series


def sales_by_category(
    transactions: Iterable[PersistedTransaction],
    categories: Sequence[str] = DEFAULT_CATEGORIES,
) -> Dict[str, Decimal]:
    totals = {category: Decimal("0") for category in categories}
    for transaction in transactions:
        for item in transaction.items:
            if item.category in totals:
                totals[item.category] += to_decimal(item.total)
    return totals


def dashboard_stats(
    products: Sequence[Product],
    transactions: Sequence[PersistedTransaction],
    today: date,
) -> Dict[str, object]:
    """
    Headline figures for the dashboard.

    ``income_change_percent`` compares today with yesterday and is 0
    when yesterday had no income.
    """
    today_transactions = transactions_on(transactions, today)
    today_income = income(today_transactions)
    yesterday_income = income(transactions_on(transactions, today - timedelta(days=1)))

    if yesterday_income > 0:
        change = (today_income - yesterday_income) / yesterday_income * 100
        income_change = change.quantize(Decimal("0.1"))
    else:
        income_change = Decimal("0")

    low_stock = sum(1 for p in products if 0 < p.stock <= p.min_stock)
    out_of_stock = sum(1 for p in products if p.stock == 0)

    return {
        "today_income": today_income,
        "today_transactions": len(today_transactions),
        "yesterday_income": yesterday_income,
        "income_change_percent": income_change,
        "total_products": len(products),
        "low_stock_count": low_stock + out_of_stock,
    }
