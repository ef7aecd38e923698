"""
Actuals Aggregator
==================
Groups booked transactions into calendar-month buckets split by category.
"""

from typing import Dict, Iterable

from components.records import CategoryTotals, MonthBucket, Transaction


def aggregate_actuals(transactions: Iterable[Transaction]) -> Dict[str, MonthBucket]:
    """
    Bucket transactions by ``YYYY-MM``.

    Non-negative amounts count as income, negative amounts as expenses (stored
    positive). An empty input yields an empty map.

    Returns:
        Dict of month key to MonthBucket, ordered by month.
    """
    buckets: Dict[str, MonthBucket] = {}
    for txn in transactions:
        bucket = buckets.setdefault(txn.month, MonthBucket())
        category = bucket.by_category.setdefault(txn.category_name, CategoryTotals())
        if txn.amount >= 0:
            bucket.income += txn.amount
            category.income += txn.amount
        else:
            bucket.expenses += abs(txn.amount)
            category.expenses += abs(txn.amount)
    return {month: buckets[month] for month in sorted(buckets)}


def closing_balances(transactions: Iterable[Transaction], opening_balance: float = 0.0) -> Dict[str, float]:
    """Balance at the end of each month with activity: opening balance plus every transaction through that month."""
    net_by_month: Dict[str, float] = {}
    for txn in transactions:
        net_by_month[txn.month] = net_by_month.get(txn.month, 0.0) + txn.amount

    balances = {}
    running = opening_balance
    for month in sorted(net_by_month):
        running += net_by_month[month]
        balances[month] = running
    return balances


def category_history(actuals: Dict[str, MonthBucket]) -> Dict[str, Dict[str, CategoryTotals]]:
    """Pivot month buckets into ``{category: {month: totals}}`` with months ascending."""
    history: Dict[str, Dict[str, CategoryTotals]] = {}
    for month in sorted(actuals):
        for name, totals in actuals[month].by_category.items():
            history.setdefault(name, {})[month] = totals
    return history
