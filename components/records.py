"""
Cash-Flow Records
=================
Typed records shared by the forecast components. Loosely-typed JSON only
appears at the storage boundary (``Budget.from_record`` / ``Budget.to_record``);
everything in between works on these dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from components.numeric import DEFAULT_VALUE_CAP, finite_or_zero, sanitize_amount
from components.periods import HORIZONS, month_key

UNCATEGORIZED = "Uncategorized"
PLANNED_ITEMS_CATEGORY = "Planned Items"

RECURRENCE_ONE_OFF = "one-off"
RECURRENCE_MONTHLY = "monthly"
RECURRENCES = (RECURRENCE_ONE_OFF, RECURRENCE_MONTHLY)

ENTRY_ACTUAL = "actual"
ENTRY_FORECAST = "forecast"

RUNWAY_FORECAST_BALANCE = "forecast_balance"
RUNWAY_AVERAGE_BURN = "average_burn"


def normalize_category(category: Optional[str]) -> str:
    if category is None:
        return UNCATEGORIZED
    name = str(category).strip()
    return name or UNCATEGORIZED


@dataclass(frozen=True)
class Transaction:
    """A booked bank transaction; non-negative amounts are inflows."""
    amount: float
    category: Optional[str]
    booked_at: date

    @property
    def month(self) -> str:
        return month_key(self.booked_at)

    @property
    def category_name(self) -> str:
        return normalize_category(self.category)


@dataclass(frozen=True)
class PlannedItem:
    """A known future income or expense entered by the user."""
    description: str
    amount: float
    expected_date: date
    recurrence: str = RECURRENCE_ONE_OFF

    def applies_to(self, month: str) -> bool:
        """Monthly items apply to every forecast month, one-off items to their own month."""
        if self.recurrence == RECURRENCE_MONTHLY:
            return True
        return month_key(self.expected_date) == month


@dataclass
class CategoryTotals:
    income: float = 0.0
    expenses: float = 0.0

    @property
    def net(self) -> float:
        return self.income - self.expenses

    @property
    def has_activity(self) -> bool:
        return self.income > 0 or self.expenses > 0

    def add(self, other: CategoryTotals) -> None:
        self.income += other.income
        self.expenses += other.expenses

    def to_dict(self) -> Dict[str, float]:
        return {"income": self.income, "expenses": self.expenses}

    @classmethod
    def from_dict(
        cls, data: Optional[Mapping[str, Any]], cap: float = DEFAULT_VALUE_CAP, label: str = ""
    ) -> CategoryTotals:
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            income=sanitize_amount(data.get("income"), cap, f"{label}.income"),
            expenses=sanitize_amount(data.get("expenses"), cap, f"{label}.expenses"),
        )


@dataclass
class MonthBucket:
    income: float = 0.0
    expenses: float = 0.0
    by_category: Dict[str, CategoryTotals] = field(default_factory=dict)

    @property
    def net(self) -> float:
        return self.income - self.expenses

    def to_dict(self) -> Dict[str, Any]:
        return {
            "income": self.income,
            "expenses": self.expenses,
            "net": self.net,
            "byCategory": {name: totals.to_dict() for name, totals in self.by_category.items()},
        }


@dataclass(frozen=True)
class CategoryGrowthRate:
    """Compound monthly growth per category, in percent."""
    income_rate: float
    expense_rate: float
    last_observed_value: CategoryTotals

    def to_dict(self) -> Dict[str, Any]:
        return {
            "incomeRate": self.income_rate,
            "expenseRate": self.expense_rate,
            "lastValue": self.last_observed_value.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], cap: float = DEFAULT_VALUE_CAP, label: str = "") -> CategoryGrowthRate:
        last = data.get("lastValue", data.get("lastObservedValue"))
        return cls(
            income_rate=finite_or_zero(data.get("incomeRate")),
            expense_rate=finite_or_zero(data.get("expenseRate")),
            last_observed_value=CategoryTotals.from_dict(last, cap, label),
        )


@dataclass
class Budget:
    horizon: str
    forecast_months: List[str]
    category_growth_rates: Dict[str, CategoryGrowthRate]
    budget_data: Dict[str, Dict[str, CategoryTotals]]

    def month_totals(self, month: str) -> CategoryTotals:
        totals = CategoryTotals()
        for values in self.budget_data.get(month, {}).values():
            totals.add(values)
        return totals

    def to_record(self) -> Dict[str, Any]:
        """Row shape of the persisted Budget table (minus ``user_id``)."""
        return {
            "horizon": self.horizon,
            "forecast_months": list(self.forecast_months),
            "category_growth_rates": {
                name: rate.to_dict() for name, rate in self.category_growth_rates.items()
            },
            "budget_data": {
                month: {name: totals.to_dict() for name, totals in slot.items()}
                for month, slot in self.budget_data.items()
            },
        }

    def to_dict(self) -> Dict[str, Any]:
        record = self.to_record()
        return {
            "horizon": record["horizon"],
            "forecastMonths": record["forecast_months"],
            "categoryGrowthRates": record["category_growth_rates"],
            "budget": record["budget_data"],
        }

    @classmethod
    def from_record(cls, row: Mapping[str, Any], cap: float = DEFAULT_VALUE_CAP) -> Budget:
        """Build a Budget from a stored row, sanitizing every amount."""
        horizon = row.get("horizon")
        if horizon not in HORIZONS:
            raise ValueError(f"Stored budget has unknown horizon '{horizon}'")

        rates = {}
        for name, data in (row.get("category_growth_rates") or {}).items():
            if isinstance(data, Mapping):
                rates[name] = CategoryGrowthRate.from_dict(data, cap, label=name)

        budget_data: Dict[str, Dict[str, CategoryTotals]] = {}
        for month, slot in (row.get("budget_data") or {}).items():
            if not isinstance(slot, Mapping):
                continue
            budget_data[month] = {
                name: CategoryTotals.from_dict(values, cap, label=f"{month}/{name}")
                for name, values in slot.items()
            }

        return cls(
            horizon=horizon,
            forecast_months=sorted(str(m) for m in (row.get("forecast_months") or [])),
            category_growth_rates=rates,
            budget_data=budget_data,
        )


@dataclass(frozen=True)
class RollingForecastEntry:
    month: str
    type: str
    income: float
    expenses: float
    net: float
    balance: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "type": self.type,
            "income": self.income,
            "expenses": self.expenses,
            "net": self.net,
            "balance": self.balance,
        }


@dataclass(frozen=True)
class RunwayResult:
    months: Optional[int] = None
    method: Optional[str] = None
    zero_cash_month: Optional[str] = None
    avg_monthly_burn: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "months": self.months,
            "method": self.method,
            "zeroCashMonth": self.zero_cash_month,
            "avgMonthlyBurn": self.avg_monthly_burn,
        }


@dataclass(frozen=True)
class ScenarioShock:
    """Percent shocks, e.g. ``revenue_shock_pct=-10`` for a 10% revenue drop."""
    name: str
    revenue_shock_pct: float = 0.0
    cost_shock_pct: float = 0.0


@dataclass(frozen=True)
class ScenarioResult:
    name: str
    new_runway_months: Optional[int]
    runway_delta_months: Optional[int]
    shocked_monthly_burn: float
    depletes: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "newRunwayMonths": self.new_runway_months,
            "runwayDeltaMonths": self.runway_delta_months,
            "shockedMonthlyBurn": self.shocked_monthly_burn,
            "depletes": self.depletes,
        }
