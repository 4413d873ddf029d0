"""
Real Estate Calculations

Per-property metrics (equity, realized rent, expenses, NOI, cap rate,
cash-on-cash return), portfolio rollups, and the rent/cash-flow figures the
real estate screen shows.

Functions that depend on "today" take an explicit ``as_of`` date so that every
result is a pure function of the arguments.
"""

import logging
import math
from datetime import date
from typing import Any, Iterable, List, Optional, Tuple

from utils.portfolio.constants import CASH_FLOW_MONTHS
from utils.portfolio.net_worth import round_display
from utils.portfolio.records import PortfolioMetrics, Property, PropertyMetrics
from utils.portfolio.sanitize import finite_or_zero, property_from_raw, sanitize_all

logger = logging.getLogger(__name__)


def _ratio_percent(numerator: float, denominator: float) -> float:
    """numerator / denominator as a percentage; 0 when the denominator is not positive."""
    if denominator <= 0:
        return 0.0
    scaled = numerator * 100
    if math.isfinite(scaled):
        return finite_or_zero(scaled / denominator, 'ratio')
    return finite_or_zero(numerator / denominator * 100, 'ratio')


def _month_key(value: Optional[date]) -> Optional[str]:
    return value.strftime('%Y-%m') if value is not None else None


def property_equity(prop: Property) -> float:
    """Value minus mortgage balance; negative equity is reported as is."""
    return finite_or_zero(prop.value - prop.mortgage_balance, 'equity')


def value_increase(prop: Property) -> float:
    """Appreciation since purchase; negative when the property lost value."""
    return finite_or_zero(prop.value - prop.purchase_price, 'value increase')


def realized_rent(prop: Property) -> float:
    """Rent actually collected; scheduled but uncollected rent is excluded."""
    return finite_or_zero(sum(entry.amount for entry in prop.rent_collected if entry.collected), 'rent')


def short_term_income_total(prop: Property) -> float:
    return finite_or_zero(sum(item.amount for item in prop.short_term_income), 'short-term income')


def expenses_total(prop: Property) -> float:
    return finite_or_zero(sum(expense.amount for expense in prop.expenses), 'expenses')


def gross_income(prop: Property) -> float:
    """Every rent entry, collected or not, plus short-term income."""
    rent = sum(entry.amount for entry in prop.rent_collected)
    return finite_or_zero(rent + short_term_income_total(prop), 'gross income')


def scheduled_unit_rent(raw_property: Any) -> float:
    """Sum of the rent amounts of every unit in the property."""
    prop = property_from_raw(raw_property)
    return finite_or_zero(sum(unit.rent_amount for unit in prop.units), 'unit rent')


def compute_property_metrics(raw_property: Any, include_short_term: bool = False) -> PropertyMetrics:
    """
    Derived metrics for one property.

    Args:
        raw_property: Property record or raw dict
        include_short_term: Count short-term stay income towards realized income

    Returns:
        PropertyMetrics; cap rate, cash-on-cash and appreciation percentage are
        0 when value or purchase price is not positive
    """
    prop = property_from_raw(raw_property)

    total_rent = realized_rent(prop)
    if include_short_term:
        total_rent = finite_or_zero(total_rent + short_term_income_total(prop), 'rent')
    total_expenses = expenses_total(prop)
    noi = finite_or_zero(total_rent - total_expenses, 'NOI')
    increase = value_increase(prop)

    return PropertyMetrics(
        equity=property_equity(prop),
        total_rent=total_rent,
        total_expenses=total_expenses,
        noi=noi,
        cap_rate=round_display(_ratio_percent(noi, prop.value)),
        cash_on_cash=round_display(_ratio_percent(noi, prop.purchase_price)),
        value_increase=increase,
        value_increase_percent=round_display(_ratio_percent(increase, prop.purchase_price)),
    )


def compute_portfolio_metrics(properties: Optional[Iterable[Any]], include_short_term: bool = False) -> PortfolioMetrics:
    """
    Roll per-property metrics up across the whole portfolio.

    Average cap rate is total NOI over total value; average cash-on-cash
    return is total NOI over total purchase price. Both degrade to 0 instead
    of dividing by zero.

    ``total_income`` is gross: every rent entry whether collected or not, plus
    short-term income. ``real_estate_income`` is that minus total expenses.
    """
    records = sanitize_all(properties, property_from_raw)

    total_equity = 0.0
    total_rent = 0.0
    total_expenses = 0.0
    total_noi = 0.0
    total_value = 0.0
    total_purchase_price = 0.0
    total_income = 0.0

    for prop in records:
        metrics = compute_property_metrics(prop, include_short_term)
        total_equity += metrics.equity
        total_rent += metrics.total_rent
        total_expenses += metrics.total_expenses
        total_noi += metrics.noi
        total_value += prop.value
        total_purchase_price += prop.purchase_price
        total_income += gross_income(prop)

    total_noi = finite_or_zero(total_noi, 'portfolio NOI')
    total_value = finite_or_zero(total_value, 'portfolio value')
    total_purchase_price = finite_or_zero(total_purchase_price, 'portfolio purchase price')
    total_expenses = finite_or_zero(total_expenses, 'portfolio expenses')
    total_income = finite_or_zero(total_income, 'portfolio income')

    logger.debug(f"Real estate portfolio: {len(records)} properties, NOI={total_noi:.2f}, value={total_value:.2f}")

    return PortfolioMetrics(
        total_equity=finite_or_zero(total_equity, 'portfolio equity'),
        total_rent_income=finite_or_zero(total_rent, 'portfolio rent'),
        total_expenses=total_expenses,
        total_noi=total_noi,
        total_value=total_value,
        total_purchase_price=total_purchase_price,
        average_cap_rate=round_display(_ratio_percent(total_noi, total_value)),
        average_coc_return=round_display(_ratio_percent(total_noi, total_purchase_price)),
        total_income=total_income,
        real_estate_income=finite_or_zero(total_income - total_expenses, 'real estate income'),
        property_count=len(records),
    )


def rent_unpaid(properties: Optional[Iterable[Any]]) -> float:
    """Sum of every rent entry not yet collected."""
    total = sum(
        entry.amount
        for prop in sanitize_all(properties, property_from_raw)
        for entry in prop.rent_collected
        if not entry.collected
    )
    return finite_or_zero(total, 'unpaid rent')


def overdue_rent(properties: Optional[Iterable[Any]], as_of: date) -> float:
    """
    Uncollected rent for periods before the month of ``as_of``.

    Period keys are compared as 'YYYY-MM' strings; keys in another format are
    compared the same way, so only zero-padded month keys are meaningful here.
    """
    current_month = _month_key(as_of)
    total = sum(
        entry.amount
        for prop in sanitize_all(properties, property_from_raw)
        for entry in prop.rent_collected
        if not entry.collected and entry.period < current_month
    )
    return finite_or_zero(total, 'overdue rent')


def _shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def monthly_cash_flow(properties: Optional[Iterable[Any]], as_of: date,
                      months: int = CASH_FLOW_MONTHS) -> List[Tuple[str, float]]:
    """
    Net cash flow per calendar month for the ``months`` months ending at ``as_of``.

    Each month sums the rent entry keyed to it (collected or not), plus
    short-term income dated in it, minus expenses dated in it.

    Returns:
        List of ('YYYY-MM', amount) tuples, oldest month first
    """
    records = sanitize_all(properties, property_from_raw)

    keys = []
    for offset in range(-(months - 1), 1):
        year, month = _shift_month(as_of.year, as_of.month, offset)
        keys.append(f"{year:04d}-{month:02d}")

    totals = {key: 0.0 for key in keys}
    for prop in records:
        for entry in prop.rent_collected:
            if entry.period in totals:
                totals[entry.period] += entry.amount
        for item in prop.short_term_income:
            key = _month_key(item.date)
            if key in totals:
                totals[key] += item.amount
        for expense in prop.expenses:
            key = _month_key(expense.date)
            if key in totals:
                totals[key] -= expense.amount

    return [(key, finite_or_zero(totals[key], f"{key} cash flow")) for key in keys]
