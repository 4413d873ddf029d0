"""
Retirement allocation and savings goal calculations.

The retirement allocation turns a monthly spend and a set of integer category
percentages into dollar amounts. It never renormalizes the percentages: a
total other than 100 is the caller's to reject (see ``validate_allocation``).
"""

import logging
from typing import Any, Dict, Mapping, Optional

from utils.portfolio.constants import DEFAULT_RETIREMENT_ALLOCATION, REQUIRED_ALLOCATION_TOTAL
from utils.portfolio.net_worth import round_display
from utils.portfolio.records import RetirementPlan, SavingsProgress
from utils.portfolio.sanitize import finite_or_zero, parse_amount, retirement_goals_from_raw, savings_goal_from_raw

logger = logging.getLogger(__name__)


class AllocationTotalError(ValueError):
    """Raised when category percentages are not whole numbers totalling exactly 100."""

    def __init__(self, message: str, total: Optional[float] = None):
        super().__init__(message)
        self.total = total


def _round_dollars(value: float) -> int:
    return int(round_display(value, places=0))


def allocate_percentages_to_dollars(monthly_spend: Any, category_percentages: Optional[Mapping[str, Any]]) -> Dict[str, int]:
    """
    Dollar amount per category: round(monthly_spend * percent / 100).

    Category order follows the input mapping. Non-numeric spend or percentages
    count as 0.
    """
    spend = parse_amount(monthly_spend)
    if not isinstance(category_percentages, Mapping):
        return {}
    return {
        category: _round_dollars(spend * parse_amount(percent) / 100)
        for category, percent in category_percentages.items()
    }


def allocation_total(category_percentages: Optional[Mapping[str, Any]]) -> float:
    if not isinstance(category_percentages, Mapping):
        return 0
    total = finite_or_zero(sum(parse_amount(percent) for percent in category_percentages.values()), 'allocation total')
    return int(total) if float(total).is_integer() else total


def is_valid_allocation(category_percentages: Optional[Mapping[str, Any]]) -> bool:
    try:
        validate_allocation(category_percentages)
    except AllocationTotalError:
        return False
    return True


def validate_allocation(category_percentages: Optional[Mapping[str, Any]]) -> None:
    """
    Check that every percentage is a whole number in 0..100 and that they total
    exactly 100.

    Raises:
        AllocationTotalError: if the allocation cannot be accepted as entered
    """
    if not isinstance(category_percentages, Mapping) or not category_percentages:
        raise AllocationTotalError("Allocation must list at least one category", total=0)

    for category, percent in category_percentages.items():
        value = parse_amount(percent)
        if not value.is_integer() or not 0 <= value <= 100:
            raise AllocationTotalError(
                f"Percentage for '{category}' must be a whole number between 0 and 100, got {percent!r}"
            )

    total = allocation_total(category_percentages)
    if total != REQUIRED_ALLOCATION_TOTAL:
        raise AllocationTotalError(
            f"Category percentages must total {REQUIRED_ALLOCATION_TOTAL}%, got {total}%", total=total
        )


def default_allocation() -> Dict[str, int]:
    return dict(DEFAULT_RETIREMENT_ALLOCATION)


def plan_retirement(raw_goals: Any) -> RetirementPlan:
    """Derived retirement figures; ``is_valid`` reports whether the allocation totals 100."""
    goals = retirement_goals_from_raw(raw_goals)
    return RetirementPlan(
        years_until_retirement=max(0, goals.retirement_age - goals.current_age),
        monthly_spend=goals.monthly_spend,
        annual_spend=finite_or_zero(goals.monthly_spend * 12, 'annual spend'),
        allocation_total=allocation_total(goals.allocation),
        is_valid=is_valid_allocation(goals.allocation),
        dollars=allocate_percentages_to_dollars(goals.monthly_spend, goals.allocation),
    )


def savings_goal_progress(raw_goal: Any) -> SavingsProgress:
    """
    Progress towards a savings goal.

    Percent complete is not clamped, so an over-funded goal reads above 100.
    A goal without a positive target reports 0% and is never reached.
    """
    goal = savings_goal_from_raw(raw_goal)
    if goal.target_amount > 0:
        percent = goal.current_amount / goal.target_amount * 100
        reached = goal.current_amount >= goal.target_amount
    else:
        percent = 0.0
        reached = False

    return SavingsProgress(
        goal_id=goal.id,
        name=goal.name,
        percent_complete=round_display(percent),
        remaining=max(0.0, finite_or_zero(goal.target_amount - goal.current_amount, 'remaining amount')),
        reached=reached,
    )
