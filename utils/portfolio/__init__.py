"""
Portfolio aggregation utilities for net worth, account, real estate and goal figures.

Every function here is a pure computation over records the caller has already
fetched: inputs are sanitized at the boundary, never mutated, and malformed
fields degrade to safe defaults instead of raising.
"""

from .accounts import build_balance_cards, categorize, summarize_accounts
from .goals import (
    AllocationTotalError,
    allocate_percentages_to_dollars,
    plan_retirement,
    savings_goal_progress,
    validate_allocation,
)
from .net_worth import (
    build_chart_data,
    compute_growth,
    compute_net_worth_series,
    compute_trend_series,
    summarize_net_worth,
)
from .real_estate import compute_portfolio_metrics, compute_property_metrics
from .sanitize import normalize_category

__all__ = [
    'AllocationTotalError',
    'allocate_percentages_to_dollars',
    'build_balance_cards',
    'build_chart_data',
    'categorize',
    'compute_growth',
    'compute_net_worth_series',
    'compute_portfolio_metrics',
    'compute_property_metrics',
    'compute_trend_series',
    'normalize_category',
    'plan_retirement',
    'savings_goal_progress',
    'summarize_accounts',
    'summarize_net_worth',
    'validate_allocation',
]
