"""
Portfolio Aggregation Endpoints

Stateless compute endpoints over records the caller has already fetched:
net worth snapshots, accounts, real estate properties, retirement goals and
savings goals. Nothing is read from or written to storage here; request
bodies carry loose dicts and the aggregation layer sanitizes them.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from utils.authentication import verify_api_key
from utils.feature_flags import FeatureFlagKey, get_feature_flags
from utils.portfolio.accounts import build_balance_cards, categorize, summarize_accounts
from utils.portfolio.constants import CASH_FLOW_MONTHS, CHART_WINDOW, TREND_WINDOW
from utils.portfolio.goals import AllocationTotalError, plan_retirement, savings_goal_progress, validate_allocation
from utils.portfolio.net_worth import (
    build_chart_data,
    compute_growth,
    compute_net_worth_series,
    compute_trend_series,
    summarize_net_worth,
)
from utils.portfolio.real_estate import (
    compute_portfolio_metrics,
    compute_property_metrics,
    monthly_cash_flow,
    overdue_rent,
    rent_unpaid,
)
from utils.portfolio.sanitize import retirement_goals_from_raw

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/aggregation", tags=["Portfolio Aggregation"])


class NetWorthRequest(BaseModel):
    snapshots: List[Any] = Field(default_factory=list, description="Net worth entries in any order")
    trend_window: int = Field(TREND_WINDOW, ge=0, description="Entries shown on the trend cards")
    chart_window: int = Field(CHART_WINDOW, ge=0, description="Entries shown on the net worth chart")


class GrowthRequest(BaseModel):
    current: Any = Field(None, description="Current period net worth")
    previous: Any = Field(None, description="Previous period net worth, if any")


class AccountsRequest(BaseModel):
    accounts: List[Any] = Field(default_factory=list, description="Manual and linked accounts")


class RealEstateRequest(BaseModel):
    properties: List[Any] = Field(default_factory=list, description="Real estate holdings")
    as_of: Optional[date] = Field(None, description="Reference date for overdue rent and cash flow (defaults to today)")
    cash_flow_months: int = Field(CASH_FLOW_MONTHS, ge=0, le=120)


class RetirementRequest(BaseModel):
    goals: Dict[str, Any] = Field(default_factory=dict, description="Retirement goals form values")


class SavingsGoalsRequest(BaseModel):
    goals: List[Any] = Field(default_factory=list, description="Savings goals")


@router.post("/net-worth")
async def aggregate_net_worth(
    request: NetWorthRequest,
    api_key: str = Depends(verify_api_key)
) -> Dict[str, Any]:
    """Net worth series, dashboard summary, trend cards and chart data."""
    prefer_stored = get_feature_flags().is_enabled_enum(FeatureFlagKey.TRUST_STORED_NET_WORTH)

    series = compute_net_worth_series(request.snapshots, prefer_stored=prefer_stored)
    summary = summarize_net_worth(request.snapshots, prefer_stored=prefer_stored)
    trend = compute_trend_series(request.snapshots, window=request.trend_window)
    chart = build_chart_data(request.snapshots, window=request.chart_window, prefer_stored=prefer_stored)

    logger.info(f"Aggregated {len(series)} net worth entries (prefer_stored={prefer_stored})")
    return {
        "series": [point.to_dict() for point in series],
        "summary": summary.to_dict(),
        "trend": trend.to_dict(),
        "chart": chart.to_dict(),
    }


@router.post("/growth")
async def growth(
    request: GrowthRequest,
    api_key: str = Depends(verify_api_key)
) -> Dict[str, Any]:
    return compute_growth(request.current, request.previous).to_dict()


@router.post("/accounts")
async def aggregate_accounts(
    request: AccountsRequest,
    api_key: str = Depends(verify_api_key)
) -> Dict[str, Any]:
    """Accounts grouped by canonical category, with balance cards and totals."""
    groups = categorize(request.accounts)
    cards = build_balance_cards(request.accounts)
    summary = summarize_accounts(request.accounts)

    logger.info(f"Aggregated {summary.account_count} accounts into {len(groups)} categories")
    return {
        "categories": {category: group.to_dict() for category, group in groups.items()},
        "balance_cards": [card.to_dict() for card in cards],
        "summary": summary.to_dict(),
    }


@router.post("/real-estate")
async def aggregate_real_estate(
    request: RealEstateRequest,
    api_key: str = Depends(verify_api_key)
) -> Dict[str, Any]:
    """Per-property metrics, portfolio rollup, rent status and monthly cash flow."""
    include_short_term = get_feature_flags().is_enabled_enum(FeatureFlagKey.SHORT_TERM_INCOME_IN_NOI)
    as_of = request.as_of or date.today()

    properties = [
        compute_property_metrics(prop, include_short_term=include_short_term).to_dict()
        for prop in request.properties
    ]
    portfolio = compute_portfolio_metrics(request.properties, include_short_term=include_short_term)

    logger.info(f"Aggregated {portfolio.property_count} properties as of {as_of.isoformat()}")
    return {
        "properties": properties,
        "portfolio": portfolio.to_dict(),
        "rent_unpaid": rent_unpaid(request.properties),
        "overdue_rent": overdue_rent(request.properties, as_of),
        "cash_flow": [
            {"month": month, "amount": amount}
            for month, amount in monthly_cash_flow(request.properties, as_of, request.cash_flow_months)
        ],
        "as_of": as_of.isoformat(),
    }


@router.post("/retirement")
async def retirement_plan(
    request: RetirementRequest,
    api_key: str = Depends(verify_api_key)
) -> Dict[str, Any]:
    """
    Retirement plan with dollar allocation.

    Allocations whose percentages do not total exactly 100 are rejected with
    422 rather than rescaled.
    """
    goals = retirement_goals_from_raw(request.goals)
    try:
        validate_allocation(goals.allocation)
    except AllocationTotalError as e:
        logger.info(f"Rejected retirement allocation: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    return plan_retirement(goals).to_dict()


@router.post("/savings-goals")
async def savings_goals(
    request: SavingsGoalsRequest,
    api_key: str = Depends(verify_api_key)
) -> Dict[str, Any]:
    return {"goals": [savings_goal_progress(goal).to_dict() for goal in request.goals]}
