"""
Net Worth Calculations

Pure functions over net worth snapshots: the ordered time series used by the
charts, period-over-period growth, and the dashboard summary figures.

All functions accept raw transport dicts or already-sanitized ``Snapshot``
records, never mutate their input and never raise for malformed fields.
"""

import logging
from datetime import date
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from utils.portfolio.constants import (
    ANNUAL_LOOKBACK_PERIODS,
    CHART_WINDOW,
    CUSTOM_FIELD_ASSET,
    CUSTOM_FIELD_LIABILITY,
    DISPLAY_PRECISION,
    SNAPSHOT_ASSET_FIELDS,
    TREND_WINDOW,
)
from utils.portfolio.records import (
    ChartData,
    Growth,
    NetWorthSummary,
    SeriesPoint,
    Snapshot,
    TrendSeries,
)
from utils.portfolio.sanitize import (
    finite_or_zero,
    parse_amount,
    parse_optional_amount,
    sanitize_all,
    snapshot_from_raw,
)

logger = logging.getLogger(__name__)


# Enough digits to quantize any finite float to DISPLAY_PRECISION places
_ROUNDING_CONTEXT = Context(prec=400, rounding=ROUND_HALF_UP)


def round_display(value: float, places: int = DISPLAY_PRECISION) -> float:
    """
    Round half away from zero for display; only ever applied to final outputs.

    A value that is not finite (a ratio that overflowed) rounds to 0.0.
    """
    value = finite_or_zero(value, 'figure')
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, context=_ROUNDING_CONTEXT))


def sort_snapshots(snapshots: Optional[Iterable[Any]]) -> List[Snapshot]:
    """
    Sanitize and order snapshots by date, oldest first.

    The sort is stable, so entries sharing a date keep their input order.
    Entries without a usable date sort ahead of every dated entry.
    """
    records = sanitize_all(snapshots, snapshot_from_raw)
    return sorted(records, key=lambda s: (s.date is not None, s.date or date.min))


# --- Per-snapshot totals ---

def _custom_total(snapshot: Snapshot, field_type: str) -> float:
    return sum(f.amount for f in snapshot.custom_fields if f.type == field_type)


def snapshot_asset_total(snapshot: Snapshot) -> float:
    """Asset buckets plus custom asset fields."""
    buckets = sum(getattr(snapshot, name) for name in SNAPSHOT_ASSET_FIELDS)
    return finite_or_zero(buckets + _custom_total(snapshot, CUSTOM_FIELD_ASSET), 'asset total')


def snapshot_liability_total(snapshot: Snapshot) -> float:
    """Liabilities total plus custom liability fields."""
    return finite_or_zero(snapshot.liabilities + _custom_total(snapshot, CUSTOM_FIELD_LIABILITY), 'liability total')


def snapshot_net_worth(snapshot: Snapshot, prefer_stored: bool = True) -> float:
    """
    Net worth of one snapshot.

    A stored ``net_worth`` is authoritative when present and ``prefer_stored``
    is set; otherwise the value is derived from the component fields.
    """
    if prefer_stored and snapshot.net_worth is not None:
        return snapshot.net_worth
    return finite_or_zero(snapshot_asset_total(snapshot) - snapshot_liability_total(snapshot), 'net worth')


# --- Series ---

def compute_net_worth_series(snapshots: Optional[Iterable[Any]], prefer_stored: bool = True) -> List[SeriesPoint]:
    """
    Build the chronological net worth series for charting.

    Args:
        snapshots: Snapshot records or raw dicts, in any order
        prefer_stored: Trust a snapshot's stored net worth over the derived one

    Returns:
        One SeriesPoint per input entry, sorted by date ascending
    """
    series = []
    for snapshot in sort_snapshots(snapshots):
        series.append(SeriesPoint(
            date=snapshot.date,
            net_worth=snapshot_net_worth(snapshot, prefer_stored),
            asset_total=snapshot_asset_total(snapshot),
            liability_total=snapshot_liability_total(snapshot),
        ))

    logger.debug(f"Computed net worth series with {len(series)} points")
    return series


def compute_growth(current: Any, previous: Any = None) -> Growth:
    """
    Period-over-period change between two net worth figures.

    A missing previous period or a previous value of 0 yields a 0% reading
    instead of an error; the absolute change is still reported.
    """
    current_value = parse_amount(current)
    previous_value = parse_optional_amount(previous)

    if previous_value is None:
        return Growth(absolute=round_display(current_value), percent=0.0)

    absolute = current_value - previous_value
    percent = (absolute / previous_value) * 100 if previous_value != 0 else 0.0
    return Growth(absolute=round_display(absolute), percent=round_display(percent))


# --- Dashboard summary ---

def summarize_net_worth(snapshots: Optional[Iterable[Any]], prefer_stored: bool = True) -> NetWorthSummary:
    """
    Headline figures for the dashboard.

    Period growth compares the latest entry with the one before it. Annual
    growth compares it with the entry twelve periods earlier when the history
    is long enough, otherwise with the previous entry.
    """
    ordered = sort_snapshots(snapshots)
    if not ordered:
        zero = Growth(absolute=0.0, percent=0.0)
        return NetWorthSummary(
            current_net_worth=0.0,
            previous_net_worth=None,
            period_growth=zero,
            annual_growth=zero,
            cash_percent=0.0,
            asset_total=0.0,
            liability_total=0.0,
            entry_count=0,
        )

    latest = ordered[-1]
    current = snapshot_net_worth(latest, prefer_stored)

    previous = snapshot_net_worth(ordered[-2], prefer_stored) if len(ordered) >= 2 else None
    if len(ordered) > ANNUAL_LOOKBACK_PERIODS:
        year_ago = snapshot_net_worth(ordered[-1 - ANNUAL_LOOKBACK_PERIODS], prefer_stored)
    else:
        year_ago = previous

    cash_percent = (latest.cash / current) * 100 if current != 0 else 0.0

    return NetWorthSummary(
        current_net_worth=current,
        previous_net_worth=previous,
        period_growth=compute_growth(current, previous) if previous is not None else Growth(0.0, 0.0),
        annual_growth=compute_growth(current, year_ago) if year_ago is not None else Growth(0.0, 0.0),
        cash_percent=round_display(cash_percent),
        asset_total=snapshot_asset_total(latest),
        liability_total=snapshot_liability_total(latest),
        entry_count=len(ordered),
        latest_date=latest.date,
    )


def asset_breakdown(snapshot: Any) -> Dict[str, float]:
    """Amount per asset bucket of one snapshot, followed by custom assets by name."""
    record = snapshot_from_raw(snapshot)
    breakdown = {name: getattr(record, name) for name in SNAPSHOT_ASSET_FIELDS}
    for custom in record.custom_fields:
        if custom.type == CUSTOM_FIELD_ASSET and custom.name:
            breakdown[custom.name] = finite_or_zero(breakdown.get(custom.name, 0.0) + custom.amount, custom.name)
    return breakdown


# --- Trend cards and chart ---

def _equities(snapshot: Snapshot) -> float:
    custom = sum(
        f.amount for f in snapshot.custom_fields
        if f.type == CUSTOM_FIELD_ASSET and f.name not in ('Cash', 'Real Estate')
    )
    total = (snapshot.investments + snapshot.retirement_accounts + snapshot.personal_property
             + snapshot.other_assets + custom)
    return finite_or_zero(total, 'equities')


def _house(snapshot: Snapshot) -> float:
    custom = sum(
        f.amount for f in snapshot.custom_fields
        if f.type == CUSTOM_FIELD_ASSET and 'real estate' in f.name.lower()
    )
    return finite_or_zero(snapshot.real_estate + custom, 'house value')


def compute_trend_series(snapshots: Optional[Iterable[Any]], window: int = TREND_WINDOW) -> TrendSeries:
    """Cash, equities and house values for the newest ``window`` entries, oldest first."""
    recent = sort_snapshots(snapshots)[-window:] if window > 0 else []
    return TrendSeries(
        dates=[s.date for s in recent],
        cash=[s.cash for s in recent],
        equities=[_equities(s) for s in recent],
        house=[_house(s) for s in recent],
    )


def chart_label(value: Optional[date]) -> str:
    """Short 'Jan 5' style axis label."""
    if value is None:
        return ''
    return f"{value.strftime('%b')} {value.day}"


def build_chart_data(snapshots: Optional[Iterable[Any]], window: int = CHART_WINDOW,
                     prefer_stored: bool = True) -> ChartData:
    """Labelled net worth, asset and liability series for the newest ``window`` entries."""
    series = compute_net_worth_series(snapshots, prefer_stored)
    recent = series[-window:] if window > 0 else []
    return ChartData(
        labels=[chart_label(point.date) for point in recent],
        net_worth=[point.net_worth for point in recent],
        assets=[point.asset_total for point in recent],
        liabilities=[point.liability_total for point in recent],
    )
