"""
Boundary sanitizing for portfolio aggregation.

Records reach the backend as loosely-typed JSON: numbers may arrive as strings,
null or not at all, dates in several formats, categories as raw provider
strings. This module is the one place where that leniency lives. Each
``*_from_raw`` builder turns an untyped mapping into a typed record from
``utils.portfolio.records`` with every default applied, so the aggregation
code never has to coerce anything itself.

Nothing in here raises for malformed input. Invalid numbers become 0, invalid
dates become None and unknown categories fall back to ``misc``.
"""

import logging
import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from utils.portfolio.constants import (
    CATEGORY_LOOKUP,
    DEFAULT_PROPERTY_TYPE,
    DEFAULT_RETIREMENT_ALLOCATION,
    FALLBACK_CATEGORY,
    PROPERTY_TYPES,
    RETIREMENT_CATEGORY_FIELDS,
    SNAPSHOT_ASSET_FIELDS,
)
from utils.portfolio.records import (
    Account,
    CustomField,
    Expense,
    Property,
    RentEntry,
    RetirementGoals,
    SavingsGoal,
    ShortTermIncome,
    Snapshot,
    Unit,
)

logger = logging.getLogger(__name__)


# --- Scalars ---

def parse_optional_amount(value: Any) -> Optional[float]:
    """
    Parse a numeric field, returning None when it is not a finite number.

    Accepts ints, floats, Decimals and numeric strings (surrounding whitespace,
    thousands separators and a leading '$' are tolerated). Booleans are not
    treated as numbers.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip().replace(',', '').lstrip('$')
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return number


def parse_amount(value: Any) -> float:
    """Parse-or-zero: any value that is not a finite number becomes 0.0."""
    number = parse_optional_amount(value)
    if number is None:
        if value is not None:
            logger.debug(f"Non-numeric amount {value!r} treated as 0")
        return 0.0
    return number


def finite_or_zero(value: float, what: str = 'total') -> float:
    """
    Parse-or-zero for derived figures: a sum or ratio that overflowed to
    inf (or became NaN) is reported as 0.0.
    """
    if math.isfinite(value):
        return value
    logger.warning(f"Non-finite {what} {value!r} treated as 0")
    return 0.0


def parse_int(value: Any, default: int = 0) -> int:
    """Parse a whole number, truncating towards zero; falls back to ``default``."""
    number = parse_optional_amount(value)
    if number is None:
        return default
    return int(number)


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a calendar date.

    Accepts date/datetime objects and ISO-8601 strings with or without a time
    part (a trailing 'Z' is accepted). Anything else returns None.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'

    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        logger.debug(f"Unparseable date {value!r} treated as missing")
        return None


def parse_text(value: Any) -> Optional[str]:
    """Return a stripped string, or None when empty or not a scalar."""
    if value is None or isinstance(value, (dict, list, tuple, set)):
        return None
    text = str(value).strip()
    return text or None


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes', 'y', 'on')
    if isinstance(value, (int, float)):
        return value != 0
    return False


def normalize_category(raw: Any) -> str:
    """
    Map a raw category string onto one of the canonical categories.

    Lookup is case-insensitive and treats '_' and '-' as spaces. Unrecognized
    or missing categories fall back to ``misc``.
    """
    text = parse_text(raw)
    if text is None:
        return FALLBACK_CATEGORY
    key = ' '.join(text.lower().replace('_', ' ').replace('-', ' ').split())
    category = CATEGORY_LOOKUP.get(key)
    if category is None:
        logger.debug(f"Unrecognized account category {raw!r}, using '{FALLBACK_CATEGORY}'")
        return FALLBACK_CATEGORY
    return category


# --- Helpers ---

def _as_mapping(raw: Any, kind: str) -> Mapping[str, Any]:
    if isinstance(raw, Mapping):
        return raw
    if raw is not None:
        logger.warning(f"Expected a mapping for {kind}, got {type(raw).__name__}; using defaults")
    return {}


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    """Return the first value under ``keys`` that is not None."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _identifier(raw: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        text = parse_text(raw.get(key))
        if text:
            return text
    return None


# --- Records ---

def custom_field_from_raw(raw: Any) -> CustomField:
    if isinstance(raw, CustomField):
        return raw
    data = _as_mapping(raw, 'custom field')
    field_type = (parse_text(data.get('type')) or '').lower()
    return CustomField(
        name=parse_text(data.get('name')) or '',
        amount=parse_amount(data.get('amount')),
        type=field_type,
    )


def snapshot_from_raw(raw: Any) -> Snapshot:
    """Build a Snapshot from a transport dict (camelCase or snake_case keys)."""
    if isinstance(raw, Snapshot):
        return raw
    data = _as_mapping(raw, 'snapshot')

    buckets = {
        name: parse_amount(_first(data, name, transport_key))
        for name, transport_key in SNAPSHOT_ASSET_FIELDS.items()
    }
    custom_fields = tuple(
        custom_field_from_raw(item)
        for item in _as_list(_first(data, 'custom_fields', 'customFields'))
    )

    return Snapshot(
        date=parse_date(data.get('date')),
        liabilities=parse_amount(data.get('liabilities')),
        custom_fields=custom_fields,
        net_worth=parse_optional_amount(_first(data, 'net_worth', 'netWorth')),
        id=_identifier(data, '_id', 'id'),
        **buckets,
    )


def account_from_raw(raw: Any) -> Account:
    """
    Build an Account from either a manual account or a linked provider account.

    Linked accounts carry their balance under ``balances.current`` and their
    category under ``type``/``subtype``; manual accounts use ``amount`` and
    ``category``.
    """
    if isinstance(raw, Account):
        return raw
    data = _as_mapping(raw, 'account')

    balances = data.get('balances')
    current = parse_optional_amount(balances.get('current')) if isinstance(balances, Mapping) else None
    amount = current if current is not None else parse_amount(data.get('amount'))

    raw_category = _first(data, 'category', 'type', 'subtype')

    return Account(
        id=_identifier(data, 'account_id', '_id', 'id'),
        name=parse_text(_first(data, 'name', 'official_name')),
        category=normalize_category(raw_category),
        raw_category=parse_text(raw_category),
        amount=amount,
        institution_name=parse_text(_first(data, 'institution_name', 'institutionName')),
        mask=parse_text(data.get('mask')),
        manually_added=parse_bool(_first(data, 'manually_added', 'manuallyAdded')),
    )


def _rent_entries(value: Any) -> tuple:
    if not isinstance(value, Mapping):
        return ()
    entries = []
    for period, entry in value.items():
        entry_data = entry if isinstance(entry, Mapping) else {}
        entries.append(RentEntry(
            period=str(period),
            amount=parse_amount(entry_data.get('amount')),
            collected=parse_bool(entry_data.get('collected')),
        ))
    return tuple(entries)


def _expense(raw: Any) -> Expense:
    data = _as_mapping(raw, 'expense')
    return Expense(
        amount=parse_amount(data.get('amount')),
        date=parse_date(data.get('date')),
        description=parse_text(data.get('description')) or '',
        category=parse_text(data.get('category')) or '',
    )


def _unit(raw: Any) -> Unit:
    data = _as_mapping(raw, 'unit')
    return Unit(
        name=parse_text(data.get('name')) or '',
        rent_amount=parse_amount(_first(data, 'rent_amount', 'rentAmount')),
        tenant=parse_text(data.get('tenant')) or '',
    )


def _short_term_income(raw: Any) -> ShortTermIncome:
    data = _as_mapping(raw, 'short-term income')
    return ShortTermIncome(
        amount=parse_amount(data.get('amount')),
        date=parse_date(data.get('date')),
        notes=parse_text(data.get('notes')) or '',
    )


def property_from_raw(raw: Any) -> Property:
    if isinstance(raw, Property):
        return raw
    data = _as_mapping(raw, 'property')

    property_type = parse_text(_first(data, 'property_type', 'propertyType'))
    if property_type not in PROPERTY_TYPES:
        if property_type is not None:
            logger.debug(f"Unknown property type {property_type!r}, using '{DEFAULT_PROPERTY_TYPE}'")
        property_type = DEFAULT_PROPERTY_TYPE

    return Property(
        id=_identifier(data, '_id', 'id'),
        address=parse_text(_first(data, 'address', 'property_address', 'propertyAddress')) or '',
        property_type=property_type,
        purchase_date=parse_date(_first(data, 'purchase_date', 'purchaseDate')),
        purchase_price=parse_amount(_first(data, 'purchase_price', 'purchasePrice')),
        value=parse_amount(data.get('value')),
        mortgage_balance=parse_amount(_first(data, 'mortgage_balance', 'mortgageBalance')),
        rent_collected=_rent_entries(_first(data, 'rent_collected', 'rentCollected')),
        expenses=tuple(_expense(item) for item in _as_list(data.get('expenses'))),
        units=tuple(_unit(item) for item in _as_list(data.get('units'))),
        short_term_income=tuple(
            _short_term_income(item)
            for item in _as_list(_first(data, 'short_term_income', 'shortTermIncome'))
        ),
    )


def retirement_goals_from_raw(raw: Any) -> RetirementGoals:
    """
    Build RetirementGoals; category percentages missing from the input take
    their default weights.
    """
    if isinstance(raw, RetirementGoals):
        return raw
    data = _as_mapping(raw, 'retirement goals')

    allocation: Dict[str, int] = {}
    for name, transport_key in RETIREMENT_CATEGORY_FIELDS.items():
        allocation[name] = parse_int(_first(data, name, transport_key), DEFAULT_RETIREMENT_ALLOCATION[name])

    return RetirementGoals(
        current_age=parse_int(_first(data, 'current_age', 'currentAge')),
        retirement_age=parse_int(_first(data, 'retirement_age', 'retirementAge')),
        monthly_spend=parse_amount(_first(data, 'monthly_spend', 'monthlySpend')),
        allocation=allocation,
    )


def savings_goal_from_raw(raw: Any) -> SavingsGoal:
    if isinstance(raw, SavingsGoal):
        return raw
    data = _as_mapping(raw, 'savings goal')
    return SavingsGoal(
        id=_identifier(data, '_id', 'id'),
        name=parse_text(data.get('name')) or '',
        target_amount=parse_amount(_first(data, 'target_amount', 'targetAmount')),
        current_amount=parse_amount(_first(data, 'current_amount', 'currentAmount')),
        end_date=parse_date(_first(data, 'end_date', 'endDate')),
    )


def sanitize_all(items: Optional[Iterable[Any]], builder) -> List[Any]:
    """Apply a ``*_from_raw`` builder to every item; None or a non-list yields []."""
    if items is None or isinstance(items, (str, bytes, Mapping)):
        return []
    return [builder(item) for item in items]
