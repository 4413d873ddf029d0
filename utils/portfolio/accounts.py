"""
Account Categorization

Groups linked and manual accounts into canonical categories and builds the
per-category balance cards shown on the accounts screen.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from utils.portfolio.net_worth import round_display
from utils.portfolio.records import Account, AccountsSummary, BalanceCard, CategoryGroup
from utils.portfolio.sanitize import account_from_raw, finite_or_zero, sanitize_all

logger = logging.getLogger(__name__)


def usable_accounts(accounts: Optional[Iterable[Any]]) -> List[Account]:
    """
    Sanitize accounts and drop the ones that cannot be displayed or referenced
    later for edit/delete (no id and no name).
    """
    kept = []
    for account in sanitize_all(accounts, account_from_raw):
        if not account.id and not account.name:
            logger.debug(f"Dropping account without id or name (category={account.raw_category!r})")
            continue
        kept.append(account)
    return kept


def categorize(accounts: Optional[Iterable[Any]]) -> Dict[str, CategoryGroup]:
    """
    Group accounts by canonical category.

    Categories appear in the order they are first seen in the input. The sum
    of all subtotals equals the sum of the kept accounts' amounts.

    Args:
        accounts: Account records or raw dicts (manual or provider-shaped)

    Returns:
        Mapping of canonical category to its members and subtotal
    """
    members: Dict[str, List[Account]] = {}
    for account in usable_accounts(accounts):
        members.setdefault(account.category, []).append(account)

    groups = {
        category: CategoryGroup(items=items, subtotal=finite_or_zero(sum(a.amount for a in items), f"{category} subtotal"))
        for category, items in members.items()
    }
    logger.debug(f"Categorized accounts into {len(groups)} categories: {list(groups)}")
    return groups


def category_title(category: str) -> str:
    """Section title: first letter upper-cased ('credit card' -> 'Credit card')."""
    return category[:1].upper() + category[1:]


def build_balance_cards(accounts: Optional[Iterable[Any]]) -> List[BalanceCard]:
    """
    One balance card per category, in ``categorize`` order.

    Share is measured against the sum of absolute subtotals.
    """
    groups = categorize(accounts)
    gross = finite_or_zero(sum(abs(group.subtotal) for group in groups.values()), 'gross balance')

    cards = []
    for category, group in groups.items():
        share = abs(group.subtotal) / gross * 100 if gross > 0 else 0.0
        cards.append(BalanceCard(
            category=category,
            title=category_title(category),
            count=len(group.items),
            subtotal=group.subtotal,
            share_percent=round_display(share),
        ))
    return cards


def summarize_accounts(accounts: Optional[Iterable[Any]]) -> AccountsSummary:
    kept = usable_accounts(accounts)
    manual = sum(1 for a in kept if a.manually_added)
    linked = len(kept) - manual
    return AccountsSummary(
        total_balance=finite_or_zero(sum(a.amount for a in kept), 'total balance'),
        account_count=len(kept),
        linked_count=linked,
        manual_count=manual,
        has_linked_accounts=linked > 0,
    )
