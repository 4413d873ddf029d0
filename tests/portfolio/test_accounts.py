"""
Tests for account categorization, balance cards and account totals.
"""

import copy
import unittest

import pytest

from utils.portfolio.accounts import (
    build_balance_cards,
    categorize,
    category_title,
    summarize_accounts,
    usable_accounts,
)
from utils.portfolio.constants import CANONICAL_CATEGORIES
from utils.portfolio.sanitize import normalize_category


class TestNormalizeCategory(unittest.TestCase):
    """Raw category strings map onto exactly one canonical category."""

    def test_known_categories(self):
        cases = [
            ('bank', 'bank'),
            ('depository', 'bank'),
            ('Checking', 'bank'),
            ('credit card', 'credit card'),
            ('credit_card', 'credit card'),
            ('credit', 'credit card'),
            ('mortgage', 'loan'),
            ('student', 'loan'),
            ('brokerage', 'investment'),
            ('401k', 'retirement'),
            ('Roth', 'retirement'),
            ('life-insurance', 'insurance'),
            ('crypto', 'digital'),
            ('  CRYPTO  ', 'digital'),
            ('misc', 'misc'),
        ]
        for raw, expected in cases:
            with self.subTest(raw=raw):
                self.assertEqual(normalize_category(raw), expected)

    def test_unknown_or_missing_falls_back_to_misc(self):
        for raw in ['foo', '', None, 42, {'type': 'bank'}]:
            with self.subTest(raw=raw):
                self.assertEqual(normalize_category(raw), 'misc')

    def test_every_result_is_canonical(self):
        for raw in ['bank', 'credit', 'loan', 'ira', 'annuity', 'wallet', 'foo']:
            with self.subTest(raw=raw):
                self.assertIn(normalize_category(raw), CANONICAL_CATEGORIES)


def test_categorize_groups_in_first_seen_order(sample_accounts):
    groups = categorize(sample_accounts)

    assert list(groups) == ['bank', 'digital', 'credit card', 'insurance', 'misc']
    assert [a.id for a in groups['bank'].items] == ['m-1', 'plaid-1']
    assert groups['bank'].subtotal == pytest.approx(10500.5)
    assert groups['digital'].subtotal == 1500.0
    assert groups['credit card'].items[0].name == 'Platypus Rewards Card'
    assert groups['insurance'].subtotal == 0.0
    assert groups['misc'].items[0].raw_category == 'foo'


def test_linked_balance_takes_precedence_over_amount():
    groups = categorize([
        {"account_id": "p-1", "name": "Linked", "type": "depository",
         "amount": 1, "balances": {"current": 250}},
        {"account_id": "p-2", "name": "No balance", "type": "depository",
         "amount": 75, "balances": {"current": None}},
    ])

    assert [a.amount for a in groups['bank'].items] == [250.0, 75.0]


def test_categorize_conserves_amounts(sample_accounts):
    groups = categorize(sample_accounts)
    kept = usable_accounts(sample_accounts)

    assert sum(g.subtotal for g in groups.values()) == pytest.approx(sum(a.amount for a in kept))
    assert sum(g.subtotal for g in groups.values()) == pytest.approx(12510.75)


def test_accounts_without_id_or_name_are_dropped():
    accounts = [
        {"amount": 500, "category": "bank"},
        {"_id": "", "name": "   ", "amount": 250, "category": "bank"},
        {"_id": "keep", "amount": 10, "category": "bank"},
    ]

    groups = categorize(accounts)

    assert [a.id for a in groups['bank'].items] == ['keep']
    assert groups['bank'].subtotal == 10.0


def test_categorize_is_pure(sample_accounts):
    before = copy.deepcopy(sample_accounts)

    assert categorize(sample_accounts) == categorize(sample_accounts)
    assert sample_accounts == before


def test_categorize_empty_input():
    assert categorize([]) == {}
    assert categorize(None) == {}
    assert build_balance_cards([]) == []


def test_balance_cards(sample_accounts):
    cards = build_balance_cards(sample_accounts)

    assert [c.title for c in cards] == ['Bank', 'Digital', 'Credit card', 'Insurance', 'Misc']
    bank = cards[0]
    assert bank.count == 2
    assert bank.subtotal == pytest.approx(10500.5)
    assert bank.share_percent == 83.93
    assert sum(c.share_percent for c in cards) == pytest.approx(100.0, abs=0.05)


def test_balance_card_share_uses_absolute_balances():
    cards = build_balance_cards([
        {"_id": "a", "name": "Checking", "amount": 300, "category": "bank"},
        {"_id": "b", "name": "Mortgage", "amount": -100, "category": "loan"},
    ])

    assert [c.share_percent for c in cards] == [75.0, 25.0]


def test_category_title():
    assert category_title('credit card') == 'Credit card'
    assert category_title('') == ''


def test_summarize_accounts(sample_accounts):
    summary = summarize_accounts(sample_accounts)

    assert summary.account_count == 6
    assert summary.manual_count == 3
    assert summary.linked_count == 3
    assert summary.has_linked_accounts is True
    assert summary.total_balance == pytest.approx(12510.75)


def test_summarize_manual_only():
    summary = summarize_accounts([{"_id": "m", "name": "Cash jar", "amount": 20, "manuallyAdded": "true"}])

    assert summary.has_linked_accounts is False
    assert summary.manual_count == 1
