"""
Shared constants for the portfolio aggregation modules.

This module centralizes lookup tables used across the net worth, accounts,
real estate and goals calculations so every call site normalizes the same way.
"""

# Canonical account categories, in display order.
# Every raw category string (manual entry or aggregation provider type/subtype)
# is normalized into exactly one of these.
BANK = 'bank'
CREDIT_CARD = 'credit card'
LOAN = 'loan'
INVESTMENT = 'investment'
RETIREMENT = 'retirement'
INSURANCE = 'insurance'
DIGITAL = 'digital'
MISC = 'misc'

CANONICAL_CATEGORIES = (
    BANK, CREDIT_CARD, LOAN, INVESTMENT, RETIREMENT, INSURANCE, DIGITAL, MISC,
)

FALLBACK_CATEGORY = MISC

# Raw category -> canonical category.
# Keys are already normalized (lower case, '_' and '-' replaced by spaces).
# Covers the manual-entry categories plus Plaid account types and the most
# common Plaid subtypes.
CATEGORY_LOOKUP = {
    # Bank / depository
    'bank': BANK,
    'depository': BANK,
    'checking': BANK,
    'savings': BANK,
    'money market': BANK,
    'cd': BANK,
    'cash management': BANK,
    'prepaid': BANK,
    'paypal': BANK,
    'hsa': BANK,
    'ebt': BANK,

    # Credit
    'credit card': CREDIT_CARD,
    'credit': CREDIT_CARD,
    'creditcard': CREDIT_CARD,

    # Loans
    'loan': LOAN,
    'mortgage': LOAN,
    'student': LOAN,
    'auto': LOAN,
    'home equity': LOAN,
    'line of credit': LOAN,
    'business': LOAN,
    'commercial': LOAN,
    'consumer': LOAN,
    'construction': LOAN,
    'overdraft': LOAN,

    # Investments
    'investment': INVESTMENT,
    'brokerage': INVESTMENT,
    'stock plan': INVESTMENT,
    'mutual fund': INVESTMENT,
    'trust': INVESTMENT,
    'ugma': INVESTMENT,
    'utma': INVESTMENT,
    '529': INVESTMENT,

    # Retirement
    'retirement': RETIREMENT,
    '401k': RETIREMENT,
    '401a': RETIREMENT,
    '403b': RETIREMENT,
    '457b': RETIREMENT,
    'ira': RETIREMENT,
    'roth': RETIREMENT,
    'roth 401k': RETIREMENT,
    'sep ira': RETIREMENT,
    'simple ira': RETIREMENT,
    'pension': RETIREMENT,
    'keogh': RETIREMENT,
    'profit sharing plan': RETIREMENT,

    # Insurance
    'insurance': INSURANCE,
    'life insurance': INSURANCE,
    'variable annuity': INSURANCE,
    'fixed annuity': INSURANCE,
    'other annuity': INSURANCE,

    # Digital assets
    'digital': DIGITAL,
    'crypto': DIGITAL,
    'cryptocurrency': DIGITAL,
    'crypto exchange': DIGITAL,
    'non custodial wallet': DIGITAL,

    # Everything else
    'misc': MISC,
    'other': MISC,
}

# Snapshot asset buckets: internal field name -> transport (camelCase) key
SNAPSHOT_ASSET_FIELDS = {
    'cash': 'cash',
    'investments': 'investments',
    'real_estate': 'realEstate',
    'retirement_accounts': 'retirementAccounts',
    'vehicles': 'vehicles',
    'personal_property': 'personalProperty',
    'other_assets': 'otherAssets',
}

CUSTOM_FIELD_ASSET = 'asset'
CUSTOM_FIELD_LIABILITY = 'liability'

# Property types offered by the real estate screens
LONG_TERM_RENTAL = 'Long-Term Rental'
SHORT_TERM_RENTAL = 'Short-Term Rental'
PRIMARY_RESIDENCE = 'Primary Residence'
VACATION_HOME = 'Vacation Home'

PROPERTY_TYPES = (LONG_TERM_RENTAL, SHORT_TERM_RENTAL, PRIMARY_RESIDENCE, VACATION_HOME)
DEFAULT_PROPERTY_TYPE = LONG_TERM_RENTAL

# Retirement spend categories: internal key -> transport key, with default weights
RETIREMENT_CATEGORY_FIELDS = {
    'mortgage': 'mortgage',
    'cars': 'cars',
    'health_care': 'healthCare',
    'food_and_drinks': 'foodAndDrinks',
    'travel_and_entertainment': 'travelAndEntertainment',
    'reinvested_funds': 'reinvestedFunds',
}

DEFAULT_RETIREMENT_ALLOCATION = {
    'mortgage': 22,
    'cars': 3,
    'health_care': 12,
    'food_and_drinks': 10,
    'travel_and_entertainment': 28,
    'reinvested_funds': 25,
}

REQUIRED_ALLOCATION_TOTAL = 100

# Rounding applied to percentages and growth figures handed to presentation code
DISPLAY_PRECISION = 2

# Dashboard windows
TREND_WINDOW = 6
CHART_WINDOW = 12
ANNUAL_LOOKBACK_PERIODS = 12
CASH_FLOW_MONTHS = 6
