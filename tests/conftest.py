"""
Pytest configuration for the Vine Finance backend tests

Puts the project root on the import path and provides sample records shaped
the way the mobile app's transport layer delivers them.
"""

import pytest
import sys
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Add the project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture
def sample_snapshots():
    """Three monthly entries, deliberately out of order, with loose typing."""
    return [
        {
            "_id": "nw-3",
            "date": "2024-03-01T00:00:00.000Z",
            "cash": "12000",
            "investments": 30000,
            "realEstate": 250000,
            "retirementAccounts": 40000,
            "vehicles": 15000,
            "personalProperty": 5000,
            "otherAssets": None,
            "liabilities": 200000,
            "customFields": [
                {"name": "Rental Real Estate", "amount": 10000, "type": "asset"},
                {"name": "Car Loan", "amount": "5000", "type": "liability"},
            ],
        },
        {
            "_id": "nw-1",
            "date": "2024-01-01",
            "cash": 10000,
            "investments": 25000,
            "realEstate": 250000,
            "retirementAccounts": 38000,
            "vehicles": 16000,
            "personalProperty": 5000,
            "otherAssets": 0,
            "liabilities": 205000,
            "customFields": [],
            "netWorth": 139000,
        },
        {
            "_id": "nw-2",
            "date": "2024-02-01",
            "cash": 11000,
            "investments": "not a number",
            "realEstate": 250000,
            "retirementAccounts": 39000,
            "vehicles": 15500,
            "personalProperty": 5000,
            "liabilities": 202000,
        },
    ]


@pytest.fixture
def sample_accounts():
    """Mix of manual accounts and provider-shaped linked accounts."""
    return [
        {"_id": "m-1", "name": "Emergency Fund", "amount": 8000, "category": "bank", "manuallyAdded": True},
        {
            "account_id": "plaid-1",
            "name": "Plaid Checking",
            "type": "depository",
            "subtype": "checking",
            "balances": {"current": 2500.5, "available": 2400},
            "institutionName": "First Platypus Bank",
            "mask": "0000",
        },
        {"_id": "m-2", "name": "Coinbase", "amount": "1500", "category": "crypto", "manuallyAdded": True},
        {
            "account_id": "plaid-2",
            "official_name": "Platypus Rewards Card",
            "type": "credit",
            "balances": {"current": 410.25},
        },
        {"_id": "m-3", "name": "Whole Life", "amount": None, "category": "insurance", "manuallyAdded": True},
        {"name": "Mystery", "amount": 100, "category": "foo"},
    ]


@pytest.fixture
def sample_property():
    """Property used for the single-property metric checks."""
    return {
        "_id": "re-1",
        "propertyAddress": "12 Vine St",
        "propertyType": "Long-Term Rental",
        "purchaseDate": "2019-06-15",
        "purchasePrice": 400000,
        "value": 500000,
        "mortgageBalance": 300000,
        "rentCollected": {
            "jan": {"amount": 2000, "collected": True},
            "feb": {"amount": 2000, "collected": False},
        },
        "expenses": [{"amount": 500, "description": "Plumbing", "category": "repairs"}],
        "units": [
            {"name": "Unit A", "rentAmount": 1200, "tenant": "A. Tenant"},
            {"name": "Unit B", "rentAmount": "800", "tenant": ""},
        ],
    }
