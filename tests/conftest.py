"""
Pytest Configuration and Fixtures
==================================
Shared fixtures: a mock db handler plus a small three-month history.

The sample history (as of 2024-06-15):

    2024-04  Sales +5000  Rent -1000  Software -200
    2024-05  Sales +5500  Rent -1000  Software -220
    2024-06  Sales +6050  Rent -1000
"""

import pytest
from datetime import date
from unittest.mock import Mock

from components.records import PlannedItem, Transaction


AS_OF = date(2024, 6, 15)


@pytest.fixture
def mock_db_handler():
    """Create a mock database handler."""
    db = Mock()
    db.client = Mock()
    db.get_transactions.return_value = []
    db.get_planned_income.return_value = []
    db.get_planned_expenses.return_value = []
    db.get_budget.return_value = None
    return db


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def sample_transaction_rows():
    """Raw transaction rows as returned by the store."""
    return [
        {'amount': 5000, 'category': 'Sales', 'booked_at': '2024-04-03'},
        {'amount': -1000, 'category': 'Rent', 'booked_at': '2024-04-05'},
        {'amount': -200, 'category': 'Software', 'booked_at': '2024-04-20'},
        {'amount': 5500, 'category': 'Sales', 'booked_at': '2024-05-03'},
        {'amount': -1000, 'category': 'Rent', 'booked_at': '2024-05-05'},
        {'amount': -220, 'category': 'Software', 'booked_at': '2024-05-20'},
        {'amount': 6050, 'category': 'Sales', 'booked_at': '2024-06-03'},
        {'amount': -1000, 'category': 'Rent', 'booked_at': '2024-06-05'},
    ]


@pytest.fixture
def sample_transactions(sample_transaction_rows):
    """The sample history as Transaction records."""
    return [
        Transaction(
            amount=float(row['amount']),
            category=row['category'],
            booked_at=date.fromisoformat(row['booked_at']),
        )
        for row in sample_transaction_rows
    ]


@pytest.fixture
def planned_expense_rows():
    return [
        {'description': 'Equipment', 'amount': 500, 'expected_date': '2024-09-20', 'recurrence': 'one-off'},
    ]


@pytest.fixture
def planned_income_rows():
    return [
        {'description': 'Retainer', 'amount': 300, 'expected_date': '2024-07-01', 'recurrence': 'monthly'},
    ]


@pytest.fixture
def one_off_expense():
    return PlannedItem('Equipment', 500.0, date(2024, 9, 20), 'one-off')


@pytest.fixture
def monthly_income():
    return PlannedItem('Retainer', 300.0, date(2024, 7, 1), 'monthly')


@pytest.fixture
def populated_db(mock_db_handler, sample_transaction_rows):
    """Mock db handler serving the sample history and no planned items."""
    mock_db_handler.get_transactions.return_value = sample_transaction_rows
    return mock_db_handler
