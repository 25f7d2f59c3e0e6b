"""Shared fixtures: an in-memory store seeded with sample records."""

import pytest

from coliving_reports import InMemoryRecordStore, RecordRepository, ReportGenerator
from coliving_reports.config import CashFlowConfig, ReportingConfig, TaxConfig

PAYMENTS = [
    {
        "id": "1",
        "amount": 1500,
        "date": "2024-01-15",
        "type": "rent",
        "status": "completed",
        "paymentMethod": "bank_transfer",
        "propertyId": "prop1",
    },
    {
        "id": "2",
        "amount": 2000,
        "date": "2024-02-15",
        "type": "rent",
        "status": "completed",
        "paymentMethod": "credit_card",
        "propertyId": "prop1",
    },
    {
        "id": "3",
        "amount": 500,
        "date": "2024-01-20",
        "type": "deposit",
        "status": "completed",
        "paymentMethod": "bank_transfer",
        "propertyId": "prop1",
    },
]

EXPENSES = [
    {
        "id": "1",
        "amount": 200,
        "date": "2024-01-10",
        "category": "maintenance",
        "description": "Plumbing repair",
        "receiptUrl": "https://example.com/receipt1.jpg",
        "propertyId": "prop1",
    },
    {
        "id": "2",
        "amount": 150,
        "date": "2024-02-05",
        "category": "utilities",
        "description": "Electricity bill",
        "receiptUrl": "https://example.com/receipt2.jpg",
        "propertyId": "prop1",
    },
    {
        "id": "3",
        "amount": 100,
        "date": "2024-01-25",
        "category": "supplies",
        "description": "Cleaning supplies",
        "isReimbursable": True,
        "propertyId": "prop1",
    },
]

TAX_PAYMENTS = [
    {"id": "t1", "amount": 18000, "date": "2024-01-15", "type": "rent", "status": "completed"},
    {"id": "t2", "amount": 24000, "date": "2024-07-15", "type": "rent", "status": "completed"},
    {"id": "t3", "amount": 1000, "date": "2024-03-20", "type": "deposit", "status": "completed"},
    {"id": "t4", "amount": 5000, "date": "2024-05-01", "type": "rent", "status": "pending"},
    {"id": "t5", "amount": 9000, "date": "2023-12-15", "type": "rent", "status": "completed"},
]

TAX_EXPENSES = [
    {
        "id": "e1",
        "amount": 2000,
        "date": "2024-02-10",
        "category": "maintenance",
        "description": "Roof repair",
        "receiptUrl": "https://example.com/r1.pdf",
    },
    {
        "id": "e2",
        "amount": 1800,
        "date": "2024-05-05",
        "category": "utilities",
        "description": "Utilities Q2",
        "receiptUrl": "https://example.com/r2.pdf",
    },
    {
        "id": "e3",
        "amount": 500,
        "date": "2024-08-25",
        "category": "professional",
        "description": "Accountant",
        "receiptUrl": "https://example.com/r3.pdf",
    },
    {
        "id": "e4",
        "amount": 100,
        "date": "2024-09-15",
        "category": "supplies",
        "description": "Light bulbs",
    },
]

PROPERTY = {"id": "prop1", "purchasePrice": 300000, "landValue": 60000}


@pytest.fixture
def config() -> ReportingConfig:
    """Default configuration, independent of the environment."""
    return ReportingConfig(env="test", tax=TaxConfig(), cashflow=CashFlowConfig())


@pytest.fixture
def store() -> InMemoryRecordStore:
    """Store holding the sample records under user and property keys."""
    store = InMemoryRecordStore()
    store.rpush("user:user1:payments", *PAYMENTS)
    store.rpush("user:user1:expenses", *EXPENSES)
    store.rpush("payments:prop1", *PAYMENTS)
    store.rpush("expenses:prop1", *EXPENSES)
    store.rpush("user:tax_user:payments", *TAX_PAYMENTS)
    store.rpush("user:tax_user:expenses", *TAX_EXPENSES)
    return store


@pytest.fixture
def repository(store: InMemoryRecordStore) -> RecordRepository:
    return RecordRepository(store)


@pytest.fixture
def generator(repository: RecordRepository, config: ReportingConfig) -> ReportGenerator:
    return ReportGenerator(repository, config=config)
