"""
Pytest fixtures for PolicyTree tests.

Each API test gets its own domain registry through the `get_registry`
dependency override, so registrations never leak between tests.
"""

import os

# Keep test runs from writing logs/policytree.log
os.environ.setdefault("POLICYTREE_LOG_TO_FILE", "0")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from policytree.domains import register_builtin_domains  # noqa: E402
from policytree.main import app  # noqa: E402
from policytree.models.fields import FieldDefinition, field_catalog  # noqa: E402
from policytree.models.operators import ConditionOperator, FieldType  # noqa: E402
from policytree.services.registry import DomainRegistry, get_registry  # noqa: E402


@pytest.fixture
def registry() -> DomainRegistry:
    """Fresh registry holding only the built-in domains."""
    return register_builtin_domains(DomainRegistry())


@pytest.fixture
def client(registry: DomainRegistry):
    """FastAPI TestClient bound to the isolated registry."""
    app.dependency_overrides[get_registry] = lambda: registry
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def fields():
    """Small catalog covering the field types the resolver distinguishes."""
    return field_catalog(
        FieldDefinition(key="price", label="Price", type=FieldType.NUMERIC),
        FieldDefinition(key="createdAt", label="Created at", type=FieldType.DATE),
        FieldDefinition(key="tags", label="Tags", type=FieldType.RELATION),
        FieldDefinition(key="name", label="Name", type=FieldType.STRING),
        FieldDefinition(key="isVip", label="VIP", type=FieldType.BOOLEAN),
        FieldDefinition(key="status", label="Status", type=FieldType.ENUM),
        FieldDefinition(key="openHours", label="Open hours", type=FieldType.TIME),
        FieldDefinition(key="leadTime", label="Lead time", type=FieldType.DURATION),
        FieldDefinition(key="country", label="Country", type=FieldType.LOCATION),
        FieldDefinition(key="currency", label="Currency", type=FieldType.CURRENCY),
        FieldDefinition(
            key="amount",
            label="Amount",
            type=FieldType.NUMERIC,
            operators=[ConditionOperator.GT, ConditionOperator.LT],
        ),
    )
