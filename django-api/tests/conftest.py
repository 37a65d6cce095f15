"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime, timedelta

import pytest
from rest_framework.test import APIClient

from fakes import InMemoryObjectStorage, InMemoryRegistrationStore
from registrations.domain import Capacity, Child, ChildId, Event, EventId, Guardian, GuardianId

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def store() -> InMemoryRegistrationStore:
    return InMemoryRegistrationStore()


@pytest.fixture
def storage() -> InMemoryObjectStorage:
    return InMemoryObjectStorage()


@pytest.fixture
def guardian(store) -> Guardian:
    """A guardian with two children, Mia and Leo."""
    return store.add_guardian(
        Guardian(
            id=GuardianId.new(),
            auth_id="auth|parent",
            first_name="Dana",
            last_name="Reyes",
            email="dana@example.com",
            children=(
                Child(id=ChildId.new(), first_name="Mia", last_name="Reyes"),
                Child(id=ChildId.new(), first_name="Leo", last_name="Reyes"),
            ),
        )
    )


@pytest.fixture
def make_event(store):
    def _make(capacity: int = 0, deadline: datetime | None = NOW + timedelta(days=7), **kwargs) -> Event:
        fields = {
            "id": EventId.new(),
            "title": "Spring Cleanup",
            "capacity": Capacity(capacity),
            "registration_deadline": deadline,
            "start_date": NOW + timedelta(days=10),
            "end_date": NOW + timedelta(days=10, hours=4),
        }
        fields.update(kwargs)
        return store.add_event(Event(**fields))

    return _make


@pytest.fixture
def event(make_event) -> Event:
    return make_event()
