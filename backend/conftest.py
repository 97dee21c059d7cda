"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
Every service test runs against a container built from the demo data set;
``container`` is parametrized so the same test exercises both storage backends.
"""
import pytest
from django.core.cache import cache

from core_backend.container import build_container, set_container
from core_backend.demo import DEMO_CAFETERIA_ID


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def ordering_settings(settings):
    """
    Pin the engine settings for every test.

    No snapshot file, no websocket broadcast, and reset allowed, regardless of
    what the developer's environment exports.
    """
    settings.ORDERING_SNAPSHOT_PATH = ""
    settings.ORDERING_BROADCAST_CHANGES = False
    settings.ORDERING_SEED_DEMO_DATA = False
    settings.ORDERING_ALLOW_RESET = True
    settings.COMMISSION_REQUIRE_FULL_ALLOCATION = True
    settings.PAYOUT_ENFORCE_MARKETER_BALANCE = True
    settings.SECURITY_EVENTS_MAX_RETAINED = 1000
    settings.TRIAL_EXPIRY_SWEEP_ENABLED = True
    return settings


@pytest.fixture(autouse=True)
def reset_process_container():
    """
    Drop the process-wide container after each test.

    Views and tasks reach the services through get_container(); a container
    left behind by one test would leak its state into the next.
    """
    yield
    set_container(None)


@pytest.fixture(autouse=True)
def clear_cache_after_test():
    """Clear cache after each test so the snapshot debounce key never leaks."""
    yield
    cache.clear()


# ============================================================================
# CONTAINERS
# ============================================================================

@pytest.fixture
def memory_container():
    """Seeded container on the in-process backend."""
    return build_container("memory", seed=True, broadcast=False)


@pytest.fixture
def django_container(db):
    """Seeded container on the ORM backend."""
    return build_container("django", seed=True, broadcast=False)


@pytest.fixture(params=["memory", pytest.param("django", marks=pytest.mark.django_db)])
def container(request):
    """The same seeded data set on each storage backend in turn."""
    return request.getfixturevalue(f"{request.param}_container")


@pytest.fixture
def installed_container(container):
    """``container`` registered as the process container used by views and tasks."""
    set_container(container)
    return container


@pytest.fixture
def api_client(installed_container):
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def change_log(container):
    """Every change event published by ``container``, in order."""
    events = []
    container.subscribe(events.append)
    return events


# ============================================================================
# DEMO DATA SHORTCUTS
# ============================================================================

CAFETERIA_ID = DEMO_CAFETERIA_ID
CAFETERIA_CODE = "1001AB"


@pytest.fixture
def place_order(container):
    """
    Factory creating a pending order at a demo table.

    Defaults to two Coffees (2.99 each) at table A-01 (Section A).
    """

    def _place_order(items=None, table_code="1001ABT01", session_id="session-1", **kwargs):
        if items is None:
            items = [{"menu_item_id": "item-005", "quantity": 2}]
        return container.orders.create_order(
            session_id,
            kwargs.pop("cafeteria_id", CAFETERIA_ID),
            items,
            cafeteria_code=kwargs.pop("cafeteria_code", CAFETERIA_CODE),
            table_code=table_code,
            **kwargs,
        )

    return _place_order


@pytest.fixture
def advance_order(container):
    """Walk an order along the happy path up to ``target`` (served at most)."""
    path = ["confirmed", "preparing", "ready", "served"]

    def _advance(order, target):
        for status in path[: path.index(target) + 1]:
            order = container.orders.update_order_status(order.id, status)
        return order

    return _advance

