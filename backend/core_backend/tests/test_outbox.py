"""
Write-behind snapshot of the in-memory stores.
"""
import json
from decimal import Decimal
from unittest import mock

import pytest

from core_backend.container import build_container
from core_backend.infrastructure.events import ChangeEvent, ChangeKind
from core_backend.infrastructure.outbox import (
    SNAPSHOT_PENDING_KEY,
    SnapshotOutbox,
    load_snapshot,
    write_snapshot,
)
from core_backend.infrastructure.tasks import persist_state_snapshot


@pytest.fixture
def snapshot_file(tmp_path, settings):
    path = tmp_path / "state" / "snapshot.json"
    settings.ORDERING_SNAPSHOT_PATH = str(path)
    return path


def settle_one_order(container):
    order = container.orders.create_order(
        "s-1", "100101", [{"menu_item_id": "item-005", "quantity": 2}],
        cafeteria_code="1001AB", table_code="1001ABT01",
    )
    for status in ("confirmed", "preparing", "ready", "served", "paid"):
        container.orders.update_order_status(order.id, status)
    return order


class TestSnapshotFile:
    def test_state_survives_restart(self, memory_container, tmp_path):
        """
        HIGH: Orders, balances and ledger entries come back exactly after a reload.
        """
        order = settle_one_order(memory_container)
        path = write_snapshot(memory_container.repositories, str(tmp_path / "snap.json"))

        payload = json.loads(open(path, encoding="utf-8").read())
        assert payload["version"] == 1

        restored = build_container("memory", seed=False, broadcast=False)
        assert load_snapshot(restored.repositories, path) is True

        reloaded = restored.orders.get_order(order.id)
        assert reloaded == memory_container.orders.get_order(order.id)
        assert reloaded.items[0].price == Decimal("2.99")
        assert restored.cafeterias.get_cafeteria("100101").points == 100000 - 1993
        assert restored.ledger.get_marketer_balance("1001") == 797
        assert restored.config.get_commission_config() == memory_container.config.get_commission_config()

    def test_missing_file(self, tmp_path):
        container = build_container("memory", seed=False, broadcast=False)
        assert load_snapshot(container.repositories, str(tmp_path / "absent.json")) is False

    def test_unreadable_file_is_ignored(self, tmp_path, caplog):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        container = build_container("memory", seed=False, broadcast=False)

        assert load_snapshot(container.repositories, str(path)) is False
        assert "Ignoring unreadable state snapshot" in caplog.text

    def test_build_container_prefers_snapshot_over_seed(self, snapshot_file, memory_container):
        memory_container.ledger.adjust_cafeteria_points("100101", 42)
        write_snapshot(memory_container.repositories, str(snapshot_file))

        restored = build_container("memory", seed=True, broadcast=False)
        assert restored.cafeterias.get_cafeteria("100101").points == 100042


@pytest.fixture
def outbox(memory_container):
    return SnapshotOutbox(memory_container.repositories)


class TestScheduling:
    def test_no_path_no_schedule(self, outbox):
        assert outbox.schedule(ChangeEvent(ChangeKind.ORDER_CREATED, "o-1")) is False

    def test_burst_collapses_into_one_timer(self, snapshot_file, outbox, settings):
        settings.ORDERING_SNAPSHOT_DEBOUNCE_SECONDS = 5

        with mock.patch("core_backend.infrastructure.outbox.threading.Timer") as timer:
            assert outbox.schedule(ChangeEvent(ChangeKind.ORDER_CREATED, "o-1")) is True
            assert outbox.schedule(ChangeEvent(ChangeKind.ORDER_PAID, "o-1")) is False

        timer.assert_called_once_with(5.0, outbox.flush, kwargs={"path": str(snapshot_file)})
        timer.return_value.start.assert_called_once_with()

    def test_nothing_is_written_until_the_window_closes(self, snapshot_file, outbox):
        # Celery runs eagerly in tests; the debounce must not depend on countdown
        with mock.patch("core_backend.infrastructure.outbox.threading.Timer"):
            outbox.schedule(ChangeEvent(ChangeKind.ORDER_CREATED, "o-1"))

        assert not snapshot_file.exists()

    def test_flush_reopens_the_window(self, snapshot_file, outbox):
        from django.core.cache import cache

        with mock.patch("core_backend.infrastructure.outbox.threading.Timer"):
            outbox.schedule(ChangeEvent(ChangeKind.ORDER_CREATED, "o-1"))
            assert outbox.flush() is True
            assert cache.get(SNAPSHOT_PENDING_KEY) is None
            assert outbox.schedule(ChangeEvent(ChangeKind.ORDER_PAID, "o-1")) is True

    def test_timer_failure_releases_key(self, snapshot_file, outbox, caplog):
        from django.core.cache import cache

        with mock.patch(
            "core_backend.infrastructure.outbox.threading.Timer", side_effect=RuntimeError("no threads")
        ):
            assert outbox.schedule(ChangeEvent(ChangeKind.ORDER_CREATED, "o-1")) is False

        assert cache.get(SNAPSHOT_PENDING_KEY) is None
        assert "Could not schedule state snapshot" in caplog.text

    def test_flush_ships_state_from_the_owning_process(self, snapshot_file, memory_container, outbox):
        memory_container.ledger.adjust_cafeteria_points("100101", 7)

        with mock.patch.object(persist_state_snapshot, "delay") as delay:
            assert outbox.flush() is True

        path, state = delay.call_args.args
        assert path == str(snapshot_file)
        assert state == memory_container.repositories.export_state()

    def test_broker_failure_is_logged(self, snapshot_file, outbox, caplog):
        with mock.patch.object(persist_state_snapshot, "delay", side_effect=OSError("no broker")):
            assert outbox.flush() is False

        assert "Could not queue state snapshot" in caplog.text


class TestPersistTask:
    def test_writes_given_state(self, snapshot_file, memory_container):
        state = memory_container.repositories.export_state()

        result = persist_state_snapshot(str(snapshot_file), state)

        assert result == {"status": "success", "path": str(snapshot_file)}
        assert json.loads(snapshot_file.read_text(encoding="utf-8"))["state"] == state

    def test_skipped_without_path(self, memory_container):
        assert persist_state_snapshot("", memory_container.repositories.export_state()) == {"status": "skipped"}

    def test_write_failure_reported(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")

        result = persist_state_snapshot(str(blocker / "snapshot.json"), {})

        assert result["status"] == "failed"

    def test_database_container_has_no_outbox(self, django_container):
        assert django_container.outbox is None

    def test_changes_reach_disk_through_the_feed(self, snapshot_file):
        container = build_container("memory", seed=False, broadcast=False)

        with mock.patch("core_backend.infrastructure.outbox.threading.Timer") as timer:
            container.ledger.register_marketer("Solo", marketer_id="m-1")
            container.cafeterias.register_cafeteria("Solo Cafe", "SOLO1", points=3, marketer_id="m-1")

        # Fire the armed timer by hand; Celery runs the write inline in tests
        _, callback = timer.call_args.args
        callback(**timer.call_args.kwargs["kwargs"])

        restored = build_container("memory", seed=False, broadcast=False)
        assert restored.cafeterias.get_cafeterias()[0].code == "SOLO1"
        assert restored.ledger.get_all_marketer_ids() == ["m-1"]
