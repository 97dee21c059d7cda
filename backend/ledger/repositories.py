"""
Ledger, recharge request, payout and marketer storage.

Ledger entries and payout records are append-only: the port exposes no update or
delete for them. Recharge requests change status exactly once, from pending.
"""
import dataclasses
from abc import ABC, abstractmethod
from typing import List, Optional

from django.utils import timezone

from core_backend.base.memory import InMemoryRepository, matches

from . import models
from .entities import (
    LedgerEntry,
    LedgerEntryType,
    Marketer,
    PayoutRecord,
    RechargeRequest,
    RechargeStatus,
)


class LedgerRepository(ABC):
    # Ledger entries

    @abstractmethod
    def add_entry(self, entry: LedgerEntry) -> LedgerEntry: ...

    @abstractmethod
    def get_entries(
        self,
        type: Optional[str] = None,
        cafeteria_id: Optional[str] = None,
        marketer_id: Optional[str] = None,
        order_id: Optional[str] = None,
    ) -> List[LedgerEntry]:
        """Entries in insertion order, narrowed by any non-None filter."""

    def get_entries_by_marketer_id(self, marketer_id: str) -> List[LedgerEntry]:
        return self.get_entries(marketer_id=marketer_id)

    def get_commissions_by_marketer_id(self, marketer_id: str) -> List[LedgerEntry]:
        return self.get_entries(type=LedgerEntryType.COMMISSION_CREDIT, marketer_id=marketer_id)

    # Recharge requests

    @abstractmethod
    def get_all_recharge_requests(self) -> List[RechargeRequest]: ...

    @abstractmethod
    def get_recharge_request(self, request_id: str) -> Optional[RechargeRequest]: ...

    @abstractmethod
    def get_recharge_requests_by_cafeteria_id(self, cafeteria_id: str) -> List[RechargeRequest]: ...

    @abstractmethod
    def create_recharge_request(self, request: RechargeRequest) -> RechargeRequest: ...

    @abstractmethod
    def update_recharge_request_status(
        self, request_id: str, status: str, notes: Optional[str] = None
    ) -> Optional[RechargeRequest]:
        """
        Move a pending request to ``status`` and stamp ``processed_at``.

        Returns ``None`` when the request is unknown or no longer pending, so two
        concurrent approvals cannot both succeed.
        """

    # Payouts

    @abstractmethod
    def get_all_payout_records(self) -> List[PayoutRecord]: ...

    @abstractmethod
    def get_payout_records_by_marketer_id(self, marketer_id: str) -> List[PayoutRecord]: ...

    @abstractmethod
    def create_payout_record(self, record: PayoutRecord) -> PayoutRecord: ...

    # Marketers

    @abstractmethod
    def create_marketer(self, marketer: Marketer) -> Marketer: ...

    @abstractmethod
    def get_marketer(self, marketer_id: str, for_update: bool = False) -> Optional[Marketer]:
        """``for_update`` locks the row until the enclosing unit of work ends."""

    @abstractmethod
    def get_all_marketers(self) -> List[Marketer]: ...

    def get_marketer_ids(self) -> List[str]:
        return [m.id for m in self.get_all_marketers()]


class InMemoryLedgerRepository(InMemoryRepository, LedgerRepository):
    state_fields = {
        "_entries": (LedgerEntry, "id"),
        "_recharge_requests": (RechargeRequest, "id"),
        "_payouts": (PayoutRecord, "id"),
        "_marketers": (Marketer, "id"),
    }

    def __init__(self, lock=None):
        super().__init__(lock)
        self._entries = {}
        self._recharge_requests = {}
        self._payouts = {}
        self._marketers = {}

    def add_entry(self, entry):
        with self._lock:
            self._entries[entry.id] = entry
            return entry

    def get_entries(self, type=None, cafeteria_id=None, marketer_id=None, order_id=None):
        with self._lock:
            return [
                e for e in self._entries.values()
                if matches(
                    e,
                    type=type,
                    cafeteria_id=cafeteria_id,
                    marketer_id=marketer_id,
                    order_id=order_id,
                )
            ]

    def get_all_recharge_requests(self):
        with self._lock:
            return list(self._recharge_requests.values())

    def get_recharge_request(self, request_id):
        return self._recharge_requests.get(request_id)

    def get_recharge_requests_by_cafeteria_id(self, cafeteria_id):
        with self._lock:
            return [
                r for r in self._recharge_requests.values() if r.cafeteria_id == cafeteria_id
            ]

    def create_recharge_request(self, request):
        with self._lock:
            self._recharge_requests[request.id] = request
            return request

    def update_recharge_request_status(self, request_id, status, notes=None):
        with self._lock:
            current = self._recharge_requests.get(request_id)
            if current is None or current.is_processed:
                return None
            changes = {"status": RechargeStatus(status), "processed_at": timezone.now()}
            if notes is not None:
                changes["notes"] = notes
            updated = dataclasses.replace(current, **changes)
            self._recharge_requests[request_id] = updated
            return updated

    def get_all_payout_records(self):
        with self._lock:
            return list(self._payouts.values())

    def get_payout_records_by_marketer_id(self, marketer_id):
        with self._lock:
            return [p for p in self._payouts.values() if p.marketer_id == marketer_id]

    def create_payout_record(self, record):
        with self._lock:
            self._payouts[record.id] = record
            return record

    def create_marketer(self, marketer):
        with self._lock:
            self._marketers[marketer.id] = marketer
            return marketer

    def get_marketer(self, marketer_id, for_update=False):
        return self._marketers.get(marketer_id)

    def get_all_marketers(self):
        with self._lock:
            return list(self._marketers.values())


def entry_from_model(row: models.LedgerEntry) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,
        type=LedgerEntryType(row.type),
        amount=row.amount,
        timestamp=row.timestamp,
        order_id=row.order_id,
        cafeteria_id=row.cafeteria_id,
        marketer_id=row.marketer_id,
        description=row.description,
    )


def recharge_request_from_model(row: models.RechargeRequest) -> RechargeRequest:
    return RechargeRequest(
        id=row.id,
        cafeteria_id=row.cafeteria_id,
        amount=row.amount,
        status=RechargeStatus(row.status),
        created_at=row.created_at,
        proof_image_url=row.proof_image_url,
        processed_at=row.processed_at,
        notes=row.notes,
    )


def payout_from_model(row: models.PayoutRecord) -> PayoutRecord:
    return PayoutRecord(
        id=row.id,
        marketer_id=row.marketer_id,
        amount=row.amount,
        created_at=row.created_at,
        created_by=row.created_by,
        note=row.note,
    )


def marketer_from_model(row: models.Marketer) -> Marketer:
    return Marketer(id=row.id, name=row.name, parent_id=row.parent_id)


class DjangoLedgerRepository(LedgerRepository):
    def add_entry(self, entry):
        models.LedgerEntry.objects.create(
            id=entry.id,
            type=entry.type,
            amount=entry.amount,
            timestamp=entry.timestamp,
            order_id=entry.order_id,
            cafeteria_id=entry.cafeteria_id,
            marketer_id=entry.marketer_id,
            description=entry.description,
        )
        return entry

    def get_entries(self, type=None, cafeteria_id=None, marketer_id=None, order_id=None):
        filters = {
            "type": type,
            "cafeteria_id": cafeteria_id,
            "marketer_id": marketer_id,
            "order_id": order_id,
        }
        rows = models.LedgerEntry.objects.filter(
            **{k: v for k, v in filters.items() if v is not None}
        ).order_by("timestamp", "pk")
        return [entry_from_model(row) for row in rows]

    def get_all_recharge_requests(self):
        rows = models.RechargeRequest.objects.order_by("created_at")
        return [recharge_request_from_model(row) for row in rows]

    def get_recharge_request(self, request_id):
        row = models.RechargeRequest.objects.filter(pk=request_id).first()
        return recharge_request_from_model(row) if row else None

    def get_recharge_requests_by_cafeteria_id(self, cafeteria_id):
        rows = models.RechargeRequest.objects.filter(cafeteria_id=cafeteria_id).order_by("created_at")
        return [recharge_request_from_model(row) for row in rows]

    def create_recharge_request(self, request):
        row = models.RechargeRequest.objects.create(
            id=request.id,
            cafeteria_id=request.cafeteria_id,
            amount=request.amount,
            status=request.status,
            created_at=request.created_at,
            proof_image_url=request.proof_image_url,
            processed_at=request.processed_at,
            notes=request.notes,
        )
        return recharge_request_from_model(row)

    def update_recharge_request_status(self, request_id, status, notes=None):
        changes = {"status": status, "processed_at": timezone.now()}
        if notes is not None:
            changes["notes"] = notes
        updated = models.RechargeRequest.objects.filter(
            pk=request_id, status=RechargeStatus.PENDING
        ).update(**changes)
        if not updated:
            return None
        return self.get_recharge_request(request_id)

    def get_all_payout_records(self):
        rows = models.PayoutRecord.objects.order_by("created_at")
        return [payout_from_model(row) for row in rows]

    def get_payout_records_by_marketer_id(self, marketer_id):
        rows = models.PayoutRecord.objects.filter(marketer_id=marketer_id).order_by("created_at")
        return [payout_from_model(row) for row in rows]

    def create_payout_record(self, record):
        row = models.PayoutRecord.objects.create(
            id=record.id,
            marketer_id=record.marketer_id,
            amount=record.amount,
            created_at=record.created_at,
            created_by=record.created_by,
            note=record.note,
        )
        return payout_from_model(row)

    def create_marketer(self, marketer):
        row = models.Marketer.objects.create(
            id=marketer.id, name=marketer.name, parent_id=marketer.parent_id
        )
        return marketer_from_model(row)

    def get_marketer(self, marketer_id, for_update=False):
        queryset = models.Marketer.objects.filter(pk=marketer_id)
        if for_update:
            queryset = queryset.select_for_update()
        row = queryset.first()
        return marketer_from_model(row) if row else None

    def get_all_marketers(self):
        return [marketer_from_model(row) for row in models.Marketer.objects.order_by("id")]
