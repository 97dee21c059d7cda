"""
Recharge, payout and marketer balance operations.

Marketer balances are never stored: ``get_marketer_balance`` folds the full
commission and payout history on every call.
"""
import logging
from typing import List, Optional

from django.conf import settings
from django.utils import timezone

from core_backend.base import new_id
from core_backend.exceptions import (
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from core_backend.infrastructure.events import ChangeKind

from .entities import (
    LedgerEntry,
    LedgerEntryType,
    Marketer,
    PayoutRecord,
    RechargeRequest,
    RechargeStatus,
)

logger = logging.getLogger(__name__)


def _positive_int(value, field: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a whole number of points.")
    if number != value and str(number) != str(value):
        raise ValidationError(f"{field} must be a whole number of points.")
    if number <= 0:
        raise ValidationError(f"{field} must be greater than zero.")
    return number


class LedgerService:
    def __init__(self, repositories, feed):
        self.repos = repositories
        self.feed = feed

    # Recharge requests

    def create_recharge_request(
        self, cafeteria_id: str, amount, proof_image_url: str = ""
    ) -> RechargeRequest:
        amount = _positive_int(amount, "amount")
        if self.repos.cafeterias.get_by_id(cafeteria_id) is None:
            raise NotFoundError(f"Cafeteria {cafeteria_id} not found.")

        request = RechargeRequest(
            id=new_id("rch"),
            cafeteria_id=cafeteria_id,
            amount=amount,
            status=RechargeStatus.PENDING,
            created_at=timezone.now(),
            proof_image_url=proof_image_url or "",
        )
        with self.repos.atomic():
            request = self.repos.ledger.create_recharge_request(request)

        logger.info(f"Recharge request {request.id} for {amount} points from cafeteria {cafeteria_id}")
        self.feed.publish(ChangeKind.RECHARGE_REQUESTED, request.id)
        return request

    def process_recharge_request(
        self, request_id: str, status: str, notes: Optional[str] = None
    ) -> RechargeRequest:
        """
        Approve or reject a pending recharge request.

        Approval credits the cafeteria and appends a ``recharge_credit`` entry in
        the same unit of work as the status change. It also clears an expired
        trial and stops the trial clock.

        Raises:
            NotFoundError: Unknown request, or its cafeteria no longer exists
            ValidationError: Status is not approved/rejected, or the request was
                already processed
        """
        if status not in (RechargeStatus.APPROVED, RechargeStatus.REJECTED):
            raise ValidationError(
                f"Invalid recharge status '{status}'. Use 'approved' or 'rejected'."
            )

        with self.repos.atomic():
            request = self.repos.ledger.get_recharge_request(request_id)
            if request is None:
                raise NotFoundError(f"Recharge request {request_id} not found.")
            if request.is_processed:
                raise ValidationError(
                    f"Recharge request {request_id} was already {request.status}."
                )

            processed = self.repos.ledger.update_recharge_request_status(
                request_id, status, notes
            )
            if processed is None:
                # Lost the race against another processor
                raise ValidationError(f"Recharge request {request_id} was already processed.")

            if processed.status == RechargeStatus.APPROVED:
                cafeteria = self.repos.cafeterias.update_points(
                    processed.cafeteria_id, processed.amount
                )
                if cafeteria is None:
                    raise NotFoundError(f"Cafeteria {processed.cafeteria_id} not found.")
                # A paying cafeteria is out of its trial
                self.repos.cafeterias.end_trial(processed.cafeteria_id)
                self.repos.ledger.add_entry(
                    LedgerEntry(
                        id=new_id("led"),
                        type=LedgerEntryType.RECHARGE_CREDIT,
                        amount=processed.amount,
                        timestamp=timezone.now(),
                        cafeteria_id=processed.cafeteria_id,
                        description=f"Recharge {processed.id} approved",
                    )
                )

        logger.info(f"Recharge request {request_id} {processed.status}")
        self.feed.publish(ChangeKind.RECHARGE_PROCESSED, request_id)
        if processed.status == RechargeStatus.APPROVED:
            self.feed.publish(ChangeKind.CAFETERIA_UPDATED, processed.cafeteria_id)
        return processed

    def get_recharge_requests(
        self, cafeteria_id: Optional[str] = None, status: Optional[str] = None
    ) -> List[RechargeRequest]:
        if cafeteria_id is not None:
            requests = self.repos.ledger.get_recharge_requests_by_cafeteria_id(cafeteria_id)
        else:
            requests = self.repos.ledger.get_all_recharge_requests()
        if status is not None:
            requests = [r for r in requests if r.status == status]
        return requests

    # Payouts and marketer balances

    def register_marketer(self, name: str, parent_id: Optional[str] = None, marketer_id=None) -> Marketer:
        if not name:
            raise ValidationError("Marketer name is required.")
        if parent_id is not None and self.repos.ledger.get_marketer(parent_id) is None:
            raise NotFoundError(f"Marketer {parent_id} not found.")
        marketer = Marketer(id=marketer_id or new_id("mkt"), name=name, parent_id=parent_id)
        with self.repos.atomic():
            marketer = self.repos.ledger.create_marketer(marketer)
        logger.info(f"Registered marketer {marketer.id}")
        self.feed.publish(ChangeKind.MARKETER_UPDATED, marketer.id)
        return marketer

    def get_marketer_balance(self, marketer_id: str) -> int:
        earned = sum(e.amount for e in self.repos.ledger.get_commissions_by_marketer_id(marketer_id))
        paid = sum(p.amount for p in self.repos.ledger.get_payout_records_by_marketer_id(marketer_id))
        return earned - paid

    def create_payout(
        self, marketer_id: str, amount, note: Optional[str] = None, created_by: str = "admin"
    ) -> PayoutRecord:
        """
        Record a payout to a marketer along with a ``payout_debit`` ledger entry.

        With ``PAYOUT_ENFORCE_MARKETER_BALANCE`` on (the default) the payout may
        not exceed the marketer's derived balance.
        """
        amount = _positive_int(amount, "amount")

        with self.repos.atomic():
            # Row lock serializes concurrent payouts to the same marketer
            if self.repos.ledger.get_marketer(marketer_id, for_update=True) is None:
                raise NotFoundError(f"Marketer {marketer_id} not found.")

            if getattr(settings, "PAYOUT_ENFORCE_MARKETER_BALANCE", True):
                balance = self.get_marketer_balance(marketer_id)
                if amount > balance:
                    raise InsufficientBalanceError(
                        f"Payout of {amount} exceeds marketer balance of {balance}."
                    )

            now = timezone.now()
            record = self.repos.ledger.create_payout_record(
                PayoutRecord(
                    id=new_id("pay"),
                    marketer_id=marketer_id,
                    amount=amount,
                    created_at=now,
                    created_by=created_by or "admin",
                    note=note or "",
                )
            )
            self.repos.ledger.add_entry(
                LedgerEntry(
                    id=new_id("led"),
                    type=LedgerEntryType.PAYOUT_DEBIT,
                    amount=amount,
                    timestamp=now,
                    marketer_id=marketer_id,
                    description=note or f"Payout {record.id}",
                )
            )

        logger.info(f"Payout {record.id} of {amount} points to marketer {marketer_id}")
        self.feed.publish(ChangeKind.PAYOUT_CREATED, record.id)
        return record

    def get_payout_records(self, marketer_id: Optional[str] = None) -> List[PayoutRecord]:
        if marketer_id is not None:
            return self.repos.ledger.get_payout_records_by_marketer_id(marketer_id)
        return self.repos.ledger.get_all_payout_records()

    def get_marketer_commission_history(self, marketer_id: str) -> List[LedgerEntry]:
        return self.repos.ledger.get_commissions_by_marketer_id(marketer_id)

    def get_all_marketer_ids(self) -> List[str]:
        return self.repos.ledger.get_marketer_ids()

    def get_ledger_entries(self, **filters) -> List[LedgerEntry]:
        return self.repos.ledger.get_entries(**filters)

    # Manual adjustments

    def adjust_cafeteria_points(self, cafeteria_id: str, change: int, description: str = ""):
        """
        Apply a signed manual correction to a cafeteria balance.

        The ledger entry records the magnitude; the description carries the
        direction.
        """
        try:
            change = int(change)
        except (TypeError, ValueError):
            raise ValidationError("change must be a whole number of points.")
        if change == 0:
            raise ValidationError("change cannot be zero.")

        with self.repos.atomic():
            cafeteria = self.repos.cafeterias.update_points(cafeteria_id, change)
            if cafeteria is None:
                raise NotFoundError(f"Cafeteria {cafeteria_id} not found.")
            direction = "credit" if change > 0 else "debit"
            self.repos.ledger.add_entry(
                LedgerEntry(
                    id=new_id("led"),
                    type=LedgerEntryType.MANUAL_ADJUSTMENT,
                    amount=abs(change),
                    timestamp=timezone.now(),
                    cafeteria_id=cafeteria_id,
                    description=description or f"Manual {direction} of {abs(change)} points",
                )
            )

        logger.info(f"Manual adjustment of {change} points on cafeteria {cafeteria_id}")
        self.feed.publish(ChangeKind.CAFETERIA_UPDATED, cafeteria_id)
        return cafeteria
