import logging

from django.utils import timezone

from core_backend.base import new_id
from core_backend.exceptions import InsufficientBalanceError, NotFoundError, TrialExpiredError
from ledger.entities import LedgerEntry, LedgerEntryType
from ledger.financial import CommissionSplit, calculate_commissions, calculate_points_to_deduct

logger = logging.getLogger(__name__)


class SettlementService:
    """
    Charges a cafeteria for a paid order and fans the points out as commission.

    ``settle_order`` must run inside the caller's ``repositories.atomic()`` block
    together with the order's status change; it performs no unit of work of its
    own.
    """

    def __init__(self, repositories, config=None):
        self.repos = repositories
        self.config = config

    def settle_order(self, order) -> CommissionSplit:
        """
        Deduct the order's points from its cafeteria and write the ledger entries.

        Writes one ``order_payment`` entry for the cafeteria, then one
        ``commission_credit`` per receiving party: the direct marketer, that
        marketer's parent, and the system owner (no marketer id). Zero shares
        are not written.

        Raises:
            NotFoundError: If the order's cafeteria does not exist
            TrialExpiredError: If the cafeteria's trial ran out and it has not recharged
            InsufficientBalanceError: If the balance cannot cover the order
        """
        points = calculate_points_to_deduct(order.total)

        cafeteria = self.repos.cafeterias.get_by_id(order.cafeteria_id)
        if cafeteria is None:
            raise NotFoundError(f"Cafeteria {order.cafeteria_id} not found.")
        if self.config is not None and self.config.is_trial_expired(cafeteria):
            raise TrialExpiredError("Cafeteria trial has expired. Recharge to settle orders.")
        if cafeteria.points < points:
            raise InsufficientBalanceError("Insufficient points in cafeteria.")

        if points > 0:
            # Conditional in the store as well; a concurrent debit surfaces here
            self.repos.cafeterias.update_points(cafeteria.id, -points)

        now = timezone.now()
        self._write(
            LedgerEntryType.ORDER_PAYMENT,
            points,
            now,
            order,
            cafeteria_id=cafeteria.id,
            description=f"Order {order.id} settled: {points} points",
        )

        direct_marketer = None
        if cafeteria.marketer_id:
            direct_marketer = self.repos.ledger.get_marketer(cafeteria.marketer_id)

        config = self.repos.config.get_commission_config()
        split = calculate_commissions(points, config, has_marketer=cafeteria.marketer_id is not None)

        self._write(
            LedgerEntryType.COMMISSION_CREDIT,
            split.direct_marketer_points,
            now,
            order,
            cafeteria_id=cafeteria.id,
            marketer_id=cafeteria.marketer_id,
            description=f"Direct marketer commission for order {order.id}",
        )
        if direct_marketer is not None and direct_marketer.parent_id:
            self._write(
                LedgerEntryType.COMMISSION_CREDIT,
                split.grandparent_marketer_points,
                now,
                order,
                cafeteria_id=cafeteria.id,
                marketer_id=direct_marketer.parent_id,
                description=f"Grandparent marketer commission for order {order.id}",
            )
        self._write(
            LedgerEntryType.COMMISSION_CREDIT,
            split.owner_points,
            now,
            order,
            cafeteria_id=cafeteria.id,
            description=f"System owner commission for order {order.id}",
        )

        logger.info(
            f"Settled order {order.id}: {points} points from cafeteria {cafeteria.id} "
            f"(direct={split.direct_marketer_points}, "
            f"grandparent={split.grandparent_marketer_points}, owner={split.owner_points})"
        )
        return split

    def _write(self, entry_type, amount, timestamp, order, **fields):
        if amount <= 0:
            return None
        return self.repos.ledger.add_entry(
            LedgerEntry(
                id=new_id("led"),
                type=entry_type,
                amount=amount,
                timestamp=timestamp,
                order_id=order.id,
                **fields,
            )
        )
