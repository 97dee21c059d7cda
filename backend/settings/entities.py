from dataclasses import dataclass
from decimal import Decimal

from core_backend.base import Record


@dataclass(frozen=True)
class CommissionConfig(Record):
    """Percentages of a settled order's points paid to each party."""

    rate_direct_parent_percent: Decimal = Decimal("40")
    rate_grandparent_percent: Decimal = Decimal("15")
    rate_owner_percent: Decimal = Decimal("45")

    @property
    def total_percent(self) -> Decimal:
        return (
            self.rate_direct_parent_percent
            + self.rate_grandparent_percent
            + self.rate_owner_percent
        )


@dataclass(frozen=True)
class TrialConfig(Record):
    global_trial_days: int = 30
