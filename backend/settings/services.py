import dataclasses
import logging
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.utils import timezone

from core_backend.exceptions import NotFoundError, ValidationError
from core_backend.infrastructure.events import ChangeKind
from ledger.financial import to_decimal, validate_commission_config

from .entities import CommissionConfig, TrialConfig

logger = logging.getLogger(__name__)


class ConfigService:
    """
    Commission rates, trial length and per-cafeteria trial state.
    """

    def __init__(self, repositories, feed):
        self.repos = repositories
        self.feed = feed

    # Commission

    def get_commission_config(self) -> CommissionConfig:
        return self.repos.config.get_commission_config()

    def update_commission_config(self, **changes) -> CommissionConfig:
        """
        Merge the given rates into the stored config.

        Rates must each lie in [0, 100]. When ``COMMISSION_REQUIRE_FULL_ALLOCATION``
        is on (the default) the merged rates must also sum to exactly 100.

        Raises:
            ValidationError: On an unknown field or a rate that breaks the policy
        """
        known = {f.name for f in dataclasses.fields(CommissionConfig)}
        unknown = set(changes) - known
        if unknown:
            raise ValidationError(f"Unknown commission fields: {', '.join(sorted(unknown))}")

        try:
            values = {name: to_decimal(value) for name, value in changes.items()}
        except (ArithmeticError, TypeError) as e:
            raise ValidationError(f"Commission rates must be numeric: {e}")

        with self.repos.atomic():
            merged = dataclasses.replace(self.repos.config.get_commission_config(), **values)
            try:
                validate_commission_config(
                    merged,
                    require_full_allocation=getattr(
                        settings, "COMMISSION_REQUIRE_FULL_ALLOCATION", True
                    ),
                )
            except ValueError as e:
                raise ValidationError(str(e))
            updated = self.repos.config.update_commission_config(merged)

        logger.info(
            f"Commission config updated to {updated.rate_direct_parent_percent}/"
            f"{updated.rate_grandparent_percent}/{updated.rate_owner_percent}"
        )
        self.feed.publish(ChangeKind.CONFIG_UPDATED, "commission")
        return updated

    # Trial

    def get_trial_config(self) -> TrialConfig:
        return self.repos.config.get_trial_config()

    def update_trial_config(self, global_trial_days: int) -> TrialConfig:
        if int(global_trial_days) < 0:
            raise ValidationError("global_trial_days cannot be negative.")
        with self.repos.atomic():
            updated = self.repos.config.update_trial_config(
                TrialConfig(global_trial_days=int(global_trial_days))
            )
            reopened = [
                c.id
                for c in self.repos.cafeterias.get_all()
                if c.trial_days_override is None and self._reopen_trial(c)
            ]
        logger.info(f"Global trial length set to {updated.global_trial_days} days")
        self.feed.publish(ChangeKind.CONFIG_UPDATED, "trial")
        for cafeteria_id in reopened:
            self.feed.publish(ChangeKind.CAFETERIA_UPDATED, cafeteria_id)
        return updated

    def update_cafeteria_trial_override(self, cafeteria_id: str, trial_days: Optional[int]):
        if trial_days is not None and int(trial_days) < 0:
            raise ValidationError("trial_days cannot be negative.")
        with self.repos.atomic():
            cafeteria = self.repos.cafeterias.update_trial_override(
                cafeteria_id, None if trial_days is None else int(trial_days)
            )
            if cafeteria is None:
                raise NotFoundError(f"Cafeteria {cafeteria_id} not found.")
            if self._reopen_trial(cafeteria):
                cafeteria = self.repos.cafeterias.get_by_id(cafeteria_id)
        self.feed.publish(ChangeKind.CAFETERIA_UPDATED, cafeteria_id)
        return cafeteria

    def _reopen_trial(self, cafeteria) -> bool:
        """Clear a stale expiry flag once a longer trial covers today again."""
        if not cafeteria.is_trial_expired or cafeteria.trial_started_at is None:
            return False
        if self._trial_elapsed(cafeteria, timezone.now()):
            return False
        self.repos.cafeterias.set_trial_expired(cafeteria.id, False)
        logger.info(f"Trial reopened for cafeteria {cafeteria.id}")
        return True

    def effective_trial_days(self, cafeteria) -> int:
        if cafeteria.trial_days_override is not None:
            return cafeteria.trial_days_override
        return self.get_trial_config().global_trial_days

    def is_trial_expired(self, cafeteria, now=None) -> bool:
        """Expired when flagged, or when the effective trial length has elapsed."""
        if cafeteria.is_trial_expired:
            return True
        return self._trial_elapsed(cafeteria, now or timezone.now())

    def _trial_elapsed(self, cafeteria, now) -> bool:
        if cafeteria.trial_started_at is None:
            return False
        ends_at = cafeteria.trial_started_at + timedelta(days=self.effective_trial_days(cafeteria))
        return ends_at < now

    def expire_elapsed_trials(self, now=None) -> int:
        """Flag every cafeteria whose trial has run out. Returns how many were flagged."""
        now = now or timezone.now()
        expired = 0
        for cafeteria in self.repos.cafeterias.get_all():
            if cafeteria.is_trial_expired or not self.is_trial_expired(cafeteria, now):
                continue
            with self.repos.atomic():
                self.repos.cafeterias.set_trial_expired(cafeteria.id, True)
            logger.info(f"Trial expired for cafeteria {cafeteria.id}")
            self.feed.publish(ChangeKind.CAFETERIA_UPDATED, cafeteria.id)
            expired += 1
        return expired
