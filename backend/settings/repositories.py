"""Platform configuration storage (commission rates and trial length)."""
from abc import ABC, abstractmethod

from core_backend.base.memory import InMemoryRepository

from . import models
from .entities import CommissionConfig, TrialConfig


class ConfigRepository(ABC):
    @abstractmethod
    def get_commission_config(self) -> CommissionConfig: ...

    @abstractmethod
    def update_commission_config(self, config: CommissionConfig) -> CommissionConfig: ...

    @abstractmethod
    def get_trial_config(self) -> TrialConfig: ...

    @abstractmethod
    def update_trial_config(self, config: TrialConfig) -> TrialConfig: ...


class InMemoryConfigRepository(InMemoryRepository, ConfigRepository):
    state_fields = {
        "_commission": (CommissionConfig, None),
        "_trial": (TrialConfig, None),
    }

    def __init__(self, lock=None):
        super().__init__(lock)
        self._commission = CommissionConfig()
        self._trial = TrialConfig()

    def get_commission_config(self):
        return self._commission

    def update_commission_config(self, config):
        with self._lock:
            self._commission = config
            return config

    def get_trial_config(self):
        return self._trial

    def update_trial_config(self, config):
        with self._lock:
            self._trial = config
            return config


class DjangoConfigRepository(ConfigRepository):
    def get_commission_config(self):
        row = models.CommissionConfig.load()
        return CommissionConfig(
            rate_direct_parent_percent=row.rate_direct_parent_percent,
            rate_grandparent_percent=row.rate_grandparent_percent,
            rate_owner_percent=row.rate_owner_percent,
        )

    def update_commission_config(self, config):
        row = models.CommissionConfig.load()
        row.rate_direct_parent_percent = config.rate_direct_parent_percent
        row.rate_grandparent_percent = config.rate_grandparent_percent
        row.rate_owner_percent = config.rate_owner_percent
        row.save()
        return self.get_commission_config()

    def get_trial_config(self):
        return TrialConfig(global_trial_days=models.TrialConfig.load().global_trial_days)

    def update_trial_config(self, config):
        row = models.TrialConfig.load()
        row.global_trial_days = config.global_trial_days
        row.save()
        return self.get_trial_config()
