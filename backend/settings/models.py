from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class SingletonSettingsModel(models.Model):
    """
    Platform-wide settings row. Exactly one instance, always at pk=1.
    """

    SINGLETON_PK = 1

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    @classmethod
    def load(cls):
        obj, _created = cls.objects.get_or_create(pk=cls.SINGLETON_PK)
        return obj

    def clean(self):
        # Ensure only one instance exists
        if self.pk != self.SINGLETON_PK:
            raise ValidationError(f"There can only be one {self.__class__.__name__} instance.")

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_PK
        self.clean()
        super().save(*args, **kwargs)


class CommissionConfig(SingletonSettingsModel):
    """
    Share of every settled order's points credited to each party.
    """

    rate_direct_parent_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("40.00"),
        validators=[MinValueValidator(Decimal("0.00")), MaxValueValidator(Decimal("100.00"))],
        help_text=_("Percentage credited to the cafeteria's direct marketer"),
    )
    rate_grandparent_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("15.00"),
        validators=[MinValueValidator(Decimal("0.00")), MaxValueValidator(Decimal("100.00"))],
        help_text=_("Percentage credited to the direct marketer's upline"),
    )
    rate_owner_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("45.00"),
        validators=[MinValueValidator(Decimal("0.00")), MaxValueValidator(Decimal("100.00"))],
        help_text=_("Percentage credited to the system owner"),
    )

    class Meta:
        verbose_name = _("Commission Configuration")
        verbose_name_plural = _("Commission Configuration")

    def __str__(self):
        return (
            f"Commission {self.rate_direct_parent_percent}/"
            f"{self.rate_grandparent_percent}/{self.rate_owner_percent}"
        )


class TrialConfig(SingletonSettingsModel):
    global_trial_days = models.PositiveIntegerField(
        default=30,
        help_text=_("Default trial length; cafeterias may override it"),
    )

    class Meta:
        verbose_name = _("Trial Configuration")
        verbose_name_plural = _("Trial Configuration")

    def __str__(self):
        return f"Trial {self.global_trial_days} days"
