from django.db import models
from django.utils import timezone


class SecurityEvent(models.Model):
    """Append-only audit log of blocked or notable action attempts."""

    id = models.CharField(primary_key=True, max_length=64)
    actor_id = models.CharField(max_length=64, db_index=True)
    role = models.CharField(max_length=20)
    attempted_action = models.CharField(max_length=255)
    target_id = models.CharField(max_length=64, blank=True)
    timestamp = models.DateTimeField(default=timezone.now, db_index=True)
    blocked = models.BooleanField(default=True)
    reason = models.TextField(blank=True)

    class Meta:
        ordering = ["-timestamp"]

    def __str__(self):
        return f"{self.actor_id}: {self.attempted_action}"
