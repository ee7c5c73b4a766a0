from django.conf import settings
from django.db import models

from tenant.managers import TenantManager


class KDSUndoEntry(models.Model):
    """
    Snapshot taken before a kitchen display action, one stack per terminal.

    ``items`` holds the touched lines as ``{"position", "status",
    "quantity", "ready_at"}`` dicts; undo writes them back verbatim.
    """

    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='kds_undo_entries'
    )
    terminal_id = models.CharField(max_length=100, db_index=True)
    order = models.ForeignKey(
        'orders.Order', on_delete=models.CASCADE, related_name='kds_undo_entries'
    )
    order_status = models.CharField(max_length=20)
    items = models.JSONField(default=list)
    action = models.CharField(max_length=255)
    station = models.CharField(max_length=50, blank=True)
    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['-id']
        verbose_name_plural = 'KDS undo entries'
        indexes = [
            models.Index(fields=['tenant', 'terminal_id'], name='kds_undo_terminal_idx'),
        ]

    def __str__(self):
        return f"{self.terminal_id}: {self.action}"
