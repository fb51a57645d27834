"""
Flock Management Signals

Automatic actions triggered by flock batch events.

1. FlockBatch created with a cost → acquisition Expense (expenses app)

The expense is written only after the batch row has committed, so a rolled
back batch never leaves an orphan expense, and a failed expense never takes
the batch down with it.
"""

import logging
from functools import partial

from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

logger = logging.getLogger(__name__)


@receiver(post_save, sender='flock_management.FlockBatch')
def auto_create_acquisition_expense(sender, instance, created, **kwargs):
    """
    Queue the acquisition expense for a newly registered batch.

    Later saves (edits, deactivation, count adjustments) never touch the
    expense ledger.
    """
    if not created:
        return

    if not instance.cost or instance.cost <= 0:
        logger.debug(f"FlockBatch {instance.id} has no cost, skipping acquisition expense")
        return

    # Import here to avoid circular imports
    from .services.mirror import project_acquisition_expense

    transaction.on_commit(partial(project_acquisition_expense, instance))
