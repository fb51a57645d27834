"""
Cross-Entity Mirror

Best-effort projections of batch activity into other timelines:
- batch events -> flock-level timeline (FlockEvent)
- death records -> companion flock_loss batch event
- new batches with a cost -> acquisition expense

Every projection runs in its own savepoint. A failure is logged and swallowed;
the primary write that triggered it stands.
"""

import logging

from django.db import transaction
from django.db.models import Q

from ..models import BatchEvent, BatchEventType, FlockEvent, FlockEventType

logger = logging.getLogger(__name__)


# Batch event type -> (flock event type, description template)
FLOCK_EVENT_MAPPING = {
    BatchEventType.HEALTH_CHECK: (FlockEventType.OTHER, 'Health check performed on {batch_name} batch'),
    BatchEventType.VACCINATION: (FlockEventType.OTHER, 'Vaccination administered to {batch_name} batch'),
    BatchEventType.RELOCATION: (FlockEventType.OTHER, '{batch_name} batch relocated'),
    BatchEventType.BREEDING: (FlockEventType.BROODY, 'Breeding activity in {batch_name} batch'),
    BatchEventType.LAYING_START: (FlockEventType.LAYING_START, '{batch_name} batch started laying eggs'),
    BatchEventType.PRODUCTION_NOTE: (FlockEventType.OTHER, 'Production update for {batch_name} batch'),
    BatchEventType.BROODING_START: (FlockEventType.BROODY, 'Brooding started in {batch_name} batch'),
    BatchEventType.BROODING_STOP: (FlockEventType.OTHER, 'Brooding ended in {batch_name} batch'),
}
DEFAULT_MAPPING = (FlockEventType.OTHER, '{batch_name}: {description}')

FLOCK_LOSS_DESCRIPTION = 'Gone but not forgotten'


def map_batch_event(event_type, batch_name, description):
    """Return (flock event type, description) for a batch event."""
    flock_type, template = FLOCK_EVENT_MAPPING.get(event_type, DEFAULT_MAPPING)
    return flock_type, template.format(batch_name=batch_name, description=description)


def project_batch_event(event, batch_name=None):
    """
    Write a flock-timeline projection of `event`.

    Called after every create and update; an update appends a new projection
    rather than replacing the earlier one.
    """
    batch_name = batch_name or event.batch.batch_name
    try:
        flock_type, description = map_batch_event(event.type, batch_name, event.description)
        notes = f'From {batch_name} batch'
        if event.notes:
            notes = f'{notes}: {event.notes}'

        with transaction.atomic():
            flock_event = FlockEvent.objects.create(
                owner_id=event.owner_id,
                flock_profile_id=None,
                source_event=event,
                date=event.date,
                type=flock_type,
                description=description,
                affected_birds=event.affected_count,
                notes=notes,
            )
    except Exception as e:
        logger.error(
            f"Failed to mirror batch event {event.pk} to flock timeline: {e}",
            exc_info=True
        )
        return None

    logger.info("Mirrored batch event %s as flock event %s", event.pk, flock_event.pk)
    return flock_event


def remove_batch_event_mirrors(event):
    """
    Delete the flock-timeline projections of `event`.

    Linked projections are found through source_event; older unlinked ones by
    owner, date and a description containing the event's description. Finding
    none is not an error.
    """
    try:
        with transaction.atomic():
            matches = FlockEvent.objects.filter(owner_id=event.owner_id).filter(
                Q(source_event_id=event.pk)
                | Q(
                    source_event__isnull=True,
                    date=event.date,
                    description__contains=event.description,
                )
            )
            deleted, _ = matches.delete()
    except Exception as e:
        logger.error(
            f"Failed to remove flock timeline mirrors of batch event {event.pk}: {e}",
            exc_info=True
        )
        return 0

    if deleted:
        logger.info("Removed %s flock event mirror(s) of batch event %s", deleted, event.pk)
    else:
        logger.debug("No flock event mirror found for batch event %s", event.pk)
    return deleted


def record_flock_loss_event(record, batch):
    """Add a flock_loss entry to the batch timeline for a death record."""
    notes = f'{record.count} bird(s) lost due to {record.cause}: {record.description}'
    if record.notes:
        notes = f'{notes} - {record.notes}'

    try:
        with transaction.atomic():
            event = BatchEvent.objects.create(
                batch=batch,
                owner_id=record.owner_id,
                date=record.date,
                type=BatchEventType.FLOCK_LOSS,
                description=FLOCK_LOSS_DESCRIPTION,
                affected_count=record.count,
                notes=notes,
            )
    except Exception as e:
        logger.error(
            f"Failed to create flock_loss event for death record {record.pk}: {e}",
            exc_info=True
        )
        return None

    logger.info("Created flock_loss event %s for death record %s", event.pk, record.pk)
    return event


def project_acquisition_expense(batch):
    """
    Book the purchase cost of a new batch in the expense ledger.

    Skipped for free batches. The expense is never touched again when the
    batch is edited or deactivated.
    """
    if not batch.cost or batch.cost <= 0:
        logger.debug("Batch %s has no acquisition cost, no expense recorded", batch.pk)
        return None

    from expenses.models import Expense, ExpenseCategory

    try:
        with transaction.atomic():
            expense = Expense.objects.create(
                owner_id=batch.owner_id,
                flock_batch=batch,
                category=ExpenseCategory.BIRDS,
                description=f'Batch acquisition: {batch.batch_name} ({batch.initial_count} {batch.type})',
                amount=batch.cost,
                expense_date=batch.acquisition_date,
            )
    except Exception as e:
        logger.error(
            f"Failed to record acquisition expense for batch {batch.pk}: {e}",
            exc_info=True
        )
        return None

    logger.info("Recorded acquisition expense %s (%s) for batch %s", expense.pk, expense.amount, batch.pk)
    return expense
