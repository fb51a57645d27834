"""
Event Timeline Store and Brooding Derivation

Batch events are free-form timeline entries. brooding_start / brooding_stop
events additionally drive the batch's brooding_count, which is recomputed
from the full brooding history after every change that touches it.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from ..models import BROODING_EVENT_TYPES, BatchEvent, BatchEventType, FlockBatch
from . import mirror
from .batch_registry import get_batch
from .exceptions import BatchValidationError, NotFoundOrDenied
from .parsing import has_any, is_blank, parse_date, pick, to_whole_number

logger = logging.getLogger(__name__)


EVENT_FIELDS = {
    'date': ('date',),
    'type': ('type',),
    'description': ('description',),
    'affected_count': ('affectedCount', 'affected_count'),
    'notes': ('notes',),
}


# =============================================================================
# BROODING DERIVATION
# =============================================================================

def fold_brooding_events(events):
    """
    Fold (type, affected_count) pairs, oldest first, into a brooding count.

    A missing affected_count counts as one bird. Only the final total is
    clamped at zero; a stop that briefly drives the running total negative is
    carried through.
    """
    total = 0
    for event_type, affected_count in events:
        amount = affected_count or 1
        if event_type == BatchEventType.BROODING_START:
            total += amount
        elif event_type == BatchEventType.BROODING_STOP:
            total -= amount
    return max(0, total)


def recalculate_brooding_count(batch):
    """
    Recompute and store batch.brooding_count from its brooding events.

    Last writer wins: two concurrent recalculations are not serialized.
    """
    history = (
        BatchEvent.objects
        .filter(batch_id=batch.pk, type__in=BROODING_EVENT_TYPES)
        .order_by('date', 'created_at')
        .values_list('type', 'affected_count')
    )
    brooding_count = fold_brooding_events(history)

    FlockBatch.objects.filter(pk=batch.pk).update(
        brooding_count=brooding_count,
        updated_at=timezone.now(),
    )
    batch.brooding_count = brooding_count
    logger.debug("Batch %s brooding_count recalculated to %s", batch.pk, brooding_count)
    return brooding_count


# =============================================================================
# EVENTS
# =============================================================================

def get_event(owner, event_id):
    try:
        return BatchEvent.objects.select_related('batch').get(pk=event_id, owner=owner)
    except (BatchEvent.DoesNotExist, ValidationError, ValueError):
        raise NotFoundOrDenied('Event not found or access denied')


def list_events(owner, batch_id):
    """Events of one owned batch, newest first."""
    if is_blank(batch_id):
        raise BatchValidationError('batch_id is required')
    batch = get_batch(owner, batch_id, active_only=False)
    return BatchEvent.objects.filter(batch=batch).select_related('batch').order_by('-date', '-created_at')


def create_event(owner, data):
    batch_id = pick(data, 'batchId', 'batch_id')
    missing = [
        name for name, value in (
            ('batch_id', batch_id),
            ('date', pick(data, *EVENT_FIELDS['date'])),
            ('type', pick(data, *EVENT_FIELDS['type'])),
            ('description', pick(data, *EVENT_FIELDS['description'])),
        )
        if is_blank(value)
    ]
    if missing:
        raise BatchValidationError('Missing required fields', details={'missing_fields': missing})

    event_type = _validate_type(pick(data, *EVENT_FIELDS['type']))
    event_date = _validate_date(pick(data, *EVENT_FIELDS['date']))
    affected_count = _validate_affected_count(pick(data, *EVENT_FIELDS['affected_count']))

    batch = get_batch(owner, batch_id, active_only=False)

    with transaction.atomic():
        event = BatchEvent.objects.create(
            batch=batch,
            owner=owner,
            date=event_date,
            type=event_type,
            description=str(pick(data, *EVENT_FIELDS['description'])).strip(),
            affected_count=affected_count,
            notes=pick(data, *EVENT_FIELDS['notes']) or '',
        )

    logger.info("Created %s event %s on batch %s", event.type, event.pk, batch.pk)

    mirror.project_batch_event(event, batch.batch_name)

    if event.is_brooding_event:
        recalculate_brooding_count(batch)

    return event


def update_event(owner, event_id, data):
    """
    Partially update an event.

    A fresh flock-timeline projection is appended for the new state. The
    brooding count is recomputed when either the old or the new type is a
    brooding type.
    """
    event = get_event(owner, event_id)
    old_type = event.type

    if has_any(data, *EVENT_FIELDS['date']):
        event.date = _validate_date(pick(data, *EVENT_FIELDS['date']))
    if has_any(data, *EVENT_FIELDS['type']):
        event.type = _validate_type(pick(data, *EVENT_FIELDS['type']))
    if has_any(data, *EVENT_FIELDS['description']):
        description = pick(data, *EVENT_FIELDS['description'])
        if is_blank(description):
            raise BatchValidationError('description cannot be empty')
        event.description = str(description).strip()
    if has_any(data, *EVENT_FIELDS['affected_count']):
        event.affected_count = _validate_affected_count(pick(data, *EVENT_FIELDS['affected_count']))
    if has_any(data, *EVENT_FIELDS['notes']):
        event.notes = pick(data, *EVENT_FIELDS['notes']) or ''

    with transaction.atomic():
        event.save()

    logger.info("Updated event %s on batch %s", event.pk, event.batch_id)

    mirror.project_batch_event(event, event.batch.batch_name)

    if old_type in BROODING_EVENT_TYPES or event.is_brooding_event:
        recalculate_brooding_count(event.batch)

    return event


def delete_event(owner, event_id):
    event = get_event(owner, event_id)
    batch = event.batch
    was_brooding = event.is_brooding_event
    event_pk = event.pk

    mirror.remove_batch_event_mirrors(event)

    with transaction.atomic():
        event.delete()

    logger.info("Deleted event %s from batch %s", event_pk, batch.pk)

    if was_brooding:
        recalculate_brooding_count(batch)

    return event_pk


# =============================================================================
# HELPERS
# =============================================================================

def _validate_type(value):
    if value not in BatchEventType.values:
        raise BatchValidationError(
            f'Invalid event type. Must be one of: {", ".join(BatchEventType.values)}'
        )
    return value


def _validate_date(value):
    parsed = parse_date(value)
    if not parsed:
        raise BatchValidationError('Invalid date format. Use YYYY-MM-DD')
    return parsed


def _validate_affected_count(value):
    if is_blank(value):
        return None
    number = to_whole_number(value)
    if number is None or number <= 0:
        raise BatchValidationError('Affected count must be a positive whole number')
    return number
