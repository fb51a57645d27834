"""
Mortality Ledger

Death records and the batch current_count they drive.

Every ledger write adjusts current_count in the same transaction through a
guarded UPDATE: the row must still carry the version that was read when the
request was validated, and must still hold enough birds. If either check
fails the whole write is rolled back with a ConflictError.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from ..models import DeathCause, DeathRecord, FlockBatch
from . import mirror
from .batch_registry import get_batch
from .exceptions import BatchValidationError, ConflictError, NotFoundOrDenied
from .parsing import has_any, is_blank, parse_date, pick, to_whole_number

logger = logging.getLogger(__name__)


RECORD_FIELDS = {
    'date': ('date',),
    'count': ('count',),
    'cause': ('cause',),
    'description': ('description',),
    'notes': ('notes',),
}


def apply_count_change(batch, removed):
    """
    Subtract `removed` birds from batch.current_count (negative restores).

    `batch` must carry the version read before validation. Raises
    ConflictError if another write got there first.
    """
    queryset = FlockBatch.objects.filter(pk=batch.pk, version=batch.version)
    if removed > 0:
        queryset = queryset.filter(current_count__gte=removed)

    rows = queryset.update(
        current_count=F('current_count') - removed,
        version=F('version') + 1,
        updated_at=timezone.now(),
    )
    if not rows:
        raise ConflictError(
            f'Batch "{batch.batch_name}" was modified by another request. Reload and try again.'
        )

    batch.refresh_from_db(fields=['current_count', 'version', 'updated_at'])
    return batch.current_count


# =============================================================================
# READS
# =============================================================================

def get_death_record(owner, record_id):
    try:
        return DeathRecord.objects.select_related('batch').get(pk=record_id, owner=owner)
    except (DeathRecord.DoesNotExist, ValidationError, ValueError):
        raise NotFoundOrDenied('Death record not found or access denied')


def list_death_records(owner, batch_id=None):
    queryset = DeathRecord.objects.filter(owner=owner).select_related('batch')
    if not is_blank(batch_id):
        queryset = queryset.filter(batch=get_batch(owner, batch_id, active_only=False))
    return queryset.order_by('-date', '-created_at')


# =============================================================================
# WRITES
# =============================================================================

def create_death_record(owner, data):
    """
    Record deaths on an active batch.

    The batch loses `count` birds in the same transaction. A flock_loss
    event is then added to the batch timeline on a best-effort basis.
    """
    batch_id = pick(data, 'batchId', 'batch_id')
    fields = {name: pick(data, *aliases) for name, aliases in RECORD_FIELDS.items()}

    missing = [
        name for name, value in (
            ('batch_id', batch_id),
            ('date', fields['date']),
            ('count', fields['count']),
            ('cause', fields['cause']),
            ('description', fields['description']),
        )
        if is_blank(value)
    ]
    if missing:
        raise BatchValidationError('Missing required fields', details={'missing_fields': missing})

    cause = _validate_cause(fields['cause'])
    count = _validate_count(fields['count'])
    record_date = _validate_date(fields['date'])

    batch = get_batch(owner, batch_id, active_only=True)

    if count > batch.current_count:
        raise BatchValidationError(
            f'Cannot record {count} deaths. Batch "{batch.batch_name}" only has '
            f'{batch.current_count} birds remaining.',
            details={'requested': count, 'current_count': batch.current_count},
        )

    with transaction.atomic():
        record = DeathRecord.objects.create(
            batch=batch,
            owner=owner,
            date=record_date,
            count=count,
            cause=cause,
            description=str(fields['description']).strip(),
            notes=fields['notes'] or '',
        )
        apply_count_change(batch, count)

    logger.info(
        "Recorded %s death(s) on batch %s (%s); %s birds remain",
        count, batch.pk, cause, batch.current_count
    )

    mirror.record_flock_loss_event(record, batch)
    return record


def update_death_record(owner, record_id, data):
    """
    Update a death record; a changed count moves current_count by the delta.
    """
    record = get_death_record(owner, record_id)
    old_count = record.count

    if has_any(data, *RECORD_FIELDS['date']):
        record.date = _validate_date(pick(data, *RECORD_FIELDS['date']))
    if has_any(data, *RECORD_FIELDS['cause']):
        record.cause = _validate_cause(pick(data, *RECORD_FIELDS['cause']))
    if has_any(data, *RECORD_FIELDS['count']):
        record.count = _validate_count(pick(data, *RECORD_FIELDS['count']))
    if has_any(data, *RECORD_FIELDS['description']):
        description = pick(data, *RECORD_FIELDS['description'])
        if is_blank(description):
            raise BatchValidationError('description cannot be empty')
        record.description = str(description).strip()
    if has_any(data, *RECORD_FIELDS['notes']):
        record.notes = pick(data, *RECORD_FIELDS['notes']) or ''

    delta = record.count - old_count
    batch = FlockBatch.objects.get(pk=record.batch_id)

    if delta > batch.current_count:
        raise BatchValidationError(
            f'Cannot increase death count by {delta}. Batch "{batch.batch_name}" only has '
            f'{batch.current_count} birds remaining.',
            details={'requested': delta, 'current_count': batch.current_count},
        )

    with transaction.atomic():
        record.save()
        if delta:
            apply_count_change(batch, delta)

    record.batch = batch
    logger.info("Updated death record %s (count %s -> %s)", record.pk, old_count, record.count)
    return record


def delete_death_record(owner, record_id):
    """Delete a death record and give its birds back to the batch."""
    record = get_death_record(owner, record_id)
    record_pk = record.pk

    with transaction.atomic():
        record.delete()
        FlockBatch.objects.filter(pk=record.batch_id).update(
            current_count=F('current_count') + record.count,
            version=F('version') + 1,
            updated_at=timezone.now(),
        )

    logger.info("Deleted death record %s; restored %s bird(s) to batch %s", record_pk, record.count, record.batch_id)
    return record_pk


# =============================================================================
# HELPERS
# =============================================================================

def _validate_cause(value):
    if value not in DeathCause.values:
        raise BatchValidationError(
            f'Invalid cause. Must be one of: {", ".join(DeathCause.values)}'
        )
    return value


def _validate_count(value):
    count = to_whole_number(value)
    if count is None or count <= 0:
        raise BatchValidationError('Count must be a positive whole number')
    return count


def _validate_date(value):
    parsed = parse_date(value)
    if not parsed:
        raise BatchValidationError('Invalid date format. Use YYYY-MM-DD')
    return parsed
