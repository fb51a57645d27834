"""
Batch Registry

Creates, updates, deactivates and reads flock batches. Every read and write is
scoped to the requesting owner; a batch owned by someone else behaves exactly
like a missing one.
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from ..models import AgeAtAcquisition, BatchType, FlockBatch
from .exceptions import BatchValidationError, ConflictError, NotFoundOrDenied
from .parsing import has_any, is_blank, parse_date, pick, to_bool, to_decimal, to_int, to_whole_number

logger = logging.getLogger(__name__)


# Field name -> accepted request keys
BATCH_FIELDS = {
    'batch_name': ('batchName', 'batch_name'),
    'breed': ('breed',),
    'acquisition_date': ('acquisitionDate', 'acquisition_date'),
    'initial_count': ('initialCount', 'initial_count'),
    'type': ('type',),
    'age_at_acquisition': ('ageAtAcquisition', 'age_at_acquisition'),
    'source': ('source',),
    'expected_laying_start_date': ('expectedLayingStartDate', 'expected_laying_start_date'),
    'actual_laying_start_date': ('actualLayingStartDate', 'actual_laying_start_date'),
    'cost': ('cost',),
    'notes': ('notes',),
    'hens_count': ('hensCount', 'hens_count'),
    'roosters_count': ('roostersCount', 'roosters_count'),
    'chicks_count': ('chicksCount', 'chicks_count'),
    'current_count': ('currentCount', 'current_count'),
    'brooding_count': ('broodingCount', 'brooding_count'),
    'is_active': ('isActive', 'is_active'),
}

REQUIRED_ON_CREATE = (
    'batch_name', 'breed', 'acquisition_date', 'initial_count',
    'type', 'age_at_acquisition', 'source',
)

TEXT_FIELDS = ('batch_name', 'breed', 'source')
OPTIONAL_DATE_FIELDS = ('expected_laying_start_date', 'actual_laying_start_date')
COUNT_FIELDS = ('initial_count', 'current_count', 'hens_count', 'roosters_count', 'chicks_count', 'brooding_count')


# =============================================================================
# READS
# =============================================================================

def get_batch(owner, batch_id, active_only=True):
    """Fetch one batch owned by `owner` or raise NotFoundOrDenied."""
    queryset = FlockBatch.objects.filter(owner=owner)
    if active_only:
        queryset = queryset.filter(is_active=True)
    try:
        return queryset.get(pk=batch_id)
    except (FlockBatch.DoesNotExist, ValidationError, ValueError):
        # ValidationError: batch_id is not a UUID
        raise NotFoundOrDenied('Batch not found or access denied')


def list_batches(owner, active_only=True):
    queryset = FlockBatch.objects.filter(owner=owner)
    if active_only:
        queryset = queryset.filter(is_active=True)
    return queryset.order_by('-acquisition_date', '-created_at')


# =============================================================================
# CREATE
# =============================================================================

def create_batch(owner, data):
    """
    Register a new batch.

    hens/roosters/chicks counts must add up to the initial count. The live
    count starts at the initial count. The acquisition expense is written by
    the post_save signal once the batch row commits.
    """
    missing = [
        field for field in REQUIRED_ON_CREATE
        if is_blank(pick(data, *BATCH_FIELDS[field]))
    ]
    if missing:
        raise BatchValidationError(
            'Missing required fields',
            details={'missing_fields': missing},
        )

    initial_count = to_whole_number(pick(data, *BATCH_FIELDS['initial_count']))
    if initial_count is None or initial_count <= 0:
        raise BatchValidationError('Initial count must be a positive number')

    hens_count = to_int(pick(data, *BATCH_FIELDS['hens_count']))
    roosters_count = to_int(pick(data, *BATCH_FIELDS['roosters_count']))
    chicks_count = to_int(pick(data, *BATCH_FIELDS['chicks_count']))
    if min(hens_count, roosters_count, chicks_count) < 0:
        raise BatchValidationError('Bird counts cannot be negative')

    total = hens_count + roosters_count + chicks_count
    if total != initial_count:
        raise BatchValidationError(
            'Individual bird counts must add up to initial count',
            details=(
                f'Hens ({hens_count}) + Roosters ({roosters_count}) + '
                f'Chicks ({chicks_count}) = {total}, but initial count is {initial_count}'
            ),
        )

    batch_type = pick(data, *BATCH_FIELDS['type'])
    if batch_type not in BatchType.values:
        raise BatchValidationError(
            f'Invalid type. Must be one of: {", ".join(BatchType.values)}'
        )

    age = pick(data, *BATCH_FIELDS['age_at_acquisition'])
    if age not in AgeAtAcquisition.values:
        raise BatchValidationError(
            f'Invalid age at acquisition. Must be one of: {", ".join(AgeAtAcquisition.values)}'
        )

    acquisition_date = parse_date(pick(data, *BATCH_FIELDS['acquisition_date']))
    if not acquisition_date:
        raise BatchValidationError('Invalid acquisition date format. Use YYYY-MM-DD')

    laying_dates = {}
    for field in OPTIONAL_DATE_FIELDS:
        laying_dates[field] = _optional_date(data, field)

    actual_laying = laying_dates['actual_laying_start_date']
    if actual_laying and actual_laying < acquisition_date:
        raise BatchValidationError('Laying start date cannot be before acquisition date')

    cost = to_decimal(pick(data, *BATCH_FIELDS['cost']))
    if cost < 0:
        raise BatchValidationError('Cost cannot be negative')

    batch = FlockBatch(
        owner=owner,
        batch_name=str(pick(data, *BATCH_FIELDS['batch_name'])).strip(),
        breed=str(pick(data, *BATCH_FIELDS['breed'])).strip(),
        type=batch_type,
        source=str(pick(data, *BATCH_FIELDS['source'])).strip(),
        acquisition_date=acquisition_date,
        initial_count=initial_count,
        current_count=initial_count,
        age_at_acquisition=age,
        cost=cost,
        hens_count=hens_count,
        roosters_count=roosters_count,
        chicks_count=chicks_count,
        brooding_count=0,
        notes=pick(data, *BATCH_FIELDS['notes']) or '',
        is_active=True,
        **laying_dates,
    )

    # Field limits (name length, cost digits) are checked before the insert
    try:
        batch.full_clean()
    except ValidationError as exc:
        raise BatchValidationError('Invalid batch data', details=exc.message_dict)

    with transaction.atomic():
        batch.save(force_insert=True)

    logger.info(
        "Created batch %s (%s, %s birds) for user %s",
        batch.id, batch.batch_name, batch.initial_count, owner.pk
    )
    return batch


# =============================================================================
# UPDATE / DEACTIVATE
# =============================================================================

def update_batch(owner, batch_id, data):
    """
    Apply a partial update to a batch, active or not.

    The patched state is validated as a whole and written with a version
    check so a concurrent mortality adjustment is never overwritten.
    """
    batch = get_batch(owner, batch_id, active_only=False)

    changed = []
    for field, aliases in BATCH_FIELDS.items():
        if not has_any(data, *aliases):
            continue
        value = pick(data, *aliases)
        setattr(batch, field, _coerce_update_value(field, value))
        changed.append(field)

    if not changed:
        return batch

    try:
        batch.full_clean()
    except ValidationError as exc:
        raise BatchValidationError('Invalid batch data', details=exc.message_dict)

    _save_versioned(batch, changed)
    logger.info("Updated batch %s fields: %s", batch.id, ', '.join(changed))
    return batch


def deactivate_batch(owner, batch_id):
    """
    Soft-delete a batch. Events, death records, flock-timeline projections
    and the acquisition expense are left untouched.
    """
    batch = get_batch(owner, batch_id, active_only=False)
    batch.is_active = False
    batch.save(update_fields=['is_active', 'updated_at'])
    logger.info("Deactivated batch %s (%s)", batch.id, batch.batch_name)
    return batch


def _coerce_update_value(field, value):
    if field in TEXT_FIELDS:
        if is_blank(value):
            raise BatchValidationError(f'{field} cannot be empty')
        return str(value).strip()

    if field == 'notes':
        return value or ''

    if field == 'acquisition_date':
        parsed = parse_date(value)
        if not parsed:
            raise BatchValidationError('Invalid acquisition date format. Use YYYY-MM-DD')
        return parsed

    if field in OPTIONAL_DATE_FIELDS:
        if is_blank(value):
            return None
        parsed = parse_date(value)
        if not parsed:
            raise BatchValidationError(f'Invalid {field} format. Use YYYY-MM-DD')
        return parsed

    if field in COUNT_FIELDS:
        number = to_whole_number(value)
        if number is None or number < 0:
            raise BatchValidationError(f'{field} must be a non-negative whole number')
        return number

    if field == 'cost':
        cost = to_decimal(value, default=-1)
        if cost < 0:
            raise BatchValidationError('Cost cannot be negative')
        return cost

    if field == 'is_active':
        return to_bool(value)

    # type / age_at_acquisition: enum membership is checked by full_clean()
    return value


def _save_versioned(batch, fields):
    """
    Write `fields` only if nobody bumped the batch version since it was read.
    """
    values = {field: getattr(batch, field) for field in fields}
    values['updated_at'] = timezone.now()

    rows = FlockBatch.objects.filter(pk=batch.pk, version=batch.version).update(
        version=F('version') + 1,
        **values,
    )
    if not rows:
        raise ConflictError(
            f'Batch "{batch.batch_name}" was modified by another request. Reload and try again.'
        )

    batch.version += 1
    batch.updated_at = values['updated_at']


def _optional_date(data, field):
    value = pick(data, *BATCH_FIELDS[field])
    if is_blank(value):
        return None
    parsed = parse_date(value)
    if not parsed:
        raise BatchValidationError(f'Invalid {field} format. Use YYYY-MM-DD')
    return parsed
