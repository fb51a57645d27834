"""
Flock Batch Lifecycle Models

Handles:
- Flock batches (birds grouped by acquisition, tracked as one aggregate)
- Batch event timeline (health checks, brooding start/stop, losses, ...)
- Mortality ledger (death records that feed back into the live bird count)
- Flock-level timeline (projections of batch events)
"""

from django.conf import settings
from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid


# =============================================================================
# CHOICES
# =============================================================================

class BatchType(models.TextChoices):
    HENS = 'hens', 'Hens'
    ROOSTERS = 'roosters', 'Roosters'
    CHICKS = 'chicks', 'Chicks'
    MIXED = 'mixed', 'Mixed'


class AgeAtAcquisition(models.TextChoices):
    CHICK = 'chick', 'Chick'
    JUVENILE = 'juvenile', 'Juvenile'
    ADULT = 'adult', 'Adult'


class BatchEventType(models.TextChoices):
    HEALTH_CHECK = 'health_check', 'Health Check'
    VACCINATION = 'vaccination', 'Vaccination'
    RELOCATION = 'relocation', 'Relocation'
    BREEDING = 'breeding', 'Breeding'
    LAYING_START = 'laying_start', 'Laying Start'
    PRODUCTION_NOTE = 'production_note', 'Production Note'
    BROODING_START = 'brooding_start', 'Brooding Start'
    BROODING_STOP = 'brooding_stop', 'Brooding Stop'
    FLOCK_ADDED = 'flock_added', 'Flock Added'
    FLOCK_LOSS = 'flock_loss', 'Flock Loss'
    CHICKENS_HATCHED = 'chickens_hatched', 'Chickens Hatched'
    OTHER = 'other', 'Other'


BROODING_EVENT_TYPES = (BatchEventType.BROODING_START, BatchEventType.BROODING_STOP)


class DeathCause(models.TextChoices):
    PREDATOR = 'predator', 'Predator'
    DISEASE = 'disease', 'Disease'
    AGE = 'age', 'Age'
    INJURY = 'injury', 'Injury'
    UNKNOWN = 'unknown', 'Unknown'
    CULLED = 'culled', 'Culled'
    OTHER = 'other', 'Other'


class FlockEventType(models.TextChoices):
    ACQUISITION = 'acquisition', 'Acquisition'
    LAYING_START = 'laying_start', 'Laying Start'
    BROODY = 'broody', 'Broody'
    HATCHING = 'hatching', 'Hatching'
    OTHER = 'other', 'Other'


# =============================================================================
# FLOCK BATCH MODEL
# =============================================================================

class FlockBatch(models.Model):
    """
    A named group of birds acquired together.
    Birds are not tracked individually but as cohorts with per-category counts.

    current_count is owned by the mortality ledger and brooding_count by the
    brooding derivation; both are written through guarded updates, never by
    hand in views.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='flock_batches'
    )

    # Identification
    batch_name = models.CharField(max_length=255)
    breed = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=BatchType.choices, db_index=True)
    source = models.CharField(
        max_length=255,
        help_text="Hatchery, farm, store, etc."
    )

    # Acquisition
    acquisition_date = models.DateField()
    initial_count = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Number of birds at acquisition"
    )
    age_at_acquisition = models.CharField(max_length=20, choices=AgeAtAcquisition.choices)
    cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Cost paid for acquiring this batch (0.00 if free)"
    )

    # Laying
    expected_laying_start_date = models.DateField(null=True, blank=True)
    actual_laying_start_date = models.DateField(null=True, blank=True)

    # Live counts
    current_count = models.PositiveIntegerField(
        help_text="Current number of live birds"
    )
    hens_count = models.PositiveIntegerField(default=0)
    roosters_count = models.PositiveIntegerField(default=0)
    chicks_count = models.PositiveIntegerField(default=0)
    brooding_count = models.PositiveIntegerField(
        default=0,
        help_text="Derived from brooding_start/brooding_stop events"
    )

    notes = models.TextField(blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    # Optimistic lock for current_count adjustments
    version = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'flock_batches'
        ordering = ['-acquisition_date']
        indexes = [
            models.Index(fields=['owner', 'is_active'], name='flock_batch_owner_active_idx'),
            models.Index(fields=['-acquisition_date'], name='flock_batch_acq_date_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(current_count__gte=0),
                name='flock_batch_current_count_non_negative',
            ),
            models.CheckConstraint(
                condition=models.Q(initial_count__gt=0),
                name='flock_batch_initial_count_positive',
            ),
        ]

    def __str__(self):
        return f"{self.batch_name} ({self.type})"

    def clean(self):
        """Validate business logic"""
        from django.core.exceptions import ValidationError

        errors = {}

        if self.initial_count is not None and self.initial_count <= 0:
            errors['initial_count'] = 'Initial count must be a positive number'

        if self.current_count is not None and self.initial_count:
            if self.current_count > self.initial_count:
                errors['current_count'] = (
                    f'Current count ({self.current_count}) cannot exceed initial count ({self.initial_count})'
                )

        if self.actual_laying_start_date and self.acquisition_date:
            if self.actual_laying_start_date < self.acquisition_date:
                errors['actual_laying_start_date'] = 'Laying start date cannot be before acquisition date'

        if self.cost is not None and self.cost < 0:
            errors['cost'] = 'Cost cannot be negative'

        if errors:
            raise ValidationError(errors)

    @property
    def total_deaths(self):
        return self.initial_count - self.current_count


# =============================================================================
# BATCH EVENT MODEL
# =============================================================================

class BatchEvent(models.Model):
    """One timeline entry for a batch."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    batch = models.ForeignKey(FlockBatch, on_delete=models.CASCADE, related_name='events')
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='batch_events'
    )

    date = models.DateField(db_index=True)
    type = models.CharField(max_length=30, choices=BatchEventType.choices, db_index=True)
    description = models.TextField()
    affected_count = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text="Birds affected; brooding events default to 1 when empty"
    )
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'batch_events'
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['batch', 'type', 'date'], name='batch_event_batch_type_idx'),
            models.Index(fields=['owner', 'date'], name='batch_event_owner_date_idx'),
        ]

    def __str__(self):
        return f"{self.batch.batch_name} - {self.type} ({self.date})"

    @property
    def is_brooding_event(self):
        return self.type in BROODING_EVENT_TYPES


# =============================================================================
# DEATH RECORD MODEL - Mortality Ledger
# =============================================================================

class DeathRecord(models.Model):
    """
    A mortality entry.
    Inserting one decrements the batch's current_count and deleting it
    restores the count; both happen in the same transaction as the row write.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    batch = models.ForeignKey(FlockBatch, on_delete=models.CASCADE, related_name='death_records')
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='death_records'
    )

    date = models.DateField(db_index=True)
    count = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Number of birds that died in this incident"
    )
    cause = models.CharField(max_length=20, choices=DeathCause.choices, db_index=True)
    description = models.TextField()
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'death_records'
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['owner', 'date'], name='death_record_owner_date_idx'),
            models.Index(fields=['batch', 'date'], name='death_record_batch_date_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(count__gt=0),
                name='death_record_count_positive',
            ),
        ]

    def __str__(self):
        return f"{self.batch.batch_name} - {self.date} ({self.count} birds)"


# =============================================================================
# FLOCK EVENT MODEL - Flock-level timeline
# =============================================================================

class FlockEvent(models.Model):
    """
    Flock-level timeline entry.

    Batch events are projected here by the mirror. source_event links a
    projection back to the batch event it came from; rows written before the
    link existed have it empty and are matched heuristically on delete.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='flock_events'
    )
    flock_profile_id = models.UUIDField(
        null=True,
        blank=True,
        help_text="Flock profile this event belongs to (empty for batch projections)"
    )
    source_event = models.ForeignKey(
        BatchEvent,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='mirrors'
    )

    date = models.DateField(db_index=True)
    type = models.CharField(max_length=20, choices=FlockEventType.choices)
    description = models.TextField()
    affected_birds = models.PositiveIntegerField(null=True, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'flock_events'
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['owner', 'date'], name='flock_event_owner_date_idx'),
        ]

    def __str__(self):
        return f"{self.date} - {self.description}"
