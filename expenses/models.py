"""
Expense Tracking Models

Ledger of money spent on the flock. Acquisition costs of new batches are
booked here automatically (see flock_management.signals); other expenses are
entered by clients of the general expense endpoints.
"""

import uuid
from decimal import Decimal
from django.conf import settings
from django.db import models
from django.core.validators import MinValueValidator


class ExpenseCategory(models.TextChoices):
    """Expense categories. BIRDS is used for batch acquisitions."""
    BIRDS = 'Birds', 'Birds'
    FEED = 'Feed', 'Feed'
    HEALTHCARE = 'Healthcare', 'Healthcare'
    HOUSING = 'Housing', 'Housing & Equipment'
    UTILITIES = 'Utilities', 'Utilities'
    LABOR = 'Labor', 'Labor'
    OTHER = 'Other', 'Other'


class Expense(models.Model):
    """
    Individual expense record.

    flock_batch is set for acquisition expenses and survives the batch being
    edited or deactivated; the amount is never recalculated.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='expenses'
    )

    flock_batch = models.ForeignKey(
        'flock_management.FlockBatch',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses',
        help_text="Batch this expense was incurred for (blank for general expenses)"
    )

    category = models.CharField(
        max_length=50,
        choices=ExpenseCategory.choices,
        db_index=True,
        help_text="Main expense category"
    )
    description = models.TextField(
        help_text="Description of the expense"
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    expense_date = models.DateField(db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'expenses'
        ordering = ['-expense_date', '-created_at']
        indexes = [
            models.Index(fields=['owner', 'expense_date'], name='expense_owner_date_idx'),
            models.Index(fields=['owner', 'category'], name='expense_owner_category_idx'),
        ]

    def __str__(self):
        return f"{self.get_category_display()} - {self.description} ({self.amount})"
