# Generated manually for the expense ledger
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.core.validators
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('flock_management', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Expense',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('category', models.CharField(choices=[('Birds', 'Birds'), ('Feed', 'Feed'), ('Healthcare', 'Healthcare'), ('Housing', 'Housing & Equipment'), ('Utilities', 'Utilities'), ('Labor', 'Labor'), ('Other', 'Other')], db_index=True, help_text='Main expense category', max_length=50)),
                ('description', models.TextField(help_text='Description of the expense')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('expense_date', models.DateField(db_index=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('flock_batch', models.ForeignKey(blank=True, help_text='Batch this expense was incurred for (blank for general expenses)', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='expenses', to='flock_management.flockbatch')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='expenses', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'expenses',
                'ordering': ['-expense_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['owner', 'expense_date'], name='expense_owner_date_idx'),
                    models.Index(fields=['owner', 'category'], name='expense_owner_category_idx'),
                ],
            },
        ),
    ]
