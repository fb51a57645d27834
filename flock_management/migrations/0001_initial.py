# Generated manually for the flock batch engine
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='FlockBatch',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('batch_name', models.CharField(max_length=255)),
                ('breed', models.CharField(max_length=255)),
                ('type', models.CharField(choices=[('hens', 'Hens'), ('roosters', 'Roosters'), ('chicks', 'Chicks'), ('mixed', 'Mixed')], db_index=True, max_length=20)),
                ('source', models.CharField(help_text='Hatchery, farm, store, etc.', max_length=255)),
                ('acquisition_date', models.DateField()),
                ('initial_count', models.PositiveIntegerField(help_text='Number of birds at acquisition', validators=[django.core.validators.MinValueValidator(1)])),
                ('age_at_acquisition', models.CharField(choices=[('chick', 'Chick'), ('juvenile', 'Juvenile'), ('adult', 'Adult')], max_length=20)),
                ('cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Cost paid for acquiring this batch (0.00 if free)', max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('expected_laying_start_date', models.DateField(blank=True, null=True)),
                ('actual_laying_start_date', models.DateField(blank=True, null=True)),
                ('current_count', models.PositiveIntegerField(help_text='Current number of live birds')),
                ('hens_count', models.PositiveIntegerField(default=0)),
                ('roosters_count', models.PositiveIntegerField(default=0)),
                ('chicks_count', models.PositiveIntegerField(default=0)),
                ('brooding_count', models.PositiveIntegerField(default=0, help_text='Derived from brooding_start/brooding_stop events')),
                ('notes', models.TextField(blank=True)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('version', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='flock_batches', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'flock_batches',
                'ordering': ['-acquisition_date'],
                'indexes': [
                    models.Index(fields=['owner', 'is_active'], name='flock_batch_owner_active_idx'),
                    models.Index(fields=['-acquisition_date'], name='flock_batch_acq_date_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(current_count__gte=0), name='flock_batch_current_count_non_negative'),
                    models.CheckConstraint(condition=models.Q(initial_count__gt=0), name='flock_batch_initial_count_positive'),
                ],
            },
        ),
        migrations.CreateModel(
            name='BatchEvent',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('date', models.DateField(db_index=True)),
                ('type', models.CharField(choices=[('health_check', 'Health Check'), ('vaccination', 'Vaccination'), ('relocation', 'Relocation'), ('breeding', 'Breeding'), ('laying_start', 'Laying Start'), ('production_note', 'Production Note'), ('brooding_start', 'Brooding Start'), ('brooding_stop', 'Brooding Stop'), ('flock_added', 'Flock Added'), ('flock_loss', 'Flock Loss'), ('chickens_hatched', 'Chickens Hatched'), ('other', 'Other')], db_index=True, max_length=30)),
                ('description', models.TextField()),
                ('affected_count', models.PositiveIntegerField(blank=True, help_text='Birds affected; brooding events default to 1 when empty', null=True, validators=[django.core.validators.MinValueValidator(1)])),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('batch', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='events', to='flock_management.flockbatch')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='batch_events', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'batch_events',
                'ordering': ['-date', '-created_at'],
                'indexes': [
                    models.Index(fields=['batch', 'type', 'date'], name='batch_event_batch_type_idx'),
                    models.Index(fields=['owner', 'date'], name='batch_event_owner_date_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='DeathRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('date', models.DateField(db_index=True)),
                ('count', models.PositiveIntegerField(help_text='Number of birds that died in this incident', validators=[django.core.validators.MinValueValidator(1)])),
                ('cause', models.CharField(choices=[('predator', 'Predator'), ('disease', 'Disease'), ('age', 'Age'), ('injury', 'Injury'), ('unknown', 'Unknown'), ('culled', 'Culled'), ('other', 'Other')], db_index=True, max_length=20)),
                ('description', models.TextField()),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('batch', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='death_records', to='flock_management.flockbatch')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='death_records', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'death_records',
                'ordering': ['-date', '-created_at'],
                'indexes': [
                    models.Index(fields=['owner', 'date'], name='death_record_owner_date_idx'),
                    models.Index(fields=['batch', 'date'], name='death_record_batch_date_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(count__gt=0), name='death_record_count_positive'),
                ],
            },
        ),
        migrations.CreateModel(
            name='FlockEvent',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('flock_profile_id', models.UUIDField(blank=True, help_text='Flock profile this event belongs to (empty for batch projections)', null=True)),
                ('date', models.DateField(db_index=True)),
                ('type', models.CharField(choices=[('acquisition', 'Acquisition'), ('laying_start', 'Laying Start'), ('broody', 'Broody'), ('hatching', 'Hatching'), ('other', 'Other')], max_length=20)),
                ('description', models.TextField()),
                ('affected_birds', models.PositiveIntegerField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='flock_events', to=settings.AUTH_USER_MODEL)),
                ('source_event', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='mirrors', to='flock_management.batchevent')),
            ],
            options={
                'db_table': 'flock_events',
                'ordering': ['-date', '-created_at'],
                'indexes': [
                    models.Index(fields=['owner', 'date'], name='flock_event_owner_date_idx'),
                ],
            },
        ),
    ]
