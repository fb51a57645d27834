"""
Admin interface for flock batches, their timeline and mortality ledger.
"""

from django.contrib import admin
from django.utils.html import format_html
from .models import BatchEvent, DeathRecord, FlockBatch, FlockEvent


# =============================================================================
# FLOCK BATCH ADMIN
# =============================================================================

@admin.register(FlockBatch)
class FlockBatchAdmin(admin.ModelAdmin):
    """
    Admin interface for flock batches.

    current_count, brooding_count and version are maintained by the services
    and shown read-only.
    """

    list_display = [
        'batch_name', 'owner', 'type', 'breed', 'current_count',
        'initial_count', 'survival_badge', 'brooding_count',
        'is_active', 'acquisition_date'
    ]

    list_filter = ['is_active', 'type', 'age_at_acquisition', 'acquisition_date']

    search_fields = ['batch_name', 'breed', 'source', 'owner__username', 'owner__email']

    readonly_fields = [
        'id', 'current_count', 'brooding_count', 'version',
        'created_at', 'updated_at'
    ]

    fieldsets = [
        ('Batch Identification', {
            'fields': ['id', 'owner', 'batch_name', 'breed', 'type']
        }),
        ('Acquisition Details', {
            'fields': [
                'source', 'acquisition_date', 'initial_count',
                'age_at_acquisition', 'cost'
            ]
        }),
        ('Bird Counts', {
            'fields': [
                'current_count', 'hens_count', 'roosters_count',
                'chicks_count', 'brooding_count'
            ],
            'classes': ['wide']
        }),
        ('Laying', {
            'fields': ['expected_laying_start_date', 'actual_laying_start_date'],
            'classes': ['collapse']
        }),
        ('Status', {
            'fields': ['is_active', 'notes', 'version', 'created_at', 'updated_at']
        }),
    ]

    actions = ['deactivate_batches']

    def survival_badge(self, obj):
        """Color-coded share of birds still alive"""
        rate = (obj.current_count / obj.initial_count * 100) if obj.initial_count else 0
        if rate >= 95:
            color = 'green'
        elif rate >= 90:
            color = 'orange'
        else:
            color = 'red'
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; border-radius: 3px; font-weight: bold;">{}%</span>',
            color, f'{rate:.1f}'
        )
    survival_badge.short_description = 'Survival'

    def has_add_permission(self, request):
        # Batches are created through the batch registry
        return False

    def deactivate_batches(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f'{updated} batch(es) deactivated.')
    deactivate_batches.short_description = 'Deactivate selected batches'


# =============================================================================
# BATCH EVENT ADMIN
# =============================================================================

@admin.register(BatchEvent)
class BatchEventAdmin(admin.ModelAdmin):
    list_display = ['date', 'batch', 'type', 'affected_count', 'description']
    list_filter = ['type', 'date']
    search_fields = ['description', 'notes', 'batch__batch_name']
    readonly_fields = ['id', 'created_at']
    raw_id_fields = ['batch']


# =============================================================================
# DEATH RECORD ADMIN
# =============================================================================

@admin.register(DeathRecord)
class DeathRecordAdmin(admin.ModelAdmin):
    """
    Death records are read-only here: editing them outside the ledger
    would leave the batch's current_count out of step.
    """

    list_display = ['date', 'batch', 'count', 'cause', 'description']
    list_filter = ['cause', 'date']
    search_fields = ['description', 'notes', 'batch__batch_name']
    readonly_fields = [
        'id', 'batch', 'owner', 'date', 'count', 'cause',
        'description', 'notes', 'created_at', 'updated_at'
    ]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =============================================================================
# FLOCK EVENT ADMIN
# =============================================================================

@admin.register(FlockEvent)
class FlockEventAdmin(admin.ModelAdmin):
    list_display = ['date', 'type', 'description', 'affected_birds', 'source_event']
    list_filter = ['type', 'date']
    search_fields = ['description', 'notes']
    readonly_fields = ['id', 'source_event', 'created_at', 'updated_at']
