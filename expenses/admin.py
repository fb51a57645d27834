"""
Admin configuration for Expense Tracking models.
"""

from django.contrib import admin

from .models import Expense


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    """Admin for expenses"""
    list_display = ['expense_date', 'category', 'description', 'amount', 'flock_batch', 'owner']
    list_filter = ['category', 'expense_date']
    search_fields = ['description', 'flock_batch__batch_name', 'owner__username']
    list_per_page = 50
    date_hierarchy = 'expense_date'
    readonly_fields = ['id', 'created_at']
    raw_id_fields = ['flock_batch']

    fieldsets = (
        ('Basic Information', {
            'fields': ('id', 'owner', 'flock_batch', 'category', 'description')
        }),
        ('Amount', {
            'fields': ('amount', 'expense_date')
        }),
        ('Timestamps', {
            'fields': ('created_at',),
            'classes': ('collapse',)
        }),
    )
