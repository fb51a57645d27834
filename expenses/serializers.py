"""
Serializers for Expense Tracking models.
"""

from rest_framework import serializers

from .models import Expense


class ExpenseListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for expense lists"""
    category_display = serializers.CharField(source='get_category_display', read_only=True)
    batch_name = serializers.CharField(source='flock_batch.batch_name', read_only=True, allow_null=True)

    class Meta:
        model = Expense
        fields = [
            'id', 'expense_date', 'category', 'category_display',
            'description', 'amount', 'flock_batch', 'batch_name', 'created_at'
        ]
        read_only_fields = fields
