"""
Views for Expense Tracking.

All views are owner-scoped: users only see their own expenses.

API Endpoints:
- /api/expenses/ - List expenses
"""

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, generics, permissions

from .models import Expense
from .serializers import ExpenseListSerializer


class OwnerScopedMixin:
    """
    Mixin that filters querysets to rows owned by the requesting user.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        queryset = super().get_queryset()
        return queryset.filter(owner=self.request.user)


class ExpenseListView(OwnerScopedMixin, generics.ListAPIView):
    """
    GET /api/expenses/

    List the user's expenses, filterable by category and batch.
    """
    queryset = Expense.objects.all()
    serializer_class = ExpenseListSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category', 'flock_batch']
    search_fields = ['description']
    ordering_fields = ['expense_date', 'amount', 'created_at']

    def get_queryset(self):
        queryset = super().get_queryset()

        # Filter by date range
        start_date = self.request.query_params.get('start_date')
        end_date = self.request.query_params.get('end_date')
        if start_date:
            queryset = queryset.filter(expense_date__gte=start_date)
        if end_date:
            queryset = queryset.filter(expense_date__lte=end_date)

        return queryset.select_related('flock_batch')
