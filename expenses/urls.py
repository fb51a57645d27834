"""
URL configuration for Expense Tracking app.

All endpoints are prefixed with /api/expenses/
"""

from django.urls import path
from .views import ExpenseListView

app_name = 'expenses'

urlpatterns = [
    path('', ExpenseListView.as_view(), name='expense-list'),
]
