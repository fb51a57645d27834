"""
Flock Batch URLs

All endpoints are prefixed with /api/batches/
"""
from django.urls import path
from .views import BatchView

app_name = 'flock_management'

urlpatterns = [
    path('', BatchView.as_view(), name='batches'),
    path('<uuid:batch_id>/', BatchView.as_view(), name='batch-detail'),
]
