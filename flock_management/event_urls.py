"""
Batch event API routes, prefixed with /api/batch-events/

flock_timeline_urlpatterns is mounted separately at /api/flock-events/.
"""

from django.urls import path

from .views import BatchEventDetailView, BatchEventView, FlockEventListView

app_name = 'batch_events'

urlpatterns = [
    path('<uuid:event_id>/', BatchEventDetailView.as_view(), name='batch-event-detail'),
    path('', BatchEventView.as_view(), name='batch-events'),
]

flock_timeline_urlpatterns = [
    path('', FlockEventListView.as_view(), name='flock-events'),
]
