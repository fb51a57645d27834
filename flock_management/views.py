"""
Flock Management API Views

Thin HTTP layer over the flock batch services. Views parse the request, call
one service operation and serialize the result; errors raised by the services
propagate to core.exceptions.api_exception_handler.
"""

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, generics, status
from rest_framework.exceptions import MethodNotAllowed
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import FlockEvent
from .serializers import FlockEventSerializer
from .services import batch_registry, mortality_ledger, timeline
from .services.exceptions import BatchValidationError
from .services.parsing import pick, to_bool


class StandardResultsSetPagination(PageNumberPagination):
    """Standard pagination for flock management views."""
    page_size = 10
    page_size_query_param = 'page_size'
    max_page_size = 100

    def get_paginated_response_data(self, data):
        """Return pagination metadata along with results."""
        return {
            'count': self.page.paginator.count,
            'total_pages': self.page.paginator.num_pages,
            'current_page': self.page.number,
            'page_size': self.get_page_size(self.request),
            'next': self.get_next_link(),
            'previous': self.get_previous_link(),
            'results': data,
        }


class FlockBaseView(APIView):
    """Shared helpers for batch, event and mortality endpoints."""

    permission_classes = [IsAuthenticated]
    pagination_class = StandardResultsSetPagination

    def _paginated(self, request, queryset, serialize):
        paginator = self.pagination_class()
        page = paginator.paginate_queryset(queryset, request, view=self)

        if page is not None:
            return Response(paginator.get_paginated_response_data([serialize(obj) for obj in page]))

        # Fallback for non-paginated
        results = [serialize(obj) for obj in queryset]
        return Response({'results': results, 'count': len(results)})

    def _serialize_batch(self, batch):
        """Serialize batch object to dict"""
        return {
            'id': str(batch.id),
            'batch_name': batch.batch_name,
            'breed': batch.breed,
            'type': batch.type,
            'source': batch.source,
            'acquisition_date': batch.acquisition_date.isoformat(),
            'initial_count': batch.initial_count,
            'current_count': batch.current_count,
            'age_at_acquisition': batch.age_at_acquisition,
            'cost': float(batch.cost),
            'expected_laying_start_date': batch.expected_laying_start_date.isoformat() if batch.expected_laying_start_date else None,
            'actual_laying_start_date': batch.actual_laying_start_date.isoformat() if batch.actual_laying_start_date else None,
            'hens_count': batch.hens_count,
            'roosters_count': batch.roosters_count,
            'chicks_count': batch.chicks_count,
            'brooding_count': batch.brooding_count,
            'total_deaths': batch.total_deaths,
            'notes': batch.notes,
            'is_active': batch.is_active,
            'version': batch.version,
            'created_at': batch.created_at.isoformat(),
            'updated_at': batch.updated_at.isoformat(),
        }

    def _serialize_event(self, event):
        return {
            'id': str(event.id),
            'batch_id': str(event.batch_id),
            'batch_name': event.batch.batch_name,
            'date': event.date.isoformat(),
            'type': event.type,
            'description': event.description,
            'affected_count': event.affected_count,
            'notes': event.notes,
            'created_at': event.created_at.isoformat(),
        }

    def _serialize_death_record(self, record):
        return {
            'id': str(record.id),
            'batch_id': str(record.batch_id),
            'batch_name': record.batch.batch_name,
            'batch_breed': record.batch.breed,
            'batch_type': record.batch.type,
            'date': record.date.isoformat(),
            'count': record.count,
            'cause': record.cause,
            'description': record.description,
            'notes': record.notes,
            'created_at': record.created_at.isoformat(),
            'updated_at': record.updated_at.isoformat(),
        }


# =============================================================================
# BATCHES
# =============================================================================

class BatchView(FlockBaseView):
    """
    GET /api/batches/
    POST /api/batches/
    GET /api/batches/{id}/
    PUT/PATCH /api/batches/{id}/
    DELETE /api/batches/{id}/

    Manage flock batches. DELETE deactivates; batches are never removed.
    """

    def get(self, request, batch_id=None):
        include_inactive = to_bool(request.query_params.get('include_inactive'))
        if batch_id:
            batch = batch_registry.get_batch(request.user, batch_id, active_only=not include_inactive)
            return Response({'success': True, 'batch': self._serialize_batch(batch)})

        queryset = batch_registry.list_batches(request.user, active_only=not include_inactive)
        return self._paginated(request, queryset, self._serialize_batch)

    def post(self, request, batch_id=None):
        if batch_id:
            raise MethodNotAllowed(request.method)
        batch = batch_registry.create_batch(request.user, request.data)
        return Response({
            'success': True,
            'message': f'Batch "{batch.batch_name}" created successfully',
            'batch': self._serialize_batch(batch),
        }, status=status.HTTP_201_CREATED)

    def put(self, request, batch_id=None):
        if not batch_id:
            raise BatchValidationError('Batch ID is required')
        batch = batch_registry.update_batch(request.user, batch_id, request.data)
        return Response({
            'success': True,
            'message': f'Batch "{batch.batch_name}" updated successfully',
            'batch': self._serialize_batch(batch),
        })

    patch = put

    def delete(self, request, batch_id=None):
        if not batch_id:
            raise BatchValidationError('Batch ID is required')
        batch = batch_registry.deactivate_batch(request.user, batch_id)
        return Response({
            'success': True,
            'message': f'Batch "{batch.batch_name}" deactivated successfully',
        })


# =============================================================================
# BATCH EVENTS
# =============================================================================

class BatchEventView(FlockBaseView):
    """
    GET /api/batch-events/?batch_id={id}
    POST /api/batch-events/
    """

    def get(self, request):
        batch_id = pick(request.query_params, 'batch_id', 'batchId')
        queryset = timeline.list_events(request.user, batch_id)
        return self._paginated(request, queryset, self._serialize_event)

    def post(self, request):
        event = timeline.create_event(request.user, request.data)
        return Response({
            'success': True,
            'message': 'Event created successfully',
            'event': self._serialize_event(event),
        }, status=status.HTTP_201_CREATED)


class BatchEventDetailView(FlockBaseView):
    """
    PUT/PATCH /api/batch-events/{id}/
    DELETE /api/batch-events/{id}/
    """

    def put(self, request, event_id):
        event = timeline.update_event(request.user, event_id, request.data)
        return Response({
            'success': True,
            'message': 'Event updated successfully',
            'event': self._serialize_event(event),
        })

    patch = put

    def delete(self, request, event_id):
        timeline.delete_event(request.user, event_id)
        return Response({'success': True, 'message': 'Event deleted successfully'})


# =============================================================================
# DEATH RECORDS
# =============================================================================

class DeathRecordView(FlockBaseView):
    """
    GET /api/death-records/?batch_id={id}
    POST /api/death-records/

    Recording deaths lowers the batch's current count in the same transaction.
    """

    def get(self, request):
        batch_id = pick(request.query_params, 'batch_id', 'batchId')
        queryset = mortality_ledger.list_death_records(request.user, batch_id)
        return self._paginated(request, queryset, self._serialize_death_record)

    def post(self, request):
        record = mortality_ledger.create_death_record(request.user, request.data)
        return Response({
            'success': True,
            'message': f'Recorded {record.count} death(s) for batch "{record.batch.batch_name}"',
            'death_record': self._serialize_death_record(record),
            'current_count': record.batch.current_count,
        }, status=status.HTTP_201_CREATED)


class DeathRecordDetailView(FlockBaseView):
    """
    GET /api/death-records/{id}/
    PUT/PATCH /api/death-records/{id}/
    DELETE /api/death-records/{id}/
    """

    def get(self, request, record_id):
        record = mortality_ledger.get_death_record(request.user, record_id)
        return Response({'success': True, 'death_record': self._serialize_death_record(record)})

    def put(self, request, record_id):
        record = mortality_ledger.update_death_record(request.user, record_id, request.data)
        return Response({
            'success': True,
            'message': 'Death record updated successfully',
            'death_record': self._serialize_death_record(record),
            'current_count': record.batch.current_count,
        })

    patch = put

    def delete(self, request, record_id):
        mortality_ledger.delete_death_record(request.user, record_id)
        return Response({'success': True, 'message': 'Death record deleted successfully'})


# =============================================================================
# FLOCK TIMELINE
# =============================================================================

class FlockEventListView(generics.ListAPIView):
    """
    GET /api/flock-events/

    Read-only flock-level timeline, including projections of batch events.
    """
    serializer_class = FlockEventSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    ordering_fields = ['date', 'created_at']
    ordering = ['-date', '-created_at']
    filterset_fields = ['type', 'date', 'source_event']

    def get_queryset(self):
        return FlockEvent.objects.filter(owner=self.request.user)
