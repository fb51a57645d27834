"""
Tests for the Batch Registry: creation rules, partial updates, deactivation,
owner scoping and the acquisition expense written after a batch commits.
"""

import logging
from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.db.models import F
from rest_framework import status

from expenses.models import Expense
from flock_management.models import BatchEvent, DeathRecord, FlockBatch
from flock_management.services import batch_registry
from flock_management.services.exceptions import ConflictError

pytestmark = pytest.mark.django_db


# =============================================================================
# CREATE
# =============================================================================

class TestCreateBatch:

    def test_create_batch_initialises_live_counts(self, auth_client, batch_payload, owner):
        response = auth_client.post('/api/batches/', batch_payload(), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['success'] is True
        body = response.data['batch']
        assert body['current_count'] == 10
        assert body['initial_count'] == 10
        assert body['brooding_count'] == 0
        assert body['is_active'] is True
        assert body['version'] == 0

        batch = FlockBatch.objects.get(pk=body['id'])
        assert batch.owner == owner
        assert batch.acquisition_date == date(2024, 3, 1)

    def test_snake_case_body_is_accepted(self, auth_client):
        response = auth_client.post('/api/batches/', {
            'batch_name': 'Winter Mix',
            'breed': 'Sussex',
            'acquisition_date': '2024-01-10',
            'initial_count': 6,
            'type': 'mixed',
            'age_at_acquisition': 'adult',
            'source': 'Neighbour',
            'hens_count': 4,
            'roosters_count': 1,
            'chicks_count': 1,
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['batch']['roosters_count'] == 1

    def test_counts_not_summing_to_initial_count_are_rejected(self, auth_client, batch_payload):
        payload = batch_payload(initialCount=10, hensCount=5, roostersCount=3, chicksCount=0)

        response = auth_client.post('/api/batches/', payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['success'] is False
        assert response.data['error'] == 'Individual bird counts must add up to initial count'
        assert response.data['details'] == (
            'Hens (5) + Roosters (3) + Chicks (0) = 8, but initial count is 10'
        )
        assert not FlockBatch.objects.exists()

    def test_missing_required_fields_are_listed(self, auth_client, batch_payload):
        payload = batch_payload()
        del payload['breed']
        payload['source'] = ''

        response = auth_client.post('/api/batches/', payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert set(response.data['details']['missing_fields']) == {'breed', 'source'}

    @pytest.mark.parametrize('overrides', [
        {'initialCount': 0, 'hensCount': 0},
        {'initialCount': 'ten'},
        {'type': 'ducks'},
        {'ageAtAcquisition': 'ancient'},
        {'acquisitionDate': '01-03-2024'},
        {'actualLayingStartDate': '2024-02-01'},
        {'cost': '-5'},
    ])
    def test_invalid_values_are_rejected(self, auth_client, batch_payload, overrides):
        response = auth_client.post('/api/batches/', batch_payload(**overrides), format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['success'] is False
        assert not FlockBatch.objects.exists()

    @pytest.mark.parametrize('cost', ['NaN', 'Infinity', '-Infinity'])
    def test_non_finite_cost_counts_as_free(
        self, auth_client, batch_payload, cost, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            response = auth_client.post('/api/batches/', batch_payload(cost=cost), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert FlockBatch.objects.get().cost == Decimal('0.00')
        assert not Expense.objects.exists()

    @pytest.mark.parametrize('overrides,field', [
        ({'batchName': 'x' * 256}, 'batch_name'),
        ({'breed': 'b' * 300}, 'breed'),
        ({'source': 's' * 300}, 'source'),
        ({'cost': '12345678901234'}, 'cost'),
    ])
    def test_values_beyond_column_limits_are_rejected(self, auth_client, batch_payload, overrides, field):
        response = auth_client.post('/api/batches/', batch_payload(**overrides), format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert field in response.data['details']
        assert not FlockBatch.objects.exists()

    def test_unparseable_category_counts_default_to_zero(self, auth_client, batch_payload):
        payload = batch_payload(initialCount=4, hensCount=4, roostersCount='n/a', chicksCount=None)

        response = auth_client.post('/api/batches/', payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['batch']['roosters_count'] == 0


# =============================================================================
# ACQUISITION EXPENSE
# =============================================================================

class TestAcquisitionExpense:

    def test_cost_creates_birds_expense_after_commit(
        self, auth_client, batch_payload, owner, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            response = auth_client.post('/api/batches/', batch_payload(cost='150'), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        expense = Expense.objects.get()
        assert expense.owner == owner
        assert str(expense.flock_batch_id) == response.data['batch']['id']
        assert expense.category == 'Birds'
        assert expense.amount == Decimal('150.00')
        assert expense.description == 'Batch acquisition: Spring Layers (10 hens)'
        assert expense.expense_date == date(2024, 3, 1)

    def test_free_batch_creates_no_expense(
        self, auth_client, batch_payload, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            response = auth_client.post('/api/batches/', batch_payload(), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert callbacks == []
        assert not Expense.objects.exists()

    def test_expense_failure_does_not_fail_batch_creation(
        self, auth_client, batch_payload, django_capture_on_commit_callbacks, caplog
    ):
        with patch.object(Expense.objects, 'create', side_effect=DatabaseError('expenses table locked')):
            with caplog.at_level(logging.ERROR, logger='flock_management.services.mirror'):
                with django_capture_on_commit_callbacks(execute=True):
                    response = auth_client.post('/api/batches/', batch_payload(cost='150'), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert FlockBatch.objects.filter(pk=response.data['batch']['id']).exists()
        assert not Expense.objects.exists()
        assert 'Failed to record acquisition expense' in caplog.text

    def test_longest_batch_name_still_gets_its_expense(
        self, auth_client, batch_payload, django_capture_on_commit_callbacks
    ):
        name = 'N' * 255

        with django_capture_on_commit_callbacks(execute=True):
            response = auth_client.post('/api/batches/', batch_payload(batchName=name, cost='20'), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        expense = Expense.objects.get()
        assert expense.description == f'Batch acquisition: {name} (10 hens)'
        assert Expense._meta.get_field('description').max_length is None

    def test_batch_edits_never_touch_the_expense(
        self, auth_client, batch_payload, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            response = auth_client.post('/api/batches/', batch_payload(cost='150'), format='json')
        batch_id = response.data['batch']['id']

        with django_capture_on_commit_callbacks(execute=True):
            auth_client.patch(f'/api/batches/{batch_id}/', {'cost': '999'}, format='json')
            auth_client.delete(f'/api/batches/{batch_id}/')

        expense = Expense.objects.get()
        assert expense.amount == Decimal('150.00')
        assert str(expense.flock_batch_id) == batch_id


# =============================================================================
# UPDATE
# =============================================================================

class TestUpdateBatch:

    def test_partial_update_bumps_version(self, auth_client, batch):
        response = auth_client.patch(
            f'/api/batches/{batch.id}/',
            {'notes': 'Moved to the east coop', 'batchName': 'East Layers'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        batch.refresh_from_db()
        assert batch.notes == 'Moved to the east coop'
        assert batch.batch_name == 'East Layers'
        assert batch.version == 1

    def test_current_count_above_initial_count_is_rejected(self, auth_client, batch):
        response = auth_client.patch(f'/api/batches/{batch.id}/', {'currentCount': 11}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'current_count' in response.data['details']
        batch.refresh_from_db()
        assert batch.current_count == 10

    def test_negative_count_is_rejected(self, auth_client, batch):
        response = auth_client.patch(f'/api/batches/{batch.id}/', {'hensCount': -1}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.parametrize('cost', ['NaN', 'Infinity', 'abc'])
    def test_unparseable_cost_is_rejected(self, auth_client, batch, cost):
        response = auth_client.patch(f'/api/batches/{batch.id}/', {'cost': cost}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Cost cannot be negative'
        batch.refresh_from_db()
        assert batch.cost == Decimal('0.00')
        assert batch.version == 0

    def test_name_beyond_column_limit_is_rejected(self, auth_client, batch):
        response = auth_client.patch(f'/api/batches/{batch.id}/', {'batchName': 'x' * 256}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'batch_name' in response.data['details']

    @pytest.mark.parametrize('method', ['put', 'patch', 'delete'])
    def test_collection_route_requires_batch_id(self, auth_client, batch, method):
        response = getattr(auth_client, method)('/api/batches/', {'notes': 'x'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {'success': False, 'error': 'Batch ID is required'}
        batch.refresh_from_db()
        assert batch.is_active is True
        assert batch.notes == ''

    def test_post_to_detail_route_is_not_allowed(self, auth_client, batch, batch_payload):
        response = auth_client.post(f'/api/batches/{batch.id}/', batch_payload(), format='json')

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
        assert response.data['success'] is False
        assert FlockBatch.objects.count() == 1

    def test_invalid_type_is_rejected(self, auth_client, batch):
        response = auth_client.patch(f'/api/batches/{batch.id}/', {'type': 'geese'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'type' in response.data['details']

    def test_inactive_batch_can_still_be_updated(self, auth_client, batch):
        batch_registry.deactivate_batch(batch.owner, batch.id)

        response = auth_client.patch(f'/api/batches/{batch.id}/', {'isActive': True}, format='json')

        assert response.status_code == status.HTTP_200_OK
        batch.refresh_from_db()
        assert batch.is_active is True

    def test_update_against_stale_version_conflicts(self, auth_client, batch):
        stale = FlockBatch.objects.get(pk=batch.pk)
        FlockBatch.objects.filter(pk=batch.pk).update(version=F('version') + 1, current_count=9)

        with patch.object(batch_registry, 'get_batch', return_value=stale):
            response = auth_client.patch(f'/api/batches/{batch.id}/', {'notes': 'late edit'}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['success'] is False
        batch.refresh_from_db()
        assert batch.notes == ''
        assert batch.current_count == 9

    def test_save_versioned_raises_conflict_directly(self, batch):
        FlockBatch.objects.filter(pk=batch.pk).update(version=F('version') + 1)

        with pytest.raises(ConflictError):
            batch_registry._save_versioned(batch, ['notes'])


# =============================================================================
# DEACTIVATE / READ
# =============================================================================

class TestDeactivateAndRead:

    def test_deactivate_hides_batch_from_default_list(self, auth_client, batch):
        response = auth_client.delete(f'/api/batches/{batch.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert FlockBatch.objects.filter(pk=batch.pk, is_active=False).exists()

        default_list = auth_client.get('/api/batches/')
        assert default_list.data['count'] == 0

        full_list = auth_client.get('/api/batches/?include_inactive=true')
        assert full_list.data['count'] == 1
        assert full_list.data['results'][0]['is_active'] is False

    def test_deactivate_keeps_events_and_death_records(self, auth_client, batch):
        auth_client.post('/api/batch-events/', {
            'batchId': str(batch.id), 'date': '2024-03-05',
            'type': 'vaccination', 'description': 'Marek booster',
        }, format='json')
        auth_client.post('/api/death-records/', {
            'batchId': str(batch.id), 'date': '2024-03-06', 'count': 1,
            'cause': 'disease', 'description': 'Coccidiosis',
        }, format='json')

        auth_client.delete(f'/api/batches/{batch.id}/')

        assert BatchEvent.objects.filter(batch=batch, type='vaccination').exists()
        assert DeathRecord.objects.filter(batch=batch).count() == 1

    def test_list_is_newest_acquisition_first(self, auth_client, make_batch):
        make_batch(batch_name='Old', acquisition_date='2023-01-01')
        make_batch(batch_name='New', acquisition_date='2024-06-01')

        response = auth_client.get('/api/batches/')

        assert [row['batch_name'] for row in response.data['results']] == ['New', 'Old']

    def test_get_single_batch(self, auth_client, batch):
        response = auth_client.get(f'/api/batches/{batch.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['batch']['batch_name'] == 'Spring Layers'

    def test_deactivated_batch_is_hidden_unless_requested(self, auth_client, batch):
        auth_client.delete(f'/api/batches/{batch.id}/')

        hidden = auth_client.get(f'/api/batches/{batch.id}/')
        shown = auth_client.get(f'/api/batches/{batch.id}/?include_inactive=true')

        assert hidden.status_code == status.HTTP_404_NOT_FOUND
        assert shown.status_code == status.HTTP_200_OK
        assert shown.data['batch']['is_active'] is False


# =============================================================================
# OWNERSHIP
# =============================================================================

class TestBatchOwnership:

    def test_other_users_batch_is_not_found(self, other_client, batch):
        assert other_client.get(f'/api/batches/{batch.id}/').status_code == status.HTTP_404_NOT_FOUND
        assert other_client.patch(
            f'/api/batches/{batch.id}/', {'notes': 'mine now'}, format='json'
        ).status_code == status.HTTP_404_NOT_FOUND
        assert other_client.delete(f'/api/batches/{batch.id}/').status_code == status.HTTP_404_NOT_FOUND

        batch.refresh_from_db()
        assert batch.is_active is True
        assert batch.notes == ''

    def test_list_only_shows_own_batches(self, other_client, batch):
        response = other_client.get('/api/batches/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 0


# =============================================================================
# ADMIN
# =============================================================================

class TestBatchAdmin:

    def test_batches_cannot_be_added_from_admin(self, admin_user, rf):
        from django.contrib import admin

        request = rf.get('/admin/flock_management/flockbatch/add/')
        request.user = admin_user

        assert admin.site._registry[FlockBatch].has_add_permission(request) is False
        assert admin.site._registry[FlockBatch].has_change_permission(request) is True
