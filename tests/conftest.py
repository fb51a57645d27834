"""
Shared pytest fixtures for the flock batch tests.
"""
import pytest
from rest_framework.test import APIClient


@pytest.fixture
def api_client():
    """API client for making requests."""
    return APIClient()


@pytest.fixture
def owner(django_user_model):
    return django_user_model.objects.create_user(
        username='flock_owner',
        email='owner@test.com',
        password='testpass123',
    )


@pytest.fixture
def other_user(django_user_model):
    return django_user_model.objects.create_user(
        username='neighbour',
        email='neighbour@test.com',
        password='testpass123',
    )


@pytest.fixture
def auth_client(api_client, owner):
    """API client authenticated as the batch owner."""
    api_client.force_authenticate(user=owner)
    return api_client


@pytest.fixture
def other_client(other_user):
    client = APIClient()
    client.force_authenticate(user=other_user)
    return client


@pytest.fixture
def batch_payload():
    """Valid create-batch body in the frontend's camelCase."""
    def _payload(**overrides):
        payload = {
            'batchName': 'Spring Layers',
            'breed': 'Isa Brown',
            'acquisitionDate': '2024-03-01',
            'initialCount': 10,
            'type': 'hens',
            'ageAtAcquisition': 'juvenile',
            'source': 'Sunrise Hatchery',
            'hensCount': 10,
            'roostersCount': 0,
            'chicksCount': 0,
        }
        payload.update(overrides)
        return payload
    return _payload


@pytest.fixture
def make_batch(owner):
    """Create a batch through the registry, bypassing HTTP."""
    from flock_management.services import batch_registry

    def _make(user=None, **overrides):
        data = {
            'batch_name': 'Spring Layers',
            'breed': 'Isa Brown',
            'acquisition_date': '2024-03-01',
            'initial_count': 10,
            'type': 'hens',
            'age_at_acquisition': 'juvenile',
            'source': 'Sunrise Hatchery',
            'hens_count': 10,
        }
        data.update(overrides)
        return batch_registry.create_batch(user or owner, data)
    return _make


@pytest.fixture
def batch(make_batch):
    return make_batch()
