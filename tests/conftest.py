"""
Pytest configuration and fixtures
"""
import itertools

import pytest
from django.contrib.auth import get_user_model
from django.test import Client

from authentication.jwt_auth import create_access_token
from leads.models import Lead

User = get_user_model()


@pytest.fixture(autouse=True)
def fast_password_hasher(settings):
    """bcrypt is deliberately slow; tests that need it opt back in"""
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


@pytest.fixture
def test_user(db):
    """Create a test user"""
    return User.objects.create_user(
        email='test@example.com',
        password='testpass123',
        first_name='Test',
        last_name='User',
    )


@pytest.fixture
def other_user(db):
    """A second tenant whose leads must stay invisible to test_user"""
    return User.objects.create_user(
        email='other@example.com',
        password='otherpass123',
        first_name='Other',
        last_name='Tenant',
    )


def bearer_client(user):
    return Client(HTTP_AUTHORIZATION=f"Bearer {create_access_token(user)}")


@pytest.fixture
def api_client(test_user):
    """Create an API client with JWT token"""
    return bearer_client(test_user)


@pytest.fixture
def other_client(other_user):
    return bearer_client(other_user)


@pytest.fixture
def sample_lead_data():
    """Sample lead data for testing"""
    return {
        'first_name': 'Ann',
        'last_name': 'Lee',
        'email': 'ann@x.com',
        'phone': '+1-555-010-2030',
        'company': 'TechCorp',
        'city': 'Austin',
        'state': 'TX',
        'source': 'referral',
        'status': 'contacted',
        'score': 42,
        'lead_value': 1500.0,
        'is_qualified': True,
    }


@pytest.fixture
def make_lead(test_user):
    """Factory for stored leads; owner defaults to test_user"""
    counter = itertools.count(1)

    def _make_lead(owner=None, **fields):
        n = next(counter)
        values = {
            'first_name': f'Lead{n}',
            'last_name': 'Example',
            'email': f'lead{n}@example.com',
        }
        values.update(fields)
        return Lead.objects.create(owner=owner or test_user, **values)

    return _make_lead
