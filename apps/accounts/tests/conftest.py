import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import Organization, User, UserRole


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def organization(db):
    """Create and return a studio organization."""
    return Organization.objects.create(
        name='Ride Studio',
        slug='ride-studio',
        timezone='Europe/Istanbul',
    )


@pytest.fixture
def user(organization):
    """Create and return a member user of the organization."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        name='Test User',
        organization=organization,
        role=UserRole.MEMBER,
    )


@pytest.fixture
def user_inactive(organization):
    """Create and return an inactive user."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        organization=organization,
        is_active=False,
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
