import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import Organization, User, UserRole
from apps.members.models import Member


def client_for(user):
    """Return an API client authenticated as ``user`` using JWT."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def organization(db):
    """Create and return a studio organization."""
    return Organization.objects.create(name='Ride Studio', slug='ride-studio')


@pytest.fixture
def other_organization(db):
    """Create and return a second, unrelated organization."""
    return Organization.objects.create(name='Other Studio', slug='other-studio')


@pytest.fixture
def admin_user(organization):
    """Create and return a tenant admin."""
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        name='Studio Admin',
        organization=organization,
        role=UserRole.TENANT_ADMIN,
    )


@pytest.fixture
def member_user(organization):
    """Create and return a member login."""
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        name='Studio Member',
        organization=organization,
        role=UserRole.MEMBER,
    )


@pytest.fixture
def other_admin(other_organization):
    """Create and return a tenant admin of the other organization."""
    return User.objects.create_user(
        email='otheradmin@example.com',
        password='TestPass123!',
        organization=other_organization,
        role=UserRole.TENANT_ADMIN,
    )


@pytest.fixture
def member(organization, member_user):
    """Create and return the member profile of ``member_user`` (0 credits)."""
    return Member.objects.create(organization=organization, user=member_user)


@pytest.fixture
def other_member(organization):
    """Create and return a second member without a login."""
    return Member.objects.create(organization=organization, membership_type='walk-in')


@pytest.fixture
def admin_client(admin_user):
    return client_for(admin_user)


@pytest.fixture
def member_client(member_user):
    return client_for(member_user)


@pytest.fixture
def other_admin_client(other_admin):
    return client_for(other_admin)
