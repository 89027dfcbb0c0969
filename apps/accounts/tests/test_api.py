import pytest
from io import StringIO
from django.core.management import call_command, CommandError
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import Organization, User, UserRole


@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, user):
        """Valid credentials return JWT tokens and the principal."""
        url = reverse('users:login')
        response = api_client.post(url, {
            'email': 'testuser@example.com',
            'password': 'TestPass123!',
        })

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']
        assert response.data['user']['role'] == UserRole.MEMBER
        assert response.data['user']['organization']['slug'] == 'ride-studio'

    def test_login_updates_last_login(self, api_client, user):
        """Successful login records last_login."""
        url = reverse('users:login')
        api_client.post(url, {'email': 'testuser@example.com', 'password': 'TestPass123!'})

        user.refresh_from_db()
        assert user.last_login is not None

    def test_login_wrong_password(self, api_client, user):
        """Wrong password returns 401."""
        url = reverse('users:login')
        response = api_client.post(url, {
            'email': 'testuser@example.com',
            'password': 'WrongPass123!',
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'invalid_credentials'

    def test_login_inactive_user(self, api_client, user_inactive):
        """Inactive users cannot log in."""
        url = reverse('users:login')
        response = api_client.post(url, {
            'email': 'inactive@example.com',
            'password': 'TestPass123!',
        })

        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)

    def test_login_missing_fields(self, api_client):
        """Missing fields return 400."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': 'testuser@example.com'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestCurrentUser:
    """Tests for GET /api/auth/user/"""

    def test_get_current_user(self, authenticated_client, user):
        """Returns the authenticated principal."""
        url = reverse('users:current-user')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == user.email
        assert response.data['organization']['timezone'] == 'Europe/Istanbul'

    def test_get_current_user_unauthenticated(self, api_client):
        """Unauthenticated requests are rejected."""
        url = reverse('users:current-user')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestHealthCheck:
    """Tests for GET /api/health/"""

    def test_health_check_is_public(self, api_client):
        response = api_client.get('/api/health/')

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {'status': 'ok'}

    def test_plain_http_is_not_redirected(self, api_client):
        """With production defaults the test client still gets a plain HTTP answer."""
        response = api_client.get('/api/health/', secure=False)

        assert response.status_code == status.HTTP_200_OK


@pytest.mark.django_db
class TestProvisionOrganization:
    """Tests for the provision_organization management command."""

    def test_creates_organization_and_admin(self):
        out = StringIO()
        call_command(
            'provision_organization',
            '--name', 'Ride Studio',
            '--slug', 'ride',
            '--timezone', 'Europe/Istanbul',
            '--admin-email', 'owner@ride.studio',
            '--admin-password', 'OwnerPass123!',
            stdout=out,
        )

        organization = Organization.objects.get(slug='ride')
        assert organization.timezone == 'Europe/Istanbul'
        admin = User.objects.get(email='owner@ride.studio')
        assert admin.organization == organization
        assert admin.role == UserRole.TENANT_ADMIN
        assert admin.check_password('OwnerPass123!')

    def test_rerun_updates_in_place(self):
        call_command('provision_organization', '--name', 'Ride', '--slug', 'ride', stdout=StringIO())
        call_command('provision_organization', '--name', 'Ride Studio', '--slug', 'ride', stdout=StringIO())

        assert Organization.objects.filter(slug='ride').count() == 1
        assert Organization.objects.get(slug='ride').name == 'Ride Studio'

    def test_rejects_unknown_timezone(self):
        with pytest.raises(CommandError):
            call_command(
                'provision_organization',
                '--name', 'Ride',
                '--slug', 'ride',
                '--timezone', 'Mars/Olympus',
                stdout=StringIO(),
            )

    def test_new_admin_requires_password(self):
        with pytest.raises(CommandError):
            call_command(
                'provision_organization',
                '--name', 'Ride',
                '--slug', 'ride',
                '--admin-email', 'owner@ride.studio',
                stdout=StringIO(),
            )
