import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework import status
from apps.catalog.models import Package, PackageType, Coupon, CouponType


# =============================================================================
# Package Tests
# =============================================================================

@pytest.mark.django_db
class TestPackageList:
    """Tests for GET /api/catalog/packages/"""

    def test_member_sees_active_packages(self, member_client, credit_pack, inactive_package):
        url = reverse('catalog:package-list')
        response = member_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        codes = [row['code'] for row in response.data['results']]
        assert codes == ['EXPLORER-5']

    def test_admin_sees_inactive_packages(self, admin_client, credit_pack, inactive_package):
        url = reverse('catalog:package-list')
        response = admin_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2

    def test_other_organization_packages_hidden(self, other_admin_client, credit_pack):
        url = reverse('catalog:package-list')
        response = other_admin_client.get(url)

        assert response.data['count'] == 0


@pytest.mark.django_db
class TestPackageWrite:
    """Tests for package create / update / deactivate."""

    def test_admin_creates_package(self, admin_client, organization):
        url = reverse('catalog:package-list')
        response = admin_client.post(url, {
            'code': 'core-10',
            'name': 'Core 10',
            'type': PackageType.CREDIT_PACK,
            'price': '8000.00',
            'credits': 10,
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        package = Package.objects.get(organization=organization, code='CORE-10')
        assert package.price == Decimal('8000.00')

    def test_all_access_with_credits_rejected(self, admin_client):
        url = reverse('catalog:package-list')
        response = admin_client.post(url, {
            'code': 'AA-30',
            'name': 'All Access',
            'type': PackageType.ALL_ACCESS,
            'price': '21000.00',
            'credits': 30,
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'credits' in response.data

    def test_duplicate_code_rejected(self, admin_client, credit_pack):
        url = reverse('catalog:package-list')
        response = admin_client.post(url, {
            'code': 'explorer-5',
            'name': 'Explorer again',
            'type': PackageType.CREDIT_PACK,
            'price': '5000.00',
            'credits': 5,
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_member_cannot_create(self, member_client):
        url = reverse('catalog:package-list')
        response = member_client.post(url, {'code': 'X'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_delete_deactivates(self, admin_client, credit_pack):
        url = reverse('catalog:package-detail', kwargs={'pk': credit_pack.id})
        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        credit_pack.refresh_from_db()
        assert credit_pack.is_active is False


# =============================================================================
# Coupon Tests
# =============================================================================

@pytest.mark.django_db
class TestCouponAdmin:
    """Tests for /api/catalog/coupons/"""

    def test_admin_creates_package_coupon(self, admin_client, credit_pack, organization):
        url = reverse('catalog:coupon-list')
        response = admin_client.post(url, {
            'code': 'friends',
            'name': 'Friends & family',
            'coupon_type': CouponType.PACKAGE,
            'package': str(credit_pack.id),
            'custom_price': '3500.00',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        coupon = Coupon.objects.get(organization=organization, code='FRIENDS')
        assert coupon.package == credit_pack

    def test_discount_shape_validated(self, admin_client):
        url = reverse('catalog:coupon-list')
        response = admin_client.post(url, {
            'code': 'HALF',
            'name': 'Half off',
            'coupon_type': CouponType.DISCOUNT,
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_foreign_package_rejected(self, other_admin_client, credit_pack):
        url = reverse('catalog:coupon-list')
        response = other_admin_client.post(url, {
            'code': 'STEAL',
            'name': 'Steal',
            'coupon_type': CouponType.PACKAGE,
            'package': str(credit_pack.id),
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_member_cannot_list_coupons(self, member_client, discount_coupon):
        url = reverse('catalog:coupon-list')
        response = member_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestCouponLookup:
    """Tests for GET /api/catalog/coupons/code/{code}/"""

    def test_member_looks_up_code(self, member_client, discount_coupon):
        url = reverse('catalog:coupon-lookup', kwargs={'code': 'spring15'})
        response = member_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['coupon']['code'] == 'SPRING15'
        assert response.data['is_valid'] is True
        assert response.data['remaining_redemptions'] == 2

    def test_inactive_coupon_reported_invalid(self, member_client, discount_coupon):
        discount_coupon.is_active = False
        discount_coupon.save()

        url = reverse('catalog:coupon-lookup', kwargs={'code': 'SPRING15'})
        response = member_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_valid'] is False
        assert response.data['code'] == 'coupon_inactive'

    def test_unknown_code(self, member_client, organization):
        url = reverse('catalog:coupon-lookup', kwargs={'code': 'NOPE'})
        response = member_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'coupon_not_found'
