from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import HasOrganization, IsOrganizationAdmin
from config.views import error_response

from .models import Package, Coupon
from .serializers import (
    PackageSerializer,
    CouponSerializer,
    CouponLookupSerializer,
)
from .services import (
    get_coupon,
    describe_coupon_validity,
    CouponNotFoundError,
)


class CatalogPagination(PageNumberPagination):
    """Custom pagination for catalog listings."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


class PackageViewSet(viewsets.ModelViewSet):
    """
    ViewSet for the organization's packages.

    list/retrieve: Any organization user (members only see active packages)
    create/update/partial_update: Admins only
    destroy: Admins only; deactivates the package so historical
        redemptions keep their reference
    """

    serializer_class = PackageSerializer
    pagination_class = CatalogPagination

    def get_queryset(self):
        user = self.request.user
        queryset = Package.objects.filter(organization_id=user.organization_id)
        if not user.is_org_admin:
            queryset = queryset.filter(is_active=True)
        return queryset.order_by('display_order', 'price')

    def get_permissions(self):
        if self.action in ['list', 'retrieve']:
            return [HasOrganization()]
        return [IsOrganizationAdmin()]

    def perform_create(self, serializer):
        serializer.save(organization_id=self.request.user.organization_id)

    def destroy(self, request, *args, **kwargs):
        """Deactivate instead of deleting."""
        package = self.get_object()
        package.is_active = False
        package.save(update_fields=['is_active', 'updated_at'])
        return Response(status=status.HTTP_204_NO_CONTENT)


class CouponViewSet(viewsets.ModelViewSet):
    """
    ViewSet for the organization's coupons (admins only).

    Members use the ``code/{code}`` lookup to preview a coupon.
    """

    serializer_class = CouponSerializer
    permission_classes = [IsOrganizationAdmin]
    pagination_class = CatalogPagination

    def get_queryset(self):
        return Coupon.objects.filter(
            organization_id=self.request.user.organization_id
        ).select_related('package')

    def perform_create(self, serializer):
        serializer.save(organization_id=self.request.user.organization_id)

    def destroy(self, request, *args, **kwargs):
        """Deactivate instead of deleting."""
        coupon = self.get_object()
        coupon.is_active = False
        coupon.save(update_fields=['is_active', 'updated_at'])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: CouponLookupSerializer})
    @action(
        detail=False,
        methods=['get'],
        url_path=r'code/(?P<code>[^/]+)',
        permission_classes=[HasOrganization],
    )
    def lookup(self, request, code=None):
        """
        Look up a coupon by code and report whether it can be used now.

        GET /api/catalog/coupons/code/{code}/
        """
        try:
            coupon = get_coupon(
                organization_id=request.user.organization_id,
                coupon_code=code,
            )
        except CouponNotFoundError as e:
            return error_response(e, status.HTTP_404_NOT_FOUND)

        verdict = describe_coupon_validity(coupon)
        serializer = CouponLookupSerializer({'coupon': coupon, **verdict})
        return Response(serializer.data)
