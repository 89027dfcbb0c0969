import uuid

from rest_framework import viewsets, status, mixins
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.accounts.permissions import HasOrganization, IsOrganizationAdmin
from apps.catalog.services import (
    CatalogServiceError,
    PackageNotFoundError,
    CouponNotFoundError,
)
from apps.members.models import Member
from apps.members.services import (
    with_contention_retry,
    MemberNotFoundError,
    MemberInactiveError,
    LedgerContentionError,
)
from config.views import error_response, contention_response

from .models import PackageRedemption, RedemptionStatus
from .serializers import (
    RedemptionCreateSerializer,
    DailyUsageInputSerializer,
    ReleaseUsageInputSerializer,
    PackageRedemptionSerializer,
    ApprovedRedemptionSerializer,
    DailyUsageSerializer,
)
from .services import (
    create_redemption,
    approve_redemption,
    cancel_redemption,
    record_daily_usage,
    release_daily_usage,
    list_daily_usage,
    # Exceptions
    RedemptionServiceError,
    RedemptionNotFoundError,
    InvalidStateError,
    DayAlreadyUsedError,
)


class RedemptionPagination(PageNumberPagination):
    """Custom pagination for redemptions."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _service_error_response(exc):
    """Map a service error to its HTTP status."""
    if isinstance(exc, LedgerContentionError):
        return contention_response(exc)
    if isinstance(exc, (RedemptionNotFoundError, MemberNotFoundError, PackageNotFoundError, CouponNotFoundError)):
        return error_response(exc, status.HTTP_404_NOT_FOUND)
    if isinstance(exc, (InvalidStateError, DayAlreadyUsedError)):
        return error_response(exc, status.HTTP_409_CONFLICT)
    return error_response(exc, status.HTTP_400_BAD_REQUEST)


def _is_uuid(value):
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


SERVICE_ERRORS = (RedemptionServiceError, CatalogServiceError, MemberNotFoundError, MemberInactiveError, LedgerContentionError)


class RedemptionViewSet(mixins.ListModelMixin,
                        mixins.RetrieveModelMixin,
                        viewsets.GenericViewSet):
    """
    Package redemptions and All-Access usage.

    All business logic is in the services layer.
    Views are thin HTTP handlers only.

    list: Admins see the organization, members their own redemptions
    retrieve: Redemption details (admin or owner)
    create: Redeem a package (admin for anyone, member for themselves)
    approve: Grant a pending redemption (admin only)
    cancel: Reject a pending redemption (admin or owner)
    usage: List or record All-Access days (admin or owner)
    release_usage: Free the day of a cancelled booking (admin or owner)
    """

    serializer_class = PackageRedemptionSerializer
    permission_classes = [HasOrganization]
    pagination_class = RedemptionPagination

    def get_queryset(self):
        """Admins see the whole organization, members only their own."""
        user = self.request.user
        queryset = PackageRedemption.objects.filter(
            organization_id=user.organization_id
        ).select_related(
            'package', 'coupon', 'redeemed_by', 'approved_by', 'cancelled_by'
        )

        if not user.is_org_admin:
            queryset = queryset.filter(member__user=user)

        if self.action == 'list':
            member_id = self.request.query_params.get('member')
            if member_id and _is_uuid(member_id):
                queryset = queryset.filter(member_id=member_id)
            status_filter = self.request.query_params.get('status')
            if status_filter in RedemptionStatus.values:
                queryset = queryset.filter(status=status_filter)

        return queryset.order_by('-redeemed_at')

    def get_permissions(self):
        if self.action == 'approve':
            return [IsOrganizationAdmin()]
        return [HasOrganization()]

    @extend_schema(
        parameters=[
            OpenApiParameter('member', str, description='Filter by member ID'),
            OpenApiParameter('status', str, description='Filter by status'),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(request=RedemptionCreateSerializer, responses={201: PackageRedemptionSerializer})
    def create(self, request):
        """
        Redeem a package directly or with a coupon.

        POST /api/redemptions/
        Body: {"member_id": "...", "package_id": "...", "coupon_code": "SPRING15"}
        """
        serializer = RedemptionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        member_id = data.get('member_id')
        if not request.user.is_org_admin:
            own = Member.objects.filter(
                user=request.user,
                organization_id=request.user.organization_id,
            ).values_list('id', flat=True).first()
            if own is None:
                return Response(
                    {'error': 'Your account has no member profile', 'code': 'member_not_found'},
                    status=status.HTTP_404_NOT_FOUND
                )
            if member_id and member_id != own:
                return Response(
                    {'error': 'You can only redeem packages for yourself', 'code': 'forbidden'},
                    status=status.HTTP_403_FORBIDDEN
                )
            member_id = own
        elif not member_id:
            return Response(
                {'error': 'member_id is required', 'code': 'member_required'},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            redemption = create_redemption(
                member_id=member_id,
                organization_id=request.user.organization_id,
                redeemed_by=request.user,
                package_id=data.get('package_id'),
                coupon_id=data.get('coupon_id'),
                coupon_code=data.get('coupon_code') or None,
                notes=data.get('notes', ''),
            )
        except SERVICE_ERRORS as e:
            return _service_error_response(e)

        return Response(
            PackageRedemptionSerializer(redemption).data,
            status=status.HTTP_201_CREATED
        )

    @extend_schema(request=None, responses={200: ApprovedRedemptionSerializer})
    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        """
        Approve a pending redemption: post credits and grant entitlements.

        POST /api/redemptions/{id}/approve/
        """
        try:
            redemption = with_contention_retry(
                approve_redemption,
                redemption_id=pk,
                organization_id=request.user.organization_id,
                approved_by=request.user,
            )
        except SERVICE_ERRORS as e:
            return _service_error_response(e)

        return Response(ApprovedRedemptionSerializer(redemption).data)

    @extend_schema(request=None, responses={200: PackageRedemptionSerializer})
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """
        Cancel a pending redemption.

        POST /api/redemptions/{id}/cancel/
        """
        redemption = self.get_object()
        try:
            redemption = cancel_redemption(
                redemption_id=redemption.id,
                organization_id=request.user.organization_id,
                cancelled_by=request.user,
            )
        except SERVICE_ERRORS as e:
            return _service_error_response(e)

        return Response(PackageRedemptionSerializer(redemption).data)

    @extend_schema(
        methods=['get'],
        responses={200: DailyUsageSerializer(many=True)}
    )
    @extend_schema(
        methods=['post'],
        request=DailyUsageInputSerializer,
        responses={201: DailyUsageSerializer}
    )
    @action(detail=True, methods=['get', 'post'])
    def usage(self, request, pk=None):
        """
        All-Access daily usage of a redemption.

        GET  /api/redemptions/{id}/usage/
        POST /api/redemptions/{id}/usage/
        Body: {"booking_id": "...", "usage_date": "2025-01-15"}
        """
        redemption = self.get_object()

        if request.method == 'GET':
            try:
                usages = list_daily_usage(
                    redemption_id=redemption.id,
                    organization_id=request.user.organization_id,
                )
            except SERVICE_ERRORS as e:
                return _service_error_response(e)
            return Response(DailyUsageSerializer(usages, many=True).data)

        serializer = DailyUsageInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            usage = with_contention_retry(
                record_daily_usage,
                redemption_id=redemption.id,
                organization_id=request.user.organization_id,
                booking_id=serializer.validated_data['booking_id'],
                usage_date=serializer.validated_data['usage_date'],
            )
        except SERVICE_ERRORS as e:
            return _service_error_response(e)

        return Response(DailyUsageSerializer(usage).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ReleaseUsageInputSerializer, responses={204: None})
    @action(detail=True, methods=['post'])
    def release_usage(self, request, pk=None):
        """
        Release the All-Access day held by a cancelled booking.

        POST /api/redemptions/{id}/release_usage/
        Body: {"booking_id": "..."}
        """
        redemption = self.get_object()
        serializer = ReleaseUsageInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            released = release_daily_usage(
                redemption_id=redemption.id,
                organization_id=request.user.organization_id,
                booking_id=serializer.validated_data['booking_id'],
            )
        except SERVICE_ERRORS as e:
            return _service_error_response(e)

        if not released:
            return Response(
                {'error': 'No usage recorded for this booking', 'code': 'usage_not_found'},
                status=status.HTTP_404_NOT_FOUND
            )
        return Response(status=status.HTTP_204_NO_CONTENT)
