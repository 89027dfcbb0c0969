from rest_framework import viewsets, status, mixins
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.models import User
from apps.accounts.permissions import HasOrganization, IsOrganizationAdmin
from config.views import error_response, contention_response

from .models import Member
from .serializers import (
    MemberSerializer,
    MemberCreateSerializer,
    AdjustBalanceInputSerializer,
    CreditTransactionSerializer,
)
from .services import (
    enroll_member,
    adjust_balance,
    list_transactions,
    with_contention_retry,
    # Exceptions
    MemberNotFoundError,
    InvalidAmountError,
    InsufficientCreditsError,
    LedgerContentionError,
)


class MemberPagination(PageNumberPagination):
    """Custom pagination for members."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class MemberViewSet(mixins.ListModelMixin,
                    mixins.RetrieveModelMixin,
                    mixins.CreateModelMixin,
                    viewsets.GenericViewSet):
    """
    Members and their credit ledger.

    All balance changes go through the ledger service.
    Views are thin HTTP handlers only.

    list: Members of the organization (admins) or the caller's own profile
    retrieve: Member with current balance and entitlements
    create: Enroll a member (admin only)
    adjust_balance: Add, deduct or set credits (admin only)
    transactions: Ledger history, oldest first
    """

    serializer_class = MemberSerializer
    permission_classes = [HasOrganization]
    pagination_class = MemberPagination

    def get_queryset(self):
        """Admins see the whole organization, members only themselves."""
        user = self.request.user
        queryset = Member.objects.filter(
            organization_id=user.organization_id
        ).select_related('user')

        if not user.is_org_admin:
            queryset = queryset.filter(user=user)
        return queryset

    def get_permissions(self):
        if self.action in ['create', 'adjust_balance']:
            return [IsOrganizationAdmin()]
        return [HasOrganization()]

    def get_serializer_class(self):
        if self.action == 'create':
            return MemberCreateSerializer
        return MemberSerializer

    @extend_schema(request=MemberCreateSerializer, responses={201: MemberSerializer})
    def create(self, request, *args, **kwargs):
        """Enroll a member, optionally linked to a user of the organization."""
        serializer = MemberCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user = None
        if data.get('user_id'):
            user = User.objects.filter(
                id=data['user_id'],
                organization_id=request.user.organization_id,
            ).first()
            if user is None:
                return Response(
                    {'error': 'User not found in this organization', 'code': 'user_not_found'},
                    status=status.HTTP_404_NOT_FOUND
                )
            if Member.objects.filter(user=user).exists():
                return Response(
                    {'error': 'User already has a member profile', 'code': 'member_exists'},
                    status=status.HTTP_400_BAD_REQUEST
                )

        member = enroll_member(
            organization=request.user.organization,
            user=user,
            membership_type=data.get('membership_type', ''),
            opening_credits=data.get('opening_credits', 0),
            performed_by=request.user,
        )
        return Response(MemberSerializer(member).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=AdjustBalanceInputSerializer, responses={200: MemberSerializer})
    @action(detail=True, methods=['post'])
    def adjust_balance(self, request, pk=None):
        """
        Add/deduct credits (``delta``) or set the balance (``absolute``).

        POST /api/members/{id}/adjust_balance/
        Body: {"delta": -2, "description": "No-show fee"}
        """
        serializer = AdjustBalanceInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            member = with_contention_retry(
                adjust_balance,
                member_id=pk,
                organization_id=request.user.organization_id,
                delta=data.get('delta'),
                absolute=data.get('absolute'),
                description=data.get('description', ''),
                performed_by=request.user,
            )
        except MemberNotFoundError as e:
            return error_response(e, status.HTTP_404_NOT_FOUND)
        except (InvalidAmountError, InsufficientCreditsError) as e:
            return error_response(e, status.HTTP_400_BAD_REQUEST)
        except LedgerContentionError as e:
            return contention_response(e)

        return Response(MemberSerializer(member).data)

    @extend_schema(responses={200: CreditTransactionSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def transactions(self, request, pk=None):
        """
        Ledger history of the member, oldest first.

        GET /api/members/{id}/transactions/
        """
        member = self.get_object()
        try:
            entries = list_transactions(
                member_id=member.id,
                organization_id=request.user.organization_id,
            )
        except MemberNotFoundError as e:
            return error_response(e, status.HTTP_404_NOT_FOUND)

        serializer = CreditTransactionSerializer(entries, many=True)
        return Response(serializer.data)
