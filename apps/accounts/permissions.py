"""
Tenant-scoping permission classes shared by the ledger apps.

Cross-tenant access is rejected here, before any service call.
"""
from rest_framework.permissions import BasePermission


class HasOrganization(BasePermission):
    """
    Permission: user must belong to an organization.

    Every ledger endpoint reads and writes inside ``request.user.organization``.
    """

    message = 'Your account is not assigned to an organization.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.organization_id)


class IsOrganizationAdmin(HasOrganization):
    """
    Permission: user must be an ADMIN or TENANT_ADMIN of their organization.
    """

    message = 'Only organization admins can perform this action.'

    def has_permission(self, request, view):
        return super().has_permission(request, view) and request.user.is_org_admin
