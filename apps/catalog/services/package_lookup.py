"""
Package lookup service.
"""

from uuid import UUID

from django.core.exceptions import ValidationError
from django.db.models import QuerySet

from apps.catalog.models import Package

from .exceptions import PackageNotFoundError


def get_active_package(*, package_id: UUID, organization_id: UUID) -> Package:
    """
    Get a package that can currently be redeemed.

    Raises:
        PackageNotFoundError: If the package doesn't exist in this
            organization or is inactive
    """
    try:
        return Package.objects.get(
            id=package_id,
            organization_id=organization_id,
            is_active=True,
        )
    except (Package.DoesNotExist, ValidationError, ValueError):
        raise PackageNotFoundError(f"Package with ID {package_id} not found or inactive")


def get_package(*, package_id: UUID, organization_id: UUID) -> Package:
    """
    Get a package regardless of its active flag.

    PACKAGE coupons keep working for packages retired from the public
    catalog.

    Raises:
        PackageNotFoundError: If the package doesn't exist in this organization
    """
    try:
        return Package.objects.get(id=package_id, organization_id=organization_id)
    except (Package.DoesNotExist, ValidationError, ValueError):
        raise PackageNotFoundError(f"Package with ID {package_id} not found")


def list_packages(*, organization_id: UUID, include_inactive: bool = False) -> QuerySet[Package]:
    """Catalog of the organization in display order."""
    packages = Package.objects.filter(organization_id=organization_id)
    if not include_inactive:
        packages = packages.filter(is_active=True)
    return packages.order_by('display_order', 'price')
