from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
import uuid


class Organization(models.Model):
    """Studio tenant. Every ledger, catalog and redemption row belongs to one."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=100, unique=True)

    # IANA zone name; calendar days and end-of-day expirations are org-local
    timezone = models.CharField(max_length=64, default='UTC')

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'organizations'
        ordering = ['name']

    def __str__(self):
        return self.name


class UserRole(models.TextChoices):
    ADMIN = 'ADMIN', 'Admin'
    TENANT_ADMIN = 'TENANT_ADMIN', 'Tenant Admin'
    INSTRUCTOR = 'INSTRUCTOR', 'Instructor'
    MEMBER = 'MEMBER', 'Member'


ADMIN_ROLES = (UserRole.ADMIN, UserRole.TENANT_ADMIN)


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', UserRole.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom user model with email authentication.

    Together with ``organization`` and ``role`` a user is the acting
    principal for every ledger and redemption operation.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=255, db_index=True)
    name = models.CharField(max_length=100, blank=True)

    organization = models.ForeignKey(
        Organization,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='users'
    )
    role = models.CharField(max_length=20, choices=UserRole.choices, default=UserRole.MEMBER)

    # Permissions
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    last_login = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['organization', 'role'], name='users_organiz_4b9f1e_idx'),
            models.Index(fields=['created_at'], name='users_created_7c2a3d_idx'),
        ]

    def __str__(self):
        return self.email

    def get_display_name(self):
        """Return name or email prefix."""
        return self.name or self.email.split('@')[0]

    @property
    def is_org_admin(self):
        """Admins and tenant admins may approve redemptions and edit balances."""
        return self.role in ADMIN_ROLES
