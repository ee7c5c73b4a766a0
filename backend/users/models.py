from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from tenant.managers import TenantAwareUserManager


class User(AbstractBaseUser, PermissionsMixin):
    class Role(models.TextChoices):
        OWNER = "OWNER", _("Owner")
        ADMIN = "ADMIN", _("Admin")
        MANAGER = "MANAGER", _("Manager")
        CASHIER = "CASHIER", _("Cashier")
        WAITER = "WAITER", _("Waiter")
        KITCHEN = "KITCHEN", _("Kitchen")
        DRIVER = "DRIVER", _("Driver")

    # Multi-tenancy: Each user belongs to a tenant
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='users',
        help_text=_("The restaurant this user belongs to")
    )

    # Email is unique per tenant, not globally
    email = models.EmailField(_("email address"))
    first_name = models.CharField(_("first name"), max_length=150, blank=True)
    last_name = models.CharField(_("last name"), max_length=150, blank=True)
    phone_number = models.CharField(
        _("phone number"), max_length=20, blank=True, null=True
    )

    role = models.CharField(
        _("role"), max_length=50, choices=Role.choices, default=Role.CASHIER
    )

    is_pos_staff = models.BooleanField(
        _("POS staff"),
        default=False,
        help_text=_("Designates whether this user can operate POS, KDS and dispatch terminals."),
        db_index=True,
    )

    is_active = models.BooleanField(_("active"), default=True)
    is_staff = models.BooleanField(
        _("staff status"),
        default=False,
        help_text=_("Designates whether the user can log into this admin site."),
    )
    date_joined = models.DateTimeField(_("date joined"), default=timezone.now)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    objects = TenantAwareUserManager()
    all_objects = models.Manager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['tenant', 'email'],
                name='unique_user_email_per_tenant'
            ),
        ]
        indexes = [
            models.Index(fields=['tenant', 'email'], name='user_tenant_email_idx'),
            models.Index(fields=['tenant', 'role', 'is_pos_staff'], name='user_tenant_role_idx'),
        ]

    def __str__(self):
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.email

    @property
    def is_manager_or_higher(self):
        return self.role in (self.Role.OWNER, self.Role.ADMIN, self.Role.MANAGER)

