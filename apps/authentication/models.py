import uuid
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("Email is required")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.PLATFORM_ADMIN)
        extra_fields.setdefault("verification_status", User.VERIFIED)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    CLIENT = "CLIENT"
    AGENT = "AGENT"
    INSPECTOR = "INSPECTOR"
    COMPANY_ADMIN = "COMPANY_ADMIN"
    PLATFORM_ADMIN = "PLATFORM_ADMIN"

    ROLE_CHOICES = [
        (CLIENT, "Client"),
        (AGENT, "Agent"),
        (INSPECTOR, "Inspector"),
        (COMPANY_ADMIN, "Company Admin"),
        (PLATFORM_ADMIN, "Platform Admin"),
    ]

    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"

    VERIFICATION_CHOICES = [
        (PENDING, "Pending"),
        (VERIFIED, "Verified"),
        (REJECTED, "Rejected"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = None
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=32, blank=True, default="")
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=CLIENT)
    verification_status = models.CharField(max_length=20, choices=VERIFICATION_CHOICES, default=PENDING)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        db_table = "users"
        indexes = [models.Index(fields=["role", "verification_status"], name="users_role_verif_idx")]

    def __str__(self):
        return self.email

    @property
    def name(self) -> str:
        return self.get_full_name() or self.email


class InspectorProfile(models.Model):
    user = models.OneToOneField(User, related_name="inspector_profile", on_delete=models.CASCADE)
    service_area = models.CharField(max_length=255, blank=True, default="")
    inspection_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "inspector_profiles"
