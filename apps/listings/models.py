import uuid
from django.db import models
from django.conf import settings


class Company(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "companies"
        ordering = ["name"]
        verbose_name_plural = "companies"

    def __str__(self):
        return self.name


class Listing(models.Model):
    TYPE_CHOICES = (
        ("HOUSE", "House"),
        ("APARTMENT", "Apartment"),
        ("LAND", "Land"),
        ("COMMERCIAL", "Commercial"),
        ("OTHER", "Other"),
    )

    ACTIVE = "ACTIVE"
    STATUS_CHOICES = (
        (ACTIVE, "Active"),
        ("PENDING", "Pending"),
        ("SOLD", "Sold"),
        ("INACTIVE", "Inactive"),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    price = models.DecimalField(max_digits=14, decimal_places=2)
    address = models.CharField(max_length=500)
    city = models.CharField(max_length=120, blank=True, default="")
    state = models.CharField(max_length=120, blank=True, default="")
    bedrooms = models.PositiveIntegerField(null=True, blank=True)
    bathrooms = models.PositiveIntegerField(null=True, blank=True)
    area = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=ACTIVE)
    images = models.JSONField(default=list, blank=True)  # ordered image URLs

    agent = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="listings", on_delete=models.CASCADE)
    company = models.ForeignKey(Company, related_name="listings", null=True, blank=True, on_delete=models.SET_NULL)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "listings"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="listings_status_idx"),
            models.Index(fields=["agent"], name="listings_agent_idx"),
        ]

    def __str__(self):
        return self.title

    @property
    def is_active(self) -> bool:
        return self.status == self.ACTIVE


class SavedListing(models.Model):
    """A client's bookmark of a listing, at most one per client and listing"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="saved_listings", on_delete=models.CASCADE)
    listing = models.ForeignKey(Listing, related_name="saves", on_delete=models.CASCADE)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "saved_listings"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["user", "listing"], name="saved_listings_user_listing_uniq"),
        ]

    def __str__(self):
        return f"{self.user_id} saved {self.listing_id}"
