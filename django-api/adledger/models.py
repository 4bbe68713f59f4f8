"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid

from django.db import models
from django.db.models.functions import Lower


class Schedule(models.Model):
    """Persistence model for release schedules."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.CharField(max_length=64, db_index=True)
    name = models.CharField(max_length=255)
    archived = models.BooleanField(default=False)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name


class ScheduleIssue(models.Model):
    """Persistence model for one issue of a schedule."""

    schedule = models.ForeignKey(Schedule, on_delete=models.CASCADE, related_name="issues")
    name = models.CharField(max_length=100)
    close_date = models.DateTimeField()
    sort_order = models.PositiveIntegerField()
    key_year = models.PositiveIntegerField()
    key_month = models.PositiveSmallIntegerField()
    key_disambiguator = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["sort_order"]
        constraints = [
            models.UniqueConstraint(
                fields=["schedule", "name"], name="uq_schedule_issue_name"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.schedule.name} - {self.name}"


class Magazine(models.Model):
    """Persistence model for magazines."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.CharField(max_length=64, db_index=True)
    name = models.CharField(max_length=255)
    schedule = models.ForeignKey(Schedule, on_delete=models.PROTECT, related_name="magazines")
    archived = models.BooleanField(default=False)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["owner_id", "name"], name="uq_magazine_owner_name"),
        ]

    def __str__(self) -> str:
        return self.name


class PageConfiguration(models.Model):
    """Page budget of a magazine for one issue."""

    magazine = models.ForeignKey(
        Magazine, on_delete=models.CASCADE, related_name="page_configurations"
    )
    issue_name = models.CharField(max_length=100)
    total_pages = models.PositiveIntegerField()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["magazine", "issue_name"], name="uq_page_configuration_issue"
            ),
        ]


class ContentSize(models.Model):
    """Persistence model for content sizes."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.CharField(max_length=64, db_index=True)
    description = models.CharField(max_length=255)
    size = models.DecimalField(max_digits=6, decimal_places=3)
    archived = models.BooleanField(default=False)
    created_at = models.DateTimeField()

    class Meta:
        ordering = ["size"]
        constraints = [
            models.CheckConstraint(condition=models.Q(size__gt=0), name="ck_content_size_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.description} ({self.size})"


class ContentSizePrice(models.Model):
    """Price of a content size in one magazine."""

    content_size = models.ForeignKey(
        ContentSize, on_delete=models.CASCADE, related_name="prices"
    )
    magazine = models.ForeignKey(Magazine, on_delete=models.CASCADE, related_name="prices")
    price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["content_size", "magazine"], name="uq_content_size_magazine_price"
            ),
        ]


class Label(models.Model):
    """Persistence model for content types and business types."""

    KIND_CHOICES = [
        ("content_type", "Content type"),
        ("business_type", "Business type"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    kind = models.CharField(max_length=20, choices=KIND_CHOICES)
    owner_id = models.CharField(max_length=64, db_index=True)
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=255, blank=True, default="")
    is_default = models.BooleanField(default=False)
    archived = models.BooleanField(default=False)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                "owner_id", "kind", Lower("name"), name="uq_label_owner_kind_name"
            ),
        ]

    def __str__(self) -> str:
        return self.name


class Booking(models.Model):
    """Persistence model for bookings."""

    STATUS_CHOICES = [
        ("Active", "Active"),
        ("Completed", "Completed"),
        ("Cancelled", "Cancelled"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.CharField(max_length=64, db_index=True)
    customer_ref = models.CharField(max_length=64, db_index=True)
    additional_charges = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    charge_mode = models.CharField(max_length=10, default="split")
    notes = models.TextField(blank=True, default="")
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="Active")
    total_value = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["owner_id", "-created_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.customer_ref} - {self.total_value}"


class BookingEntry(models.Model):
    """One magazine row of a booking."""

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="entries")
    position = models.PositiveIntegerField()
    magazine = models.ForeignKey(Magazine, on_delete=models.PROTECT, related_name="entries")
    content_size = models.ForeignKey(
        ContentSize, on_delete=models.PROTECT, related_name="entries"
    )
    content_type = models.CharField(max_length=100)
    list_price = models.DecimalField(max_digits=10, decimal_places=2)
    discount_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    discount_value = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    apportioned_charges = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    net_value = models.DecimalField(max_digits=10, decimal_places=2)
    start_issue = models.CharField(max_length=100)
    finish_issue = models.CharField(max_length=100, blank=True, null=True)
    is_ongoing = models.BooleanField(default=False)

    class Meta:
        ordering = ["position"]
        indexes = [
            models.Index(fields=["magazine", "start_issue"]),
        ]

    def __str__(self) -> str:
        return f"{self.magazine.name} - {self.start_issue}"


class LeafletDelivery(models.Model):
    """Persistence model for leaflet deliveries."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.CharField(max_length=64, db_index=True)
    customer_ref = models.CharField(max_length=64, db_index=True)
    magazine = models.ForeignKey(
        Magazine, on_delete=models.PROTECT, related_name="leaflet_deliveries"
    )
    issue_name = models.CharField(max_length=100)
    description = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(default=1)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    discount_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    discount_value = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    additional_charges = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    net_value = models.DecimalField(max_digits=10, decimal_places=2)
    notes = models.TextField(blank=True, default="")
    status = models.CharField(max_length=10, choices=Booking.STATUS_CHOICES, default="Active")
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "leaflet deliveries"
        indexes = [
            models.Index(fields=["owner_id", "-created_at"]),
            models.Index(fields=["magazine", "issue_name"]),
        ]

    def __str__(self) -> str:
        return f"{self.customer_ref} - {self.description}"
