"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
"""

import uuid

from django.db import models
from django.utils import timezone


class Event(models.Model):
    """Persistence model for events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    registration_deadline = models.DateTimeField(blank=True, null=True)
    capacity = models.PositiveIntegerField(default=0)
    fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-start_date"]
        indexes = [
            models.Index(fields=["-start_date"]),
        ]

    def __str__(self) -> str:
        return self.title


class Guardian(models.Model):
    """Persistence model for guardian accounts."""

    class Role(models.TextChoices):
        USER = "user"
        ADMIN = "admin"
        DONATOR = "donator"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    auth_id = models.CharField(max_length=255, unique=True)
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.USER)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(unique=True)
    registered_events = models.ManyToManyField(Event, blank=True, related_name="+")
    waivers_signed = models.ManyToManyField("Waiver", blank=True, related_name="+")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Child(models.Model):
    """Persistence model for children. A child has no lifecycle outside its guardian."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    guardian = models.ForeignKey(Guardian, on_delete=models.CASCADE, related_name="children")
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    birthday = models.DateField(blank=True, null=True)
    registered_events = models.ManyToManyField(Event, blank=True, related_name="+")
    waivers_signed = models.ManyToManyField("Waiver", blank=True, related_name="+")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        verbose_name_plural = "children"

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Waiver(models.Model):
    """Persistence model for template and completed waivers."""

    class Type(models.TextChoices):
        TEMPLATE = "template"
        COMPLETED = "completed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    file_key = models.CharField(max_length=500)
    file_name = models.CharField(max_length=255)
    type = models.CharField(max_length=16, choices=Type.choices)
    layout = models.CharField(max_length=64, default="default")
    uploaded_by = models.ForeignKey(Guardian, on_delete=models.CASCADE, related_name="+")
    belongs_to = models.ForeignKey(Guardian, on_delete=models.CASCADE, related_name="waivers")
    child = models.ForeignKey(Child, on_delete=models.CASCADE, blank=True, null=True, related_name="waivers")
    is_for_child = models.BooleanField(default=False)
    template = models.ForeignKey("self", on_delete=models.SET_NULL, blank=True, null=True, related_name="+")
    event = models.ForeignKey(Event, on_delete=models.CASCADE, blank=True, null=True, related_name="waivers")
    uploaded_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-uploaded_at"]
        indexes = [
            models.Index(fields=["belongs_to", "type"]),
            models.Index(fields=["event", "type"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(is_for_child=True, child__isnull=False)
                    | models.Q(is_for_child=False, child__isnull=True)
                ),
                name="waiver_child_flag_matches_child",
            ),
            models.UniqueConstraint(
                fields=["event", "template", "belongs_to"],
                condition=models.Q(type="completed", child__isnull=True),
                name="unique_completed_waiver_for_guardian",
            ),
            models.UniqueConstraint(
                fields=["event", "template", "child"],
                condition=models.Q(type="completed", child__isnull=False),
                name="unique_completed_waiver_for_child",
            ),
        ]

    def __str__(self) -> str:
        return self.file_name


class RegisteredUser(models.Model):
    """Roster entry for a guardian attending an event themself."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registered_users")
    guardian = models.ForeignKey(Guardian, on_delete=models.CASCADE, related_name="+")
    waivers_signed = models.ManyToManyField(Waiver, blank=True, related_name="+")
    registered_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["registered_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["event", "guardian"], name="unique_registered_user"),
        ]


class RegisteredChild(models.Model):
    """Roster entry for a child attending an event."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registered_children")
    guardian = models.ForeignKey(Guardian, on_delete=models.CASCADE, related_name="+")
    child = models.ForeignKey(Child, on_delete=models.CASCADE, related_name="+")
    waivers_signed = models.ManyToManyField(Waiver, blank=True, related_name="+")
    registered_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["registered_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["event", "child"], name="unique_registered_child"),
        ]
