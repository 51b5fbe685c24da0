from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class LeadSource(models.TextChoices):
    WEBSITE = "website", "Website"
    FACEBOOK_ADS = "facebook_ads", "Facebook Ads"
    GOOGLE_ADS = "google_ads", "Google Ads"
    REFERRAL = "referral", "Referral"
    EVENTS = "events", "Events"
    OTHER = "other", "Other"


class LeadStatus(models.TextChoices):
    NEW = "new", "New"
    CONTACTED = "contacted", "Contacted"
    QUALIFIED = "qualified", "Qualified"
    LOST = "lost", "Lost"
    WON = "won", "Won"


class Lead(models.Model):
    """A sales contact owned by exactly one user."""

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField()
    phone = models.CharField(max_length=32, blank=True, default="")
    company = models.CharField(max_length=255, blank=True, default="")
    city = models.CharField(max_length=100, blank=True, default="")
    state = models.CharField(max_length=100, blank=True, default="")
    source = models.CharField(max_length=20, choices=LeadSource.choices, default=LeadSource.WEBSITE)
    status = models.CharField(max_length=20, choices=LeadStatus.choices, default=LeadStatus.NEW)
    score = models.PositiveSmallIntegerField(
        default=0, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    lead_value = models.FloatField(default=0, validators=[MinValueValidator(0)])
    last_activity_at = models.DateTimeField(null=True, blank=True)
    is_qualified = models.BooleanField(default=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="leads"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["owner", "email"], name="unique_lead_email_per_owner"
            ),
        ]
        indexes = [
            models.Index(fields=["owner", "status"], name="lead_owner_status_idx"),
            models.Index(fields=["owner", "source"], name="lead_owner_source_idx"),
            models.Index(fields=["owner", "-created_at"], name="lead_owner_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.full_name} <{self.email}>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)
