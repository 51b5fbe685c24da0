import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Lead",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(max_length=100)),
                ("email", models.EmailField(max_length=254)),
                ("phone", models.CharField(blank=True, default="", max_length=32)),
                ("company", models.CharField(blank=True, default="", max_length=255)),
                ("city", models.CharField(blank=True, default="", max_length=100)),
                ("state", models.CharField(blank=True, default="", max_length=100)),
                (
                    "source",
                    models.CharField(
                        choices=[
                            ("website", "Website"),
                            ("facebook_ads", "Facebook Ads"),
                            ("google_ads", "Google Ads"),
                            ("referral", "Referral"),
                            ("events", "Events"),
                            ("other", "Other"),
                        ],
                        default="website",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("new", "New"),
                            ("contacted", "Contacted"),
                            ("qualified", "Qualified"),
                            ("lost", "Lost"),
                            ("won", "Won"),
                        ],
                        default="new",
                        max_length=20,
                    ),
                ),
                (
                    "score",
                    models.PositiveSmallIntegerField(
                        default=0,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                (
                    "lead_value",
                    models.FloatField(default=0, validators=[django.core.validators.MinValueValidator(0)]),
                ),
                ("last_activity_at", models.DateTimeField(blank=True, null=True)),
                ("is_qualified", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="leads",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["owner", "status"], name="lead_owner_status_idx"),
                    models.Index(fields=["owner", "source"], name="lead_owner_source_idx"),
                    models.Index(fields=["owner", "-created_at"], name="lead_owner_created_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("owner", "email"), name="unique_lead_email_per_owner"),
                ],
            },
        ),
    ]
