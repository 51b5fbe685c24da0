import random
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from leads.models import Lead, LeadSource, LeadStatus

User = get_user_model()

COMPANIES = [
    "TechCorp", "InnovateLabs", "Digital Solutions", "Future Systems", "SmartTech",
    "Global Innovations", "NextGen Corp", "Elite Solutions", "Prime Technologies", "Apex Systems",
]
CITIES = [
    "New York", "Los Angeles", "Chicago", "Houston", "Phoenix", "Philadelphia", "San Antonio",
    "San Diego", "Dallas", "San Jose", "Austin", "Jacksonville", "Fort Worth", "Columbus",
    "Charlotte", "San Francisco", "Indianapolis", "Seattle", "Denver", "Washington",
]
STATES = ["NY", "CA", "IL", "TX", "AZ", "PA", "FL", "OH", "NC", "WA", "CO", "GA", "MI", "OR"]

# (email, password, first name, last name, role, divisor of --count)
ACCOUNTS = [
    ("test@example.com", "password123", "Test", "User", User.Role.USER, 1),
    ("admin@example.com", "admin123", "Admin", "User", User.Role.ADMIN, 6),
    ("user@example.com", "user123", "Regular", "User", User.Role.USER, 6),
]


def random_lead(owner, index: int) -> Lead:
    """Build an unsaved lead with plausible random values"""
    first_name = f"John{random.randint(0, 999)}"
    last_name = f"Doe{random.randint(0, 999)}"
    last_activity_at = None
    if random.random() > 0.3:
        last_activity_at = timezone.now() - timedelta(seconds=random.randint(0, 30 * 24 * 3600))

    return Lead(
        owner=owner,
        first_name=first_name,
        last_name=last_name,
        # index keeps the address unique per owner
        email=f"{first_name.lower()}.{last_name.lower()}.{index}@example.com",
        phone=f"+1-{random.randint(100, 999)}-{random.randint(100, 999)}-{random.randint(1000, 9999)}",
        company=random.choice(COMPANIES),
        city=random.choice(CITIES),
        state=random.choice(STATES),
        source=random.choice(LeadSource.values),
        status=random.choice(LeadStatus.values),
        score=random.randint(0, 100),
        lead_value=float(random.randint(100, 10099)),
        last_activity_at=last_activity_at,
        is_qualified=random.random() > 0.7,
    )


class Command(BaseCommand):
    help = "Seed demo accounts and random leads"

    def add_arguments(self, parser):
        parser.add_argument(
            '--count',
            type=int,
            default=120,
            help='Number of leads for the main test account (others get a sixth each)',
        )
        parser.add_argument(
            '--reset',
            action='store_true',
            help='Delete all users and leads before seeding',
        )

    def handle(self, *args, **options):
        count = max(options['count'], 0)

        with transaction.atomic():
            if options['reset']:
                Lead.objects.all().delete()
                User.objects.all().delete()
                self.stdout.write(self.style.WARNING('Cleared existing users and leads'))

            for email, password, first_name, last_name, role, divisor in ACCOUNTS:
                user, created = User.objects.get_or_create(
                    email=email,
                    defaults={
                        'first_name': first_name,
                        'last_name': last_name,
                        'role': role,
                    },
                )
                if created:
                    user.set_password(password)
                    user.save()

                offset = user.leads.count()
                leads = [random_lead(user, offset + i) for i in range(count // divisor)]
                Lead.objects.bulk_create(leads)

                self.stdout.write(
                    self.style.SUCCESS(f"{email} / {password}: {len(leads)} leads created")
                )

        self.stdout.write(self.style.SUCCESS('Database seeded successfully'))
