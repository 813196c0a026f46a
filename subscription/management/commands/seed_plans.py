from typing import Any
from django.core.management import BaseCommand

from subscription.models import SubscriptionPlan


plans = [
    {
        "name": "basic",
        "price": "0",
        "features": ["basic_job_posting", "limited_applications"],
    },
    {
        "name": "premium",
        "price": "9.99",
        "features": ["unlimited_job_posting", "priority_support", "advanced_analytics", "featured_jobs"],
    },
    {
        "name": "pro",
        "price": "19.99",
        "features": [
            "unlimited_job_posting",
            "priority_support",
            "advanced_analytics",
            "featured_jobs",
            "custom_branding",
            "api_access",
        ],
    },
]

class Command(BaseCommand):
    help = "Create the basic, premium and pro subscription plans"

    def handle(self, *args: Any, **options: Any) -> str | None:
        for plan in plans:
            _, created = SubscriptionPlan.objects.get_or_create(
                name=plan["name"],
                defaults={"price": plan["price"], "features": plan["features"], "duration_months": 1},
            )
            if created:
                self.stdout.write(f"Created {plan['name']} plan")
            else:
                self.stdout.write(f"Skipped {plan['name']} plan because it already exists")
