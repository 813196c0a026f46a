from django.conf import settings
from django.core.management.base import BaseCommand
from common.models import SystemSetting


class Command(BaseCommand):
    help = "Seed the ledger system settings from settings.LEDGER"

    def add_arguments(self, parser):
        parser.add_argument("--overwrite", action="store_true", help="Replace values that already exist")

    def handle(self, *args, **options):
        for key, value in settings.LEDGER.items():
            if options["overwrite"]:
                SystemSetting.objects.update_or_create(key=key.lower(), defaults={"value": str(value)})
            else:
                SystemSetting.objects.get_or_create(key=key.lower(), defaults={"value": str(value)})

        self.stdout.write(self.style.SUCCESS("System settings seeded successfully!"))
