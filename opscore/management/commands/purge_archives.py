from django.core.management.base import BaseCommand

from opscore.services.archive import redact_expired_archives


class Command(BaseCommand):
    help = "Redact archived records whose retention period has lapsed."

    def add_arguments(self, parser):
        parser.add_argument('--batch-size', type=int, default=500)

    def handle(self, *args, **opts):
        n = redact_expired_archives(batch_size=opts['batch_size'])
        self.stdout.write(self.style.SUCCESS(f"redacted {n} archived record(s)"))
