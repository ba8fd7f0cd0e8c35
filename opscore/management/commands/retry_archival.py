from django.core.management.base import BaseCommand

from opscore.services.shifts import retry_failed_archivals


class Command(BaseCommand):
    help = "Re-run archival for ended shifts whose archive is pending or failed."

    def add_arguments(self, parser):
        parser.add_argument('--limit', type=int, default=100)

    def handle(self, *args, **opts):
        ok, failed = retry_failed_archivals(limit=opts['limit'])
        msg = f"archived {ok} shift(s), {failed} still failing"
        if failed:
            self.stdout.write(self.style.WARNING(msg))
        else:
            self.stdout.write(self.style.SUCCESS(msg))
