from django.core.management.base import BaseCommand

from clinic.realtime.broadcast import broadcast_refresh
from clinic.services.theaters import ensure_default_theaters, sync_theater_status


class Command(BaseCommand):
    help = "Move stale theater rows to their current status (Scheduled -> In Progress, expired -> Available)."

    def handle(self, *args, **options):
        created = ensure_default_theaters()
        if created:
            self.stdout.write(f"Seeded {created} default theaters")
        applied = sync_theater_status()
        if applied:
            broadcast_refresh('theaters', 'ot-board')
        self.stdout.write(self.style.SUCCESS(f"Corrected {applied} theater(s)"))
