from django.core.management.base import BaseCommand, CommandError

from slugcascade.correlation import CorrelationId
from slugcascade.services.history import HistoryRollback


class Command(BaseCommand):
    help = "Reverts the redirects or slug updates made under a correlation id"

    def add_arguments(self, parser):
        parser.add_argument("correlation_id", help="The correlation id to revert")
        parser.add_argument(
            "--redirects",
            action="store_true",
            help="Delete the redirects created under the correlation id",
        )
        parser.add_argument(
            "--slugs",
            action="store_true",
            help="Restore the slugs updated under the correlation id",
        )

    def handle(self, *args, **options):
        try:
            correlation_id = CorrelationId.from_string(options["correlation_id"])
        except ValueError as e:
            raise CommandError(str(e))

        if not options["redirects"] and not options["slugs"]:
            raise CommandError("Pass --redirects, --slugs or both")

        rollback = HistoryRollback()
        if options["redirects"]:
            count = rollback.revert_redirect_creation(correlation_id)
            self.stdout.write("%d redirect(s) deleted." % count)
        if options["slugs"]:
            count = rollback.revert_slug_update(correlation_id)
            self.stdout.write("%d slug(s) restored." % count)
