from django.core.management.base import BaseCommand, CommandError

from slugcascade.correlation import CorrelationId
from slugcascade.events import MemoryEventSink, SignalEventSink
from slugcascade.models import LIVE_WORKSPACE_ID
from slugcascade.services.slugs import SlugService


class Command(BaseCommand):
    help = (
        "Creates redirects and updates sub-page slugs for a page whose slug "
        "changed from OLD_SLUG to NEW_SLUG, as configured for its site"
    )

    def add_arguments(self, parser):
        parser.add_argument("page_id", type=int, help="Id of the changed page")
        parser.add_argument("old_slug", help="The slug before the change")
        parser.add_argument("new_slug", help="The slug after the change")
        parser.add_argument(
            "--workspace",
            help="Id of the workspace the change was made in",
            type=int,
            default=LIVE_WORKSPACE_ID,
        )
        parser.add_argument(
            "--correlation-id",
            help="Correlation id to derive the ids of the changes from",
            default=None,
        )

    def handle(self, *args, **options):
        if options["correlation_id"]:
            try:
                correlation_id = CorrelationId.from_string(options["correlation_id"])
            except ValueError as e:
                raise CommandError(str(e))
        else:
            correlation_id = CorrelationId.for_scope("cli")

        # Listeners of slug_changed_broadcast are notified as for any other change
        event_sink = MemoryEventSink(forward_to=SignalEventSink())
        SlugService(
            workspace_id=options["workspace"], event_sink=event_sink
        ).rebuild_slugs_for_slug_change(
            options["page_id"],
            options["old_slug"],
            options["new_slug"],
            correlation_id,
        )

        if not event_sink.messages:
            self.stdout.write("Nothing to do.")
            return

        for message in event_sink.messages:
            data = message.as_dict()
            if data["autoCreateRedirects"]:
                self.stdout.write(
                    "Redirects: %s"
                    % data["correlations"]["correlationIdRedirectCreation"]
                )
            if data["autoUpdateSlugs"]:
                self.stdout.write(
                    "Slug updates: %s" % data["correlations"]["correlationIdSlugUpdate"]
                )
