import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from slugcascade.conf import RedirectSettings
from slugcascade.correlation import CorrelationId
from slugcascade.events import SignalEventSink, SlugChangedMessage
from slugcascade.exceptions import PageTreeCycleError
from slugcascade.models import (
    DEFAULT_LANGUAGE_ID,
    LIVE_WORKSPACE_ID,
    Page,
    RecordHistory,
    Redirect,
    Site,
    overlay_workspace_versions,
)
from slugcascade.signal_handlers import disable_slug_cascade
from slugcascade.utils.records import record_to_dict
from slugcascade.utils.slugs import build_slug_for_unique_in_site, is_unique_in_site

logger = logging.getLogger("slugcascade")

# Aspect identifying the writes made by this service within a correlation id
CORRELATION_ID_IDENTIFIER = "slugcascade"


class SlugService:
    """
    Reacts to the slug of a page being changed: creates a redirect from the old
    URL to the new one, and rewrites the slugs of sub-pages that start with the
    old slug (creating redirects for those as well). Which of the two happens is
    configured per site, see ``RedirectSettings``.

    Every write is tagged with one of two correlation ids derived from the one
    passed in, so the redirects and the slug updates can each be found (and
    reverted) later. Once done, a ``SlugChangedMessage`` is published to the
    event sink.
    """

    def __init__(self, workspace_id=LIVE_WORKSPACE_ID, user=None, event_sink=None):
        self.workspace_id = workspace_id
        self.user = user
        self.event_sink = event_sink or SignalEventSink()

        # Set per call of rebuild_slugs_for_slug_change()
        self.site = None
        self.settings = None
        self.correlation_id_redirect_creation = None
        self.correlation_id_slug_update = None

    @property
    def is_live(self):
        return self.workspace_id == LIVE_WORKSPACE_ID

    @transaction.atomic
    def rebuild_slugs_for_slug_change(self, page_id, old_slug, new_slug, correlation_id):
        page = Page.objects.not_deleted().filter(pk=page_id).first()
        if page is None:
            logger.debug("Page id=%s not found, slug change ignored", page_id)
            return

        # Site settings always come from the default language page
        self.initialize_settings(page.get_default_language_page().live_id)
        if not self.settings.enabled:
            logger.debug(
                "Slug updates and redirect creation are disabled for site '%s'",
                self.site,
            )
            return

        self.create_correlation_ids(page.live_id, correlation_id)
        if self.settings.auto_create_redirects:
            self.create_redirect(old_slug, new_slug, page.language_id)
        if self.settings.auto_update_slugs:
            self.check_sub_pages(page, old_slug, new_slug)
        self.send_notification()

    def initialize_settings(self, page_id):
        self.site = Site.find_for_page(page_id)
        self.settings = RedirectSettings.for_site(self.site, is_live=self.is_live)

    def create_correlation_ids(self, page_id, correlation_id):
        if isinstance(correlation_id, str):
            correlation_id = CorrelationId.from_string(correlation_id)

        if correlation_id.subject is None:
            correlation_id = correlation_id.with_subject(
                CorrelationId.make_subject("pages", page_id)
            )

        self.correlation_id_redirect_creation = correlation_id.with_aspects(
            CORRELATION_ID_IDENTIFIER, "redirect"
        )
        self.correlation_id_slug_update = correlation_id.with_aspects(
            CORRELATION_ID_IDENTIFIER, "slug"
        )

    def get_redirect_endtime(self, now):
        if self.settings.redirect_ttl > 0:
            return int((now + timedelta(days=self.settings.redirect_ttl)).timestamp())
        return 0

    def create_redirect(self, old_slug, new_slug, language_id):
        base_path = self.site.get_language(language_id).get_base_path().rstrip("/")
        now = timezone.now()

        redirect = Redirect.objects.create(
            source_host=self.site.host,
            source_path=base_path + old_slug,
            target=base_path + new_slug,
            target_statuscode=self.settings.http_status_code,
            endtime=self.get_redirect_endtime(now),
            created_at=now,
            updated_at=now,
            created_by_id=getattr(self.user, "pk", None),
            automatically_created=True,
        )
        RecordHistory.objects.add_record(
            redirect,
            record_to_dict(redirect),
            correlation_id=self.correlation_id_redirect_creation,
            user=self.user,
            workspace_id=self.workspace_id,
            timestamp=now,
        )

        logger.info(
            "Redirect created: %s%s -> %s id=%d",
            redirect.source_host,
            redirect.source_path,
            redirect.target,
            redirect.pk,
        )
        return redirect

    def check_sub_pages(self, page, old_slug_of_parent_page, new_slug_of_parent_page):
        language_id = page.language_id
        # resolve_sub_pages needs the live page id of the default language
        if language_id == DEFAULT_LANGUAGE_ID:
            page_id = page.live_id
        else:
            page_id = page.translation_of_id
            if page_id is None:
                logger.warning(
                    "Page id=%d in language %d has no default language page, "
                    "sub-pages not updated",
                    page.pk,
                    language_id,
                )
                return

        for sub_page in self.resolve_sub_pages(page_id, language_id):
            old_slug = sub_page.slug
            new_slug = self.update_slug(
                sub_page, old_slug_of_parent_page, new_slug_of_parent_page
            )
            if new_slug is not None and self.settings.auto_create_redirects:
                self.create_redirect(old_slug, new_slug, language_id)

    def get_pages_queryset(self):
        return Page.objects.not_deleted().in_workspace(self.workspace_id)

    def resolve_sub_pages(self, page_id, language_id, ancestors=()):
        """
        Returns all pages below ``page_id`` (a default language page id) in
        ``language_id``, depth first, each page followed by its own sub-pages.
        Siblings are ordered by id.

        For a language other than the default language, the tree is walked
        through the default language pages, and each one is replaced by its
        translation. Pages without a translation are left out, along with their
        sub-pages.

        ``ancestors`` holds the ids on the path from the starting page; meeting
        one of them again means the tree is corrupt.
        """
        if page_id in ancestors:
            raise PageTreeCycleError(page_id, ancestors)
        ancestors = ancestors + (page_id,)

        sub_pages = list(
            self.get_pages_queryset()
            .child_of(page_id)
            .default_language()
            .order_by("pk")
        )

        if language_id != DEFAULT_LANGUAGE_ID and sub_pages:
            sub_pages = list(
                self.get_pages_queryset()
                .translation_of([sub_page.pk for sub_page in sub_pages])
                .in_language(language_id)
                .order_by("pk")
            )

        results = []
        for sub_page in overlay_workspace_versions(sub_pages, self.workspace_id):
            results.append(sub_page)
            # resolve_sub_pages needs the page id of the default language
            if language_id == DEFAULT_LANGUAGE_ID:
                next_page_id = sub_page.live_id
            else:
                next_page_id = sub_page.translation_of_id
            results.extend(self.resolve_sub_pages(next_page_id, language_id, ancestors))

        return results

    def update_slug(self, page, old_slug_of_parent_page, new_slug_of_parent_page):
        """
        Update the slug of ``page`` to start with ``new_slug_of_parent_page``
        instead of ``old_slug_of_parent_page``. Returns the new slug, or ``None``
        if the slug doesn't start with the old parent slug and nothing was changed.
        """
        if not page.slug.startswith(old_slug_of_parent_page):
            logger.debug(
                "Slug '%s' of page id=%d does not start with '%s', skipped",
                page.slug,
                page.pk,
                old_slug_of_parent_page,
            )
            return None

        prefix_length = len(old_slug_of_parent_page.rstrip("/") + "/")
        new_slug = new_slug_of_parent_page.rstrip("/") + "/" + page.slug[prefix_length:]

        if not is_unique_in_site(new_slug, page, self.workspace_id):
            new_slug = build_slug_for_unique_in_site(new_slug, page, self.workspace_id)

        self.persist_new_slug(page, new_slug)
        return new_slug

    def persist_new_slug(self, page, new_slug):
        old_slug = page.slug

        # The cascade for this page is already part of the current run
        with disable_slug_cascade():
            if not self.is_live and page.workspace_id != self.workspace_id:
                # Live pages are changed through a version in the current workspace
                page = page.create_workspace_version(self.workspace_id)
            page.slug = new_slug
            page.save(
                update_fields=["slug"],
                user=self.user,
                correlation_id=self.correlation_id_slug_update,
            )

        RecordHistory.objects.modify_record(
            page,
            {"slug": old_slug},
            {"slug": new_slug},
            correlation_id=self.correlation_id_slug_update,
            user=self.user,
            workspace_id=self.workspace_id,
        )

        logger.info(
            "Slug of page id=%d updated: %s -> %s", page.pk, old_slug, new_slug
        )

    def send_notification(self):
        self.event_sink.publish(
            SlugChangedMessage(
                correlation_id_slug_update=self.correlation_id_slug_update,
                correlation_id_redirect_creation=self.correlation_id_redirect_creation,
                auto_update_slugs=self.settings.auto_update_slugs,
                auto_create_redirects=self.settings.auto_create_redirects,
            )
        )
