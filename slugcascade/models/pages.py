import logging

from django.db import models, transaction
from django.utils.translation import gettext_lazy as _

from slugcascade.exceptions import PageTreeCycleError
from slugcascade.signals import page_slug_changed

logger = logging.getLogger("slugcascade")

LIVE_WORKSPACE_ID = 0
DEFAULT_LANGUAGE_ID = 0


class PageQuerySet(models.QuerySet):
    def not_deleted(self):
        return self.filter(deleted=False)

    def in_workspace(self, workspace_id):
        """
        Filters to the pages visible from ``workspace_id``: everything in the live
        workspace plus pages newly created in ``workspace_id``. Workspace versions
        of live pages are left out here; ``overlay_workspace_versions`` swaps them in.
        """
        return self.filter(
            workspace_id__in={LIVE_WORKSPACE_ID, workspace_id},
            version_of__isnull=True,
        )

    def with_workspace_overlay(self, workspace_id):
        """
        Filters to the rows in effect in ``workspace_id``: live pages without a
        version there, plus the workspace's own rows (new pages and versions of
        live pages).
        """
        if workspace_id == LIVE_WORKSPACE_ID:
            return self.in_workspace(workspace_id)

        overridden = Page.objects.filter(
            workspace_id=workspace_id, version_of__isnull=False
        ).values("version_of_id")
        return self.filter(
            models.Q(workspace_id=LIVE_WORKSPACE_ID, version_of__isnull=True)
            & ~models.Q(pk__in=overridden)
            | models.Q(workspace_id=workspace_id)
        )

    def default_language(self):
        return self.filter(language_id=DEFAULT_LANGUAGE_ID)

    def in_language(self, language_id):
        return self.filter(language_id=language_id)

    def child_of(self, page_id):
        return self.filter(parent_id=page_id)

    def translation_of(self, page_ids):
        return self.filter(translation_of_id__in=page_ids)


class PageManager(models.Manager.from_queryset(PageQuerySet)):
    pass


class Page(models.Model):
    title = models.CharField(verbose_name=_("title"), max_length=255)
    slug = models.TextField(
        verbose_name=_("slug"),
        help_text=_(
            "The full path of the page within its site, starting with a '/' (e.g. '/about/team')"
        ),
    )
    parent = models.ForeignKey(
        "self",
        verbose_name=_("parent page"),
        null=True,
        blank=True,
        related_name="children",
        on_delete=models.PROTECT,
    )
    translation_of = models.ForeignKey(
        "self",
        verbose_name=_("translation of"),
        help_text=_("The default language page this page is a translation of."),
        null=True,
        blank=True,
        related_name="translations",
        on_delete=models.CASCADE,
    )
    language_id = models.PositiveIntegerField(
        verbose_name=_("language"), default=DEFAULT_LANGUAGE_ID, db_index=True
    )
    workspace_id = models.PositiveIntegerField(
        verbose_name=_("workspace"), default=LIVE_WORKSPACE_ID, db_index=True
    )
    version_of = models.ForeignKey(
        "self",
        verbose_name=_("workspace version of"),
        null=True,
        blank=True,
        related_name="workspace_versions",
        on_delete=models.CASCADE,
    )
    deleted = models.BooleanField(verbose_name=_("deleted"), default=False)

    objects = PageManager()

    class Meta:
        verbose_name = _("page")
        verbose_name_plural = _("pages")

    def __str__(self):
        return self.title or self.slug

    @property
    def live_id(self):
        """
        The id of the live record; for a workspace version this is the page it overrides.
        """
        return self.version_of_id or self.pk

    def is_translation(self):
        return (
            self.language_id != DEFAULT_LANGUAGE_ID
            and self.translation_of_id is not None
        )

    def get_default_language_page(self):
        if self.is_translation():
            return self.translation_of
        return self

    def get_default_language_page_id(self):
        if self.is_translation():
            return self.translation_of_id
        return self.pk

    def get_rootline(self):
        """
        Returns the pages from this page up to the root of the tree. Localized
        pages are placed in the tree by their default language page, so the walk
        starts there.
        """
        rootline = []
        visited = []
        page = self.get_default_language_page()
        while page is not None:
            if page.pk in visited:
                raise PageTreeCycleError(page.pk, visited)
            visited.append(page.pk)
            rootline.append(page)
            page = page.parent
        return rootline

    def create_workspace_version(self, workspace_id, **kwargs):
        """
        Creates a copy of this live page in ``workspace_id``, overriding the page
        while that workspace is being worked in.
        """
        kwargs.setdefault("title", self.title)
        kwargs.setdefault("slug", self.slug)
        version = Page(
            parent_id=self.parent_id,
            translation_of_id=self.translation_of_id,
            language_id=self.language_id,
            workspace_id=workspace_id,
            version_of=self,
            **kwargs
        )
        version.save()
        return version

    def _normalize_slug(self):
        if self.slug and not self.slug.startswith("/"):
            self.slug = "/" + self.slug

    @transaction.atomic
    def save(self, user=None, correlation_id=None, **kwargs):
        """
        Writes the page to the database.

        If the ``slug`` of an existing page has changed, a ``page_slug_changed``
        signal is sent after the write, within the same transaction, so that
        anything the receivers change is committed (or rolled back) together
        with the page. ``user`` and ``correlation_id`` are passed on to the
        receivers.
        """
        self._normalize_slug()

        slug_changed = False
        is_new = self.pk is None

        # If update_fields has been specified, and slug is not included, the
        # slug isn't being written
        if not is_new and not (
            "update_fields" in kwargs and "slug" not in kwargs["update_fields"]
        ):
            old_record = Page.objects.filter(pk=self.pk).first()
            if old_record is not None and old_record.slug != self.slug:
                slug_changed = True

        result = super().save(**kwargs)

        if is_new:
            logger.info(
                'Page created: "%s" id=%d slug=%s language=%d workspace=%d',
                self.title,
                self.pk,
                self.slug,
                self.language_id,
                self.workspace_id,
            )

        if slug_changed:
            page_slug_changed.send(
                sender=self.__class__,
                instance=self,
                instance_before=old_record,
                correlation_id=correlation_id,
                user=user,
            )

        return result


def overlay_workspace_versions(pages, workspace_id):
    """
    Replaces each of the given live pages with its version from ``workspace_id``,
    if there is one. Pages whose version is marked as deleted in that workspace
    are left out. Order is preserved.
    """
    pages = list(pages)
    if workspace_id == LIVE_WORKSPACE_ID or not pages:
        return pages

    versions = {
        version.version_of_id: version
        for version in Page.objects.filter(
            workspace_id=workspace_id,
            version_of_id__in=[page.pk for page in pages],
        )
    }

    result = []
    for page in pages:
        version = versions.get(page.pk)
        if version is None:
            result.append(page)
        elif not version.deleted:
            result.append(version)
    return result
