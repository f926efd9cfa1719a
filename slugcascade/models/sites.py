from urllib.parse import urljoin, urlparse

from django.db import models
from django.utils.translation import gettext_lazy as _

from slugcascade.exceptions import SiteNotFoundError

from .pages import DEFAULT_LANGUAGE_ID, Page


class Site(models.Model):
    site_name = models.CharField(
        verbose_name=_("site name"),
        max_length=255,
        blank=True,
        help_text=_("Human-readable name for the site."),
    )
    hostname = models.CharField(
        verbose_name=_("hostname"),
        max_length=255,
        blank=True,
        help_text=_(
            "Used as the source host of generated redirects when the base URL has no host."
        ),
    )
    base = models.CharField(
        verbose_name=_("base"),
        max_length=255,
        default="/",
        help_text=_(
            "The base URL of the site, e.g. 'https://www.example.com/' or '/'."
        ),
    )
    root_page = models.ForeignKey(
        "slugcascade.Page",
        verbose_name=_("root page"),
        related_name="sites_rooted_here",
        on_delete=models.CASCADE,
    )
    settings = models.JSONField(
        verbose_name=_("settings"),
        default=dict,
        blank=True,
        help_text=_(
            "Site settings. The 'redirects' key configures slug updates and redirect creation."
        ),
    )

    class Meta:
        verbose_name = _("site")
        verbose_name_plural = _("sites")

    def __str__(self):
        return self.site_name or self.host

    @property
    def host(self):
        return urlparse(self.base).hostname or self.hostname or "*"

    def get_redirect_settings(self):
        return (self.settings or {}).get("redirects") or {}

    def get_language(self, language_id):
        """
        Returns the ``SiteLanguage`` configured for ``language_id``. Sites without
        an explicit default language use the site base for language 0.
        """
        try:
            return self.languages.get(language_id=language_id)
        except SiteLanguage.DoesNotExist:
            if language_id == DEFAULT_LANGUAGE_ID:
                return SiteLanguage(site=self, language_id=language_id, base="")
            raise

    @staticmethod
    def find_for_page(page):
        """
        Find the site a page belongs to, by looking for the nearest site root on
        the rootline of the page. ``page`` may be a ``Page`` or a page id.
        """
        if not isinstance(page, Page):
            page_id = page
            page = Page.objects.filter(pk=page_id).first()
            if page is None:
                raise SiteNotFoundError(page_id)

        rootline_ids = [rootline_page.pk for rootline_page in page.get_rootline()]
        sites = {
            site.root_page_id: site
            for site in Site.objects.filter(root_page_id__in=rootline_ids)
        }
        for page_id in rootline_ids:
            if page_id in sites:
                return sites[page_id]

        raise SiteNotFoundError(page.pk)


class SiteLanguage(models.Model):
    site = models.ForeignKey(
        Site,
        verbose_name=_("site"),
        related_name="languages",
        on_delete=models.CASCADE,
    )
    language_id = models.PositiveIntegerField(verbose_name=_("language"))
    locale = models.CharField(verbose_name=_("locale"), max_length=100, blank=True)
    base = models.CharField(
        verbose_name=_("base"),
        max_length=255,
        blank=True,
        help_text=_(
            "Base URL of this language, absolute or relative to the site base (e.g. '/de/')."
        ),
    )

    class Meta:
        verbose_name = _("site language")
        verbose_name_plural = _("site languages")
        unique_together = [("site", "language_id")]

    def __str__(self):
        return self.locale or str(self.language_id)

    def get_base_url(self):
        return urljoin(self.site.base, self.base)

    def get_base_path(self):
        return urlparse(self.get_base_url()).path
