from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class RedirectQuerySet(models.QuerySet):
    def active(self, timestamp):
        """
        Redirects that are neither deleted, disabled nor expired at ``timestamp``.
        """
        return (
            self.filter(deleted=False, disabled=False)
            .filter(models.Q(starttime=0) | models.Q(starttime__lte=timestamp))
            .filter(models.Q(endtime=0) | models.Q(endtime__gt=timestamp))
        )

    def automatically_created(self):
        return self.filter(automatically_created=True)


class Redirect(models.Model):
    source_host = models.CharField(
        verbose_name=_("source host"),
        max_length=255,
        default="*",
        help_text=_("The host to match, or '*' to match any host."),
    )
    source_path = models.CharField(
        verbose_name=_("redirect from"), max_length=2048, db_index=True
    )
    target = models.CharField(verbose_name=_("redirect to"), max_length=2048)
    target_statuscode = models.PositiveSmallIntegerField(
        verbose_name=_("status code"), default=307
    )

    # Unix timestamps, 0 when unset
    starttime = models.PositiveIntegerField(verbose_name=_("start time"), default=0)
    endtime = models.PositiveIntegerField(
        verbose_name=_("end time"),
        default=0,
        help_text=_("The redirect expires at this time. 0 means it never expires."),
    )

    is_regexp = models.BooleanField(verbose_name=_("is regular expression"), default=False)
    force_https = models.BooleanField(verbose_name=_("force SSL redirect"), default=False)
    respect_query_parameters = models.BooleanField(
        verbose_name=_("respect query parameters"), default=False
    )

    hitcount = models.PositiveIntegerField(verbose_name=_("hit count"), default=0)
    lasthiton = models.PositiveIntegerField(verbose_name=_("last hit on"), default=0)
    disable_hitcount = models.BooleanField(
        verbose_name=_("disable hit counter"), default=False
    )

    disabled = models.BooleanField(verbose_name=_("disabled"), default=False)
    deleted = models.BooleanField(verbose_name=_("deleted"), default=False)
    automatically_created = models.BooleanField(
        verbose_name=_("automatically created"),
        default=False,
        editable=False,
    )

    created_at = models.DateTimeField(verbose_name=_("created at"))
    updated_at = models.DateTimeField(verbose_name=_("updated at"))
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name=_("created by"),
        null=True,
        blank=True,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="+",
    )

    objects = RedirectQuerySet.as_manager()

    class Meta:
        verbose_name = _("redirect")
        verbose_name_plural = _("redirects")

    def __str__(self):
        return "%s%s -> %s" % (
            "" if self.source_host == "*" else self.source_host,
            self.source_path,
            self.target,
        )

    def is_expired(self, timestamp):
        return self.endtime != 0 and self.endtime <= timestamp
