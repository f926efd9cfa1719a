from collections import namedtuple

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


def get_default_redirect_settings():
    """
    Project-wide defaults, used for any key missing from a site's
    ``redirects`` settings block.
    """
    return {
        "autoUpdateSlugs": getattr(settings, "SLUGCASCADE_AUTO_UPDATE_SLUGS", True),
        "autoCreateRedirects": getattr(
            settings, "SLUGCASCADE_AUTO_CREATE_REDIRECTS", True
        ),
        "redirectTTL": getattr(settings, "SLUGCASCADE_REDIRECT_TTL", 0),
        "httpStatusCode": getattr(settings, "SLUGCASCADE_HTTP_STATUS_CODE", 307),
    }


def _to_bool(value, key):
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str) and value.strip().lower() in ("1", "true", "yes", "on"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("0", "false", "no", "off", ""):
        return False
    raise ImproperlyConfigured(
        "Redirect setting '%s' must be a boolean, got %r" % (key, value)
    )


def _to_int(value, key):
    if isinstance(value, bool):
        raise ImproperlyConfigured(
            "Redirect setting '%s' must be an integer, got %r" % (key, value)
        )
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ImproperlyConfigured(
            "Redirect setting '%s' must be an integer, got %r" % (key, value)
        )


class RedirectSettings(
    namedtuple(
        "RedirectSettings",
        "auto_update_slugs auto_create_redirects redirect_ttl http_status_code",
    )
):
    """
    The ``settings.redirects`` block of a site, validated and with defaults applied.
    """

    __slots__ = ()

    @classmethod
    def from_dict(cls, data, is_live=True):
        values = get_default_redirect_settings()
        values.update(data or {})

        redirect_ttl = _to_int(values["redirectTTL"], "redirectTTL")
        if redirect_ttl < 0:
            raise ImproperlyConfigured(
                "Redirect setting 'redirectTTL' must not be negative, got %d"
                % redirect_ttl
            )

        http_status_code = _to_int(values["httpStatusCode"], "httpStatusCode")
        if not 300 <= http_status_code <= 399:
            raise ImproperlyConfigured(
                "Redirect setting 'httpStatusCode' must be a 3xx status code, got %d"
                % http_status_code
            )

        auto_create_redirects = _to_bool(
            values["autoCreateRedirects"], "autoCreateRedirects"
        )
        # Redirects are only ever created for the live workspace
        if not is_live:
            auto_create_redirects = False

        return cls(
            auto_update_slugs=_to_bool(values["autoUpdateSlugs"], "autoUpdateSlugs"),
            auto_create_redirects=auto_create_redirects,
            redirect_ttl=redirect_ttl,
            http_status_code=http_status_code,
        )

    @classmethod
    def for_site(cls, site, is_live=True):
        return cls.from_dict(site.get_redirect_settings(), is_live=is_live)

    @property
    def enabled(self):
        return self.auto_update_slugs or self.auto_create_redirects
