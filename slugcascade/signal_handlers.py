import logging
from contextlib import contextmanager

from asgiref.local import Local

from slugcascade.correlation import CorrelationId
from slugcascade.models import Page
from slugcascade.signals import page_slug_changed

logger = logging.getLogger("slugcascade")


slug_cascade_disabled = Local()


@contextmanager
def disable_slug_cascade():
    """
    A context manager that can be used to temporarily stop slug changes from
    being cascaded to sub-pages.

    For example:

    with disable_slug_cascade():
        page.save()  # Sub-pages and redirects will not be touched by this save
    """
    previous = getattr(slug_cascade_disabled, "value", False)
    try:
        slug_cascade_disabled.value = True
        yield
    finally:
        slug_cascade_disabled.value = previous


def is_slug_cascade_disabled():
    return getattr(slug_cascade_disabled, "value", False)


def rebuild_slugs_on_slug_change(
    instance, instance_before, correlation_id=None, user=None, **kwargs
):
    if is_slug_cascade_disabled():
        return

    from slugcascade.services.slugs import SlugService

    if correlation_id is None:
        correlation_id = CorrelationId.for_scope("core")

    SlugService(
        workspace_id=instance.workspace_id, user=user
    ).rebuild_slugs_for_slug_change(
        instance.live_id, instance_before.slug, instance.slug, correlation_id
    )


def register_signal_handlers():
    page_slug_changed.connect(rebuild_slugs_on_slug_change, sender=Page)
