import logging

from django.db import transaction
from django.utils import timezone

from slugcascade.correlation import CorrelationId
from slugcascade.models import LIVE_WORKSPACE_ID, Page, RecordHistory, Redirect
from slugcascade.signal_handlers import disable_slug_cascade

logger = logging.getLogger("slugcascade")


class HistoryRollback:
    """
    Undoes the changes recorded under a correlation id, e.g. the redirects or
    the sub-page slug updates made by ``SlugService`` for one slug change.

    The rollback itself is recorded in the history, tagged with the original
    correlation id plus a ``rollback`` aspect.
    """

    def __init__(self, user=None, workspace_id=LIVE_WORKSPACE_ID):
        self.user = user
        self.workspace_id = workspace_id

    def get_rollback_correlation_id(self, correlation_id):
        if isinstance(correlation_id, str):
            correlation_id = CorrelationId.from_string(correlation_id)
        return correlation_id.with_aspects(*correlation_id.aspects, "rollback")

    def get_entries(self, correlation_id, model, action):
        return (
            RecordHistory.objects.for_correlation(correlation_id)
            .for_model(model)
            .filter(action=action)
        )

    @transaction.atomic
    def revert_redirect_creation(self, correlation_id):
        """
        Marks the redirects created under ``correlation_id`` as deleted.
        Returns the number of redirects deleted.
        """
        rollback_correlation_id = self.get_rollback_correlation_id(correlation_id)
        count = 0

        for entry in self.get_entries(
            correlation_id, Redirect, RecordHistory.ACTION_ADD
        ):
            redirect = Redirect.objects.filter(
                pk=entry.object_id, deleted=False
            ).first()
            if redirect is None:
                continue

            redirect.deleted = True
            redirect.updated_at = timezone.now()
            redirect.save(update_fields=["deleted", "updated_at"])
            RecordHistory.objects.delete_record(
                redirect,
                correlation_id=rollback_correlation_id,
                user=self.user,
                workspace_id=self.workspace_id,
            )
            count += 1

        logger.info(
            "Reverted %d redirect(s) created under correlation id %s",
            count,
            correlation_id,
        )
        return count

    @transaction.atomic
    def revert_slug_update(self, correlation_id):
        """
        Restores the previous slug of each page updated under ``correlation_id``.
        Pages whose slug has been changed again since are left alone.
        Returns the number of pages restored.
        """
        rollback_correlation_id = self.get_rollback_correlation_id(correlation_id)
        count = 0

        # newest first, so that a page updated twice ends up with its oldest slug
        for entry in self.get_entries(
            correlation_id, Page, RecordHistory.ACTION_UPDATE
        ).order_by("-timestamp", "-id"):
            old_slug = entry.data.get("oldRecord", {}).get("slug")
            new_slug = entry.data.get("newRecord", {}).get("slug")
            page = Page.objects.filter(pk=entry.object_id).first()
            if page is None or old_slug is None or page.slug != new_slug:
                logger.debug(
                    "Slug of page id=%s changed since, not reverted", entry.object_id
                )
                continue

            page.slug = old_slug
            with disable_slug_cascade():
                page.save(
                    update_fields=["slug"],
                    user=self.user,
                    correlation_id=rollback_correlation_id,
                )
            RecordHistory.objects.modify_record(
                page,
                {"slug": new_slug},
                {"slug": old_slug},
                correlation_id=rollback_correlation_id,
                user=self.user,
                workspace_id=self.workspace_id,
            )
            count += 1

        logger.info(
            "Reverted %d slug update(s) made under correlation id %s",
            count,
            correlation_id,
        )
        return count
