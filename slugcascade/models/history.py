import json

from django.conf import settings
from django.contrib.contenttypes.models import ContentType
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone
from django.utils.functional import cached_property
from django.utils.translation import gettext_lazy as _

from .pages import LIVE_WORKSPACE_ID


class RecordHistoryQuerySet(models.QuerySet):
    def for_correlation(self, correlation_id):
        return self.filter(correlation_id=str(correlation_id))

    def for_instance(self, instance):
        return self.filter(
            content_type=ContentType.objects.get_for_model(instance),
            object_id=str(instance.pk),
        )

    def for_model(self, model):
        return self.filter(content_type=ContentType.objects.get_for_model(model))


class RecordHistoryManager(models.Manager.from_queryset(RecordHistoryQuerySet)):
    def log_action(self, instance, action, data=None, correlation_id=None, **kwargs):
        """
        :param instance: The model instance the change was made to
        :param action: One of ``RecordHistory.ACTION_ADD``, ``ACTION_UPDATE`` or ``ACTION_DELETE``
        :param data: The record data to store with the entry
        :param correlation_id: The ``CorrelationId`` (or string) grouping this change with others
        :param kwargs: Additional fields: user, workspace_id, timestamp
        :return: The new history entry
        """
        user = kwargs.pop("user", None)
        timestamp = kwargs.pop("timestamp", None) or timezone.now()

        return self.create(
            content_type=ContentType.objects.get_for_model(instance),
            object_id=str(instance.pk),
            action=action,
            data_json=json.dumps(data or {}, cls=DjangoJSONEncoder),
            correlation_id=str(correlation_id) if correlation_id else "",
            timestamp=timestamp,
            user_id=getattr(user, "pk", None),
            **kwargs,
        )

    def add_record(self, instance, data, correlation_id=None, **kwargs):
        return self.log_action(
            instance,
            RecordHistory.ACTION_ADD,
            data=data,
            correlation_id=correlation_id,
            **kwargs,
        )

    def modify_record(self, instance, old_data, new_data, correlation_id=None, **kwargs):
        return self.log_action(
            instance,
            RecordHistory.ACTION_UPDATE,
            data={"oldRecord": old_data, "newRecord": new_data},
            correlation_id=correlation_id,
            **kwargs,
        )

    def delete_record(self, instance, correlation_id=None, **kwargs):
        return self.log_action(
            instance,
            RecordHistory.ACTION_DELETE,
            correlation_id=correlation_id,
            **kwargs,
        )


class RecordHistory(models.Model):
    ACTION_ADD = "add"
    ACTION_UPDATE = "update"
    ACTION_DELETE = "delete"

    ACTION_CHOICES = [
        (ACTION_ADD, _("Added")),
        (ACTION_UPDATE, _("Updated")),
        (ACTION_DELETE, _("Deleted")),
    ]

    content_type = models.ForeignKey(
        ContentType,
        models.SET_NULL,
        verbose_name=_("content type"),
        blank=True,
        null=True,
        related_name="+",
    )
    object_id = models.CharField(max_length=255, db_index=True)
    action = models.CharField(max_length=20, choices=ACTION_CHOICES, db_index=True)
    data_json = models.TextField(blank=True)
    correlation_id = models.CharField(max_length=255, blank=True, db_index=True)
    timestamp = models.DateTimeField(verbose_name=_("timestamp (UTC)"))
    workspace_id = models.PositiveIntegerField(default=LIVE_WORKSPACE_ID)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,  # Null if actioned by system
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="+",
    )

    objects = RecordHistoryManager()

    class Meta:
        ordering = ["-timestamp", "-id"]
        verbose_name = _("history entry")
        verbose_name_plural = _("history entries")

    def __str__(self):
        return "RecordHistory %d: '%s' on %s %s" % (
            self.pk,
            self.action,
            self.content_type.model if self.content_type_id else "-",
            self.object_id,
        )

    @cached_property
    def data(self):
        if self.data_json:
            return json.loads(self.data_json)
        else:
            return {}
