import json
import logging

from slugcascade.signals import slug_changed_broadcast

logger = logging.getLogger("slugcascade")


class SlugChangedMessage:
    """
    The notification sent once a slug change has been handled, so that anything
    showing redirects or page slugs (e.g. an open editor session) can refresh,
    and offer to revert the changes by their correlation ids.
    """

    component_name = "redirects"
    event_name = "slugChanged"

    def __init__(
        self,
        correlation_id_slug_update,
        correlation_id_redirect_creation,
        auto_update_slugs,
        auto_create_redirects,
    ):
        self.correlation_id_slug_update = correlation_id_slug_update
        self.correlation_id_redirect_creation = correlation_id_redirect_creation
        self.auto_update_slugs = bool(auto_update_slugs)
        self.auto_create_redirects = bool(auto_create_redirects)

    def as_dict(self):
        return {
            "componentName": self.component_name,
            "eventName": self.event_name,
            "correlations": {
                "correlationIdSlugUpdate": str(self.correlation_id_slug_update),
                "correlationIdRedirectCreation": str(
                    self.correlation_id_redirect_creation
                ),
            },
            "autoUpdateSlugs": self.auto_update_slugs,
            "autoCreateRedirects": self.auto_create_redirects,
        }

    def to_json(self):
        return json.dumps(self.as_dict())

    def __repr__(self):
        return "<SlugChangedMessage %s>" % self.to_json()


class BaseEventSink:
    def publish(self, message):
        raise NotImplementedError


class SignalEventSink(BaseEventSink):
    """
    Publishes messages by sending the ``slug_changed_broadcast`` signal. Receivers
    get the message as the ``message`` keyword argument.
    """

    def publish(self, message):
        logger.debug("Broadcasting %s", message.to_json())
        slug_changed_broadcast.send(sender=type(message), message=message)


class MemoryEventSink(BaseEventSink):
    """
    Keeps published messages in memory, e.g. for inspecting them in tests.
    Messages are passed on to ``forward_to`` as well, if given.
    """

    def __init__(self, forward_to=None):
        self.messages = []
        self.forward_to = forward_to

    def publish(self, message):
        self.messages.append(message)
        if self.forward_to is not None:
            self.forward_to.publish(message)

    def clear(self):
        self.messages.clear()
