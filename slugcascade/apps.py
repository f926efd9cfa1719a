from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class SlugCascadeAppConfig(AppConfig):
    name = "slugcascade"
    label = "slugcascade"
    verbose_name = _("Slug cascade")
    default_auto_field = "django.db.models.AutoField"

    def ready(self):
        from slugcascade.signal_handlers import register_signal_handlers

        register_signal_handlers()
