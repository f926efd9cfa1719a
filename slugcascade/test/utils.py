from django.contrib.auth import get_user_model

from slugcascade.models import Page, Site, SiteLanguage
from slugcascade.signal_handlers import disable_slug_cascade


class SlugCascadeTestUtils:
    @staticmethod
    def create_test_user():
        user_model = get_user_model()
        user_data = {
            user_model.USERNAME_FIELD: "test@email.com",
            "email": "test@email.com",
            "password": "password",
        }

        for field in user_model.REQUIRED_FIELDS:
            if field not in user_data:
                user_data[field] = field

        return user_model.objects.create_superuser(**user_data)

    @staticmethod
    def create_page(slug, parent=None, **kwargs):
        kwargs.setdefault("title", slug.rstrip("/").rsplit("/", 1)[-1] or "Home")
        # Creating fixtures must not trigger any cascade
        with disable_slug_cascade():
            page = Page(slug=slug, parent=parent, **kwargs)
            page.save()
        return page

    @classmethod
    def create_translation(cls, page, slug, language_id, **kwargs):
        parent = page.parent
        return cls.create_page(
            slug,
            parent=parent,
            translation_of=page,
            language_id=language_id,
            **kwargs
        )

    @staticmethod
    def create_workspace_version(page, workspace_id, **kwargs):
        with disable_slug_cascade():
            return page.create_workspace_version(workspace_id, **kwargs)

    @staticmethod
    def get_workspace_version(page, workspace_id):
        return Page.objects.get(version_of=page, workspace_id=workspace_id)

    @staticmethod
    def create_site(root_page, base="https://www.example.com/", redirects=None, **kwargs):
        settings = kwargs.pop("settings", {})
        if redirects is not None:
            settings["redirects"] = redirects
        return Site.objects.create(
            root_page=root_page, base=base, settings=settings, **kwargs
        )

    @staticmethod
    def add_site_language(site, language_id, base, locale=""):
        return SiteLanguage.objects.create(
            site=site, language_id=language_id, base=base, locale=locale
        )

    @staticmethod
    def reload(page):
        return Page.objects.get(pk=page.pk)
