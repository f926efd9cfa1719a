from datetime import datetime, timezone

from django.core.exceptions import ImproperlyConfigured
from django.test import TestCase, override_settings
from freezegun import freeze_time

from slugcascade.correlation import CorrelationId
from slugcascade.events import MemoryEventSink
from slugcascade.exceptions import PageTreeCycleError, SiteNotFoundError
from slugcascade.models import Page, RecordHistory, Redirect
from slugcascade.services.slugs import SlugService
from slugcascade.signal_handlers import disable_slug_cascade
from slugcascade.test.utils import SlugCascadeTestUtils


class SlugServiceTestCase(SlugCascadeTestUtils, TestCase):
    redirect_settings = None

    def setUp(self):
        self.root = self.create_page("/", title="Home")
        self.site = self.create_site(self.root, redirects=self.redirect_settings)
        self.event_sink = MemoryEventSink()

    def get_service(self, **kwargs):
        kwargs.setdefault("event_sink", self.event_sink)
        return SlugService(**kwargs)

    def rename(self, page, new_slug, **kwargs):
        """
        Change the slug of ``page`` the way an editor would, then run the cascade.
        """
        old_slug = page.slug
        page.slug = new_slug
        with disable_slug_cascade():
            page.save()
        self.get_service(**kwargs).rebuild_slugs_for_slug_change(
            page.pk, old_slug, new_slug, CorrelationId.for_scope("core")
        )
        return old_slug


class TestRebuildSlugsForSlugChange(SlugServiceTestCase):
    def setUp(self):
        super().setUp()
        self.parent = self.create_page("/old", parent=self.root)
        self.child_x = self.create_page("/old/x", parent=self.parent)
        self.grandchild = self.create_page("/old/x/z", parent=self.child_x)
        self.child_y = self.create_page("/old/y", parent=self.parent)

    def test_sub_page_slugs_are_updated(self):
        self.rename(self.parent, "/new")

        self.assertEqual(self.reload(self.child_x).slug, "/new/x")
        self.assertEqual(self.reload(self.grandchild).slug, "/new/x/z")
        self.assertEqual(self.reload(self.child_y).slug, "/new/y")

    def test_redirects_are_created_for_page_and_sub_pages(self):
        self.rename(self.parent, "/new")

        self.assertEqual(
            list(
                Redirect.objects.order_by("pk").values_list("source_path", "target")
            ),
            [
                ("/old", "/new"),
                ("/old/x", "/new/x"),
                ("/old/x/z", "/new/x/z"),
                ("/old/y", "/new/y"),
            ],
        )

    def test_redirect_fields(self):
        self.rename(self.parent, "/new")

        redirect = Redirect.objects.get(source_path="/old")
        self.assertEqual(redirect.source_host, "www.example.com")
        self.assertEqual(redirect.target_statuscode, 307)
        self.assertEqual(redirect.endtime, 0)
        self.assertEqual(redirect.hitcount, 0)
        self.assertFalse(redirect.is_regexp)
        self.assertFalse(redirect.force_https)
        self.assertFalse(redirect.respect_query_parameters)
        self.assertTrue(redirect.automatically_created)

    def test_sub_page_not_starting_with_old_slug_is_left_alone(self):
        elsewhere = self.create_page("/somewhere-else", parent=self.parent)

        self.rename(self.parent, "/new")

        self.assertEqual(self.reload(elsewhere).slug, "/somewhere-else")
        self.assertFalse(
            Redirect.objects.filter(source_path="/somewhere-else").exists()
        )

    def test_prefix_match_is_case_sensitive(self):
        shouting = self.create_page("/OLD/shouting", parent=self.parent)

        self.rename(self.parent, "/new")

        self.assertEqual(self.reload(shouting).slug, "/OLD/shouting")

    def test_deleted_sub_pages_are_ignored(self):
        deleted = self.create_page("/old/deleted", parent=self.parent, deleted=True)

        self.rename(self.parent, "/new")

        self.assertEqual(self.reload(deleted).slug, "/old/deleted")
        self.assertFalse(Redirect.objects.filter(source_path="/old/deleted").exists())

    def test_conflicting_slug_gets_a_suffix(self):
        self.create_page("/new/x", parent=self.root)

        self.rename(self.parent, "/new")

        self.assertEqual(self.reload(self.child_x).slug, "/new/x-1")
        # descendants are rewritten relative to the renamed page
        self.assertEqual(self.reload(self.grandchild).slug, "/new/x/z")
        self.assertEqual(
            Redirect.objects.get(source_path="/old/x").target, "/new/x-1"
        )

    def test_conflicting_slug_in_another_site_is_allowed(self):
        other_root = self.create_page("/", title="Other home")
        self.create_site(other_root, base="https://other.example.com/")
        self.create_page("/new/x", parent=other_root)

        self.rename(self.parent, "/new")

        self.assertEqual(self.reload(self.child_x).slug, "/new/x")

    def test_trailing_slash_on_parent_slug(self):
        parent = self.create_page("/blog/", parent=self.root)
        post = self.create_page("/blog/post", parent=parent)

        self.rename(parent, "/news/")

        self.assertEqual(self.reload(post).slug, "/news/post")

    def test_second_run_changes_nothing(self):
        self.rename(self.parent, "/new")
        slugs_after_first_run = list(
            Page.objects.order_by("pk").values_list("slug", flat=True)
        )
        page_history_count = RecordHistory.objects.for_model(Page).count()

        self.get_service().rebuild_slugs_for_slug_change(
            self.parent.pk, "/old", "/new", CorrelationId.for_scope("core")
        )

        self.assertEqual(
            list(Page.objects.order_by("pk").values_list("slug", flat=True)),
            slugs_after_first_run,
        )
        self.assertEqual(
            RecordHistory.objects.for_model(Page).count(), page_history_count
        )

    def test_missing_page_is_ignored(self):
        self.get_service().rebuild_slugs_for_slug_change(
            99999, "/old", "/new", CorrelationId.for_scope("core")
        )

        self.assertFalse(Redirect.objects.exists())
        self.assertEqual(self.event_sink.messages, [])

    def test_deleted_page_is_ignored(self):
        Page.objects.filter(pk=self.parent.pk).update(deleted=True)

        self.get_service().rebuild_slugs_for_slug_change(
            self.parent.pk, "/old", "/new", CorrelationId.for_scope("core")
        )

        self.assertFalse(Redirect.objects.exists())
        self.assertEqual(self.event_sink.messages, [])

    def test_page_without_site_raises(self):
        orphan = self.create_page("/orphan")

        with self.assertRaises(SiteNotFoundError):
            self.get_service().rebuild_slugs_for_slug_change(
                orphan.pk, "/orphan", "/adopted", CorrelationId.for_scope("core")
            )

    def test_corrupt_tree_raises(self):
        # make the parent a child of its own grandchild
        Page.objects.filter(pk=self.parent.pk).update(parent=self.grandchild)

        with self.assertRaises(PageTreeCycleError):
            self.get_service().rebuild_slugs_for_slug_change(
                self.parent.pk, "/old", "/new", CorrelationId.for_scope("core")
            )

    def test_failure_rolls_back_the_whole_cascade(self):
        service = self.get_service()

        def fail(*args, **kwargs):
            raise RuntimeError("database went away")

        service.send_notification = fail

        with self.assertRaises(RuntimeError):
            service.rebuild_slugs_for_slug_change(
                self.parent.pk, "/old", "/new", CorrelationId.for_scope("core")
            )

        self.assertFalse(Redirect.objects.exists())
        self.assertEqual(self.reload(self.child_x).slug, "/old/x")

    def test_logs_slug_updates(self):
        with self.assertLogs("slugcascade", level="INFO") as logs:
            self.rename(self.parent, "/new")

        self.assertIn(
            "INFO:slugcascade:Slug of page id=%d updated: /old/x -> /new/x"
            % self.child_x.pk,
            logs.output,
        )


class TestCorrelationIds(SlugServiceTestCase):
    def setUp(self):
        super().setUp()
        self.parent = self.create_page("/old", parent=self.root)
        self.child = self.create_page("/old/child", parent=self.parent)

    def test_subject_is_derived_from_page_id(self):
        self.rename(self.parent, "/new")

        subject = CorrelationId.make_subject("pages", self.parent.pk)
        message = self.event_sink.messages[0]
        self.assertEqual(
            str(message.correlation_id_redirect_creation),
            "0400$core:%s/slugcascade/redirect" % subject,
        )
        self.assertEqual(
            str(message.correlation_id_slug_update),
            "0400$core:%s/slugcascade/slug" % subject,
        )

    def test_existing_subject_is_kept(self):
        self.get_service().rebuild_slugs_for_slug_change(
            self.parent.pk, "/old", "/new", "0400$core:abc123"
        )

        message = self.event_sink.messages[0]
        self.assertEqual(
            str(message.correlation_id_slug_update), "0400$core:abc123/slugcascade/slug"
        )

    def test_history_is_tagged(self):
        self.rename(self.parent, "/new")
        message = self.event_sink.messages[0]

        redirect_entries = RecordHistory.objects.for_correlation(
            message.correlation_id_redirect_creation
        )
        self.assertEqual(redirect_entries.count(), 2)
        for entry in redirect_entries:
            self.assertEqual(entry.action, RecordHistory.ACTION_ADD)
            redirect = Redirect.objects.get(pk=entry.object_id)
            self.assertEqual(entry.data["id"], redirect.pk)
            self.assertEqual(entry.data["source_path"], redirect.source_path)
            self.assertEqual(entry.data["target"], redirect.target)

        slug_entry = RecordHistory.objects.for_correlation(
            message.correlation_id_slug_update
        ).get()
        self.assertEqual(slug_entry.action, RecordHistory.ACTION_UPDATE)
        self.assertEqual(slug_entry.object_id, str(self.child.pk))
        self.assertEqual(
            slug_entry.data,
            {"oldRecord": {"slug": "/old/child"}, "newRecord": {"slug": "/new/child"}},
        )

    def test_history_records_user(self):
        user = self.create_test_user()

        self.rename(self.parent, "/new", user=user)

        self.assertTrue(RecordHistory.objects.exists())
        self.assertFalse(RecordHistory.objects.exclude(user=user).exists())
        self.assertEqual(Redirect.objects.first().created_by, user)


class TestNotification(SlugServiceTestCase):
    def setUp(self):
        super().setUp()
        self.parent = self.create_page("/old", parent=self.root)

    def test_one_notification_is_sent(self):
        self.rename(self.parent, "/new")

        self.assertEqual(len(self.event_sink.messages), 1)
        data = self.event_sink.messages[0].as_dict()
        self.assertEqual(data["componentName"], "redirects")
        self.assertEqual(data["eventName"], "slugChanged")
        self.assertEqual(
            set(data["correlations"]),
            {"correlationIdSlugUpdate", "correlationIdRedirectCreation"},
        )
        self.assertTrue(data["autoUpdateSlugs"])
        self.assertTrue(data["autoCreateRedirects"])


class TestSettingsDisabled(SlugServiceTestCase):
    redirect_settings = {"autoUpdateSlugs": False, "autoCreateRedirects": False}

    def test_nothing_happens(self):
        parent = self.create_page("/old", parent=self.root)
        child = self.create_page("/old/child", parent=parent)

        self.rename(parent, "/new")

        self.assertEqual(self.reload(child).slug, "/old/child")
        self.assertFalse(Redirect.objects.exists())
        self.assertFalse(RecordHistory.objects.exists())
        self.assertEqual(self.event_sink.messages, [])


class TestRedirectsDisabled(SlugServiceTestCase):
    redirect_settings = {"autoCreateRedirects": False}

    def test_only_slugs_are_updated(self):
        parent = self.create_page("/old", parent=self.root)
        child = self.create_page("/old/child", parent=parent)

        self.rename(parent, "/new")

        self.assertEqual(self.reload(child).slug, "/new/child")
        self.assertFalse(Redirect.objects.exists())
        self.assertFalse(self.event_sink.messages[0].auto_create_redirects)


class TestSlugUpdatesDisabled(SlugServiceTestCase):
    redirect_settings = {"autoUpdateSlugs": False, "httpStatusCode": 301}

    def test_only_redirect_for_page_is_created(self):
        parent = self.create_page("/old", parent=self.root)
        child = self.create_page("/old/child", parent=parent)

        self.rename(parent, "/new")

        self.assertEqual(self.reload(child).slug, "/old/child")
        redirect = Redirect.objects.get()
        self.assertEqual((redirect.source_path, redirect.target), ("/old", "/new"))
        self.assertEqual(redirect.target_statuscode, 301)


class TestInvalidSettings(SlugServiceTestCase):
    redirect_settings = {"redirectTTL": "forever"}

    def test_raises_improperly_configured(self):
        parent = self.create_page("/old", parent=self.root)

        with self.assertRaises(ImproperlyConfigured):
            self.rename(parent, "/new")


class TestRedirectTTL(SlugServiceTestCase):
    redirect_settings = {"redirectTTL": 10}

    @freeze_time("2026-03-01 12:00:00")
    def test_endtime(self):
        parent = self.create_page("/old", parent=self.root)

        self.rename(parent, "/new")

        redirect = Redirect.objects.get()
        self.assertEqual(
            redirect.endtime,
            int(datetime(2026, 3, 11, 12, 0, 0, tzinfo=timezone.utc).timestamp()),
        )

    @override_settings(SLUGCASCADE_REDIRECT_TTL=3)
    def test_site_setting_overrides_project_default(self):
        parent = self.create_page("/old", parent=self.root)

        with freeze_time("2026-03-01 12:00:00"):
            self.rename(parent, "/new")

        self.assertEqual(
            Redirect.objects.get().endtime,
            int(datetime(2026, 3, 11, 12, 0, 0, tzinfo=timezone.utc).timestamp()),
        )


class TestRedirectSourceHostAndBasePath(SlugServiceTestCase):
    def test_site_without_host_uses_wildcard(self):
        root = self.create_page("/", title="Hostless")
        self.create_site(root, base="/")
        page = self.create_page("/old", parent=root)

        self.rename(page, "/new")

        self.assertEqual(Redirect.objects.get().source_host, "*")

    def test_hostname_is_used_when_base_has_no_host(self):
        root = self.create_page("/", title="Relative")
        self.create_site(root, base="/", hostname="relative.example.com")
        page = self.create_page("/old", parent=root)

        self.rename(page, "/new")

        self.assertEqual(Redirect.objects.get().source_host, "relative.example.com")

    def test_site_base_path_is_prefixed(self):
        root = self.create_page("/", title="Sub directory")
        self.create_site(root, base="https://www.example.org/site/")
        page = self.create_page("/old", parent=root)

        self.rename(page, "/new")

        redirect = Redirect.objects.get()
        self.assertEqual(redirect.source_host, "www.example.org")
        self.assertEqual(redirect.source_path, "/site/old")
        self.assertEqual(redirect.target, "/site/new")


class TestWorkspaces(SlugServiceTestCase):
    def setUp(self):
        super().setUp()
        self.parent = self.create_page("/old", parent=self.root)
        self.child = self.create_page("/old/child", parent=self.parent)

    def test_no_redirects_outside_live_workspace(self):
        self.rename(self.parent, "/new", workspace_id=1)

        self.assertFalse(Redirect.objects.exists())
        self.assertFalse(self.event_sink.messages[0].auto_create_redirects)

    def test_live_sub_pages_get_a_workspace_version(self):
        self.rename(self.parent, "/new", workspace_id=1)

        self.assertEqual(self.reload(self.child).slug, "/old/child")
        self.assertEqual(
            self.get_workspace_version(self.child, 1).slug, "/new/child"
        )

    def test_workspace_version_is_updated_instead_of_live_page(self):
        version = self.create_workspace_version(
            self.child, workspace_id=1, slug="/old/child-draft"
        )

        self.rename(self.parent, "/new", workspace_id=1)

        self.assertEqual(self.reload(version).slug, "/new/child-draft")
        self.assertEqual(self.reload(self.child).slug, "/old/child")

    def test_versions_of_other_workspaces_are_ignored(self):
        version = self.create_workspace_version(
            self.child, workspace_id=2, slug="/old/child-draft"
        )

        self.rename(self.parent, "/new")

        self.assertEqual(self.reload(version).slug, "/old/child-draft")
        self.assertEqual(self.reload(self.child).slug, "/new/child")

    def test_sub_page_slug_does_not_clash_with_workspace_version(self):
        sibling = self.create_page("/s", parent=self.root)
        self.create_workspace_version(sibling, workspace_id=1, slug="/new/child")

        self.rename(self.parent, "/new", workspace_id=1)

        self.assertEqual(
            self.get_workspace_version(self.child, 1).slug, "/new/child-1"
        )

    def test_cascade_from_workspace_version(self):
        grandchild = self.create_page("/old/child/leaf", parent=self.child)
        version = self.create_workspace_version(self.parent, workspace_id=1, slug="/new")

        self.get_service(workspace_id=1).rebuild_slugs_for_slug_change(
            version.pk, "/old", "/new", CorrelationId.for_scope("core")
        )

        self.assertEqual(self.get_workspace_version(self.child, 1).slug, "/new/child")
        self.assertEqual(
            self.get_workspace_version(grandchild, 1).slug, "/new/child/leaf"
        )
        self.assertEqual(self.reload(self.child).slug, "/old/child")

    def test_cascade_from_workspace_version_uses_live_page_id_as_subject(self):
        version = self.create_workspace_version(self.parent, workspace_id=1, slug="/new")

        self.get_service(workspace_id=1).rebuild_slugs_for_slug_change(
            version.pk, "/old", "/new", CorrelationId.for_scope("core")
        )

        self.assertEqual(
            self.event_sink.messages[0].correlation_id_slug_update.subject,
            CorrelationId.make_subject("pages", self.parent.pk),
        )
