import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("contenttypes", "0002_remove_content_type_name"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Page",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("title", models.CharField(max_length=255, verbose_name="title")),
                (
                    "slug",
                    models.TextField(
                        help_text="The full path of the page within its site, starting with a '/' (e.g. '/about/team')",
                        verbose_name="slug",
                    ),
                ),
                (
                    "language_id",
                    models.PositiveIntegerField(
                        db_index=True, default=0, verbose_name="language"
                    ),
                ),
                (
                    "workspace_id",
                    models.PositiveIntegerField(
                        db_index=True, default=0, verbose_name="workspace"
                    ),
                ),
                ("deleted", models.BooleanField(default=False, verbose_name="deleted")),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="children",
                        to="slugcascade.page",
                        verbose_name="parent page",
                    ),
                ),
                (
                    "translation_of",
                    models.ForeignKey(
                        blank=True,
                        help_text="The default language page this page is a translation of.",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="translations",
                        to="slugcascade.page",
                        verbose_name="translation of",
                    ),
                ),
                (
                    "version_of",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="workspace_versions",
                        to="slugcascade.page",
                        verbose_name="workspace version of",
                    ),
                ),
            ],
            options={
                "verbose_name": "page",
                "verbose_name_plural": "pages",
            },
        ),
        migrations.CreateModel(
            name="Redirect",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "source_host",
                    models.CharField(
                        default="*",
                        help_text="The host to match, or '*' to match any host.",
                        max_length=255,
                        verbose_name="source host",
                    ),
                ),
                (
                    "source_path",
                    models.CharField(
                        db_index=True, max_length=2048, verbose_name="redirect from"
                    ),
                ),
                ("target", models.CharField(max_length=2048, verbose_name="redirect to")),
                (
                    "target_statuscode",
                    models.PositiveSmallIntegerField(
                        default=307, verbose_name="status code"
                    ),
                ),
                (
                    "starttime",
                    models.PositiveIntegerField(default=0, verbose_name="start time"),
                ),
                (
                    "endtime",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="The redirect expires at this time. 0 means it never expires.",
                        verbose_name="end time",
                    ),
                ),
                (
                    "is_regexp",
                    models.BooleanField(
                        default=False, verbose_name="is regular expression"
                    ),
                ),
                (
                    "force_https",
                    models.BooleanField(default=False, verbose_name="force SSL redirect"),
                ),
                (
                    "respect_query_parameters",
                    models.BooleanField(
                        default=False, verbose_name="respect query parameters"
                    ),
                ),
                (
                    "hitcount",
                    models.PositiveIntegerField(default=0, verbose_name="hit count"),
                ),
                (
                    "lasthiton",
                    models.PositiveIntegerField(default=0, verbose_name="last hit on"),
                ),
                (
                    "disable_hitcount",
                    models.BooleanField(
                        default=False, verbose_name="disable hit counter"
                    ),
                ),
                ("disabled", models.BooleanField(default=False, verbose_name="disabled")),
                ("deleted", models.BooleanField(default=False, verbose_name="deleted")),
                (
                    "automatically_created",
                    models.BooleanField(
                        default=False,
                        editable=False,
                        verbose_name="automatically created",
                    ),
                ),
                ("created_at", models.DateTimeField(verbose_name="created at")),
                ("updated_at", models.DateTimeField(verbose_name="updated at")),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="created by",
                    ),
                ),
            ],
            options={
                "verbose_name": "redirect",
                "verbose_name_plural": "redirects",
            },
        ),
        migrations.CreateModel(
            name="Site",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "site_name",
                    models.CharField(
                        blank=True,
                        help_text="Human-readable name for the site.",
                        max_length=255,
                        verbose_name="site name",
                    ),
                ),
                (
                    "hostname",
                    models.CharField(
                        blank=True,
                        help_text="Used as the source host of generated redirects when the base URL has no host.",
                        max_length=255,
                        verbose_name="hostname",
                    ),
                ),
                (
                    "base",
                    models.CharField(
                        default="/",
                        help_text="The base URL of the site, e.g. 'https://www.example.com/' or '/'.",
                        max_length=255,
                        verbose_name="base",
                    ),
                ),
                (
                    "settings",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Site settings. The 'redirects' key configures slug updates and redirect creation.",
                        verbose_name="settings",
                    ),
                ),
                (
                    "root_page",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sites_rooted_here",
                        to="slugcascade.page",
                        verbose_name="root page",
                    ),
                ),
            ],
            options={
                "verbose_name": "site",
                "verbose_name_plural": "sites",
            },
        ),
        migrations.CreateModel(
            name="SiteLanguage",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("language_id", models.PositiveIntegerField(verbose_name="language")),
                (
                    "locale",
                    models.CharField(blank=True, max_length=100, verbose_name="locale"),
                ),
                (
                    "base",
                    models.CharField(
                        blank=True,
                        help_text="Base URL of this language, absolute or relative to the site base (e.g. '/de/').",
                        max_length=255,
                        verbose_name="base",
                    ),
                ),
                (
                    "site",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="languages",
                        to="slugcascade.site",
                        verbose_name="site",
                    ),
                ),
            ],
            options={
                "verbose_name": "site language",
                "verbose_name_plural": "site languages",
                "unique_together": {("site", "language_id")},
            },
        ),
        migrations.CreateModel(
            name="RecordHistory",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("object_id", models.CharField(db_index=True, max_length=255)),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("add", "Added"),
                            ("update", "Updated"),
                            ("delete", "Deleted"),
                        ],
                        db_index=True,
                        max_length=20,
                    ),
                ),
                ("data_json", models.TextField(blank=True)),
                (
                    "correlation_id",
                    models.CharField(blank=True, db_index=True, max_length=255),
                ),
                ("timestamp", models.DateTimeField(verbose_name="timestamp (UTC)")),
                ("workspace_id", models.PositiveIntegerField(default=0)),
                (
                    "content_type",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="contenttypes.contenttype",
                        verbose_name="content type",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "history entry",
                "verbose_name_plural": "history entries",
                "ordering": ["-timestamp", "-id"],
            },
        ),
    ]
