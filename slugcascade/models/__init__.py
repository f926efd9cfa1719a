from .history import RecordHistory, RecordHistoryManager, RecordHistoryQuerySet  # noqa: F401
from .pages import (  # noqa: F401
    DEFAULT_LANGUAGE_ID,
    LIVE_WORKSPACE_ID,
    Page,
    PageManager,
    PageQuerySet,
    overlay_workspace_versions,
)
from .redirects import Redirect, RedirectQuerySet  # noqa: F401
from .sites import Site, SiteLanguage  # noqa: F401
