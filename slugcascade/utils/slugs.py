import hashlib

from slugcascade.exceptions import SiteNotFoundError
from slugcascade.models import LIVE_WORKSPACE_ID, Page, Site

# After this many numbered attempts, a hash of the slug is used as suffix instead
MAX_NUMBERED_SUFFIX = 100


def is_unique_in_site(slug, page, workspace_id=LIVE_WORKSPACE_ID):
    """
    Determine whether ``slug`` is free for ``page`` within its site and language.

    Pages of other sites may use the same slug. The page itself (and the live page
    it is a workspace version of) does not count as a duplicate. Outside the live
    workspace, the slugs of the workspace versions are checked in place of the
    live slugs they override.
    """
    candidates = list(
        Page.objects.not_deleted()
        .with_workspace_overlay(workspace_id)
        .in_language(page.language_id)
        .filter(slug=slug)
        .exclude(pk__in={page.pk, page.live_id})
        .exclude(version_of_id=page.live_id)
    )
    if not candidates:
        return True

    site = Site.find_for_page(page)
    for candidate in candidates:
        try:
            if Site.find_for_page(candidate).pk == site.pk:
                return False
        except SiteNotFoundError:
            # pages outside of any site can't clash with this one
            continue

    return True


def build_slug_for_unique_in_site(slug, page, workspace_id=LIVE_WORKSPACE_ID):
    """
    Finds an available slug for ``page`` within its site, adding a number on the
    end if the requested slug is taken, for example:

     - '/about/team'
     - '/about/team-1'
     - '/about/team-2'

    And so on, until an available slug is found.
    """
    trailing_slash = "/" if len(slug) > 1 and slug.endswith("/") else ""
    base_slug = slug.rstrip("/") if trailing_slash else slug

    candidate_slug = slug
    number = 0
    while not is_unique_in_site(candidate_slug, page, workspace_id):
        number += 1
        if number > MAX_NUMBERED_SUFFIX:
            suffix = hashlib.md5(base_slug.encode()).hexdigest()[:10]
            candidate_slug = "%s-%s%s" % (base_slug, suffix, trailing_slash)
            break
        candidate_slug = "%s-%d%s" % (base_slug, number, trailing_slash)

    return candidate_slug
