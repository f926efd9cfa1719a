class SlugCascadeError(Exception):
    """
    Base class for errors raised while propagating a slug change.
    """

    pass


class PageTreeCycleError(SlugCascadeError):
    """
    Raised when walking the page tree visits the same page twice. This means
    the ``parent`` or ``translation_of`` links of the stored pages form a loop,
    which would otherwise recurse forever.
    """

    def __init__(self, page_id, path=None):
        self.page_id = page_id
        self.path = list(path or [])
        super().__init__(
            "Page tree contains a cycle at page id=%s (visited: %s)"
            % (page_id, ", ".join(str(id) for id in self.path) or "-")
        )


class SiteNotFoundError(SlugCascadeError):
    """
    Raised when no site is configured for the rootline of a page.
    """

    def __init__(self, page_id):
        self.page_id = page_id
        super().__init__("No site found for page id=%s" % page_id)
