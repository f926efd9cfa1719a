import hashlib
import re

CORRELATION_ID_PATTERN = re.compile(
    r"^(?:(?P<capabilities>[0-9a-f]{4})\$)?"
    r"(?:(?P<scope>[A-Za-z0-9_-]+):)?"
    r"(?P<subject>[^/]*)"
    r"(?P<aspects>(?:/[^/]+)*)$"
)


class CorrelationId:
    """
    An opaque tag that is threaded through a batch of related writes, so that
    the history records they produce can later be found (and reverted) together.

    The string form is ``<capabilities>$<scope>:<subject>/<aspect>/<aspect>``,
    for example ``0400$core:3f2a.../slugcascade/redirect``.

    Instances are immutable; the ``with_*`` methods return modified copies.
    """

    DEFAULT_CAPABILITIES = "0400"

    def __init__(self, scope=None, subject=None, aspects=(), capabilities=None):
        self.scope = scope
        self.subject = subject
        self.aspects = tuple(aspects)
        self.capabilities = capabilities or self.DEFAULT_CAPABILITIES

    @classmethod
    def for_scope(cls, scope):
        return cls(scope=scope)

    @classmethod
    def for_subject(cls, subject, *aspects):
        return cls(subject=subject, aspects=aspects)

    @classmethod
    def from_string(cls, value):
        match = CORRELATION_ID_PATTERN.match(value or "")
        if match is None:
            raise ValueError("'%s' is not a valid correlation id" % value)

        aspects = [aspect for aspect in match.group("aspects").split("/") if aspect]
        return cls(
            scope=match.group("scope"),
            subject=match.group("subject") or None,
            aspects=aspects,
            capabilities=match.group("capabilities"),
        )

    @staticmethod
    def make_subject(table, record_id):
        # e.g. md5("pages:12")
        return hashlib.md5(("%s:%s" % (table, record_id)).encode()).hexdigest()

    def with_subject(self, subject):
        return type(self)(self.scope, subject, self.aspects, self.capabilities)

    def with_aspects(self, *aspects):
        return type(self)(self.scope, self.subject, aspects, self.capabilities)

    def __str__(self):
        value = "%s$" % self.capabilities
        if self.scope:
            value += "%s:" % self.scope
        value += self.subject or ""
        for aspect in self.aspects:
            value += "/%s" % aspect
        return value

    def __repr__(self):
        return "<CorrelationId %s>" % self

    def __eq__(self, other):
        if isinstance(other, CorrelationId):
            return str(self) == str(other)
        return NotImplemented

    def __hash__(self):
        return hash(str(self))
