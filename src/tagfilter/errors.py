"""Exceptions raised by tagfilter."""


class TagFilterError(Exception):
    """Base class for every error raised by this package."""


class RuleError(TagFilterError, TypeError):
    """A rule fragment could not be understood.

    Raised while merging, before any rule table is touched, so a failed
    ``allow()`` / ``deny()`` call leaves the previous rules in place.
    """


class RuleStoreError(TagFilterError, RuntimeError):
    """A rule table lookup ran into something that is not a container.

    This only happens when the internal tables were modified behind the
    public API's back.
    """


class FilterClosedError(TagFilterError, RuntimeError):
    """An event was fed to a filter after ``finish()``."""
