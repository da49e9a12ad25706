"""Domain exceptions for the hooks bounded context."""


class MissingHookUrlError(ValueError):
    """Raised when a hook is created or updated without a URL."""

    pass


class InvalidHookUrlError(ValueError):
    """Raised when a hook URL is not an http(s) URL with a host."""

    pass
