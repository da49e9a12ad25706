"""ProjectHook aggregate for the hooks context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from hooks.domain.exceptions import InvalidHookUrlError, MissingHookUrlError
from hooks.domain.value_objects import ProjectHookId
from membership.domain.value_objects import ProjectId

EVENT_FIELDS = (
    "push_events",
    "issues_events",
    "merge_requests_events",
    "tag_push_events",
    "note_events",
    "job_events",
    "pipeline_events",
    "wiki_page_events",
)
SETTING_FIELDS = frozenset(EVENT_FIELDS) | {"enable_ssl_verification"}

_http_url = TypeAdapter(AnyHttpUrl)


@dataclass
class ProjectHook:
    """A webhook registered on a project.

    The token is sent with every delivery and is write-only: it is never
    part of ``repr`` or of any view returned to callers.
    """

    id: ProjectHookId
    project_id: ProjectId
    url: str
    token: str | None = field(default=None, repr=False)
    push_events: bool = True
    issues_events: bool = False
    merge_requests_events: bool = False
    tag_push_events: bool = False
    note_events: bool = False
    job_events: bool = False
    pipeline_events: bool = False
    wiki_page_events: bool = False
    enable_ssl_verification: bool = True

    @classmethod
    def create(
        cls,
        project_id: ProjectId,
        url: str | None,
        token: str | None = None,
        **settings: bool,
    ) -> ProjectHook:
        """Factory method for creating a new hook.

        Args:
            project_id: The project the hook belongs to
            url: Delivery URL, http or https
            token: Optional secret token
            **settings: Event flags and enable_ssl_verification

        Raises:
            MissingHookUrlError: If url is missing or blank
            InvalidHookUrlError: If url is not an http(s) URL with a host
            ValueError: If an unknown setting is given
        """
        _check_settings(settings)
        return cls(
            id=ProjectHookId.generate(),
            project_id=project_id,
            url=validate_url(url),
            token=token,
            **settings,
        )

    def update(
        self, url: str | None, token: str | None = None, **settings: bool
    ) -> None:
        """Replace the URL and change the given settings.

        The URL is required on every update. A token of None keeps the
        current token.

        Raises:
            MissingHookUrlError: If url is missing or blank
            InvalidHookUrlError: If url is not an http(s) URL with a host
            ValueError: If an unknown setting is given
        """
        _check_settings(settings)
        self.url = validate_url(url)
        if token is not None:
            self.token = token
        for name, value in settings.items():
            setattr(self, name, bool(value))

    def enabled_events(self) -> list[str]:
        """Names of the events this hook is triggered by."""
        return [name for name in EVENT_FIELDS if getattr(self, name)]


def validate_url(url: str | None) -> str:
    """Check a hook URL and return it unchanged.

    Raises:
        MissingHookUrlError: If url is missing or blank
        InvalidHookUrlError: If url is not an http(s) URL with a host
    """
    if url is None or not url.strip():
        raise MissingHookUrlError("url is missing")
    try:
        _http_url.validate_python(url)
    except ValidationError as e:
        raise InvalidHookUrlError(f"url is blocked: {url} is not a valid URL") from e
    return url


def _check_settings(settings: dict[str, Any]) -> None:
    unknown = set(settings) - SETTING_FIELDS
    if unknown:
        raise ValueError(f"Unknown hook settings: {sorted(unknown)}")
