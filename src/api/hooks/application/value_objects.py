"""Application-layer value objects for the hooks bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from hooks.domain.aggregates import ProjectHook


@dataclass(frozen=True)
class ProjectHookView:
    """What callers get to see of a hook. The token is never included."""

    id: str
    project_id: str
    url: str
    push_events: bool
    issues_events: bool
    merge_requests_events: bool
    tag_push_events: bool
    note_events: bool
    job_events: bool
    pipeline_events: bool
    wiki_page_events: bool
    enable_ssl_verification: bool

    @classmethod
    def from_hook(cls, hook: ProjectHook) -> ProjectHookView:
        return cls(
            id=hook.id.value,
            project_id=hook.project_id.value,
            url=hook.url,
            push_events=hook.push_events,
            issues_events=hook.issues_events,
            merge_requests_events=hook.merge_requests_events,
            tag_push_events=hook.tag_push_events,
            note_events=hook.note_events,
            job_events=hook.job_events,
            pipeline_events=hook.pipeline_events,
            wiki_page_events=hook.wiki_page_events,
            enable_ssl_verification=hook.enable_ssl_verification,
        )
