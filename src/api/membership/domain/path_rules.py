"""Reserved route names and path validation for groups.

A group's path becomes part of every URL beneath it, so it cannot shadow a
route the application serves itself. Top-level groups live next to the
application's root routes; nested groups live next to the routes served
inside a namespace (``tree``, ``blob``...). Group routes such as
``activity`` are reserved at every depth.
"""

from __future__ import annotations

import re

PATH_FORMAT = re.compile(r"^[a-zA-Z0-9_.][a-zA-Z0-9_.-]*$")
FORBIDDEN_SUFFIXES = (".git", ".atom")

TOP_LEVEL_ROUTES = frozenset(
    {
        "-",
        ".well-known",
        "abuse_reports",
        "admin",
        "api",
        "assets",
        "autocomplete",
        "ci",
        "dashboard",
        "explore",
        "files",
        "groups",
        "health_check",
        "help",
        "import",
        "invites",
        "jwt",
        "koding",
        "notification_settings",
        "oauth",
        "profile",
        "projects",
        "public",
        "robots.txt",
        "s",
        "search",
        "sent_notifications",
        "snippets",
        "u",
        "unicorn_test",
        "unsubscribes",
        "uploads",
        "users",
    }
)

WILDCARD_ROUTES = frozenset(
    {
        "badges",
        "blame",
        "blob",
        "builds",
        "commits",
        "create",
        "create_dir",
        "edit",
        "environments",
        "files",
        "find_file",
        "gitlab-lfs",
        "info",
        "new",
        "preview",
        "raw",
        "refs",
        "tree",
        "update",
        "wikis",
    }
)

GROUP_ROUTES = frozenset(
    {
        "activity",
        "analytics",
        "audit_events",
        "avatar",
        "edit",
        "group_members",
        "hooks",
        "issues",
        "labels",
        "ldap",
        "ldap_group_links",
        "merge_requests",
        "milestones",
        "notification_setting",
        "pipeline_quota",
        "projects",
        "subgroups",
    }
)


def path_errors(path: str | None, top_level: bool) -> list[str]:
    """Return validation messages for a group path.

    Args:
        path: The candidate path segment
        top_level: Whether the group has no parent

    Returns:
        A list of messages; empty when the path is acceptable
    """
    if not path:
        return ["can't be blank"]

    errors: list[str] = []
    if not PATH_FORMAT.match(path):
        errors.append(
            "can contain only letters, digits, '_', '-' and '.' "
            "and cannot start with '-'"
        )
    if path.lower().endswith(FORBIDDEN_SUFFIXES):
        errors.append("cannot end in '.git' or '.atom'")

    if is_reserved(path, top_level):
        errors.append(f"{path} is a reserved name")

    return errors


def is_reserved(path: str, top_level: bool) -> bool:
    """Check a path against the reserved routes for its position."""
    candidate = path.lower()
    if candidate in GROUP_ROUTES:
        return True
    if top_level:
        return candidate in TOP_LEVEL_ROUTES
    return candidate in WILDCARD_ROUTES
