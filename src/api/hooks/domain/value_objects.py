"""Value objects for the hooks domain."""

from __future__ import annotations

from dataclasses import dataclass

from ulid import ULID


@dataclass(frozen=True)
class ProjectHookId:
    """Identifier for a ProjectHook aggregate."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> ProjectHookId:
        """Generate a new ProjectHookId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> ProjectHookId:
        """Create ProjectHookId from string value.

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except ValueError as e:
            raise ValueError(f"Invalid ProjectHookId: {value}") from e
        return cls(value=value)
