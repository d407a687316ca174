from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PatchPolicy:
    """Configuration for patch_where / patch_where_input."""

    remove: int
    max_applications: int | None = None

    def __post_init__(self) -> None:
        if self.remove < 0:
            raise ValueError("PatchPolicy.remove must be >= 0")
        if self.max_applications is not None and self.max_applications < 0:
            raise ValueError("PatchPolicy.max_applications must be >= 0")

    @property
    def disabled(self) -> bool:
        return self.max_applications == 0


__all__ = ("PatchPolicy",)
