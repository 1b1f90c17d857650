"""Entity models for projects, guidelines, reviews and review comments.

Records reference each other by id only. Ownership is resolved by explicit
store queries keyed on (id, owner_id), never by walking back-references.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string with second precision."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class CommentRole(str, Enum):
    USER = "USER"
    AI = "AI"


@dataclass
class User:
    id: int
    email: str


@dataclass
class Project:
    id: int
    name: str
    language: str
    created_at: str  # ISO-8601 UTC timestamp
    owner_id: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CustomGuideline:
    """A free-text rule injected verbatim into every review prompt of its project."""

    id: int
    rule_text: str
    project_id: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Review:
    """A code snapshot and the model's reply to it.

    Created pending (llm_response is None) and completed exactly once.
    """

    id: int
    timestamp: str  # ISO-8601 UTC timestamp
    code_snapshot: str
    project_id: int
    user_id: int
    llm_response: str | None = None
    effort_estimation: str | None = None

    @property
    def pending(self) -> bool:
        return self.llm_response is None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ReviewComment:
    """One message in the follow-up conversation attached to a review."""

    id: int
    message: str
    role: CommentRole
    timestamp: str  # ISO-8601 UTC timestamp
    review_id: int
    user_id: int

    def to_dict(self) -> dict:
        d = asdict(self)
        d["role"] = self.role.value
        return d
