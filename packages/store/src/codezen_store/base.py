"""Abstract store interface.

Every lookup that takes an owner returns None (or False for deletes) both
when the record does not exist and when it belongs to someone else, so
callers cannot learn whether another user's id is valid. The services in
codezen_core depend on BaseStore, not on a concrete backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codezen_store.models import CommentRole, CustomGuideline, Project, Review, ReviewComment, User


class BaseStore(ABC):
    """Ownership-scoped persistence for projects, guidelines, reviews and comments.

    Persistence failures propagate to the caller; nothing here retries.
    """

    # ------------------------------------------------------------------ #
    # Users                                                                #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def ensure_user(self, email: str) -> User:
        """Return the user registered under email, creating it if needed."""

    # ------------------------------------------------------------------ #
    # Projects                                                             #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def create_project(self, owner_id: int, name: str, language: str) -> Project:
        """Persist a new project owned by owner_id."""

    @abstractmethod
    def list_projects(self, owner_id: int) -> list[Project]:
        """Return the owner's projects, newest first."""

    @abstractmethod
    def get_project(self, project_id: int, owner_id: int) -> Project | None:
        """Return the project if it exists and belongs to owner_id."""

    @abstractmethod
    def delete_project(self, project_id: int, owner_id: int) -> bool:
        """Delete the project with its guidelines, reviews and comments.

        Returns False when nothing owned by owner_id matched.
        """

    # ------------------------------------------------------------------ #
    # Guidelines                                                           #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def add_guideline(self, project_id: int, rule_text: str) -> CustomGuideline:
        """Append a guideline to the project."""

    @abstractmethod
    def list_guidelines(self, project_id: int) -> list[CustomGuideline]:
        """Return the project's guidelines in insertion order."""

    @abstractmethod
    def delete_guideline(self, guideline_id: int, project_id: int) -> bool:
        """Remove one guideline of the project. False if it did not match."""

    # ------------------------------------------------------------------ #
    # Reviews                                                              #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def create_review(self, project_id: int, user_id: int, code_snapshot: str) -> Review:
        """Persist a pending review (no llm_response yet)."""

    @abstractmethod
    def complete_review(self, review_id: int, llm_response: str, effort_estimation: str | None) -> Review | None:
        """Set the reply and estimate of a pending review.

        The write only applies while the review is still pending, so a
        review is completed at most once. Returns the completed review, or
        None when the review is absent or was already completed.
        """

    @abstractmethod
    def list_reviews(self, project_id: int) -> list[Review]:
        """Return the project's reviews, most recent first."""

    @abstractmethod
    def get_review(self, review_id: int, project_id: int) -> Review | None:
        """Return the review if it belongs to project_id."""

    @abstractmethod
    def list_user_reviews(self, user_id: int) -> list[Review]:
        """Return every review submitted by user_id, most recent first."""

    # ------------------------------------------------------------------ #
    # Comments                                                             #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def append_comment(
        self,
        review_id: int,
        user_id: int,
        role: CommentRole,
        message: str,
        not_before: str | None = None,
    ) -> ReviewComment:
        """Append a message to the review's conversation.

        Each comment gets the next sequence number of its review, so
        list_comments() order is strictly the append order. not_before
        clamps the timestamp so a reply never sorts before its question.
        """

    @abstractmethod
    def list_comments(self, review_id: int) -> list[ReviewComment]:
        """Return the review's conversation, oldest first."""

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Optional: subclasses that need cleanup should override this.
        Default is a no-op so callers can always call close() safely.
        """
