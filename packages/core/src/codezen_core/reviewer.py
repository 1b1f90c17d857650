"""Core review orchestration."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from codezen_core.parsing import effort_score, extract_effort_estimation, findings_of, parse_review
from codezen_core.prompts import FINDING_TYPES, build_review_prompt

if TYPE_CHECKING:
    from codezen_core.providers.base import BaseGateway
    from codezen_store.base import BaseStore
    from codezen_store.models import Project, Review

logger = logging.getLogger(__name__)

REVIEW_FALLBACK = (
    "Error: Unable to get a review from the inference service. "
    "Please ensure Ollama is running and try again."
)


class ReviewService:
    """Submits code snapshots for review and reads them back, scoped to their owner.

    Every method taking a user_id returns None when the project (or review)
    does not exist or is not owned by that user; callers must check.
    """

    def __init__(self, store: BaseStore, gateway: BaseGateway):
        self.store = store
        self.gateway = gateway

    def submit_for_review(self, project_id: int, code: str, user_id: int) -> Review | None:
        """Review code against the project's guidelines and return the completed review.

        A gateway failure still completes the review, with REVIEW_FALLBACK
        as its reply and no effort estimate.
        """
        project = self.store.get_project(project_id, user_id)
        if project is None:
            return None
        review = self.begin_review(project, code, user_id)
        return self.complete_review(review, project)

    def begin_review(self, project: Project, code: str, user_id: int) -> Review:
        """Persist the pending review so it is visible before the reply arrives."""
        review = self.store.create_review(project.id, user_id, code)
        logger.info("Review %d pending for project %d", review.id, project.id)
        return review

    def complete_review(self, review: Review, project: Project) -> Review:
        """Call the gateway for a pending review and write its one completion."""
        guidelines = [g.rule_text for g in self.store.list_guidelines(project.id)]
        prompt = build_review_prompt(review.code_snapshot, project.language, guidelines)

        reply = self.gateway.submit(prompt)
        if reply.ok:
            llm_response = reply.text
            effort = extract_effort_estimation(reply.text)
        else:
            logger.error("Review %d falls back after gateway error: %s", review.id, reply.error.kind.value)
            llm_response = REVIEW_FALLBACK
            effort = None

        completed = self.store.complete_review(review.id, llm_response, effort)
        if completed is None:
            # Another writer completed it first; its result stands.
            logger.warning("Review %d was already completed; keeping the stored reply", review.id)
            return self.store.get_review(review.id, project.id)
        logger.info("Review %d completed (effort: %s)", completed.id, completed.effort_estimation)
        return completed

    def list_reviews(self, project_id: int, user_id: int) -> list[Review] | None:
        project = self.store.get_project(project_id, user_id)
        if project is None:
            return None
        return self.store.list_reviews(project.id)

    def list_user_reviews(self, user_id: int) -> list[Review]:
        """Every review the user submitted, across all their projects, most recent first."""
        return self.store.list_user_reviews(user_id)

    def get_review(self, project_id: int, review_id: int, user_id: int) -> Review | None:
        project = self.store.get_project(project_id, user_id)
        if project is None:
            return None
        return self.store.get_review(review_id, project.id)


@dataclass
class ReviewStats:
    """Aggregates over a project's reviews, for the stats command."""

    total: int = 0
    pending: int = 0
    failed: int = 0
    scores: list[int] = field(default_factory=list)
    finding_types: Counter = field(default_factory=Counter)

    @property
    def completed(self) -> int:
        return self.total - self.pending

    @property
    def mean_effort(self) -> float | None:
        if not self.scores:
            return None
        return sum(self.scores) / len(self.scores)


def summarize_reviews(reviews: list[Review]) -> ReviewStats:
    """Count reviews by state, average effort scores and tally finding types.

    Unknown finding types are counted under "other".
    """
    stats = ReviewStats(total=len(reviews))
    for review in reviews:
        if review.pending:
            stats.pending += 1
            continue
        if review.llm_response == REVIEW_FALLBACK:
            stats.failed += 1
            continue
        score = effort_score(review.effort_estimation)
        if score is not None:
            stats.scores.append(score)
        for finding in findings_of(parse_review(review.llm_response)):
            kind = str(finding.get("type", "")).lower()
            stats.finding_types[kind if kind in FINDING_TYPES else "other"] += 1
    return stats
