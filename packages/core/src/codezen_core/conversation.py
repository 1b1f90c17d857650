"""Follow-up questions on a completed review."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from codezen_core.prompts import build_chat_prompt
from codezen_store.models import CommentRole

if TYPE_CHECKING:
    from codezen_core.providers.base import BaseGateway
    from codezen_store.base import BaseStore
    from codezen_store.models import Review, ReviewComment

logger = logging.getLogger(__name__)

CHAT_FALLBACK = "I apologize, but I'm currently unable to answer. Please try again later."


@dataclass
class Exchange:
    """One question/answer pair and the thread it left behind."""

    question: ReviewComment
    answer: ReviewComment
    history: list[ReviewComment] = field(default_factory=list)


class ConversationService:
    def __init__(self, store: BaseStore, gateway: BaseGateway):
        self.store = store
        self.gateway = gateway

    def _resolve(self, review_id: int, project_id: int, user_id: int) -> Review | None:
        project = self.store.get_project(project_id, user_id)
        if project is None:
            return None
        return self.store.get_review(review_id, project.id)

    def ask(self, review_id: int, project_id: int, question: str, user_id: int) -> Exchange | None:
        """Record a question, get the model's answer and record that too.

        Returns None when the project or review is not found for this user.
        A gateway failure is answered with CHAT_FALLBACK.
        """
        review = self._resolve(review_id, project_id, user_id)
        if review is None:
            return None

        history = self.store.list_comments(review.id)
        asked = self.store.append_comment(review.id, user_id, CommentRole.USER, question)

        prompt = build_chat_prompt(question, review, history)
        reply = self.gateway.submit(prompt)
        if reply.ok:
            answer_text = reply.text
        else:
            logger.error("Question on review %d falls back after gateway error: %s", review.id, reply.error.kind.value)
            answer_text = CHAT_FALLBACK

        answered = self.store.append_comment(
            review.id, user_id, CommentRole.AI, answer_text, not_before=asked.timestamp
        )
        return Exchange(question=asked, answer=answered, history=self.store.list_comments(review.id))

    def history(self, review_id: int, project_id: int, user_id: int) -> list[ReviewComment] | None:
        review = self._resolve(review_id, project_id, user_id)
        if review is None:
            return None
        return self.store.list_comments(review.id)
