"""Tests for follow-up conversations on a review."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from codezen_core.conversation import CHAT_FALLBACK, ConversationService
from codezen_core.providers.base import BaseGateway, GatewayErrorKind, GatewayFailure
from codezen_store.models import CommentRole
from codezen_store.sqlite import SQLiteStore


class EchoGateway(BaseGateway):
    """Answers every prompt with a numbered reply."""

    def __init__(self, fail=False):
        self.fail = fail
        self.prompts = []

    def _call_api(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail:
            raise GatewayFailure(GatewayErrorKind.BAD_STATUS, "500")
        return f"answer {len(self.prompts)}"


@pytest.fixture
def store(tmp_path):
    s = SQLiteStore(db_path=str(tmp_path / "test.db"))
    yield s
    s.close()


@pytest.fixture
def setup(store):
    alice = store.ensure_user("alice@example.com")
    bob = store.ensure_user("bob@example.com")
    project = store.create_project(alice.id, "demo", "python")
    review = store.create_review(project.id, alice.id, "def f(): pass")
    review = store.complete_review(review.id, '{"summary": "empty"}', "1/10")
    return alice, bob, project, review


class TestAsk:
    def test_two_questions_produce_ordered_thread(self, store, setup):
        alice, _, project, review = setup
        service = ConversationService(store, EchoGateway())

        service.ask(review.id, project.id, "first?", alice.id)
        service.ask(review.id, project.id, "second?", alice.id)

        comments = store.list_comments(review.id)
        assert [(c.role, c.message) for c in comments] == [
            (CommentRole.USER, "first?"),
            (CommentRole.AI, "answer 1"),
            (CommentRole.USER, "second?"),
            (CommentRole.AI, "answer 2"),
        ]

    def test_returns_both_comments_and_history(self, store, setup):
        alice, _, project, review = setup

        exchange = ConversationService(store, EchoGateway()).ask(review.id, project.id, "why?", alice.id)

        assert exchange.question.role == CommentRole.USER
        assert exchange.question.message == "why?"
        assert exchange.answer.role == CommentRole.AI
        assert exchange.answer.message == "answer 1"
        assert exchange.answer.timestamp >= exchange.question.timestamp
        assert [c.id for c in exchange.history] == [exchange.question.id, exchange.answer.id]

    def test_prompt_uses_history_before_question(self, store, setup):
        alice, _, project, review = setup
        gateway = EchoGateway()
        service = ConversationService(store, gateway)

        service.ask(review.id, project.id, "first?", alice.id)
        service.ask(review.id, project.id, "second?", alice.id)

        first_prompt, second_prompt = gateway.prompts
        assert "CONVERSATION HISTORY" not in first_prompt
        assert "User: first?" in second_prompt
        assert "You: answer 1" in second_prompt
        assert "User: second?" not in second_prompt
        assert "def f(): pass" in second_prompt
        assert '{"summary": "empty"}' in second_prompt

    def test_gateway_failure_answers_with_fallback(self, store, setup):
        alice, _, project, review = setup

        exchange = ConversationService(store, EchoGateway(fail=True)).ask(review.id, project.id, "q", alice.id)

        assert exchange.answer.message == CHAT_FALLBACK
        assert len(store.list_comments(review.id)) == 2

    def test_foreign_user_gets_not_found(self, store, setup):
        _, bob, project, review = setup
        gateway = EchoGateway()

        assert ConversationService(store, gateway).ask(review.id, project.id, "q", bob.id) is None
        assert gateway.prompts == []
        assert store.list_comments(review.id) == []

    def test_missing_review_is_not_found(self, store, setup):
        alice, _, project, _ = setup
        assert ConversationService(store, EchoGateway()).ask(999, project.id, "q", alice.id) is None

    def test_parallel_questions_on_different_reviews(self, store, setup):
        alice, _, project, review = setup
        other = store.create_review(project.id, alice.id, "y = 2")
        store.complete_review(other.id, "{}", None)
        service = ConversationService(store, EchoGateway())

        def ask_twice(review_id):
            service.ask(review_id, project.id, "q1", alice.id)
            service.ask(review_id, project.id, "q2", alice.id)

        with ThreadPoolExecutor(max_workers=2) as pool:
            list(pool.map(ask_twice, [review.id, other.id]))

        for rid in (review.id, other.id):
            comments = store.list_comments(rid)
            assert [c.role for c in comments] == [CommentRole.USER, CommentRole.AI] * 2
            assert [c.message for c in comments if c.role == CommentRole.USER] == ["q1", "q2"]


class TestHistory:
    def test_history_for_owner(self, store, setup):
        alice, _, project, review = setup
        service = ConversationService(store, EchoGateway())
        service.ask(review.id, project.id, "q", alice.id)

        assert [c.message for c in service.history(review.id, project.id, alice.id)] == ["q", "answer 1"]

    def test_history_hidden_from_other_user(self, store, setup):
        alice, bob, project, review = setup
        service = ConversationService(store, EchoGateway())
        service.ask(review.id, project.id, "q", alice.id)

        assert service.history(review.id, project.id, bob.id) is None
