"""Prompt construction for reviews and follow-up questions.

Both builders are pure: the same inputs always produce byte-identical text,
so a stored review can be reproduced from its snapshot and guidelines.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from codezen_store.models import CommentRole

if TYPE_CHECKING:
    from codezen_store.models import Review, ReviewComment

FINDING_TYPES = ("bug", "style", "performance", "security")


def build_review_prompt(code: str, language: str, guidelines: Sequence[str]) -> str:
    """Build the review prompt for a code snapshot.

    guidelines are rule texts in insertion order; they are rendered in that
    order and the section is omitted entirely when there are none.
    """
    parts = [
        "You are a senior software engineer performing a professional code review.\n"
        "Analyze the following code and provide structured feedback.\n\n"
    ]

    if guidelines:
        parts.append("IMPORTANT PROJECT-SPECIFIC GUIDELINES:\n")
        parts.extend(f"- {rule}\n" for rule in guidelines)
        parts.append("\n")

    parts.append(f"CODE TO REVIEW:\n```{language}\n{code}\n```\n\n")

    finding_types = "|".join(FINDING_TYPES)
    parts.append(
        f"""CRITICAL INSTRUCTION: You MUST respond with ONLY valid JSON. No text before or after the JSON object.

REQUIRED JSON STRUCTURE (copy this format exactly):
{{
  "summary": "A brief one-sentence overview of the overall code quality and purpose",
  "findings": [
    {{"line": 42, "type": "bug", "message": "Description of the issue", "suggestion": "How to fix it"}},
    {{"line": 15, "type": "performance", "message": "Performance concern", "suggestion": "Optimization suggestion"}}
  ],
  "effort_estimation": "X/10"
}}

Each finding "type" must be one of: {finding_types}.
"line" is an integer line number in the code above.

REVIEW CRITERIA (analyze for):
- Code quality and best practices
- Performance optimizations
- Security vulnerabilities
- Style consistency and maintainability
- Potential bugs and edge cases

EFFORT ESTIMATION GUIDE:
- 1-3/10: Minor style issues, very easy to fix
- 4-6/10: Some bugs or refactoring needed, moderate effort
- 7-9/10: Multiple issues, significant refactoring required
- 10/10: Major rewrite needed

IMPORTANT: Start your response directly with {{ and end with }}. \
No markdown code blocks, no explanations, ONLY the JSON object."""
    )
    return "".join(parts)


def build_chat_prompt(question: str, review: Review, history: Sequence[ReviewComment]) -> str:
    """Build the prompt for a follow-up question about a completed review.

    history holds the comments that precede this question, oldest first.
    """
    parts = [
        "You are an AI code review assistant. "
        "The user is asking a question about a code review you previously performed.\n\n",
        f"ORIGINAL CODE THAT WAS REVIEWED:\n```\n{review.code_snapshot}\n```\n\n",
        f"YOUR PREVIOUS REVIEW:\n{review.llm_response or ''}\n\n",
    ]

    if history:
        parts.append("CONVERSATION HISTORY:\n")
        for comment in history:
            speaker = "User" if comment.role == CommentRole.USER else "You"
            parts.append(f"{speaker}: {comment.message}\n")
        parts.append("\n")

    parts.append(f"USER'S QUESTION:\n{question}\n\n")
    parts.append(
        "Please provide a helpful, clear, and concise answer to the user's question. "
        "Base your response on the code and review above. "
        "If the question asks for code examples or fixes, provide them in a clear format. "
        "Keep your response focused and relevant to the code review context."
    )
    return "".join(parts)
