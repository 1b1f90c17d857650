"""Best-effort readers for the model's free-form review reply.

The prompt asks for a bare JSON object, but nothing guarantees the model
complies: replies arrive wrapped in markdown fences, preceded by prose, or
cut off mid-object. Every function here tolerates that and returns None
instead of raising.
"""

from __future__ import annotations

import json
import logging
import re

logger = logging.getLogger(__name__)

_EFFORT_KEY = "effort_estimation"

# After the key: an optional closing quote, a colon, then a complete quoted
# string on the same line. A value missing its closing quote does not match.
_EFFORT_VALUE = re.compile(r'"?\s*:\s*"([^"\n]*)"')

_SCORE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*/\s*10\s*$")


def extract_effort_estimation(text: str | None) -> str | None:
    """Return the quoted value following the first `effort_estimation` key that has one.

    Scans the raw text rather than decoding JSON, so an estimate is still
    found in replies that are otherwise malformed. Mentions of the key in
    prose or finding messages are skipped. Returns None when no occurrence
    is followed by a complete quoted value, or anything else goes wrong.
    """
    try:
        if not text:
            return None
        start = text.find(_EFFORT_KEY)
        while start != -1:
            match = _EFFORT_VALUE.match(text, start + len(_EFFORT_KEY))
            if match is not None:
                return match.group(1)
            start = text.find(_EFFORT_KEY, start + len(_EFFORT_KEY))
        logger.debug("No effort_estimation key followed by a quoted value")
        return None
    except Exception as e:
        logger.debug("Effort extraction failed (%s): %s", type(e).__name__, e)
        return None


def effort_score(estimate: str | None) -> int | None:
    """Turn an estimate such as "7/10" into 7; None unless it is N/10 with 1 <= N <= 10."""
    if not estimate:
        return None
    match = _SCORE.match(estimate)
    if match is None:
        return None
    score = round(float(match.group(1)))
    if 1 <= score <= 10:
        return score
    return None


def parse_review(text: str | None) -> dict | None:
    """Decode the review JSON object from a raw reply, or return None.

    Strips an outer ```json ... ``` fence, then falls back to the span between
    the first '{' and the last '}' when the model wrapped the object in prose.
    Used for display and statistics only; the stored reply is always the raw
    text.
    """
    if not text:
        return None
    # Strip only the outer fence, NOT backticks inside string values.
    cleaned = re.sub(r"^```(?:json)?\s*", "", text.strip())
    cleaned = re.sub(r"\s*```$", "", cleaned.strip())
    candidates = [cleaned]
    first, last = cleaned.find("{"), cleaned.rfind("}")
    if 0 <= first < last:
        candidates.append(cleaned[first : last + 1])

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    logger.debug("Could not decode review reply as a JSON object: %s", text[:200])
    return None


def findings_of(parsed: dict | None) -> list[dict]:
    """Return the well-formed findings of a decoded review (dicts only)."""
    if not parsed:
        return []
    findings = parsed.get("findings")
    if not isinstance(findings, list):
        return []
    return [f for f in findings if isinstance(f, dict)]
