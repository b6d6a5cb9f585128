"""
ATS score reconciliation.

Scores a document against the job description and merges only the score
fields into the canonical result, so edits committed in the meantime stay.
Overlapping calls are not queued: whichever finishes last wins, unless the
analysis was reset or replaced while the call was out.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, NamedTuple, Optional

import ai_service
from cleaner import clamp_score
from result_store import ResultStore

Scorer = Callable[[Dict[str, Any], str], Dict[str, Any]]


class ScoreUpdate(NamedTuple):
    score: int
    explanation: str


def reconcile(document: Dict[str, Any], job_description: str, scorer: Optional[Scorer] = None) -> ScoreUpdate:
    """Score `document`; raises whatever the scorer raises."""
    scorer = scorer or ai_service.recalculate_ats_score
    raw = scorer(document, job_description)
    try:
        return ScoreUpdate(clamp_score(raw["atsScore"]), str(raw.get("atsScoreExplanation") or ""))
    except (KeyError, TypeError, ValueError) as exc:
        raise ai_service.AIServiceError(f"Malformed ATS score response: {raw!r}") from exc


def reconcile_store(
    store: ResultStore,
    job_description: str,
    *,
    scorer: Optional[Scorer] = None,
    status_callback: Callable[[str], None] | None = None,
) -> bool:
    """Re-score the canonical document and merge the new score.

    Returns False when the store moved on to another analysis before the
    score came back.
    """
    token = store.token
    document = store.document
    if document is None:
        return False

    if status_callback:
        status_callback("📊 Recalculating ATS score...")
    update = reconcile(document, job_description, scorer)

    applied = store.update(
        token,
        lambda prev: {"atsScore": update.score, "atsScoreExplanation": update.explanation},
        scored_document=document,
    )
    if applied and status_callback:
        status_callback(f"✅ ATS score updated: {update.score}")
    return applied
