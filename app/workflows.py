"""
Two-step resume fixes offered on the Keyword Gaps tab.

Both follow the same order: change the document through the AI, score the
changed document, then commit document, score and gap bookkeeping in one
store update. Any failure before the commit leaves the result untouched.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Optional

import ai_service
from cleaner import dedupe_skills
from document import set_at_path
from reconciler import Scorer, reconcile
from result_store import ResultStore
from schema_resume import TARGET_SECTIONS

Integrator = Callable[[Dict[str, Any], str, str], Dict[str, Any]]


def _ensure_skill(document: Dict[str, Any], keyword: str) -> Dict[str, Any]:
    skills = dedupe_skills(list(document["skills"]) + [keyword])
    if skills == document["skills"]:
        return document
    return set_at_path(document, ("skills",), skills)


def integrate_keyword(
    store: ResultStore,
    keyword: str,
    target_section: str,
    job_description: str,
    *,
    integrator: Optional[Integrator] = None,
    scorer: Optional[Scorer] = None,
    status_callback: Callable[[str], None] | None = None,
) -> bool:
    """Work `keyword` into `target_section`, re-score, and drop it from the gaps.

    Returns False if the analysis was reset before the answers came back.
    """
    if target_section not in TARGET_SECTIONS:
        raise ValueError(f"Unknown target section: {target_section}")
    integrator = integrator or ai_service.integrate_keyword

    token = store.token
    document = store.document
    if document is None:
        return False

    if status_callback:
        status_callback(f"🧠 Adding '{keyword}' to {target_section}...")
    updated = integrator(document, keyword, target_section)
    if target_section == "Skills":
        updated = _ensure_skill(updated, keyword)

    score = reconcile(updated, job_description, scorer)

    def patch(prev):
        return {
            "tailoredResume": updated,
            "atsScore": score.score,
            "atsScoreExplanation": score.explanation,
            "keywordGaps": [g for g in prev["keywordGaps"] if g["keyword"] != keyword],
        }

    applied = store.update(token, patch, scored_document=updated)
    if applied and status_callback:
        status_callback(f"✅ '{keyword}' added. New ATS score: {score.score}")
    return applied


def fix_job_title(
    store: ResultStore,
    job_description: str,
    *,
    scorer: Optional[Scorer] = None,
    status_callback: Callable[[str], None] | None = None,
) -> bool:
    """Use the job posting's title on the resume and clear the mismatch."""
    token = store.token
    result = store.result
    if result is None or not result.get("jobTitleMismatch"):
        return False

    suggested = result["jobTitleMismatch"]["suggestedTitle"]
    if status_callback:
        status_callback(f"🎯 Changing job title to '{suggested}'...")
    updated = set_at_path(result["tailoredResume"], ("jobTitle",), suggested)

    score = reconcile(updated, job_description, scorer)

    applied = store.update(
        token,
        lambda prev: {
            "tailoredResume": updated,
            "atsScore": score.score,
            "atsScoreExplanation": score.explanation,
            "jobTitleMismatch": None,
        },
        scored_document=updated,
    )
    if applied and status_callback:
        status_callback(f"✅ Job title updated. New ATS score: {score.score}")
    return applied
