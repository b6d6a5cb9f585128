"""
Keyword integration and job-title fix: change, re-score, then one commit.
"""

import pytest

from ai_service import AIServiceError
from document import set_at_path
import workflows


def fake_integrator(calls=None, add_skill=True, error=None):
    def integrate(document, keyword, target_section):
        if calls is not None:
            calls.append((keyword, target_section))
        if error:
            raise error
        if target_section == "Skills":
            skills = document["skills"] + [keyword] if add_skill else document["skills"]
            return set_at_path(document, ("skills",), skills)
        if target_section == "Summary":
            return set_at_path(document, ("summary",), document["summary"] + f" Runs services on {keyword}.")
        bullets = document["workExperience"][0]["responsibilities"]
        return set_at_path(document, ("workExperience", 0, "responsibilities", 0), f"{bullets[0]} on {keyword}")
    return integrate


def test_keyword_into_skills(store, scorer, job_description):
    calls = []
    applied = workflows.integrate_keyword(
        store, "Kubernetes", "Skills", job_description,
        integrator=fake_integrator(calls), scorer=scorer,
    )

    assert applied
    assert calls == [("Kubernetes", "Skills")]
    assert store.document["skills"] == ["Python", "SQL", "Kubernetes"]
    assert [g["keyword"] for g in store.result["keywordGaps"]] == ["Terraform"]
    assert store.result["atsScore"] == 80
    assert not store.score_stale
    # the score was computed for the updated document
    assert scorer.calls[0][0] is store.document


def test_skills_keyword_added_once_when_model_forgets_it(store, scorer, job_description):
    workflows.integrate_keyword(
        store, "Terraform", "Skills", job_description,
        integrator=fake_integrator(add_skill=False), scorer=scorer,
    )
    assert store.document["skills"].count("Terraform") == 1


def test_skills_keyword_not_duplicated(store, scorer, job_description):
    def doubled(document, keyword, target_section):
        return set_at_path(document, ("skills",), document["skills"] + [keyword, keyword.lower()])

    workflows.integrate_keyword(store, "Terraform", "Skills", job_description, integrator=doubled, scorer=scorer)

    assert [s.lower() for s in store.document["skills"]].count("terraform") == 1


def test_integrating_the_same_skill_twice(store, scorer, job_description):
    for _ in range(2):
        workflows.integrate_keyword(
            store, "Python", "Skills", job_description,
            integrator=fake_integrator(), scorer=scorer,
        )
    assert store.document["skills"].count("Python") == 1
    assert len(scorer.calls) == 2


def test_keyword_into_summary(store, scorer, job_description):
    workflows.integrate_keyword(
        store, "Kubernetes", "Summary", job_description,
        integrator=fake_integrator(), scorer=scorer,
    )
    assert "Kubernetes" in store.document["summary"]
    assert "Kubernetes" not in store.document["skills"]
    assert [g["keyword"] for g in store.result["keywordGaps"]] == ["Terraform"]


def test_keyword_into_work_experience(store, scorer, job_description):
    workflows.integrate_keyword(
        store, "Kubernetes", "Work Experience", job_description,
        integrator=fake_integrator(), scorer=scorer,
    )
    assert store.document["workExperience"][0]["responsibilities"][0].endswith("on Kubernetes")


def test_scoring_failure_leaves_result_untouched(store, failing_scorer, job_description):
    before = store.result
    with pytest.raises(AIServiceError):
        workflows.integrate_keyword(
            store, "Kubernetes", "Skills", job_description,
            integrator=fake_integrator(), scorer=failing_scorer,
        )
    assert store.result is before
    assert len(store.result["keywordGaps"]) == 2
    assert "Kubernetes" not in store.document["skills"]


def test_integration_failure_skips_scoring(store, scorer, job_description):
    before = store.result
    with pytest.raises(AIServiceError):
        workflows.integrate_keyword(
            store, "Kubernetes", "Summary", job_description,
            integrator=fake_integrator(error=AIServiceError("integrate request failed")), scorer=scorer,
        )
    assert scorer.calls == []
    assert store.result is before


def test_reset_while_integrating_drops_the_result(store, make_scorer, job_description):
    scorer = make_scorer(side_effect=store.reset)
    applied = workflows.integrate_keyword(
        store, "Kubernetes", "Skills", job_description,
        integrator=fake_integrator(), scorer=scorer,
    )
    assert not applied
    assert store.result is None


def test_unknown_target_section(store, scorer, job_description):
    with pytest.raises(ValueError):
        workflows.integrate_keyword(
            store, "Kubernetes", "Hobbies", job_description,
            integrator=fake_integrator(), scorer=scorer,
        )
    assert scorer.calls == []


def test_status_messages(store, scorer, job_description):
    messages = []
    workflows.integrate_keyword(
        store, "Kubernetes", "Skills", job_description,
        integrator=fake_integrator(), scorer=scorer, status_callback=messages.append,
    )
    assert messages == ["🧠 Adding 'Kubernetes' to Skills...", "✅ 'Kubernetes' added. New ATS score: 80"]


def test_fix_job_title(store, scorer, job_description):
    applied = workflows.fix_job_title(store, job_description, scorer=scorer)

    assert applied
    assert store.document["jobTitle"] == "Senior Software Engineer"
    assert store.result["jobTitleMismatch"] is None
    assert store.result["atsScore"] == 80
    assert len(scorer.calls) == 1
    assert scorer.calls[0][0]["jobTitle"] == "Senior Software Engineer"
    # gaps are not part of the title fix
    assert len(store.result["keywordGaps"]) == 2


def test_fix_job_title_failure_keeps_mismatch(store, failing_scorer, job_description):
    with pytest.raises(AIServiceError):
        workflows.fix_job_title(store, job_description, scorer=failing_scorer)
    assert store.document["jobTitle"] == "Software Engineer"
    assert store.result["jobTitleMismatch"]["suggestedTitle"] == "Senior Software Engineer"


def test_fix_job_title_without_mismatch(store, scorer, job_description):
    store.update(store.token, lambda prev: {"jobTitleMismatch": None})
    assert not workflows.fix_job_title(store, job_description, scorer=scorer)
    assert scorer.calls == []
