"""
Working copy vs canonical document: edits stay local until the field
loses focus, and each commit re-scores exactly once.
"""

import pytest

import ai_service
from ai_service import AIServiceError
from document import get_at_path, set_at_path
from edit_session import EditSession
from result_store import ResultStore


@pytest.fixture
def session(store, scorer, job_description):
    return EditSession(store, job_description, scorer=scorer)


def test_three_edits_then_blur_scores_once(session, store, scorer, job_description):
    original = store.document

    for text in ("S", "Senior", "Senior Engineer"):
        session.on_field_change(("jobTitle",), text)

    # nothing reaches the canonical result while typing
    assert store.document is original
    assert scorer.calls == []
    assert session.value(("jobTitle",)) == "Senior Engineer"
    assert session.dirty

    assert session.on_field_commit()

    assert len(scorer.calls) == 1
    scored_document, job = scorer.calls[0]
    assert scored_document["jobTitle"] == "Senior Engineer"
    assert job == job_description
    assert store.document["jobTitle"] == "Senior Engineer"
    assert store.result["atsScore"] == 80
    assert not store.score_stale
    assert not session.dirty


def test_blur_without_change_does_nothing(session, store, scorer):
    before = store.result
    assert not session.on_field_commit()
    assert scorer.calls == []
    assert store.result is before


def test_typing_the_same_text_is_not_a_change(session, scorer):
    session.on_field_change(("fullName",), "Ada Lovelace")
    assert not session.dirty
    assert not session.on_field_commit()
    assert scorer.calls == []


def test_edit_reverted_before_blur_is_not_committed(session, store, scorer):
    original = store.document
    session.on_field_change(("summary",), "Something else")
    session.on_field_change(("summary",), original["summary"])

    assert not session.on_field_commit()
    assert scorer.calls == []
    assert store.document is original
    assert not store.score_stale


def test_edits_across_fields_commit_together(session, store, scorer):
    original = store.document
    session.on_field_change(("summary",), "Python and Kubernetes engineer.")
    session.on_field_change(("workExperience", 0, "responsibilities", 1), "Led the on-call rota")
    session.on_field_commit()

    assert len(scorer.calls) == 1
    assert store.document["summary"] == "Python and Kubernetes engineer."
    assert store.document["workExperience"][0]["responsibilities"][1] == "Led the on-call rota"
    # untouched sections are shared with the original
    assert store.document["education"] is original["education"]


@pytest.mark.parametrize(
    "path, text",
    [
        (("workExperience", 0, "responsibilities", 0), "Built reusable <Header> and <Footer> components in React"),
        (("jobTitle",), "Engineer (R&amp;D)"),
        (("summary",), "Cut CO₂ by 10 m² ™ "),
    ],
)
def test_typed_text_is_committed_verbatim(session, store, path, text):
    session.on_field_change(path, text)
    assert session.on_field_commit()

    assert get_at_path(store.document, path) == text
    assert store.document == session.working_copy


def test_failed_scoring_keeps_the_edit(store, failing_scorer, job_description):
    session = EditSession(store, job_description, scorer=failing_scorer)
    session.on_field_change(("jobTitle",), "Senior Engineer")

    with pytest.raises(AIServiceError):
        session.on_field_commit()

    assert store.document["jobTitle"] == "Senior Engineer"
    assert store.result["atsScore"] == 62
    assert store.score_stale
    assert not session.dirty


def test_working_copy_reseeds_when_canonical_changes(session, store):
    session.on_field_change(("summary",), "draft")
    replacement = set_at_path(store.document, ("jobTitle",), "Senior Software Engineer")
    store.update(store.token, lambda prev: {"tailoredResume": replacement}, scored_document=replacement)

    assert session.working_copy is replacement
    assert not session.dirty


def test_working_copy_follows_a_new_analysis(session, store, analysis):
    session.on_field_change(("summary",), "draft")
    fresh = dict(analysis, tailoredResume=set_at_path(analysis["tailoredResume"], ("fullName",), "A. Lovelace"))
    store.load(fresh)

    assert session.value(("fullName",)) == "A. Lovelace"
    assert session.value(("summary",)) == analysis["tailoredResume"]["summary"]


def test_editing_without_a_result_fails(scorer):
    session = EditSession(ResultStore(), "job", scorer=scorer)
    assert session.working_copy is None
    with pytest.raises(RuntimeError):
        session.on_field_change(("jobTitle",), "x")


def test_status_messages_are_reported(store, scorer, job_description):
    messages = []
    session = EditSession(store, job_description, scorer=scorer, status_callback=messages.append)
    session.on_field_change(("summary",), "Updated")
    session.on_field_commit()
    assert messages == ["📊 Recalculating ATS score...", "✅ ATS score updated: 80"]


def test_commits_are_scored_with_the_current_model_choice(store, fake_chat, job_description):
    settings = {"selected_provider": "openai", "selected_model": "gpt-4o-mini"}
    chat = fake_chat({"atsScore": 70}, {"atsScore": 75})
    session = EditSession(store, job_description, scorer=ai_service.settings_scorer(settings))

    session.on_field_change(("jobTitle",), "Senior Engineer")
    session.on_field_commit()
    settings.update(selected_provider="ollama", selected_model="llama3.1:8b")
    session.on_field_change(("jobTitle",), "Staff Engineer")
    session.on_field_commit()

    assert [(r["provider"], r["model"]) for r in chat.requests] == [
        ("openai", "gpt-4o-mini"),
        ("ollama", "llama3.1:8b"),
    ]
    assert store.result["atsScore"] == 75
