"""
AI service calls with the model replaced by ``FakeChat``.
"""

import json

import pytest

import ai_service
import config
from ai_service import AIServiceError


def test_generate_analysis_normalises_the_reply(fake_chat, raw_analysis, job_description):
    del raw_analysis["tailoredResume"]["education"][0]["fieldOfStudy"]
    raw_analysis["tailoredResume"]["workExperience"][0]["responsibilities"] = "Built data pipelines.\nRan the on-call rota."
    chat = fake_chat("```json\n" + json.dumps(raw_analysis) + "\n```")

    result = ai_service.generate_analysis(
        {"fullName": "Ada Lovelace", "skills": ["Python"]}, job_description, "Software Engineer", "professional",
    )

    assert result["atsScore"] == 62
    assert result["tailoredResume"]["projects"] == []
    assert result["tailoredResume"]["education"][0]["fieldOfStudy"] == ""
    assert result["tailoredResume"]["workExperience"][0]["responsibilities"] == [
        "Built data pipelines.", "Ran the on-call rota.",
    ]
    request = chat.requests[0]
    assert request["json_mode"]
    assert request["temperature"] == config.TASK_TEMPERATURE["generate"]
    assert request["model"] == config.get_model_for_provider()
    user_message = request["messages"][-1]["content"]
    assert "Full Name: Ada Lovelace" in user_message
    assert job_description in user_message


def test_generate_analysis_missing_required_fields(fake_chat, raw_analysis):
    del raw_analysis["tailoredResume"]["summary"]
    fake_chat(raw_analysis)
    with pytest.raises(AIServiceError, match="summary"):
        ai_service.generate_analysis({}, "job", "role", "professional")


def test_generate_analysis_missing_score(fake_chat, raw_analysis):
    del raw_analysis["atsScore"]
    fake_chat(raw_analysis)
    with pytest.raises(AIServiceError, match="atsScore"):
        ai_service.generate_analysis({}, "job", "role", "professional")


def test_transport_errors_become_service_errors(fake_chat):
    fake_chat(ConnectionError("connection refused"))
    with pytest.raises(AIServiceError, match="connection refused"):
        ai_service.recalculate_ats_score({"fullName": "Ada"}, "job")


def test_unparseable_reply(fake_chat):
    fake_chat("I cannot help with that.")
    with pytest.raises(AIServiceError):
        ai_service.recalculate_ats_score({"fullName": "Ada"}, "job")


def test_json_array_reply_is_rejected(fake_chat):
    fake_chat("[1, 2, 3]")
    with pytest.raises(AIServiceError, match="not a JSON object"):
        ai_service.recalculate_ats_score({"fullName": "Ada"}, "job")


def test_recalculate_ats_score(fake_chat, analysis):
    chat = fake_chat('Here you go: {"atsScore": "88", "atsScoreExplanation": "Strong."}')
    assert ai_service.recalculate_ats_score(analysis["tailoredResume"], "job", model="gpt-4o") == {
        "atsScore": 88, "atsScoreExplanation": "Strong.",
    }
    assert chat.requests[0]["model"] == "gpt-4o"
    assert chat.requests[0]["temperature"] == config.TASK_TEMPERATURE["score"]


def test_provider_travels_with_the_request(fake_chat, analysis, cache_dir, monkeypatch):
    monkeypatch.setattr(config, "LLM_PROVIDER", "openai")
    chat = fake_chat({"atsScore": 70}, "Platform Engineer")

    ai_service.recalculate_ats_score(analysis["tailoredResume"], "job", provider="ollama")
    ai_service.extract_text_from_image(b"ollama png", "image/png", provider="ollama")

    assert [r["provider"] for r in chat.requests] == ["ollama", "ollama"]
    assert chat.requests[0]["model"] == config.DEFAULT_MODEL["ollama"]
    assert chat.requests[1]["model"] == config.VISION_MODEL["ollama"]
    assert config.LLM_PROVIDER == "openai"


def test_integrate_keyword(fake_chat, analysis):
    updated = dict(analysis["tailoredResume"], skills=["Python", "SQL", "Kubernetes"])
    del updated["projects"]
    chat = fake_chat(updated)

    document = ai_service.integrate_keyword(analysis["tailoredResume"], "Kubernetes", "Skills")

    assert document["skills"] == ["Python", "SQL", "Kubernetes"]
    assert document["projects"] == []
    assert 'TARGET SECTION: "Skills"' in chat.requests[0]["messages"][-1]["content"]


def test_integrate_keyword_unknown_section(analysis):
    with pytest.raises(ValueError):
        ai_service.integrate_keyword(analysis["tailoredResume"], "Kubernetes", "Hobbies")


def test_image_text_is_cached(fake_chat, cache_dir):
    chat = fake_chat("**Job Title:** Platform Engineer")

    first = ai_service.extract_text_from_image(b"\x89PNG fake", "image/png")
    second = ai_service.extract_text_from_image(b"\x89PNG fake", "image/png")

    assert first == second == "**Job Title:** Platform Engineer"
    assert len(chat.requests) == 1
    request = chat.requests[0]
    assert not request["json_mode"]
    assert request["model"] == config.get_vision_model_for_provider()
    assert request["images"][0][1] == "image/png"
    assert len(list((cache_dir / "images").glob("*.json"))) == 1


def test_image_with_no_text(fake_chat, cache_dir):
    fake_chat("   ")
    with pytest.raises(AIServiceError):
        ai_service.extract_text_from_image(b"blank", "image/jpeg")
    assert not list((cache_dir / "images").glob("*.json"))


def test_parse_profile_document_is_cached(fake_chat, cache_dir):
    chat = fake_chat({
        "fullName": "Ada Lovelace",
        "workExperience": [{"jobTitle": "Engineer", "company": "AEL", "responsibilities": ["Built APIs"]}],
        "education": [{"institution": "UoL", "graduationDate": "(2015 - 2019)"}],
    })

    profile = ai_service.parse_profile_document("Ada Lovelace\nEngineer at AEL")
    again = ai_service.parse_profile_document("Ada Lovelace\nEngineer at AEL")

    assert again == profile
    assert len(chat.requests) == 1
    assert profile["fullName"] == "Ada Lovelace"
    assert profile["workExperience"][0]["responsibilities"] == "- Built APIs"
    assert profile["education"][0]["graduationDate"] == "(2015 - 2019)"
    assert profile["certifications"] == []
    assert "profilePicture" not in profile
    assert "roleAppliedFor" not in profile
