"""
Shared fixtures: a realistic analysis result and fake AI callables.

No test talks to a model; the AI layer is replaced by plain callables or by
monkeypatching ``ai_service.chat``.
"""

import json
from types import SimpleNamespace

import pytest

import config
from ai_service import AIServiceError
from cleaner import normalise_analysis
from result_store import ResultStore

JOB_DESCRIPTION = (
    "Senior Software Engineer. You will build Python services on Kubernetes "
    "and mentor other engineers. Requirements: Python, Kubernetes, Terraform."
)


@pytest.fixture
def raw_analysis():
    return {
        "tailoredResume": {
            "fullName": "Ada Lovelace",
            "jobTitle": "Software Engineer",
            "contact": {"email": "ada@example.com", "phone": "555-0100"},
            "summary": "Engineer who builds reliable Python services.",
            "workExperience": [
                {
                    "jobTitle": "Engineer",
                    "company": "Analytical Engines Ltd",
                    "startDate": "Jan 2020",
                    "endDate": "Present",
                    "responsibilities": ["Built data pipelines", "Ran the on-call rota"],
                }
            ],
            "education": [
                {"institution": "University of London", "degree": "BSc", "fieldOfStudy": "Mathematics",
                 "graduationDate": "2019"}
            ],
            "skills": ["Python", "SQL"],
        },
        "atsScore": 62,
        "atsScoreExplanation": "Solid match, missing infrastructure keywords.",
        "qualificationMatches": [
            {"userQualification": "Built data pipelines", "jobRequirement": "build Python services",
             "explanation": "Both are backend Python work."}
        ],
        "keywordGaps": [
            {"keyword": "Kubernetes", "reason": "Named in the requirements."},
            {"keyword": "Terraform", "reason": "Named in the requirements."},
        ],
        "keywordGuide": [],
        "jobTitleMismatch": {
            "userTitle": "Software Engineer",
            "suggestedTitle": "Senior Software Engineer",
            "reason": "The posting is for a senior role.",
        },
    }


@pytest.fixture
def analysis(raw_analysis):
    return normalise_analysis(raw_analysis)


@pytest.fixture
def store(analysis):
    return ResultStore(analysis)


class RecordingScorer:
    """Stands in for ``ai_service.recalculate_ats_score``."""

    def __init__(self, score=80, explanation="Better match.", error=None, side_effect=None):
        self.score = score
        self.explanation = explanation
        self.error = error
        self.side_effect = side_effect
        self.calls = []

    def __call__(self, document, job_description):
        self.calls.append((document, job_description))
        if self.side_effect:
            self.side_effect()
        if self.error:
            raise self.error
        return {"atsScore": self.score, "atsScoreExplanation": self.explanation}


@pytest.fixture
def scorer():
    return RecordingScorer()


@pytest.fixture
def failing_scorer():
    return RecordingScorer(error=AIServiceError("score request failed: timeout"))


@pytest.fixture
def job_description():
    return JOB_DESCRIPTION


@pytest.fixture
def cache_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "CACHE_DIR", str(tmp_path / "cache"))
    return tmp_path / "cache"


class FakeChat:
    """Replaces ``ai_service.chat``; answers with queued replies and records requests."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.requests = []

    def __call__(self, model, messages, *, temperature=None, json_mode=False, images=None, provider=None):
        self.requests.append(
            {"model": model, "messages": messages, "temperature": temperature,
             "json_mode": json_mode, "images": images, "provider": provider}
        )
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if not isinstance(reply, str):
            reply = json.dumps(reply)
        return SimpleNamespace(message=SimpleNamespace(content=reply))


@pytest.fixture
def fake_chat(monkeypatch):
    def install(*replies):
        fake = FakeChat(*replies)
        monkeypatch.setattr("ai_service.chat", fake)
        return fake
    return install


@pytest.fixture
def make_scorer():
    return RecordingScorer
