"""
LLM-backed résumé tailoring.

• Supports multiple LLM providers (OpenAI GPT models, local Ollama models)
• Every call asks for a single JSON object and normalises it with the
  cleaner, so optional sections always come back as lists.
• Profile parsing and image text extraction are cached in
  <CACHE_DIR>/<kind>/<sha256>.json so the model is queried only once per
  unique input.
• Any transport or parse problem surfaces as AIServiceError.
"""

from __future__ import annotations
import base64, json, re, textwrap
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Tuple

import config
from llm_client import chat
from cleaner import normalise_analysis, normalise_profile, normalise_resume, clamp_score
from schema_resume import (
    ANALYSIS_SCHEMA,
    ANALYSIS_REQUIRED,
    PROFILE_SCHEMA,
    RESUME_SCHEMA,
    RESUME_REQUIRED,
    SCORE_SCHEMA,
    TARGET_SECTIONS,
)
from utils import _sha


class AIServiceError(RuntimeError):
    """The model could not be reached or did not return usable JSON."""


_JSON_FINDER = re.compile(r"\{.*\}", re.S)

_SYSTEM_PROMPT_ANALYSIS = textwrap.dedent(
    f"""\
You are a senior career coach and professional résumé writer.
You receive an applicant's profile, the role they are applying for and a job description.
Output ONLY one valid JSON object (no markdown fences) shaped like this:

{json.dumps(ANALYSIS_SCHEMA, indent=2)}

Rules:
1. jobTitleMismatch: find the main job title stated in the job description and compare it with the
   role the applicant entered. If they differ materially (e.g. "Software Engineer" vs "Senior Full Stack
   Developer") fill userTitle, suggestedTitle (from the posting) and a one-sentence reason. If they are
   the same or trivially different ("Sr." vs "Senior") set jobTitleMismatch to null.
2. tailoredResume.jobTitle MUST be exactly the role the applicant entered.
3. tailoredResume.summary: refine the applicant's own summary towards the role and posting, keeping their
   voice. Write one from their experience if it is empty.
4. Highlight the most relevant experience, use projects and additional experience where they help, and
   weave in missing job-description keywords only where they genuinely fit the applicant's background.
   Never invent experience.
5. workExperience[].responsibilities is a list of bullet strings.
6. atsScore: integer 0-100 for how well the tailored résumé matches the posting.
   atsScoreExplanation: one sentence.
7. qualificationMatches: the 5 strongest matches, quoting the profile and the posting verbatim, each with a
   1-2 sentence explanation of the fit.
8. keywordGaps: the 5 most important terms or phrases, copied verbatim from the posting, that are still
   missing or underrepresented after tailoring, each with why it matters. Skip generic words.
9. keywordGuide: for 3-4 of those gaps, one sentence of guidance and one learning resource
   (title, type Article/Video/Course, url).
"""
)

_SYSTEM_PROMPT_SCORE = textwrap.dedent(
    f"""\
You are an ATS (applicant tracking system) analyst.
Compare the résumé JSON with the job description and output ONLY this JSON object:

{json.dumps(SCORE_SCHEMA)}

atsScore is an integer between 0 and 100; atsScoreExplanation is one sentence.
"""
)

_SYSTEM_PROMPT_INTEGRATE = textwrap.dedent(
    f"""\
You are a résumé editor. Work one keyword into one section of a résumé given as JSON.

- Change ONLY the target section.
- Summary / Work Experience: rephrase the most fitting sentence or bullet so the keyword reads naturally.
  Do not just append the bare keyword.
- Skills: add the keyword to the "skills" list unless it is already there.
- Keep every other field exactly as it is. Omitted fields count as deleted.

Output ONLY the complete updated résumé as one JSON object with this shape:

{json.dumps(RESUME_SCHEMA, indent=2)}
"""
)

_SYSTEM_PROMPT_PROFILE = textwrap.dedent(
    f"""\
You are an expert résumé parser. The input is text copied from a LinkedIn profile PDF.
Output ONLY valid JSON conforming to this schema (no markdown fences):

{json.dumps({k: v for k, v in PROFILE_SCHEMA.items() if k not in ("profilePicture", "roleAppliedFor")}, indent=2)}

- summary: the About section; if longer than 150 words, condense it to about 100 words.
- workExperience: one entry per job with dates as written ("Jan 2020", "Present");
  responsibilities is a single block of text.
- education: put the whole date range as written, e.g. "(2017 - 2021)", into graduationDate.
- certifications: name, issuing organisation and issue date when given.
- Leave anything that is not in the text as an empty string or empty list.
"""
)

_IMAGE_PROMPT = textwrap.dedent(
    """\
The image shows a job posting. Extract ONLY:

**Job Title:** the main position title
**Key Responsibilities:** the duties section ("What you'll do", "Responsibilities", ...)
**Qualifications & Skills:** the requirements section ("Requirements", "Who you are", ...)

Return these three sections as plain text with the headings above and "-" bullets.
No other text from the image and no commentary.
"""
)


def _extract_json(raw: str) -> dict:
    raw = raw.strip().strip("`")
    if raw.startswith("json"):
        raw = raw[4:]
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        if m := _JSON_FINDER.search(raw):
            return json.loads(m.group())
        raise


def _ask(
    system: str,
    user: str,
    *,
    task: str,
    json_mode: bool = True,
    model: str | None = None,
    provider: str | None = None,
    images: List[Tuple[str, str]] | None = None,
) -> Any:
    messages = [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]
    try:
        rsp = chat(
            model=model or (
                config.get_vision_model_for_provider(provider) if images
                else config.get_model_for_provider(provider)
            ),
            messages=messages,
            temperature=config.TASK_TEMPERATURE.get(task),
            json_mode=json_mode,
            images=images,
            provider=provider,
        )
        content = rsp.message.content or ""
        if not json_mode:
            return content.strip()
        data = _extract_json(content)
    except AIServiceError:
        raise
    except Exception as exc:
        raise AIServiceError(f"{task} request failed: {exc}") from exc

    if not isinstance(data, dict):
        raise AIServiceError(f"{task} response is not a JSON object")
    return data


def _require(data: Dict[str, Any], keys, what: str) -> None:
    missing = [k for k in keys if k not in data]
    if missing:
        raise AIServiceError(f"{what} is missing required fields: {', '.join(missing)}")


def _cache_path(kind: str, key: str) -> Path:
    directory = Path(config.CACHE_DIR) / kind
    directory.mkdir(parents=True, exist_ok=True)
    return directory / f"{key}.json"


def _profile_to_text(profile: Dict[str, Any]) -> str:
    p = normalise_profile(profile)
    lines = [
        f"Full Name: {p['fullName']}",
        f"Email: {p['email']}",
        f"Phone: {p['phone']}",
        f"LinkedIn: {p['linkedinUrl']}",
        f"Summary: {p['summary']}",
        f"Has Profile Picture: {'Yes' if p['profilePicture'] else 'No'}",
        "Work Experience:",
    ]
    for exp in p["workExperience"]:
        lines += [
            f"  - Job Title: {exp['jobTitle']}",
            f"    Company: {exp['company']}",
            f"    Dates: {exp['startDate']} - {exp['endDate']}",
            f"    Responsibilities: {exp['responsibilities']}",
        ]
    for title, section in (("Projects", "projects"), ("Additional Experience", "additionalExperience")):
        lines.append(f"{title}:")
        for item in p[section]:
            lines += [
                f"  - Title: {item['title']}",
                f"    Date: {item['date']}",
                f"    Description: {item['description']}",
            ]
    lines.append("Education:")
    for edu in p["education"]:
        lines += [
            f"  - Institution: {edu['institution']}",
            f"    Degree: {edu['degree']}",
            f"    Field of Study: {edu['fieldOfStudy']}",
            f"    Graduation Date: {edu['graduationDate']}",
        ]
    lines.append(f"Skills: {', '.join(p['skills'])}")
    lines.append("Certifications:")
    for cert in p["certifications"]:
        lines.append(f"  - {cert['name']} | {cert['issuingOrganization']} | {cert['date']}")
    lines.append("References:")
    for ref in p["references"]:
        lines.append(f"  - {ref['name']} | {ref['title']} | {ref['company']} | {ref['phone']} | {ref['email']}")
    return "\n".join(lines)


def generate_analysis(
    profile: Dict[str, Any],
    job_description: str,
    role_title: str,
    template: str,
    model: str | None = None,
    provider: str | None = None,
) -> Dict[str, Any]:
    """Tailored résumé plus ATS analysis for one profile / job pair."""
    user = textwrap.dedent(
        """\
APPLICANT PROFILE:
---
{profile}
---
ROLE APPLIED FOR:
---
{role}
---
JOB DESCRIPTION:
---
{job}
---
The résumé will be shown with the "{template}" layout."""
    ).format(profile=_profile_to_text(profile), role=role_title, job=job_description, template=template)

    data = _ask(_SYSTEM_PROMPT_ANALYSIS, user, task="generate", model=model, provider=provider)
    _require(data, ANALYSIS_REQUIRED, "Analysis")
    if not isinstance(data["tailoredResume"], dict):
        raise AIServiceError("Analysis has no résumé object")
    _require(data["tailoredResume"], RESUME_REQUIRED, "Tailored résumé")
    try:
        return normalise_analysis(data)
    except ValueError as exc:
        raise AIServiceError(str(exc)) from exc


def recalculate_ats_score(
    document: Dict[str, Any], job_description: str,
    model: str | None = None, provider: str | None = None,
) -> Dict[str, Any]:
    user = f"RÉSUMÉ:\n---\n{json.dumps(document)}\n---\nJOB DESCRIPTION:\n---\n{job_description}\n---"
    data = _ask(_SYSTEM_PROMPT_SCORE, user, task="score", model=model, provider=provider)
    _require(data, ("atsScore",), "ATS score")
    try:
        score = clamp_score(data["atsScore"])
    except ValueError as exc:
        raise AIServiceError(str(exc)) from exc
    return {"atsScore": score, "atsScoreExplanation": str(data.get("atsScoreExplanation") or "")}


def settings_scorer(settings: Mapping[str, Any]) -> Callable[[Dict[str, Any], str], Dict[str, Any]]:
    """Scorer reading ``selected_model`` / ``selected_provider`` from `settings` at call time."""
    def score(document: Dict[str, Any], job_description: str) -> Dict[str, Any]:
        return recalculate_ats_score(
            document, job_description,
            model=settings.get("selected_model"),
            provider=settings.get("selected_provider"),
        )
    return score


def integrate_keyword(
    document: Dict[str, Any], keyword: str, target_section: str,
    model: str | None = None, provider: str | None = None,
) -> Dict[str, Any]:
    if target_section not in TARGET_SECTIONS:
        raise ValueError(f"Unknown target section: {target_section}")
    user = (
        f'KEYWORD: "{keyword}"\nTARGET SECTION: "{target_section}"\n'
        f"RÉSUMÉ JSON:\n---\n{json.dumps(document, indent=2)}\n---"
    )
    data = _ask(_SYSTEM_PROMPT_INTEGRATE, user, task="integrate", model=model, provider=provider)
    _require(data, RESUME_REQUIRED, "Updated résumé")
    return normalise_resume(data)


def extract_text_from_image(
    image_bytes: bytes, mime_type: str, model: str | None = None, provider: str | None = None
) -> str:
    """Job-description text read off a screenshot or photo."""
    cache_path = _cache_path("images", _sha(image_bytes))
    if cache_path.exists():
        return json.loads(cache_path.read_text())["text"]

    image = (base64.b64encode(image_bytes).decode("ascii"), mime_type)
    text = _ask(
        "You are an HR assistant who reads job postings.",
        _IMAGE_PROMPT,
        task="extract",
        json_mode=False,
        model=model,
        provider=provider,
        images=[image],
    )
    if not text:
        raise AIServiceError("No text could be extracted from the image")

    cache_path.write_text(json.dumps({"text": text}, ensure_ascii=False))
    return text


def parse_profile_document(
    raw_text: str, model: str | None = None, provider: str | None = None
) -> Dict[str, Any]:
    """Profile fields found in LinkedIn PDF text; missing fields come back empty."""
    cache_path = _cache_path("profiles", _sha(raw_text))
    if cache_path.exists():
        return json.loads(cache_path.read_text())

    data = _ask(_SYSTEM_PROMPT_PROFILE, raw_text, task="parse", model=model, provider=provider)
    profile = normalise_profile(data)
    profile.pop("profilePicture")
    profile.pop("roleAppliedFor")

    cache_path.write_text(json.dumps(profile, ensure_ascii=False, indent=2))
    return profile
