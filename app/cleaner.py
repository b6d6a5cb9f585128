"""
Shared clean-ups and schema normalisation.

Everything the model returns passes through here before the rest of the app
sees it, so templates and the editor can rely on every key being present.
"""
from __future__ import annotations
import copy, re
from typing import List, Dict, Any

from schema_resume import (
    RESUME_SCHEMA,
    ENTRY_SCHEMAS,
    PROFILE_SCHEMA,
    PROFILE_ENTRY_SCHEMAS,
)

_BULLETS = re.compile(r"^\s*(?:[•\-–*]|\d+[.)])\s*")

# ───────────────────────────────────────── helpers ──
def split_responsibilities(raw: str | list[str] | None) -> List[str]:
    """Turn a responsibilities block into bullet strings."""
    if raw is None:
        return []
    if isinstance(raw, list):
        return [str(x).strip() for x in raw if x and str(x).strip()]
    lines = [_BULLETS.sub("", ln).strip() for ln in str(raw).splitlines()]
    lines = [ln for ln in lines if ln]
    if len(lines) == 1:
        # single paragraph: break on sentence ends
        lines = [s.strip() for s in re.split(r"(?<=\.)\s+", lines[0]) if s.strip()]
    return lines

def join_responsibilities(raw: str | list[str] | None) -> str:
    if isinstance(raw, list):
        return "\n".join(f"- {x}" for x in raw if x)
    return raw or ""

def dedupe_skills(skills: List[str]) -> List[str]:
    """Drop repeated skills (case-insensitive), keeping the first spelling."""
    seen, out = set(), []
    for s in skills:
        key = s.strip().lower()
        if key and key not in seen:
            seen.add(key)
            out.append(s.strip())
    return out

def clamp_score(value: Any) -> int:
    try:
        score = int(round(float(value)))
    except (TypeError, ValueError):
        raise ValueError(f"ATS score is not a number: {value!r}")
    return max(0, min(100, score))

def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)

def _record(raw: Any, template: Dict[str, Any]) -> Dict[str, Any]:
    raw = raw if isinstance(raw, dict) else {}
    out = {}
    for key, default in template.items():
        if isinstance(default, list):
            out[key] = split_responsibilities(raw.get(key))
        else:
            out[key] = _text(raw.get(key))
    return out

def _records(raw: Any, template: Dict[str, Any]) -> List[Dict[str, Any]]:
    if not isinstance(raw, list):
        return []
    return [_record(item, template) for item in raw if isinstance(item, dict)]

def _strings(raw: Any) -> List[str]:
    if isinstance(raw, str):
        raw = [s for s in re.split(r"[,\n]", raw)]
    if not isinstance(raw, list):
        return []
    return [_text(s).strip() for s in raw if _text(s).strip()]

# ───────────────────────────────────────── normalisers ──
def normalise_resume(r: Dict[str, Any]) -> Dict[str, Any]:
    """Fully-populated copy of a tailored resume; absent arrays become []."""
    out = {
        "fullName": _text(r.get("fullName")),
        "jobTitle": _text(r.get("jobTitle")),
        "contact": _record(r.get("contact"), RESUME_SCHEMA["contact"]),
        "summary": _text(r.get("summary")),
        "skills": _strings(r.get("skills")),
    }
    for section, template in ENTRY_SCHEMAS.items():
        out[section] = _records(r.get(section), template)
    # keep schema key order so JSON round-trips look the same
    return {key: out[key] for key in RESUME_SCHEMA}

def normalise_analysis(a: Dict[str, Any]) -> Dict[str, Any]:
    mismatch = a.get("jobTitleMismatch")
    if isinstance(mismatch, dict) and mismatch.get("suggestedTitle"):
        mismatch = _record(mismatch, {"userTitle": "", "suggestedTitle": "", "reason": ""})
    else:
        mismatch = None

    guide = []
    for item in a.get("keywordGuide") or []:
        if not isinstance(item, dict):
            continue
        guide.append({
            "keyword": _text(item.get("keyword")),
            "guidance": _text(item.get("guidance")),
            "resource": _record(item.get("resource"), {"title": "", "type": "", "url": ""}),
        })

    return {
        "tailoredResume": normalise_resume(a.get("tailoredResume") or {}),
        "atsScore": clamp_score(a.get("atsScore")),
        "atsScoreExplanation": _text(a.get("atsScoreExplanation")),
        "qualificationMatches": _records(
            a.get("qualificationMatches"),
            {"userQualification": "", "jobRequirement": "", "explanation": ""},
        ),
        "keywordGaps": [g for g in _records(a.get("keywordGaps"), {"keyword": "", "reason": ""}) if g["keyword"]],
        "keywordGuide": guide,
        "jobTitleMismatch": mismatch,
    }

def empty_profile() -> Dict[str, Any]:
    return copy.deepcopy(PROFILE_SCHEMA)

def empty_entry(section: str) -> Dict[str, Any]:
    return copy.deepcopy(PROFILE_ENTRY_SCHEMAS[section])

def normalise_profile(p: Dict[str, Any] | None) -> Dict[str, Any]:
    """Profile with every key present; responsibilities kept as one text block."""
    p = p or {}
    out = empty_profile()
    for key in ("fullName", "email", "phone", "linkedinUrl", "summary", "roleAppliedFor"):
        out[key] = _text(p.get(key))
    out["profilePicture"] = p.get("profilePicture") or None
    out["skills"] = _strings(p.get("skills"))
    for section, template in PROFILE_ENTRY_SCHEMAS.items():
        if section not in out:
            continue
        rows = []
        for item in p.get(section) or []:
            if not isinstance(item, dict):
                continue
            row = {k: _text(item.get(k)) for k in template if k != "responsibilities"}
            if "responsibilities" in template:
                row["responsibilities"] = join_responsibilities(item.get("responsibilities"))
            rows.append({k: row[k] for k in template})
        out[section] = rows
    return out

def merge_profile(current: Dict[str, Any], imported: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay non-empty imported values onto the current profile."""
    merged = normalise_profile(current)
    incoming = normalise_profile(imported)
    for key, value in incoming.items():
        if key in ("profilePicture", "roleAppliedFor"):
            continue
        if value:
            merged[key] = value
    return merged
