"""
Résumé document → HTML, plain text and PDF.

The four layouts live in app/templates/<name>.html. Rendering is read-only:
each text element carries a ``data-path`` naming the document field it
shows, and edits go back through the edit session, never into the HTML.
"""
from __future__ import annotations
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Iterator, List, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape
from xhtml2pdf import pisa

from document import Path as FieldPath, format_path, iter_field_paths
from schema_resume import TEMPLATES

env = Environment(loader=FileSystemLoader(Path(__file__).parent / "templates"),
                  autoescape=select_autoescape(["html"]),
                  trim_blocks=True, lstrip_blocks=True)
env.globals["path"] = lambda *parts: format_path(parts)

SECTION_TITLES = {
    "fullName": "Name",
    "jobTitle": "Job Title",
    "contact": "Contact",
    "summary": "Summary",
    "workExperience": "Work Experience",
    "education": "Education",
    "skills": "Skills",
    "certifications": "Certifications",
    "references": "References",
    "projects": "Projects",
    "additionalExperience": "Additional Experience",
    "additionalInfo": "Additional Information",
}

FIELD_LABELS = {
    "linkedinUrl": "LinkedIn",
    "jobTitle": "Job Title",
    "startDate": "Start Date",
    "endDate": "End Date",
    "fieldOfStudy": "Field of Study",
    "graduationDate": "Graduation Date",
    "issuingOrganization": "Issuer",
}


class ExportError(RuntimeError):
    pass


def render_resume(document: Dict[str, Any], template: str = "professional",
                  profile_picture: str | None = None) -> str:
    """Render résumé → HTML for one of the four layouts."""
    if template not in TEMPLATES:
        raise ValueError(f"Unsupported template: {template}")
    return env.get_template(f"{template}.html").render(
        r=document, picture=profile_picture
    )


def _label(path: FieldPath) -> str:
    section = path[0]
    bits = [SECTION_TITLES.get(section, section)]
    for key in path[1:]:
        if isinstance(key, int):
            bits.append(f"#{key + 1}")
        else:
            bits.append(FIELD_LABELS.get(key, key[:1].upper() + key[1:]))
    return " · ".join(bits)


def editable_fields(document: Dict[str, Any]) -> Iterator[Tuple[str, List[Tuple[FieldPath, str, str]]]]:
    """Group every text field by section: ``(section_title, [(path, label, value), ...])``.

    Sections with nothing in them are skipped.
    """
    groups: Dict[str, List[Tuple[FieldPath, str, str]]] = {}
    for path, value in iter_field_paths(document):
        groups.setdefault(path[0], []).append((path, _label(path), value))
    for section, title in SECTION_TITLES.items():
        if groups.get(section):
            yield title, groups[section]


def to_plain_text(r: Dict[str, Any]) -> str:
    """Clipboard-friendly text version of the résumé."""
    c = r["contact"]
    contact = " | ".join(x for x in (c["email"], c["phone"], c["website"]) if x)
    out = [r["fullName"], r["jobTitle"], "", "Contact:", contact]
    if c["address"]:
        out.append(c["address"])
    out += ["", "--- SUMMARY ---", r["summary"], "", "--- WORK EXPERIENCE ---"]
    for exp in r["workExperience"]:
        out += ["", f"{exp['jobTitle'].upper()} | {exp['company']}", f"{exp['startDate']} - {exp['endDate']}"]
        out += [f"- {line}" for line in exp["responsibilities"]]
    if r["projects"]:
        out += ["", "--- PROJECTS ---"]
        for p in r["projects"]:
            out += ["", f"{p['title']} ({p['date']})" if p["date"] else p["title"], p["description"]]
    out += ["", "--- EDUCATION ---"]
    for edu in r["education"]:
        degree = edu["degree"] + (f" in {edu['fieldOfStudy']}" if edu["fieldOfStudy"] else "")
        out += ["", degree, f"{edu['institution']} | {edu['graduationDate']}"]
    out += ["", "--- SKILLS ---", ", ".join(r["skills"])]
    if r["certifications"]:
        out += ["", "--- CERTIFICATIONS ---"]
        out += [" - ".join(x for x in (ct["name"], ct["issuingOrganization"], ct["date"]) if x)
                for ct in r["certifications"]]
    if r["additionalInfo"]:
        out += ["", "--- ADDITIONAL INFORMATION ---"]
        out += [f"{info['title'].upper()}: {info['details']}" for info in r["additionalInfo"]]
    return "\n".join(out) + "\n"


def to_pdf(html: str) -> bytes:
    """Convert a rendered résumé to PDF bytes."""
    buffer = BytesIO()
    status = pisa.CreatePDF(html, dest=buffer, encoding="utf-8")
    if status.err:
        raise ExportError(f"PDF creation failed with {status.err} error(s)")
    return buffer.getvalue()


def pdf_filename(document: Dict[str, Any]) -> str:
    name = "_".join((document.get("fullName") or "Resume").split())
    return f"{name}_Resume.pdf"


def score_band(score: int) -> str:
    """Colour band for the ATS score header."""
    if score > 75:
        return "green"
    if score > 50:
        return "yellow"
    return "red"
