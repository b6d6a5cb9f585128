# canonical schemas (empty lists – no placeholders)
# key names follow the JSON the model is asked to return

CONTACT_SCHEMA = {"email": "", "phone": "", "website": "", "address": "", "linkedinUrl": ""}

# one empty record per array section; `skills` is a list of plain strings
ENTRY_SCHEMAS = {
    "workExperience": {"jobTitle": "", "company": "", "startDate": "", "endDate": "", "responsibilities": []},
    "education": {"institution": "", "degree": "", "fieldOfStudy": "", "graduationDate": ""},
    "certifications": {"name": "", "issuingOrganization": "", "date": ""},
    "references": {"name": "", "title": "", "company": "", "phone": "", "email": ""},
    "projects": {"title": "", "date": "", "description": ""},
    "additionalExperience": {"title": "", "date": "", "description": ""},
    "additionalInfo": {"title": "", "details": ""},
}

RESUME_SCHEMA = {
    "fullName": "",
    "jobTitle": "",
    "contact": CONTACT_SCHEMA,
    "summary": "",
    "workExperience": [],
    "education": [],
    "skills": [],
    "certifications": [],
    "references": [],
    "projects": [],
    "additionalExperience": [],
    "additionalInfo": [],
}

# the model must always send these; everything else may be filled in locally
RESUME_REQUIRED = ("fullName", "jobTitle", "contact", "summary", "workExperience", "education", "skills")

ANALYSIS_SCHEMA = {
    "tailoredResume": RESUME_SCHEMA,
    "atsScore": 0,
    "atsScoreExplanation": "",
    "qualificationMatches": [{"userQualification": "", "jobRequirement": "", "explanation": ""}],
    "keywordGaps": [{"keyword": "", "reason": ""}],
    "keywordGuide": [{
        "keyword": "",
        "guidance": "",
        "resource": {"title": "", "type": "Article | Video | Course", "url": ""},
    }],
    "jobTitleMismatch": {"userTitle": "", "suggestedTitle": "", "reason": ""},
}

ANALYSIS_REQUIRED = ("tailoredResume", "atsScore", "atsScoreExplanation")

SCORE_SCHEMA = {"atsScore": 0, "atsScoreExplanation": ""}

# profile entries as the wizard form edits them; responsibilities is one text block
PROFILE_ENTRY_SCHEMAS = {
    **ENTRY_SCHEMAS,
    "workExperience": {"jobTitle": "", "company": "", "startDate": "", "endDate": "", "responsibilities": ""},
}

PROFILE_SCHEMA = {
    "fullName": "",
    "email": "",
    "phone": "",
    "linkedinUrl": "",
    "summary": "",
    "roleAppliedFor": "",
    "profilePicture": None,
    "workExperience": [],
    "education": [],
    "skills": [],
    "certifications": [],
    "references": [],
    "projects": [],
    "additionalExperience": [],
}

PROFILE_SECTIONS = (
    "workExperience", "education", "certifications", "references", "projects", "additionalExperience",
)

TEMPLATES = ("professional", "creative", "elegant", "minimalist")

TARGET_SECTIONS = ("Summary", "Work Experience", "Skills")
