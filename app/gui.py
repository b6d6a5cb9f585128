import streamlit as st

# MUST be the first Streamlit command
st.set_page_config(layout="wide", page_title="Resume Tailor")

import copy
import logging
from datetime import datetime
from functools import partial

import streamlit.components.v1 as components

import ai_service
import config
import workflows
from account_store import AccountStore, JsonFileRepository
from ai_service import AIServiceError
from cleaner import empty_entry, merge_profile, normalise_profile
from document import format_path
from edit_session import EditSession
from extractor import ExtractionError, check_image, fetch_image, pdf_to_text
from reconciler import reconcile_store
from render import ExportError, editable_fields, pdf_filename, render_resume, score_band, to_pdf, to_plain_text
from result_store import ResultStore
from schema_resume import PROFILE_SECTIONS, TARGET_SECTIONS, TEMPLATES
from utils import to_data_url

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("gui")

STEPS = ["👤 Profile", "📋 Job", "🎨 Style", "📊 Results"]

# Available models for each provider
MODEL_OPTIONS = {
    "openai": ["gpt-4o-mini", "gpt-4o", "gpt-4-turbo"],
    "ollama": ["llama3.1:8b", "llama3.1:70b", "qwen2.5:14b", "mistral:7b"],
}

TEMPLATE_INFO = {
    "professional": "💼 **Professional**: clean header with a photo, teal section rules",
    "creative": "🎨 **Creative**: dark theme with a sidebar for contact and skills",
    "elegant": "✒️ **Elegant**: serif type with a dark sidebar",
    "minimalist": "◻️ **Minimalist**: one centred column, lots of white space",
}

SECTION_FORMS = {
    "workExperience": ("💼 Work Experience", {
        "jobTitle": "Job Title", "company": "Company", "startDate": "Start Date",
        "endDate": "End Date", "responsibilities": "Responsibilities",
    }),
    "education": ("🎓 Education", {
        "institution": "Institution", "degree": "Degree", "fieldOfStudy": "Field of Study",
        "graduationDate": "Graduation Date",
    }),
    "projects": ("🛠️ Projects", {"title": "Title", "date": "Date", "description": "Description"}),
    "additionalExperience": ("🧭 Additional Experience", {"title": "Title", "date": "Date", "description": "Description"}),
    "certifications": ("📜 Certifications", {"name": "Name", "issuingOrganization": "Issuing Organization", "date": "Date"}),
    "references": ("🤝 References", {"name": "Name", "title": "Title", "company": "Company", "phone": "Phone", "email": "Email"}),
}

LONG_FIELDS = {"responsibilities", "description", "details", "summary"}

BAND_COLOURS = {"green": "#22c55e", "yellow": "#eab308", "red": "#ef4444"}


@st.cache_data(show_spinner=False)
def cached_pdf(html: str) -> bytes:
    return to_pdf(html)


@st.cache_resource
def get_repository() -> JsonFileRepository:
    """One accounts file shared by every browser session."""
    return JsonFileRepository(config.ACCOUNTS_PATH)


# Initialize session state variables
if "accounts" not in st.session_state:
    st.session_state.accounts = AccountStore(get_repository())
if "auth_view" not in st.session_state:
    st.session_state.auth_view = "login"
if "verify_email" not in st.session_state:
    st.session_state.verify_email = None
if "step" not in st.session_state:
    st.session_state.step = 0
if "profile" not in st.session_state:
    st.session_state.profile = normalise_profile(None)
if "job_text" not in st.session_state:
    st.session_state.job_text = ""
if "template" not in st.session_state:
    st.session_state.template = "professional"
# Bumped whenever form rows are added/removed or data is loaded, so widgets rebuild
if "form_rev" not in st.session_state:
    st.session_state.form_rev = 0
if "store" not in st.session_state:
    st.session_state.store = ResultStore()
if "editor" not in st.session_state:
    st.session_state.editor = None
# Job description the current analysis was generated for
if "analysis_job" not in st.session_state:
    st.session_state.analysis_job = ""
if "gap_targets" not in st.session_state:
    st.session_state.gap_targets = {}
# Set by an edit field callback; committed during the next render cycle
if "commit_pending" not in st.session_state:
    st.session_state.commit_pending = False
if "flash" not in st.session_state:
    st.session_state.flash = None
if "show_admin" not in st.session_state:
    st.session_state.show_admin = False
if "selected_provider" not in st.session_state:
    st.session_state.selected_provider = config.LLM_PROVIDER
if "selected_model" not in st.session_state:
    st.session_state.selected_model = config.get_model_for_provider()

accounts: AccountStore = st.session_state.accounts
store: ResultStore = st.session_state.store


def ai_options() -> dict:
    """Model and provider picked in this session's sidebar."""
    return {"model": st.session_state.selected_model, "provider": st.session_state.selected_provider}


def scorer():
    return ai_service.settings_scorer(st.session_state)


def bump_form():
    st.session_state.form_rev += 1


def fail(message: str, exc: Exception):
    logger.error("%s: %s", message, exc)
    st.error(f"❌ {message}: {exc}")


# ─────────────────────────────────────────────────────────── auth ──
def render_auth_page():
    st.title("✂️ Resume Tailor")
    st.markdown("Tailor your résumé to every job posting with AI")

    if st.session_state.auth_view == "verify":
        email = st.session_state.verify_email
        st.subheader("📧 Verify your email")
        st.info(f"We sent a verification link to **{email}**. (Simulated: click below to verify.)")
        col_verify, col_back = st.columns(2)
        if col_verify.button("✅ Verify email", use_container_width=True):
            accounts.verify_user(email)
            st.session_state.auth_view = "login"
            st.session_state.flash = "Email verified. You can log in now."
            st.rerun()
        if col_back.button("↩️ Back to login", use_container_width=True):
            st.session_state.auth_view = "login"
            st.rerun()
        return

    if st.session_state.flash:
        st.success(st.session_state.flash)
        st.session_state.flash = None

    tab_login, tab_signup = st.tabs(["🔑 Log in", "🆕 Sign up"])

    with tab_login:
        with st.form("login_form"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Log in", use_container_width=True)
        if submitted:
            result = accounts.login(email, password)
            if result.success:
                st.session_state.profile = normalise_profile(result.user["profileData"])
                st.session_state.step = 0
                bump_form()
                st.rerun()
            elif result.error == "unverified":
                st.warning("⚠️ Please verify your email before logging in.")
                st.session_state.verify_email = result.user["email"]
                st.session_state.auth_view = "verify"
                st.rerun()
            else:
                st.error("❌ Invalid email or password.")
        st.caption("Demo accounts: admin@app.com / admin, client@app.com / client")

    with tab_signup:
        with st.form("signup_form"):
            email = st.text_input("Email", key="signup_email")
            password = st.text_input("Password", type="password", key="signup_password")
            submitted = st.form_submit_button("Create account", use_container_width=True)
        if submitted:
            if not email.strip() or not password:
                st.error("❌ Email and password are required.")
            else:
                result = accounts.signup(email, password)
                if result.success:
                    st.session_state.verify_email = result.user["email"]
                    st.session_state.auth_view = "verify"
                    st.rerun()
                else:
                    st.error("❌ An account with this email already exists.")


def render_admin_dashboard():
    st.subheader("🛡️ Admin Dashboard")
    users = accounts.list_users()
    col1, col2, col3 = st.columns(3)
    col1.metric("👥 Users", len(users))
    col2.metric("✅ Verified", sum(1 for u in users if u["isVerified"]))
    col3.metric("🛡️ Admins", sum(1 for u in users if u["role"] == "Admin"))
    st.dataframe(
        [
            {
                "Email": u["email"],
                "Name": u["profileData"].get("fullName", ""),
                "Role": u["role"],
                "Verified": u["isVerified"],
                "Templates": len(u.get("templates") or []),
            }
            for u in users
        ],
        use_container_width=True,
    )


# ─────────────────────────────────────────────────────────── sidebar ──
def render_sidebar(user):
    with st.sidebar:
        st.markdown(f"**{user['profileData'].get('fullName') or user['email']}**")
        st.caption(f"{user['email']} · {user['role']}")
        if st.button("🚪 Log out", use_container_width=True):
            accounts.logout()
            store.reset()
            st.session_state.editor = None
            st.session_state.step = 0
            st.session_state.profile = normalise_profile(None)
            st.session_state.job_text = ""
            st.rerun()
        if user["role"] == "Admin":
            st.session_state.show_admin = st.toggle("🛡️ Admin dashboard", value=st.session_state.show_admin)

        st.divider()
        st.markdown("### 🤖 AI Model")
        providers = list(MODEL_OPTIONS)
        provider = st.selectbox(
            "Provider",
            options=providers,
            index=providers.index(st.session_state.selected_provider)
            if st.session_state.selected_provider in providers else 0,
            help="OpenAI API or a local Ollama server",
        )
        if provider != st.session_state.selected_provider:
            st.session_state.selected_provider = provider
            st.session_state.selected_model = MODEL_OPTIONS[provider][0]
        options = MODEL_OPTIONS[provider]
        st.session_state.selected_model = st.selectbox(
            "Model",
            options=options,
            index=options.index(st.session_state.selected_model)
            if st.session_state.selected_model in options else 0,
        )


def render_stepper():
    cols = st.columns(len(STEPS))
    for i, (col, label) in enumerate(zip(cols, STEPS)):
        if i == st.session_state.step:
            col.markdown(f"**▶ {label}**")
        else:
            col.markdown(f"<span style='color:#888'>{label}</span>", unsafe_allow_html=True)
    st.divider()


def nav_buttons(back: bool = True, next_label: str | None = "Next ➡️") -> bool:
    """Back/next row; returns True when next was clicked."""
    col_back, _, col_next = st.columns([1, 3, 1])
    if back and col_back.button("⬅️ Back", use_container_width=True):
        st.session_state.step -= 1
        st.rerun()
    if next_label:
        return col_next.button(next_label, type="primary", use_container_width=True)
    return False


# ─────────────────────────────────────────────────────────── step 1: profile ──
def render_linkedin_import(profile):
    with st.expander("📥 Import from LinkedIn PDF"):
        st.caption("On LinkedIn: More → Save to PDF, then upload the file here.")
        upload = st.file_uploader("LinkedIn profile PDF", type="pdf", key=f"li-{st.session_state.form_rev}")
        if st.button("Import", disabled=upload is None):
            with st.spinner("🔍 Reading your LinkedIn profile with AI..."):
                try:
                    text = pdf_to_text(upload.getvalue())
                    parsed = ai_service.parse_profile_document(text, **ai_options())
                except (ExtractionError, AIServiceError) as e:
                    fail("LinkedIn import failed", e)
                    return
            st.session_state.profile = merge_profile(profile, parsed)
            st.session_state.flash = "✅ Profile imported from LinkedIn. Review the fields below."
            bump_form()
            st.rerun()


def render_saved_templates(profile, user):
    with st.expander("💾 Saved profile templates"):
        templates = user.get("templates") or []
        col_pick, col_load = st.columns([3, 1])
        if templates:
            names = [t["name"] for t in templates]
            chosen = col_pick.selectbox("Template", names, label_visibility="collapsed")
            if col_load.button("Load", use_container_width=True):
                data = next(t["data"] for t in templates if t["name"] == chosen)
                st.session_state.profile = normalise_profile(copy.deepcopy(data))
                st.session_state.flash = f"✅ Loaded template '{chosen}'."
                bump_form()
                st.rerun()
        else:
            col_pick.caption("No saved templates yet.")

        col_name, col_save = st.columns([3, 1])
        name = col_name.text_input("Template name", placeholder="e.g. Backend roles", label_visibility="collapsed")
        if col_save.button("Save", use_container_width=True):
            if not name.strip():
                st.error("❌ Please enter a template name.")
            else:
                accounts.save_template(name, profile)
                st.success(f"✅ Saved template '{name.strip()}'.")


def render_section_rows(profile, section):
    title, fields = SECTION_FORMS[section]
    rev = st.session_state.form_rev
    with st.expander(f"{title} ({len(profile[section])})"):
        for i, row in enumerate(profile[section]):
            cols = st.columns(2)
            for j, (field, label) in enumerate(fields.items()):
                key = f"pf-{rev}-{section}-{i}-{field}"
                if field in LONG_FIELDS:
                    row[field] = st.text_area(label, value=row[field], key=key)
                else:
                    row[field] = cols[j % 2].text_input(label, value=row[field], key=key)
            if st.button("🗑️ Remove", key=f"rm-{rev}-{section}-{i}"):
                profile[section].pop(i)
                bump_form()
                st.rerun()
            st.divider()
        if st.button(f"➕ Add {title.split(' ', 1)[1].rstrip('s')}", key=f"add-{rev}-{section}"):
            profile[section].append(empty_entry(section))
            bump_form()
            st.rerun()


def render_profile_step(user):
    profile = st.session_state.profile
    rev = st.session_state.form_rev
    st.subheader("👤 Your Profile")

    render_linkedin_import(profile)
    render_saved_templates(profile, user)

    col_text, col_pic = st.columns([3, 1])
    with col_text:
        col1, col2 = st.columns(2)
        profile["fullName"] = col1.text_input("Full Name", value=profile["fullName"], key=f"pf-{rev}-fullName")
        profile["email"] = col2.text_input("Email", value=profile["email"], key=f"pf-{rev}-email")
        profile["phone"] = col1.text_input("Phone", value=profile["phone"], key=f"pf-{rev}-phone")
        profile["linkedinUrl"] = col2.text_input("LinkedIn URL", value=profile["linkedinUrl"], key=f"pf-{rev}-linkedin")
        profile["summary"] = st.text_area("Summary", value=profile["summary"], key=f"pf-{rev}-summary", height=120)
    with col_pic:
        picture = st.file_uploader("Profile picture", type=["png", "jpg", "jpeg"], key=f"pic-{rev}")
        if picture is not None:
            profile["profilePicture"] = to_data_url(picture.getvalue(), picture.type)
        if profile["profilePicture"]:
            st.image(profile["profilePicture"], width=120)
            if st.button("Remove picture"):
                profile["profilePicture"] = None
                bump_form()
                st.rerun()

    skills = st.text_area(
        "Skills (comma separated)", value=", ".join(profile["skills"]), key=f"pf-{rev}-skills"
    )
    profile["skills"] = [s.strip() for s in skills.split(",") if s.strip()]

    for section in PROFILE_SECTIONS:
        render_section_rows(profile, section)

    if nav_buttons(back=False):
        if not profile["fullName"].strip():
            st.error("❌ Please enter your full name.")
            return
        accounts.update_profile(profile)
        st.session_state.step = 1
        st.rerun()


# ─────────────────────────────────────────────────────────── step 2: job ──
def render_job_image_input():
    rev = st.session_state.form_rev
    with st.expander("🖼️ Job posting is an image?"):
        upload = st.file_uploader("Upload screenshot", type=["png", "jpg", "jpeg", "webp"], key=f"jd-img-{rev}")
        url = st.text_input("…or image URL", key=f"jd-url-{rev}")
        if st.button("🔍 Extract job description", disabled=upload is None and not url.strip()):
            with st.spinner("🔍 Reading the job posting..."):
                try:
                    if upload is not None:
                        data, mime_type = upload.getvalue(), check_image(upload.type)
                    else:
                        data, mime_type = fetch_image(url.strip())
                    text = ai_service.extract_text_from_image(
                        data, mime_type, provider=st.session_state.selected_provider
                    )
                except (ExtractionError, AIServiceError) as e:
                    fail("Could not extract the job description", e)
                    return
            st.session_state.job_text = text
            st.session_state.flash = "✅ Job description extracted from the image."
            bump_form()
            st.rerun()


def render_job_step():
    profile = st.session_state.profile
    rev = st.session_state.form_rev
    st.subheader("📋 Target Job")

    profile["roleAppliedFor"] = st.text_input(
        "Role you are applying for", value=profile["roleAppliedFor"], key=f"role-{rev}"
    )
    render_job_image_input()
    st.session_state.job_text = st.text_area(
        "Job description", value=st.session_state.job_text, key=f"jd-{rev}", height=300,
        placeholder="Paste the full job posting here",
    )

    if nav_buttons():
        if not profile["roleAppliedFor"].strip():
            st.error("❌ Please enter the role you are applying for.")
        elif not st.session_state.job_text.strip():
            st.error("❌ Please provide a job description.")
        else:
            st.session_state.step = 2
            st.rerun()


# ─────────────────────────────────────────────────────────── step 3: style ──
def run_generation():
    profile = st.session_state.profile
    job = st.session_state.job_text
    with st.status("🤖 Tailoring your résumé...", expanded=True) as status_ui:
        status_ui.write(f"{datetime.now():%H:%M:%S} - Comparing your profile with the job description")
        try:
            result = ai_service.generate_analysis(
                profile, job, profile["roleAppliedFor"], st.session_state.template, **ai_options()
            )
        except AIServiceError as e:
            status_ui.update(label="💥 Could not generate the résumé.", state="error")
            fail("Generation failed", e)
            return
        status_ui.update(label="✅ Tailored résumé ready!", state="complete")

    store.load(result)
    st.session_state.analysis_job = job
    st.session_state.editor = EditSession(store, job, scorer=scorer())
    st.session_state.gap_targets = {}
    st.session_state.step = 3
    st.rerun()


def render_style_step():
    st.subheader("🎨 Choose a layout")
    st.session_state.template = st.radio(
        "Template",
        options=list(TEMPLATES),
        index=TEMPLATES.index(st.session_state.template),
        format_func=lambda t: t.title(),
        horizontal=True,
    )
    st.info(TEMPLATE_INFO[st.session_state.template])
    if nav_buttons(next_label="✨ Generate"):
        run_generation()


# ─────────────────────────────────────────────────────────── step 4: results ──
def status_writer(status_ui):
    def callback(message: str):
        status_ui.write(f"{datetime.now():%H:%M:%S} - {message}")
        status_ui.update(label=message)
    return callback


def on_field_edit(path, key):
    st.session_state.editor.on_field_change(path, st.session_state[key])
    st.session_state.commit_pending = True


def commit_pending_edit():
    st.session_state.commit_pending = False
    editor: EditSession = st.session_state.editor
    if editor is None:
        return
    with st.status("💾 Saving your edit...") as status_ui:
        editor.status_callback = status_writer(status_ui)
        try:
            editor.on_field_commit()
        except AIServiceError as e:
            status_ui.update(label="⚠️ Edit saved, score not updated", state="error")
            fail("Could not recalculate the ATS score", e)
        else:
            status_ui.update(state="complete")


def render_score_header(result):
    score = result["atsScore"]
    colour = BAND_COLOURS[score_band(score)]
    col_score, col_text, col_action = st.columns([1, 4, 1])
    col_score.markdown(
        f"<div style='font-size:3rem;font-weight:700;color:{colour};text-align:center'>{score}</div>"
        "<div style='text-align:center;color:#888'>ATS score</div>",
        unsafe_allow_html=True,
    )
    with col_text:
        st.markdown(f"**Analysis:** {result['atsScoreExplanation']}")
        if store.score_stale:
            st.warning("⚠️ The résumé changed since this score was computed.")
    if col_action.button("🔄 Recalculate score", use_container_width=True):
        with st.status("📊 Recalculating...") as status_ui:
            try:
                reconcile_store(
                    store, st.session_state.analysis_job,
                    scorer=scorer(), status_callback=status_writer(status_ui),
                )
            except AIServiceError as e:
                status_ui.update(state="error")
                fail("Could not recalculate the ATS score", e)
                return
        st.rerun()


def render_editor(editor: EditSession | None):
    if editor is None:
        editor = st.session_state.editor = EditSession(store, st.session_state.analysis_job, scorer=scorer())
    st.markdown("#### ✏️ Edit")
    st.caption("Changes are saved and re-scored when you leave a field.")
    document = editor.working_copy
    revision = store.revision
    for title, fields in editable_fields(document):
        with st.expander(title, expanded=title == "Summary"):
            for path, label, value in fields:
                key = f"fld-{revision}-{format_path(path)}"
                widget = st.text_area if path[-1] in LONG_FIELDS or path[-2:-1] == ("responsibilities",) else st.text_input
                widget(label, value=value, key=key, on_change=on_field_edit, args=(path, key))


def render_resume_tab(result):
    document = result["tailoredResume"]
    picture = st.session_state.profile.get("profilePicture")
    template = st.selectbox(
        "Layout", list(TEMPLATES), index=TEMPLATES.index(st.session_state.template), format_func=str.title,
    )
    st.session_state.template = template
    html = render_resume(document, template, picture)

    col1, col2, col3 = st.columns(3)
    with col1:
        try:
            pdf = cached_pdf(html)
        except ExportError as e:
            fail("PDF export failed", e)
        else:
            st.download_button("📥 Download PDF", data=pdf, file_name=pdf_filename(document),
                               mime="application/pdf", use_container_width=True)
    with col2:
        st.download_button("🌐 Download HTML", data=html, file_name=pdf_filename(document).replace(".pdf", ".html"),
                           mime="text/html", use_container_width=True)
    with col3:
        show_text = st.toggle("📋 Show copyable text")
    if show_text:
        st.code(to_plain_text(document), language=None)

    col_preview, col_edit = st.columns([3, 2])
    with col_preview:
        components.html(html, height=900, scrolling=True)
    with col_edit:
        render_editor(st.session_state.editor)


def render_matches_tab(result):
    if not result["qualificationMatches"]:
        st.info("No qualification matches were returned.")
    for match in result["qualificationMatches"]:
        with st.container(border=True):
            col_you, col_job = st.columns(2)
            col_you.markdown(f"**Your profile**\n\n{match['userQualification']}")
            col_job.markdown(f"**Job requirement**\n\n{match['jobRequirement']}")
            st.caption(match["explanation"])


def render_gaps_tab(result):
    mismatch = result["jobTitleMismatch"]
    if mismatch:
        with st.container(border=True):
            st.markdown("#### 🎯 Job title mismatch")
            st.markdown(
                f"Your résumé says **{mismatch['userTitle'] or result['tailoredResume']['jobTitle']}**, "
                f"the posting asks for **{mismatch['suggestedTitle']}**."
            )
            st.caption(mismatch["reason"])
            if st.button(f"Use '{mismatch['suggestedTitle']}'", type="primary"):
                with st.status("🎯 Updating job title...", expanded=True) as status_ui:
                    try:
                        applied = workflows.fix_job_title(
                            store, st.session_state.analysis_job,
                            scorer=scorer(), status_callback=status_writer(status_ui),
                        )
                    except AIServiceError as e:
                        status_ui.update(state="error")
                        fail("Could not update the job title", e)
                        return
                if applied:
                    st.session_state.flash = f"✅ Job title changed to '{mismatch['suggestedTitle']}'."
                st.rerun()

    if not result["keywordGaps"]:
        st.success("🎉 No keyword gaps left.")
    for gap in result["keywordGaps"]:
        keyword = gap["keyword"]
        with st.container(border=True):
            col_info, col_target, col_add = st.columns([4, 2, 1])
            col_info.markdown(f"**{keyword}**")
            col_info.caption(gap["reason"])
            target = col_target.selectbox(
                "Add to", TARGET_SECTIONS,
                index=TARGET_SECTIONS.index(st.session_state.gap_targets.get(keyword, "Skills")),
                key=f"gap-target-{keyword}",
            )
            st.session_state.gap_targets[keyword] = target
            if col_add.button("➕ Add", key=f"gap-add-{keyword}", use_container_width=True):
                with st.status(f"🧠 Adding '{keyword}'...", expanded=True) as status_ui:
                    try:
                        applied = workflows.integrate_keyword(
                            store, keyword, target, st.session_state.analysis_job,
                            integrator=partial(ai_service.integrate_keyword, **ai_options()),
                            scorer=scorer(), status_callback=status_writer(status_ui),
                        )
                    except AIServiceError as e:
                        status_ui.update(state="error")
                        fail(f"Could not add '{keyword}'", e)
                        return
                if applied:
                    st.session_state.flash = f"✅ Added '{keyword}' to {target}."
                st.rerun()


def render_guide_tab(result):
    if not result["keywordGuide"]:
        st.info("No learning suggestions for this job.")
    for item in result["keywordGuide"]:
        with st.container(border=True):
            st.markdown(f"**{item['keyword']}**")
            st.write(item["guidance"])
            res = item["resource"]
            if res["url"]:
                st.markdown(f"📚 [{res['title'] or res['url']}]({res['url']}) · {res['type']}")


def start_over():
    """New job, same profile: clears role, job description and the analysis."""
    store.reset()
    st.session_state.editor = None
    st.session_state.profile["roleAppliedFor"] = ""
    st.session_state.job_text = ""
    st.session_state.analysis_job = ""
    st.session_state.gap_targets = {}
    st.session_state.step = 0
    bump_form()


def render_results_step():
    if st.session_state.commit_pending:
        commit_pending_edit()

    result = store.result
    if result is None:
        st.info("No analysis yet.")
        if st.button("⬅️ Back"):
            st.session_state.step = 2
            st.rerun()
        return

    render_score_header(result)
    tab_resume, tab_matches, tab_gaps, tab_guide = st.tabs(
        ["📄 Tailored Resume", "✅ Qualification Matches", f"🔑 Keyword Gaps ({len(result['keywordGaps'])})", "📚 Keywords Guide"]
    )
    with tab_resume:
        render_resume_tab(result)
    with tab_matches:
        render_matches_tab(result)
    with tab_gaps:
        render_gaps_tab(result)
    with tab_guide:
        render_guide_tab(result)

    st.divider()
    col_back, _, col_reset = st.columns([1, 3, 1])
    if col_back.button("⬅️ Back", use_container_width=True):
        st.session_state.step = 2
        st.rerun()
    if col_reset.button("🔁 Start over", use_container_width=True):
        start_over()
        st.rerun()


# ─────────────────────────────────────────────────────────── main ──
user = accounts.current_user()
if user is None:
    render_auth_page()
    st.stop()

render_sidebar(user)

if st.session_state.show_admin and user["role"] == "Admin":
    render_admin_dashboard()
    st.stop()

st.title("✂️ Resume Tailor")
render_stepper()

if st.session_state.flash:
    st.success(st.session_state.flash)
    st.session_state.flash = None

step = st.session_state.step
if step == 0:
    render_profile_step(user)
elif step == 1:
    render_job_step()
elif step == 2:
    render_style_step()
else:
    render_results_step()
