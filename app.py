import logging

import plotly.graph_objects as go
import streamlit as st
from PIL import Image
from streamlit_cropper import st_cropper

# ── Project modules ────────────────────────────────────────────────────────────
import config
from sidebar import render_sidebar
from style import chip, inject_css

from scanners.errors import ScanError
from scanners.label_scan import analyze_label_image
from scanners.label_translation import translate_scan_result
from scanners.medical_assistant import MODES, get_medical_response, is_medical_query
from scanners.models import UserProfile
from scanners.skin_rash import analyze_rash_image, translate_rash_result
from scanners.voice_mood import analyze_text_heuristics, analyze_transcription
from utils.gemini_client import GenerationConfig, build_client, get_model
from utils.images import image_to_jpeg_base64

logging.basicConfig(level=config.LOG_LEVEL)
log = logging.getLogger("app")

# ─── Streamlit page config ─────────────────────────────────────────────────────
st.set_page_config(page_title="AI Health Scanner", layout="wide")
inject_css()
render_sidebar()


def score_gauge(value: int, title: str):
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=value,
        number={'font': {'color': '#2E3440'}},
        title={'text': title, 'font': {'color': '#2E3440'}},
        gauge={
            'axis': {'range': [0, 100], 'tickcolor': '#2E3440'},
            'bar': {'color': "#0B7A75"},
            'steps': [{'range': [0, 40], 'color': "#F6D5D5"},
                      {'range': [40, 70], 'color': "#FBE8C8"},
                      {'range': [70, 100], 'color': "#D8F0E2"}]
        },
        domain={'x': [0, 1], 'y': [0, 1]}
    ))
    st.plotly_chart(fig, use_container_width=True)


def bullet_list(title: str, items):
    if items:
        st.markdown(f"**{title}**")
        st.markdown("\n".join(f"- {i}" for i in items))


def render_scan_result(result):
    if result.scan_type == "medicine" and result.medicine_info:
        info = result.medicine_info
        st.subheader(f"💊 {info.name}")
        if info.generic_name and info.generic_name != info.name:
            st.caption(info.generic_name)
        c1, c2 = st.columns(2)
        with c1:
            bullet_list("Uses", info.uses)
            bullet_list("Indications", info.indications)
            bullet_list("Side effects", info.side_effects)
            bullet_list("Contraindications", info.contraindications)
        with c2:
            st.markdown(f"**Dosage**: {info.dosage}")
            bullet_list("Precautions", info.precautions)
            bullet_list("Interactions", info.interactions or [])
            if info.results:
                st.markdown(f"**Expected results**: {info.results}")
    else:
        st.subheader("🥫 Food label")
        c1, c2 = st.columns([1, 2])
        with c1:
            score_gauge(result.nutrition_score.score, f"Grade {result.nutrition_score.grade}")
        with c2:
            if result.allergens:
                st.markdown("**Allergens**")
                st.markdown(" ".join(
                    chip(a.allergen, a.severity) for a in result.allergens if a.found
                ) or "None of yours found", unsafe_allow_html=True)
            bullet_list("Why this grade", result.nutrition_score.reasons)
            bullet_list("Ingredients", result.ingredients)
            bullet_list("Safer alternatives", result.safe_alternatives)

    if result.is_safe:
        st.success("✅ No critical warnings")
    else:
        st.error("🛑 Not safe for your profile")
    for w in result.warnings:
        st.warning(w)
    with st.expander("Text read from the image"):
        st.text(result.extracted_text or "(none)")
    with st.expander("Raw JSON"):
        st.json(result.to_json_dict())


# ---- Main Page Layout ----
st.markdown("<h1>🩺 AI Health Scanner</h1>", unsafe_allow_html=True)

# ── API key ────────────────────────────────────────────────────────────────────
def _secret_api_key() -> str:
    try:
        return st.secrets.get("GEMINI_API_KEY", "")
    except FileNotFoundError:  # no secrets.toml
        return ""


api_key = config.GEMINI_API_KEY or _secret_api_key()
if not api_key:
    api_key = st.text_input("🔑 Enter your Gemini API Key", type="password")
if not api_key:
    st.warning("Please enter your Gemini API key to proceed.")
    st.stop()

client = build_client(api_key)
scan_model = get_model(client)
mood_model = get_model(client, generation_config=GenerationConfig(max_output_tokens=500))

tab_label, tab_skin, tab_mood, tab_ask = st.tabs(
    ["💊🥫 Label scan", "🩹 Skin rash", "🎙️ Mood check", "🤖 Medical assistant"]
)

# ------------------------------------------------------------------------------
# Label scan
# ------------------------------------------------------------------------------
with tab_label:
    with st.expander("👤 Your profile", expanded=False):
        allergies = st.text_input("Allergies (comma separated)", "")
        restriction = st.selectbox("Dietary restriction", ["none", "vegan", "vegetarian", "diabetic"])
        conditions = st.text_input("Health conditions (comma separated)", "")
    profile = UserProfile(
        allergies=[a.strip() for a in allergies.split(",") if a.strip()],
        dietary_restrictions=restriction,
        health_conditions=[c.strip() for c in conditions.split(",") if c.strip()],
    )

    uploaded_label = st.file_uploader("Choose JPG or PNG", type=["jpg", "jpeg", "png"], key="label_img")
    if uploaded_label:
        img = Image.open(uploaded_label).convert("RGB")
        st.markdown("### ✂️ Crop to the label")
        cropped = st_cropper(img, box_color="#0B7A75", realtime_update=True, aspect_ratio=None, return_type="image")
        if st.button("🔍 Scan label"):
            with st.spinner("Reading the label…"):
                try:
                    st.session_state["scan_result"] = analyze_label_image(
                        scan_model, image_to_jpeg_base64(cropped), profile, max_retries=config.SCAN_MAX_RETRIES
                    )
                    st.session_state.pop("scan_result_hi", None)
                except ScanError as e:
                    log.warning("Label scan failed: %s", e)
                    st.error(f"🛑 {e}")

    result = st.session_state.get("scan_result")
    if result is not None:
        show_hindi = st.toggle("हिन्दी में दिखाएँ (Show in Hindi)", key="scan_hindi")
        if show_hindi and "scan_result_hi" not in st.session_state:
            with st.spinner("Translating…"):
                st.session_state["scan_result_hi"] = translate_scan_result(scan_model, result)
        render_scan_result(st.session_state["scan_result_hi"] if show_hindi else result)
        if st.button("↺ New scan"):
            st.session_state.pop("scan_result", None)
            st.session_state.pop("scan_result_hi", None)
            st.rerun()

# ------------------------------------------------------------------------------
# Skin rash
# ------------------------------------------------------------------------------
with tab_skin:
    uploaded_skin = st.file_uploader("Photo of the affected area", type=["jpg", "jpeg", "png"], key="skin_img")
    if uploaded_skin and st.button("🔍 Analyze skin"):
        with st.spinner("Looking at the photo…"):
            try:
                st.session_state["rash_result"] = analyze_rash_image(
                    scan_model, image_to_jpeg_base64(Image.open(uploaded_skin)), max_retries=config.SCAN_MAX_RETRIES
                )
                st.session_state.pop("rash_result_hi", None)
            except ScanError as e:
                log.warning("Skin scan failed: %s", e)
                st.error(f"🛑 {e}")

    rash = st.session_state.get("rash_result")
    if rash is not None:
        if st.toggle("हिन्दी में दिखाएँ (Show in Hindi)", key="rash_hindi"):
            if "rash_result_hi" not in st.session_state:
                with st.spinner("Translating…"):
                    st.session_state["rash_result_hi"] = translate_rash_result(scan_model, rash)
            rash = st.session_state["rash_result_hi"]
        a = rash.analysis
        st.subheader(a.condition)
        st.markdown(chip(f"severity: {a.severity}", a.severity) + chip(f"urgency: {a.urgency}", a.urgency),
                    unsafe_allow_html=True)
        st.write(a.description)
        st.caption(f"Confidence {rash.confidence:.0%}")
        bullet_list("Symptoms seen", a.symptoms)
        bullet_list("Possible causes", a.possible_causes)
        bullet_list("Recommendations", a.recommendations)
        bullet_list("See a doctor if", a.when_to_see_doctor)

# ------------------------------------------------------------------------------
# Mood check
# ------------------------------------------------------------------------------
with tab_mood:
    said = st.text_area("What did you say? (transcription)", height=120)
    use_model = st.checkbox("Use Gemini (otherwise a quick keyword estimate)", value=True)
    if st.button("🎙️ Check mood") and said.strip():
        analysis = analyze_transcription(mood_model, said) if use_model else analyze_text_heuristics(said)
        c1, c2 = st.columns([1, 2])
        with c1:
            score_gauge(analysis.score, "Mood score")
        with c2:
            st.markdown(f"**{analysis.detected_mood}**")
            st.markdown(f"Tone: `{analysis.tone}` · Energy: `{analysis.energy}` · Confidence {analysis.confidence:.0%}")
            flags = [name for name, on in analysis.indicators.to_json_dict().items() if on]
            bullet_list("Indicators", flags)
            if analysis.score < 40:
                st.error("Your answers suggest a very low mood. Please consider talking to a doctor or someone you trust.")

# ------------------------------------------------------------------------------
# Medical assistant
# ------------------------------------------------------------------------------
with tab_ask:
    mode = st.radio("Ask about", MODES, horizontal=True,
                    format_func=lambda m: {"medicine": "💊 Medicine", "symptoms": "🤒 Symptoms",
                                           "health-tips": "🌿 Health tips"}[m])
    question = st.text_input("Your question", placeholder="e.g. What is paracetamol used for?")
    if st.button("💬 Ask") and question.strip():
        if not is_medical_query(question):
            st.info("This assistant answers health questions. Try asking about a medicine or a symptom.")
        with st.spinner("Thinking…"):
            try:
                answer = get_medical_response(client, question, mode)
            except ScanError as e:
                log.warning("Medical assistant failed: %s", e)
                st.error(f"🛑 {e}")
            else:
                st.markdown(answer.response)
                for s in answer.suggestions or []:
                    with st.expander(f"💊 {s.name}"):
                        st.write(s.description)
                        st.caption(s.usage)
