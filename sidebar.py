import streamlit as st

from utils.gemini_client import model_candidates

SIDEBAR_MD = """
### 🩺 AI Health Scanner

Point your camera at a label and let Gemini read it for you.

- 💊 Medicine packets: uses, side effects, dosage, precautions
- 🥫 Food labels: ingredients, allergens vs. your profile, nutrition grade
- 🩹 Skin rash photos: likely condition, urgency, when to see a doctor
- 🎙️ Mood check from what you said
- 🤖 Medical assistant: quick answers on medicines, symptoms and health tips
- 🇮🇳 One-click Hindi translation of any result

*Results are informational only. Always confirm with a doctor or pharmacist.*
"""


def render_sidebar():
    """
    Render the application sidebar with description and the model in use.
    """
    st.sidebar.markdown("# AI Health Scanner")
    st.sidebar.markdown(SIDEBAR_MD, unsafe_allow_html=True)
    first, *rest = model_candidates()
    st.sidebar.caption(f"Model: {first} · fallbacks: {', '.join(rest)}")
