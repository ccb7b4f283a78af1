import html

import streamlit as st

# CSS styles for the scanner pages
STYLE_CSS = """
<style>
/* ---------------------------------------------- */
/* Palette (for reference):
   • Care Teal     = #0B7A75
   • Safe Green    = #3BB273
   • Caution Amber = #F2A541
   • Alert Red     = #D64545
   • Ink           = #2E3440
/* ---------------------------------------------- */

body {
  background-color: #F5FAFA;
  font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif;
}
.main {
  padding: 2rem;
}

h1 {
  font-size: 2.8rem;
  color: #0B7A75;   /* Care Teal */
  text-align: center;
  margin-bottom: 1rem;
}
h2, h3, h4 {
  color: #2E3440;   /* Ink */
}

/* Result chips */
.chip {
  display: inline-block;
  padding: 0.15rem 0.6rem;
  margin: 0.15rem;
  border-radius: 999px;
  font-size: 0.85rem;
  color: #FFFFFF;
}
.chip.high   { background-color: #D64545; }
.chip.medium { background-color: #F2A541; }
.chip.low    { background-color: #3BB273; }

/* Buttons */
button[class*="stButton"] {
    background-color: #0B7A75 !important;
    color: white !important;
    border-radius: 4px;
    border: none;
    font-weight: 600;
}

.stAlert.error {
  background-color: #D64545 !important;
  color: #FFFFFF !important;
  border-radius: 4px;
}
.stAlert.warning {
  background-color: #F2A541 !important;
  color: #2E3440 !important;
  border-radius: 4px;
}
</style>
"""

# allergen severity / rash urgency → chip class
LEVEL_CLASS = {
    "high": "high", "severe": "high",
    "medium": "medium", "moderate": "medium",
    "low": "low", "mild": "low",
}


def chip(text: str, level: str) -> str:
    return f"<span class='chip {LEVEL_CLASS.get(level, 'low')}'>{html.escape(text)}</span>"


def inject_css():
    """
    Inject custom CSS styles into the Streamlit app.
    """
    st.markdown(STYLE_CSS, unsafe_allow_html=True)
