# scanners/medical_assistant.py
"""
Short Q&A answers for the medical assistant tab.

Three modes share one flow: a mode-specific prompt goes to the first model
candidate that answers, and medicine questions that ask for treatment get a
second call for a few OTC suggestions. Suggestions are optional; a failure
there never loses the main answer.
"""
from __future__ import annotations

import json
import logging
from typing import List, Optional, Sequence

from scanners.common import as_text, extract_json_array
from scanners.errors import ConfigurationError, RateLimitedError, ScanError
from scanners.models import MedicalResponse, MedicineSuggestion
from utils.gemini_client import GenerationConfig, generate_with_fallback
from utils.utils_retries import is_rate_limit_error

log = logging.getLogger(__name__)

MODES = ("medicine", "symptoms", "health-tips")
MAX_SUGGESTIONS = 4

ASSISTANT_CONFIG = GenerationConfig(temperature=0.7, top_p=0.9, top_k=40, max_output_tokens=500)

MEDICINE_PROMPT_TEMPLATE = """
You are a medicine information specialist. Provide concise information about medicines ONLY.

User question: {query}

Focus on:
- Medicine name, generic name
- Uses/indications
- Dosage information
- Side effects (key ones only)
- Precautions/warnings
- When to consult a doctor

IMPORTANT: Keep response SHORT (2-4 sentences). Use **bold** for key terms. Be direct and factual.

If the question is not about a specific medicine, guide them to ask about a medicine name.

End with: "**Note:** This is educational only. Consult a doctor before taking any medicine."
""".strip()

SYMPTOMS_PROMPT_TEMPLATE = """
You are a symptoms assessment assistant. Help users understand their symptoms.

User question: {query}

Focus on:
- What the symptoms might indicate (possible causes)
- When to seek immediate medical attention
- General guidance (NOT diagnosis)
- Self-care tips if appropriate
- Urgency level (mild/moderate/urgent)

IMPORTANT: Keep response SHORT (2-3 sentences). Use **bold** for urgent warnings. NEVER diagnose - only provide guidance.

Always emphasize: "**Important:** This is not a diagnosis. See a doctor for proper evaluation."

End with: "**Note:** For accurate diagnosis, please consult a healthcare professional."
""".strip()

HEALTH_TIPS_PROMPT_TEMPLATE = """
You are a wellness and health tips advisor. Provide helpful health tips and wellness advice.

User question: {query}

Focus on:
- General health and wellness tips
- Preventive care advice
- Lifestyle recommendations
- Nutrition guidance
- Exercise/fitness tips
- Mental health wellness

IMPORTANT: Keep response SHORT (2-4 sentences). Use **bold** for important points. Be encouraging and practical.

Keep it practical, actionable, and easy to understand.

End with: "**Note:** These are general tips. Consult a healthcare professional for personalized advice."
""".strip()

PROMPTS = {
    "medicine": MEDICINE_PROMPT_TEMPLATE,
    "symptoms": SYMPTOMS_PROMPT_TEMPLATE,
    "health-tips": HEALTH_TIPS_PROMPT_TEMPLATE,
}

SUGGESTION_PROMPT_TEMPLATE = """
Based on the following medical query and response, provide 2-4 relevant medicine suggestions in JSON format. Only suggest medicines if appropriate for the condition mentioned.

Query: {query}

Response: {response}

Provide suggestions in this exact JSON format (array of objects):
[
  {{
    "name": "Medicine Name",
    "description": "Brief description of what it does",
    "usage": "Dosage and frequency information"
  }}
]

If no medicines are appropriate, return an empty array: []

IMPORTANT:
- Only suggest common, over-the-counter medicines when appropriate
- Include dosage information
- Be specific and accurate
- Return ONLY valid JSON, no additional text
""".strip()

# query must ask for treatment before suggestions are requested
SUGGESTION_TRIGGERS = (
    "medicine", "medication", "drug", "treatment", "what to take",
    "suggest", "recommend", "help with", "cure", "relief",
)

MEDICAL_KEYWORDS = (
    "medicine", "medication", "drug", "tablet", "capsule", "syrup", "injection",
    "dose", "dosage", "side effect", "symptom", "disease", "illness", "treatment",
    "cure", "therapy", "prescription", "pharmacy", "doctor", "health", "medical",
    "pain", "fever", "headache", "cold", "cough", "infection", "antibiotic",
    "vitamin", "supplement", "allergy", "diabetes", "blood pressure", "heart",
    "stomach", "liver", "kidney", "brain", "cancer", "surgery", "hospital",
    "paracetamol", "ibuprofen", "aspirin", "flu", "covid", "vaccine", "immunity",
)


def build_assistant_prompt(query: str, mode: str = "medicine") -> str:
    if mode not in PROMPTS:
        raise ScanError(f"Invalid mode specified: {mode!r}")
    return PROMPTS[mode].format(query=json.dumps(query, ensure_ascii=False))


def build_suggestion_prompt(query: str, response: str) -> str:
    return SUGGESTION_PROMPT_TEMPLATE.format(query=query, response=response)


def is_medical_query(query: str) -> bool:
    q = (query or "").lower()
    return any(k in q for k in MEDICAL_KEYWORDS)


def needs_suggestions(query: str) -> bool:
    q = (query or "").lower()
    return any(k in q for k in SUGGESTION_TRIGGERS)


def parse_suggestions(text: str) -> List[MedicineSuggestion]:
    """Complete entries only (name, description and usage all present), at most four."""
    out: List[MedicineSuggestion] = []
    for item in extract_json_array(text):
        if not isinstance(item, dict):
            continue
        name, description, usage = (as_text(item.get(k)) for k in ("name", "description", "usage"))
        if name and description and usage:
            out.append(MedicineSuggestion(name=name, description=description, usage=usage))
    return out[:MAX_SUGGESTIONS]


def suggest_medicines(
    client,
    query: str,
    response: str,
    candidates: Optional[Sequence[str]] = None,
) -> List[MedicineSuggestion]:
    if not needs_suggestions(query):
        return []
    try:
        resp = generate_with_fallback(client, [build_suggestion_prompt(query, response)], candidates, ASSISTANT_CONFIG)
        return parse_suggestions(resp.text)
    except Exception as e:
        log.warning("Could not get medicine suggestions: %s", e)
        return []


def _user_facing_error(err: Exception) -> ScanError:
    msg = str(err)
    if is_rate_limit_error(err):
        return RateLimitedError()
    if "api key" in msg.lower() or getattr(err, "status_code", None) == 401:
        return ConfigurationError("Invalid API key. Please check your GEMINI_API_KEY.")
    if "model" in msg.lower() or "not found" in msg.lower():
        return ScanError(
            "All Gemini models are unavailable. Please check your API key and ensure "
            "you have access to at least one Gemini model."
        )
    return ScanError(f"Failed to get response: {msg or 'Unknown error'}")


def get_medical_response(
    client,
    query: str,
    mode: str = "medicine",
    candidates: Optional[Sequence[str]] = None,
) -> MedicalResponse:
    if client is None:
        raise ConfigurationError()
    prompt = build_assistant_prompt(query, mode)
    try:
        resp = generate_with_fallback(client, [prompt], candidates, ASSISTANT_CONFIG)
    except Exception as e:
        log.exception("Medical assistant call failed")
        raise _user_facing_error(e) from e

    suggestions = suggest_medicines(client, query, resp.text, candidates) if mode == "medicine" else []
    return MedicalResponse(response=resp.text, suggestions=suggestions or None)
