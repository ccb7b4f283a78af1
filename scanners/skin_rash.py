# scanners/skin_rash.py
from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict

from scanners.common import (
    as_choice, as_confidence, as_str_list, as_text,
    extract_json_object, strip_data_url_prefix,
)
from scanners.errors import ConfigurationError, RateLimitedError, ScanError, ScanParseError
from scanners.label_translation import SCRIPTS
from scanners.models import RashAnalysis, SkinRashResult
from utils.gemini_client import ImagePart
from utils.utils_retries import generate_content_with_retry, is_rate_limit_error

log = logging.getLogger(__name__)

RASH_PROMPT = """
You are a medical AI assistant specializing in dermatology. Analyze this skin image and provide a detailed assessment.

CRITICAL INSTRUCTIONS:
- Analyze the visible skin condition, rash, or lesion
- Identify potential conditions based on appearance, color, texture, and distribution
- Assess severity (mild, moderate, severe)
- Provide evidence-based medical information
- If the condition is unclear, provide general guidance
- ALWAYS recommend consulting a healthcare professional for accurate diagnosis

Return your response as a valid JSON object with this exact structure:
{
  "condition": "string (e.g., 'Contact Dermatitis', 'Eczema', 'Psoriasis', 'Unknown Rash')",
  "severity": "mild | moderate | severe",
  "description": "Detailed description of what you observe",
  "possibleCauses": ["array of possible causes"],
  "recommendations": ["array of recommended actions/treatments"],
  "urgency": "low | medium | high",
  "whenToSeeDoctor": ["array of warning signs that require immediate medical attention"],
  "symptoms": ["array of symptoms you observe in the image"],
  "confidence": 0.0
}

MANDATORY RULES:
- Provide at least 3-5 items for possibleCauses, recommendations, and whenToSeeDoctor
- Use medical terminology appropriately
- Include general first-aid recommendations if applicable
- Return ONLY valid JSON, no markdown formatting or additional text
""".strip()

RASH_TRANSLATION_TEMPLATE = """
Translate this skin rash analysis to {language}{script_note}. Keep the structure and return JSON.

Original English:
{payload}

Translate ALL text to {language}. Return ONLY valid JSON with the same structure, all text in {language}{script_note}.
""".strip()

LIST_FIELDS = (
    ("possibleCauses", "possible_causes"),
    ("recommendations", "recommendations"),
    ("whenToSeeDoctor", "when_to_see_doctor"),
    ("symptoms", "symptoms"),
)


def build_rash_prompt() -> str:
    return RASH_PROMPT


def parse_rash_response(text: str) -> SkinRashResult:
    parsed = extract_json_object(text)
    analysis = RashAnalysis(
        condition=as_text(parsed.get("condition"), "Unknown Rash"),
        severity=as_choice(parsed.get("severity"), ("mild", "moderate", "severe"), "mild"),
        description=as_text(parsed.get("description"), "Unable to analyze image clearly"),
        possible_causes=as_str_list(parsed.get("possibleCauses")),
        recommendations=as_str_list(parsed.get("recommendations")),
        urgency=as_choice(parsed.get("urgency"), ("low", "medium", "high"), "low"),
        when_to_see_doctor=as_str_list(parsed.get("whenToSeeDoctor")),
        symptoms=as_str_list(parsed.get("symptoms")),
    )
    return SkinRashResult(
        analysis=analysis,
        confidence=as_confidence(parsed.get("confidence"), 0.7),
        extracted_text=as_text(parsed.get("extractedText")),
    )


def fallback_rash_result() -> SkinRashResult:
    return SkinRashResult(
        analysis=RashAnalysis(
            condition="Unknown Rash",
            severity="mild",
            description="Unable to analyze the image. Please ensure the image is clear and shows the affected area.",
            possible_causes=["Image quality may be insufficient", "Lighting conditions may affect analysis"],
            recommendations=[
                "Take a clearer photo with good lighting",
                "Consult a dermatologist for accurate diagnosis",
                "Keep the area clean and dry",
            ],
            urgency="low",
            when_to_see_doctor=[
                "If the rash spreads rapidly",
                "If you experience fever or other symptoms",
                "If the condition worsens",
            ],
            symptoms=[],
        ),
        confidence=0.3,
    )


def analyze_rash_image(model, image_base64: str, max_retries: int = 2, sleep=time.sleep) -> SkinRashResult:
    if model is None:
        raise ConfigurationError()
    image = ImagePart(data=strip_data_url_prefix(image_base64), mime_type="image/jpeg")
    try:
        resp = generate_content_with_retry(model, [image, build_rash_prompt()], max_retries, sleep)
    except Exception as e:
        log.error("Skin rash analysis error: %s", e)
        if is_rate_limit_error(e):
            raise RateLimitedError() from e
        raise ScanError(f"Failed to analyze skin rash: {e}") from e
    try:
        return parse_rash_response(resp.text)
    except ScanParseError as e:
        log.warning("Could not parse skin rash response: %s", e)
        return fallback_rash_result()


# ---------- Translation ----------
def build_rash_translation_prompt(result: SkinRashResult, language: str = "Hindi") -> str:
    payload = result.analysis.to_json_dict()
    return RASH_TRANSLATION_TEMPLATE.format(
        language=language,
        script_note=f" ({SCRIPTS[language]} script)" if language in SCRIPTS else "",
        payload=json.dumps(payload, ensure_ascii=False, indent=2),
    )


def merge_rash_translation(parsed: Dict[str, Any], original: SkinRashResult) -> SkinRashResult:
    a = original.analysis
    update: Dict[str, Any] = {
        "condition": as_text(parsed.get("condition"), a.condition),
        "description": as_text(parsed.get("description"), a.description),
        # severity / urgency drive the UI colour, keep them machine-readable
        "severity": as_choice(parsed.get("severity"), ("mild", "moderate", "severe"), a.severity),
        "urgency": as_choice(parsed.get("urgency"), ("low", "medium", "high"), a.urgency),
    }
    for wire, attr in LIST_FIELDS:
        update[attr] = as_str_list(parsed.get(wire)) or list(getattr(a, attr))
    return original.model_copy(update={"analysis": a.model_copy(update=update)}, deep=True)


def translate_rash_result(
    model,
    result: SkinRashResult,
    language: str = "Hindi",
    max_retries: int = 2,
    sleep=time.sleep,
) -> SkinRashResult:
    if model is None:
        raise ConfigurationError()
    try:
        prompt = build_rash_translation_prompt(result, language)
        resp = generate_content_with_retry(model, [prompt], max_retries, sleep)
        return merge_rash_translation(extract_json_object(resp.text), result)
    except Exception:
        log.exception("Skin rash translation failed; keeping original result")
        return result
