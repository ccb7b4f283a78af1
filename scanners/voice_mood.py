# scanners/voice_mood.py
"""
Mood check from what the user said.

The model never hears audio: a transcription is analysed as text, and the
keyword heuristics below give a local estimate when no model is available.
"""
from __future__ import annotations

import json
import logging
from typing import Optional

from scanners.common import as_bool, as_choice, as_confidence, as_score, as_text, extract_json_object
from scanners.errors import ConfigurationError
from scanners.models import VoiceAnalysis, VoiceIndicators

log = logging.getLogger(__name__)

NEGATIVE_WORDS = ("tired", "exhausted", "sad", "depressed", "lonely", "hopeless", "empty", "worthless", "guilty")
LOW_ENERGY_WORDS = ("can't", "can’t", "don't want", "don't feel", "barely", "hardly")

MOOD_PROMPT_TEMPLATE = """
You are a mental health AI analyzing voice/text for depression indicators.

User said: {transcription}

Analyze the following indicators:
1. Slow speech (low energy)
2. Flat tone (lack of emotion)
3. Pauses (hesitation, difficulty speaking)
4. Low volume (withdrawn)

Return ONLY valid JSON, no markdown:

{{
  "score": 65,
  "tone": "neutral",
  "energy": "medium",
  "indicators": {{
    "slowSpeech": false,
    "flatTone": true,
    "pauses": true,
    "lowVolume": false
  }},
  "detectedMood": "Feeling tired or low energy",
  "confidence": 0.75
}}

SCORING GUIDE:
- 80-100: Happy, energetic, positive
- 60-79: Neutral, okay
- 40-59: Low mood, tired, sad
- 0-39: Very low, concerning, depressed

TONE VALUES: "happy", "neutral", "sad", "flat"
ENERGY VALUES: "high", "medium", "low"

Return ONLY the JSON object.
""".strip()


def build_mood_prompt(transcription: Optional[str]) -> str:
    # json.dumps quotes + escapes whatever the user said
    said = transcription if transcription and transcription.strip() else "No transcription available"
    return MOOD_PROMPT_TEMPLATE.format(transcription=json.dumps(said, ensure_ascii=False))


def parse_mood_response(text: str) -> VoiceAnalysis:
    parsed = extract_json_object(text)
    ind = parsed.get("indicators") if isinstance(parsed.get("indicators"), dict) else {}
    return VoiceAnalysis(
        score=as_score(parsed.get("score"), 70),
        tone=as_choice(parsed.get("tone"), ("happy", "neutral", "sad", "flat"), "neutral"),
        energy=as_choice(parsed.get("energy"), ("high", "medium", "low"), "medium"),
        indicators=VoiceIndicators(
            slow_speech=as_bool(ind.get("slowSpeech")),
            flat_tone=as_bool(ind.get("flatTone")),
            pauses=as_bool(ind.get("pauses")),
            low_volume=as_bool(ind.get("lowVolume")),
        ),
        detected_mood=as_text(parsed.get("detectedMood"), "Neutral"),
        confidence=as_confidence(parsed.get("confidence"), 0.5),
    )


def fallback_analysis() -> VoiceAnalysis:
    return VoiceAnalysis(
        score=70,
        tone="neutral",
        energy="medium",
        indicators=VoiceIndicators(),
        detected_mood="Unable to analyze",
        confidence=0.3,
    )


def analyze_transcription(model, transcription: Optional[str]) -> VoiceAnalysis:
    """Single model call, no retries. Any failure → fallback_analysis()."""
    if model is None:
        raise ConfigurationError()
    try:
        resp = model.generate_content([build_mood_prompt(transcription)])
        return parse_mood_response(resp.text)
    except Exception:
        log.exception("Voice mood analysis failed; using fallback")
        return fallback_analysis()


def analyze_text_heuristics(text: str) -> VoiceAnalysis:
    """Keyword-count estimate: 70 - 10 per negative word - 5 per low-energy phrase."""
    lower = (text or "").lower()
    negative = sum(1 for w in NEGATIVE_WORDS if w in lower)
    low_energy = sum(1 for w in LOW_ENERGY_WORDS if w in lower)

    score = max(0, min(100, 70 - negative * 10 - low_energy * 5))
    if score < 40:
        tone, energy = "sad", "low"
    elif score < 60:
        tone, energy = "flat", "medium"
    else:
        tone, energy = "neutral", "medium"

    return VoiceAnalysis(
        score=score,
        tone=tone,
        energy=energy,
        indicators=VoiceIndicators(slow_speech=low_energy > 0, flat_tone=negative > 0),
        detected_mood="Estimated from keywords",
        confidence=0.4,
    )
