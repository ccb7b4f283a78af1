import json

import pytest

from conftest import FakeModel
from scanners.errors import RateLimitedError, ScanError
from scanners.skin_rash import (
    analyze_rash_image, build_rash_translation_prompt, parse_rash_response, translate_rash_result,
)

IMAGE = "data:image/jpeg;base64,QUJD"

RASH = {
    "condition": "Contact Dermatitis",
    "severity": "moderate",
    "description": "Red, itchy patches on the forearm",
    "possibleCauses": ["New detergent", "Nickel"],
    "recommendations": ["Avoid the trigger", "Apply a cold compress"],
    "urgency": "medium",
    "whenToSeeDoctor": ["Blistering", "Fever"],
    "symptoms": ["Redness", "Itching"],
    "confidence": 0.82,
}


def test_parse_full_response():
    result = parse_rash_response(json.dumps(RASH))
    assert result.analysis.condition == "Contact Dermatitis"
    assert result.analysis.severity == "moderate"
    assert result.analysis.when_to_see_doctor == ["Blistering", "Fever"]
    assert result.confidence == pytest.approx(0.82)


def test_parse_defaults():
    result = parse_rash_response('{"severity": "extreme"}')
    assert result.analysis.condition == "Unknown Rash"
    assert result.analysis.severity == "mild"
    assert result.analysis.urgency == "low"
    assert result.analysis.possible_causes == []
    assert result.confidence == pytest.approx(0.7)


def test_analyze_sends_image_then_prompt(sleep):
    model = FakeModel(json.dumps(RASH))
    result = analyze_rash_image(model, IMAGE, sleep=sleep)
    assert result.analysis.urgency == "medium"
    assert model.calls[0][0].data == "QUJD"


def test_unparseable_response_gives_low_confidence_fallback(sleep):
    model = FakeModel("I can't see a rash here.")
    result = analyze_rash_image(model, IMAGE, sleep=sleep)
    assert result.confidence == pytest.approx(0.3)
    assert result.analysis.recommendations


def test_rate_limit_is_user_facing(sleep):
    model = FakeModel(Exception("429"), Exception("429"))
    with pytest.raises(RateLimitedError):
        analyze_rash_image(model, IMAGE, sleep=sleep)
    assert sleep.calls == [2]


def test_other_errors_wrapped(sleep):
    model = FakeModel(RuntimeError("bad request"))
    with pytest.raises(ScanError, match="Failed to analyze skin rash: bad request"):
        analyze_rash_image(model, IMAGE, sleep=sleep)


def test_translation_merges_and_keeps_enums(sleep):
    original = parse_rash_response(json.dumps(RASH))
    translated_json = {"condition": "संपर्क त्वचाशोथ", "severity": "मध्यम", "symptoms": ["लालिमा", "खुजली"]}
    model = FakeModel(json.dumps(translated_json, ensure_ascii=False))
    translated = translate_rash_result(model, original, sleep=sleep)
    assert translated.analysis.condition == "संपर्क त्वचाशोथ"
    assert translated.analysis.severity == "moderate"
    assert translated.analysis.symptoms == ["लालिमा", "खुजली"]
    assert translated.analysis.recommendations == RASH["recommendations"]
    assert original.analysis.condition == "Contact Dermatitis"


def test_translation_failure_returns_original(sleep):
    original = parse_rash_response(json.dumps(RASH))
    model = FakeModel(RuntimeError("down"))
    assert translate_rash_result(model, original, sleep=sleep) is original


def test_translation_prompt():
    prompt = build_rash_translation_prompt(parse_rash_response(json.dumps(RASH)))
    assert "Hindi (Devanagari script)" in prompt
    assert '"whenToSeeDoctor"' in prompt
