import pytest

from conftest import FakeModel, as_model_text
from scanners.errors import ConfigurationError, RateLimitedError, ScanError
from scanners.label_scan import analyze_label_image, build_food_prompt, build_medicine_prompt
from scanners.models import UserProfile
from utils.gemini_client import ImagePart

IMAGE = "data:image/jpeg;base64,/9j/4AAQSkZJRg=="


def test_usable_medicine_pass_skips_food(medicine_payload, sleep):
    model = FakeModel(as_model_text(medicine_payload))
    result = analyze_label_image(model, IMAGE, sleep=sleep)
    assert result.scan_type == "medicine"
    assert result.medicine_info.name == "Crocin"
    assert len(model.calls) == 1


def test_image_part_comes_first_without_data_url_prefix(medicine_payload, sleep):
    model = FakeModel(as_model_text(medicine_payload))
    analyze_label_image(model, IMAGE, sleep=sleep)
    image, prompt = model.calls[0]
    assert image == ImagePart(data="/9j/4AAQSkZJRg==", mime_type="image/jpeg")
    assert prompt == build_medicine_prompt()


def test_unknown_medicine_falls_through_to_sparse_food(sleep):
    medicine_text = as_model_text({"scanType": "medicine", "medicineInfo": {
        "name": "Unknown Medicine", "uses": [], "sideEffects": []}})
    food_text = '{"scanType": "food"}'
    model = FakeModel(medicine_text, food_text)

    result = analyze_label_image(model, IMAGE, sleep=sleep)

    assert len(model.calls) == 2
    assert model.calls[1][1] == build_food_prompt()
    assert result.scan_type == "food"
    assert result.ingredients == []
    assert result.nutrition_score.grade == "C"


def test_medicine_without_medicine_info_falls_through(food_payload, sleep):
    model = FakeModel('{"scanType": "medicine"}', as_model_text(food_payload))
    result = analyze_label_image(model, IMAGE, sleep=sleep)
    assert result.scan_type == "food"
    assert result.ingredients == ["oats", "peanuts", "sugar"]


def test_food_prompt_uses_profile(food_payload, sleep):
    profile = UserProfile(allergies=["Peanuts"], dietary_restrictions="vegan", health_conditions=["Diabetes"])
    model = FakeModel("not json", as_model_text(food_payload))
    analyze_label_image(model, IMAGE, profile, sleep=sleep)
    assert model.calls[1][1] == build_food_prompt(["Peanuts"], "vegan", ["Diabetes"])


def test_medicine_error_then_food_success(food_payload, sleep):
    model = FakeModel(RuntimeError("boom"), as_model_text(food_payload))
    result = analyze_label_image(model, IMAGE, sleep=sleep)
    assert result.scan_type == "food"
    assert sleep.calls == []


def test_unparseable_food_response_is_degraded(sleep):
    model = FakeModel(RuntimeError("boom"), "The label is too blurry to read.")
    result = analyze_label_image(model, IMAGE, sleep=sleep)
    assert result.nutrition_score.grade == "C"
    assert result.nutrition_score.score == 70
    assert result.warnings


def test_both_passes_rate_limited_raises_user_message(sleep):
    model = FakeModel(*[Exception("429 Too Many Requests")] * 4)
    with pytest.raises(RateLimitedError, match="rate limit reached"):
        analyze_label_image(model, IMAGE, max_retries=2, sleep=sleep)
    assert len(model.calls) == 4
    assert sleep.calls == [2, 2]


def test_both_passes_fail_generic(sleep):
    model = FakeModel(RuntimeError("medicine down"), RuntimeError("food down"))
    with pytest.raises(ScanError, match="food down") as excinfo:
        analyze_label_image(model, IMAGE, sleep=sleep)
    assert not isinstance(excinfo.value, RateLimitedError)


def test_rejected_medicine_result_returned_when_food_fails(sleep):
    medicine_text = '{"medicineInfo": {"name": "Unknown Medicine"}}'
    model = FakeModel(medicine_text, RuntimeError("food down"))
    result = analyze_label_image(model, IMAGE, sleep=sleep)
    assert result.scan_type == "medicine"
    assert result.medicine_info.name == "Unknown Medicine"
    assert result.medicine_info.uses


def test_missing_model_is_configuration_error():
    with pytest.raises(ConfigurationError, match="Gemini API key not configured"):
        analyze_label_image(None, IMAGE)


def test_prompts_are_deterministic():
    assert build_food_prompt(["Milk"], "diabetic", ["BP"]) == build_food_prompt(["Milk"], "diabetic", ["BP"])
    assert build_medicine_prompt() == build_medicine_prompt()


def test_food_prompt_contents():
    prompt = build_food_prompt(["Peanuts", "Milk"], "vegan", ["Hypertension", "Diabetes"])
    assert "- Peanuts\n- Milk" in prompt
    assert "Dietary restrictions: vegan" in prompt
    assert "Check for animal products" in prompt
    assert "Health conditions to consider: Hypertension, Diabetes" in prompt

    empty = build_food_prompt()
    assert "None specified" in empty
    assert "Health conditions to consider: None" in empty
    assert '"scanType": "food"' in empty


def test_profile_allergy_missed_by_model_is_added(sleep):
    food = {"scanType": "food", "isSafe": True, "ingredients": ["wheat flour", "skimmed milk powder", "sulphtes"],
            "allergens": [{"allergen": "Milk", "severity": "medium", "found": False}]}
    model = FakeModel("{}", as_model_text(food))
    profile = UserProfile(allergies=["Milk", "Sulphites", "Peanuts"])

    result = analyze_label_image(model, IMAGE, profile, sleep=sleep)

    assert result.is_safe is False
    assert [(a.allergen, a.severity, a.found) for a in result.allergens] == [
        ("Milk", "medium", True),
        ("Sulphites", "low", True),
    ]


def test_profile_without_hits_leaves_food_result_alone(food_payload, sleep):
    food_payload["isSafe"] = True
    food_payload["allergens"] = []
    model = FakeModel("{}", as_model_text(food_payload))
    result = analyze_label_image(model, IMAGE, UserProfile(allergies=["Shellfish"]), sleep=sleep)
    assert result.is_safe is True
    assert result.allergens == []
