# scanners/label_scan.py
# Two-pass label scan: medicine prompt first, food prompt as the fallback.
from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from scanners import fallbacks
from scanners.allergens import allergen_severity, check_allergens
from scanners.common import (
    as_bool, as_choice, as_score, as_str_list, as_text,
    extract_json_object, strip_data_url_prefix,
)
from scanners.errors import ConfigurationError, RateLimitedError, ScanError, ScanParseError
from scanners.models import AllergyAlert, MedicineInfo, NutritionScore, ScanResult, UserProfile
from utils.gemini_client import ImagePart
from utils.utils_retries import generate_content_with_retry, is_rate_limit_error

log = logging.getLogger(__name__)

GRADES = ("A", "B", "C", "D", "F")
SEVERITIES = ("high", "medium", "low")
INCOMPLETE_WARNING = "Analysis incomplete. Please try again or check manually."

# ---------- Prompts ----------
MEDICINE_PROMPT = """
You are a medical information AI analyzing a medicine packet/prescription. Extract ALL information from the image.

CRITICAL: You MUST provide comprehensive information. If information is not visible on the packet, use your medical knowledge to provide common/typical information for that medicine type.

IMPORTANT: Return ONLY valid JSON, no additional text or markdown formatting.

Analyze the medicine packet and return a JSON object with this exact structure:

{
  "scanType": "medicine",
  "extractedText": "Full text extracted from the packet",
  "medicineInfo": {
    "name": "Brand name of medicine",
    "genericName": "Generic/chemical name",
    "uses": ["Use 1", "Use 2", "Use 3"],
    "indications": ["Indication 1", "Indication 2"],
    "sideEffects": ["Side effect 1", "Side effect 2", "Side effect 3"],
    "contraindications": ["Who should not take this", "Conditions to avoid"],
    "dosage": "Recommended dosage information",
    "precautions": ["Precaution 1", "Precaution 2"],
    "interactions": ["Drug interaction 1", "Drug interaction 2"],
    "results": "Expected results/outcomes when taking this medicine"
  },
  "warnings": ["Warning 1", "Warning 2"],
  "isSafe": true,
  "ingredients": [],
  "allergens": [],
  "nutritionScore": null,
  "safeAlternatives": []
}

MANDATORY RULES:
1. ALWAYS extract medicine name (brand name) - if not visible, use "Unknown Medicine"
2. ALWAYS provide at least 3-5 uses/indications - what conditions this medicine treats. If not visible, provide common uses for this type of medicine based on the name/ingredients.
3. ALWAYS provide at least 3-5 side effects - common side effects for this medicine type.
4. ALWAYS provide contraindications - who should not take it (pregnant women, children, people with certain conditions).
5. ALWAYS extract dosage information - if not visible, provide typical dosage for this medicine type.
6. ALWAYS provide at least 2-3 precautions - safety warnings (take with food, avoid alcohol, etc.)
7. ALWAYS mention drug interactions - common interactions with other medicines if any.
8. ALWAYS describe expected results/outcomes - what happens when taking this medicine.
9. Include any warnings from the packet.
10. Set isSafe based on whether there are critical warnings.

EXAMPLES:
- If medicine name is "Paracetamol" or "Acetaminophen": uses should include "Fever, Pain relief, Headache"
- If it's an antibiotic: uses should include "Bacterial infections", side effects should include "Nausea, Diarrhea, Allergic reactions"
- If it's an antacid: uses should include "Acid reflux, Heartburn, Stomach upset"

Never return empty arrays for uses, sideEffects, or contraindications.

Return ONLY the JSON object, no markdown, no code blocks.
""".strip()

FOOD_PROMPT_TEMPLATE = """
You are a food safety AI analyzing a food product label. Analyze the image and extract ALL information.

IMPORTANT: Return ONLY valid JSON, no additional text or markdown formatting.

Set "scanType": "food" in the response.

User's allergies to check:
{allergy_list}

Dietary restrictions: {restriction}{restriction_note}

Health conditions to consider: {conditions}

Analyze the label and return a JSON object with this exact structure:

{{
  "scanType": "food",
  "extractedText": "Full text extracted from the label",
  "ingredients": ["ingredient1", "ingredient2"],
  "allergens": [
    {{"allergen": "Peanuts", "severity": "high", "found": true}}
  ],
  "nutritionScore": {{"grade": "A", "score": 85, "reasons": ["Reason 1", "Reason 2"]}},
  "warnings": ["Warning message 1", "Warning message 2"],
  "safeAlternatives": ["Alternative product 1", "Alternative product 2"],
  "isSafe": true,
  "medicineInfo": null
}}

RULES:
1. Extract ALL ingredients from the label text
2. Check against user allergies - mark "found": true if allergen is present
3. Set severity: "high" for life-threatening (peanuts, tree nuts, shellfish), "medium" for serious (dairy, eggs), "low" for mild reactions
4. Calculate nutrition score:
   - Grade A (90-100): Excellent, minimal processed ingredients, low sugar/sodium
   - Grade B (80-89): Good, some processed ingredients
   - Grade C (70-79): Moderate, contains some additives
   - Grade D (60-69): Poor, high sugar/sodium/processed
   - Grade F (0-59): Very poor, avoid - high risk ingredients
5. If ANY allergen found, set isSafe: false
6. If restriction violated (vegan/vegetarian/diabetic), set isSafe: false
7. Provide 2-3 safe alternative product suggestions
8. Include specific warnings for high-risk ingredients

Return ONLY the JSON object, no markdown, no code blocks.
""".strip()

RESTRICTION_NOTES = {
    "vegan": "\n- Check for animal products (meat, dairy, eggs, honey, gelatin, etc.)",
    "vegetarian": "\n- Check for meat products",
    "diabetic": "\n- Check sugar content (avoid if >10g per serving)",
}


def build_medicine_prompt() -> str:
    return MEDICINE_PROMPT


def build_food_prompt(
    allergies: Sequence[str] = (),
    restriction: str = "none",
    conditions: Sequence[str] = (),
) -> str:
    """Food-label prompt personalised with the user's allergies, diet and conditions."""
    allergy_list = "\n".join(f"- {a}" for a in allergies) if allergies else "None specified"
    return FOOD_PROMPT_TEMPLATE.format(
        allergy_list=allergy_list,
        restriction=restriction or "none",
        restriction_note=RESTRICTION_NOTES.get(restriction, ""),
        conditions=", ".join(conditions) or "None",
    )


# ---------- Parsing / normalisation ----------
def _normalize_allergens(raw: Any) -> List[AllergyAlert]:
    if not isinstance(raw, list):
        return []
    out: List[AllergyAlert] = []
    for item in raw:
        if isinstance(item, str) and item.strip():
            item = {"allergen": item, "found": True}
        if not isinstance(item, dict):
            continue
        name = as_text(item.get("allergen"))
        if not name:
            continue
        out.append(AllergyAlert(
            allergen=name,
            severity=as_choice(item.get("severity"), SEVERITIES, allergen_severity(name)),
            found=as_bool(item.get("found"), False),
        ))
    return out


def _normalize_nutrition(raw: Any) -> NutritionScore:
    if not isinstance(raw, dict):
        return NutritionScore(grade="C", score=70, reasons=[])
    return NutritionScore(
        grade=as_choice(raw.get("grade"), GRADES, "C"),
        score=as_score(raw.get("score"), 70),
        reasons=as_str_list(raw.get("reasons")),
    )


def _normalize_medicine(raw: Any) -> Optional[MedicineInfo]:
    if not isinstance(raw, dict):
        return None
    name = as_text(raw.get("name"), fallbacks.UNKNOWN_MEDICINE)
    uses = as_str_list(raw.get("uses"))
    interactions = raw.get("interactions")
    return MedicineInfo(
        name=name,
        generic_name=as_text(raw.get("genericName"), as_text(raw.get("name"))),
        uses=uses or fallbacks.fallback_uses(name),
        indications=as_str_list(raw.get("indications")) or list(uses),
        side_effects=as_str_list(raw.get("sideEffects")) or fallbacks.fallback_side_effects(name),
        contraindications=as_str_list(raw.get("contraindications")) or fallbacks.fallback_contraindications(),
        dosage=as_text(raw.get("dosage"), fallbacks.DEFAULT_DOSAGE),
        precautions=as_str_list(raw.get("precautions")) or fallbacks.fallback_precautions(),
        interactions=as_str_list(interactions) if isinstance(interactions, list) else [],
        results=as_text(raw.get("results"), fallbacks.DEFAULT_RESULTS),
    )


def normalize_scan_payload(parsed: Dict[str, Any], is_medicine: bool = False) -> ScanResult:
    """Loose model JSON → ScanResult, every field defaulted rather than omitted."""
    return ScanResult(
        scan_type=as_choice(parsed.get("scanType"), ("food", "medicine"), "medicine" if is_medicine else "food"),
        extracted_text=as_text(parsed.get("extractedText")),
        warnings=as_str_list(parsed.get("warnings")),
        is_safe=parsed.get("isSafe") is not False,
        ingredients=as_str_list(parsed.get("ingredients")),
        allergens=_normalize_allergens(parsed.get("allergens")),
        nutrition_score=_normalize_nutrition(parsed.get("nutritionScore")),
        safe_alternatives=as_str_list(parsed.get("safeAlternatives")),
        medicine_info=_normalize_medicine(parsed.get("medicineInfo")),
    )


def parse_scan_response(text: str, is_medicine: bool = False) -> ScanResult:
    """Raises ScanParseError only when the text holds no usable JSON object."""
    return normalize_scan_payload(extract_json_object(text), is_medicine)


def degraded_scan_result(text: str, is_medicine: bool = False) -> ScanResult:
    """What the screen shows when the model answered but not with JSON."""
    return ScanResult(
        scan_type="medicine" if is_medicine else "food",
        extracted_text=text or "",
        warnings=[INCOMPLETE_WARNING],
        is_safe=True,
        nutrition_score=NutritionScore(grade="C", score=70, reasons=["Unable to fully analyze label"]),
        medicine_info=MedicineInfo(name="Unknown") if is_medicine else None,
    )


def parse_or_degrade(text: str, is_medicine: bool = False) -> ScanResult:
    try:
        return parse_scan_response(text, is_medicine)
    except ScanParseError as e:
        log.warning("Could not parse %s scan response: %s", "medicine" if is_medicine else "food", e)
        return degraded_scan_result(text, is_medicine)


def is_usable_medicine(result: ScanResult) -> bool:
    info = result.medicine_info
    return bool(
        info
        and info.name
        and info.name != fallbacks.UNKNOWN_MEDICINE
        and (info.uses or info.side_effects)
    )


def apply_profile_allergens(result: ScanResult, allergies: Sequence[str]) -> ScanResult:
    """
    Cross-check the user's allergies against the parsed ingredients locally.
    Hits the model missed are added (or flipped to found) and mark the result unsafe.
    """
    hits = check_allergens(result.ingredients, allergies) if allergies else []
    if not hits:
        return result

    alerts = list(result.allergens)
    index = {a.allergen.strip().lower(): i for i, a in enumerate(alerts)}
    for hit in hits:
        i = index.get(hit.allergen.strip().lower())
        if i is None:
            log.info("Local check found allergen %s missing from model output", hit.allergen)
            alerts.append(hit)
        elif not alerts[i].found:
            alerts[i] = alerts[i].model_copy(update={"found": True})
    return result.model_copy(update={"allergens": alerts, "is_safe": False})


# ---------- Orchestration ----------
def analyze_label_image(
    model,
    image_base64: str,
    user_profile: Optional[UserProfile] = None,
    max_retries: int = 2,
    sleep=time.sleep,
) -> ScanResult:
    """
    Scan a medicine packet or food label photo.

    Pass 1 asks for medicine data and is accepted only when it names a real
    medicine. Otherwise pass 2 asks for food data, which is cross-checked
    against the profile allergies before it is returned.
    """
    if model is None:
        raise ConfigurationError()

    profile = user_profile or UserProfile()
    image = ImagePart(data=strip_data_url_prefix(image_base64), mime_type="image/jpeg")
    medicine_result: Optional[ScanResult] = None

    try:
        resp = generate_content_with_retry(model, [image, build_medicine_prompt()], max_retries, sleep)
        medicine_result = parse_or_degrade(resp.text, is_medicine=True)
        if is_usable_medicine(medicine_result):
            return medicine_result
        log.info("Medicine pass found no medicine, trying food analysis")
    except Exception as e:
        if is_rate_limit_error(e):
            log.warning("Rate limit on medicine analysis, trying food analysis")
        else:
            log.warning("Medicine analysis failed, trying food analysis: %s", e)

    food_prompt = build_food_prompt(profile.allergies, profile.dietary_restrictions, profile.health_conditions)
    try:
        resp = generate_content_with_retry(model, [image, food_prompt], max_retries, sleep)
    except Exception as e:
        log.error("Food analysis also failed: %s", e)
        if medicine_result is not None and medicine_result.medicine_info is not None:
            return medicine_result
        if is_rate_limit_error(e):
            raise RateLimitedError() from e
        raise ScanError(f"Failed to analyze label: {e}") from e
    return apply_profile_allergens(parse_or_degrade(resp.text, is_medicine=False), profile.allergies)
