# scanners/label_translation.py
# Best-effort translation of a finished ScanResult. Never fatal to the scan.
from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, List, Optional

from scanners.common import as_choice, as_score, extract_json_object
from scanners.errors import ConfigurationError
from scanners.models import AllergyAlert, NutritionScore, ScanResult
from utils.utils_retries import generate_content_with_retry

log = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "Hindi"
SCRIPTS = {"Hindi": "Devanagari", "Marathi": "Devanagari", "Bengali": "Bengali", "Tamil": "Tamil"}

MEDICINE_FIELDS = (
    "name", "genericName", "uses", "indications", "sideEffects",
    "contraindications", "dosage", "precautions", "interactions", "results",
)

TRANSLATION_TEMPLATE = """
Translate this {subject} information to {language}{script_note}. Keep the structure and return JSON.

Original English:
{payload}

Translate ALL text to {language}. Return ONLY valid JSON with the same structure, all text in {language}{script_note}.
""".strip()


def _translation_payload(result: ScanResult) -> Dict[str, Any]:
    if result.scan_type == "medicine" and result.medicine_info:
        info = result.medicine_info.to_json_dict()
        info["interactions"] = info.get("interactions") or []
        payload = {k: info[k] for k in MEDICINE_FIELDS}
        payload["warnings"] = list(result.warnings)
        return payload
    return {
        "ingredients": list(result.ingredients),
        "nutritionScore": result.nutrition_score.to_json_dict(),
        "warnings": list(result.warnings),
        "safeAlternatives": list(result.safe_alternatives),
        "allergens": [a.to_json_dict() for a in result.allergens],
    }


def build_translation_prompt(result: ScanResult, language: str = DEFAULT_LANGUAGE) -> str:
    """Deterministic: the same result and language always give the same prompt."""
    subject = "medicine" if result.scan_type == "medicine" and result.medicine_info else "food label"
    script = SCRIPTS.get(language)
    return TRANSLATION_TEMPLATE.format(
        subject=subject,
        language=language,
        script_note=f" ({script} script)" if script else "",
        payload=json.dumps(_translation_payload(result), ensure_ascii=False, indent=2),
    )


def _str_list_or(value: Any, original: List[str]) -> List[str]:
    if isinstance(value, list) and value and all(isinstance(v, str) for v in value):
        return value
    return list(original)


def _interactions_or(value: Any, original: Optional[List[str]]) -> Optional[List[str]]:
    if isinstance(value, list) and value and all(isinstance(v, str) for v in value):
        return value
    return list(original) if original is not None else None


def _str_or(value: Any, original: str) -> str:
    return value if isinstance(value, str) and value.strip() else original


def _merge_allergens(raw: Any, original: List[AllergyAlert]) -> List[AllergyAlert]:
    """One alert per original alert; a translated entry at the same index overlays it."""
    items = raw if isinstance(raw, list) else []
    merged: List[AllergyAlert] = []
    for idx, base in enumerate(original):
        item = items[idx] if idx < len(items) else None
        if isinstance(item, str):
            item = {"allergen": item}
        if not isinstance(item, dict):
            merged.append(base.model_copy())
            continue
        # severity/found come from the English result; a translation can't change the verdict
        merged.append(base.model_copy(update={"allergen": _str_or(item.get("allergen"), base.allergen)}))
    return merged


def merge_translation(parsed: Dict[str, Any], original: ScanResult) -> ScanResult:
    """
    Overlay translated fields on a copy of original. Any field the translation
    left out (or mangled) keeps the original value.
    """
    result = original.model_copy(deep=True)
    result.warnings = _str_list_or(parsed.get("warnings"), original.warnings)

    if original.scan_type == "medicine" and original.medicine_info:
        info = original.medicine_info
        result.medicine_info = info.model_copy(update={
            "name": _str_or(parsed.get("name"), info.name),
            "generic_name": _str_or(parsed.get("genericName"), info.generic_name),
            "uses": _str_list_or(parsed.get("uses"), info.uses),
            "indications": _str_list_or(parsed.get("indications"), info.indications),
            "side_effects": _str_list_or(parsed.get("sideEffects"), info.side_effects),
            "contraindications": _str_list_or(parsed.get("contraindications"), info.contraindications),
            "dosage": _str_or(parsed.get("dosage"), info.dosage),
            "precautions": _str_list_or(parsed.get("precautions"), info.precautions),
            "interactions": _interactions_or(parsed.get("interactions"), info.interactions),
            "results": _str_or(parsed.get("results"), info.results),
        }, deep=True)
        return result

    result.ingredients = _str_list_or(parsed.get("ingredients"), original.ingredients)
    result.safe_alternatives = _str_list_or(parsed.get("safeAlternatives"), original.safe_alternatives)
    result.allergens = _merge_allergens(parsed.get("allergens"), original.allergens)
    ns = parsed.get("nutritionScore")
    if isinstance(ns, dict):
        orig = original.nutrition_score
        result.nutrition_score = NutritionScore(
            grade=as_choice(ns.get("grade"), ("A", "B", "C", "D", "F"), orig.grade),
            score=as_score(ns.get("score"), orig.score),
            reasons=_str_list_or(ns.get("reasons"), orig.reasons),
        )
    return result


def translate_scan_result(
    model,
    result: ScanResult,
    language: str = DEFAULT_LANGUAGE,
    max_retries: int = 2,
    sleep=time.sleep,
) -> ScanResult:
    """Translated copy of result, or result itself if anything goes wrong."""
    if model is None:
        raise ConfigurationError()
    try:
        resp = generate_content_with_retry(model, [build_translation_prompt(result, language)], max_retries, sleep)
        return merge_translation(extract_json_object(resp.text), result)
    except Exception:
        log.exception("Translation to %s failed; keeping original result", language)
        return result
