# scanners/fallbacks.py
"""
Keyword tables that keep medicine results from ever showing blank.

Each table is an ordered list of (name substrings, defaults); the first row
whose substring occurs in the lower-cased medicine name wins, otherwise the
catch-all default applies. These are generic placeholders, not medical advice.
"""
from typing import List, Sequence, Tuple

KeywordTable = Sequence[Tuple[Tuple[str, ...], Tuple[str, ...]]]

USES_TABLE: KeywordTable = [
    (("paracetamol", "acetaminophen"),
     ("Fever", "Pain relief", "Headache", "Body aches", "Toothache")),
    (("ibuprofen",),
     ("Pain relief", "Inflammation", "Fever", "Arthritis", "Menstrual cramps")),
    (("antibiotic", "amoxicillin", "azithromycin"),
     ("Bacterial infections", "Respiratory infections", "Skin infections", "UTI", "Ear infections")),
    (("antacid", "ranitidine", "omeprazole"),
     ("Acid reflux", "Heartburn", "Stomach upset", "Indigestion", "Gastritis")),
    (("cough", "syrup"),
     ("Cough relief", "Cold symptoms", "Throat irritation", "Chest congestion")),
    (("antihistamine", "loratadine", "cetirizine"),
     ("Allergies", "Hay fever", "Itching", "Rashes", "Runny nose")),
]
DEFAULT_USES = ("Pain relief", "Symptom management", "Treatment as prescribed", "Consult doctor for specific use")

SIDE_EFFECTS_TABLE: KeywordTable = [
    (("antibiotic",),
     ("Nausea", "Diarrhea", "Stomach upset", "Allergic reactions", "Dizziness")),
    (("pain", "ibuprofen", "paracetamol"),
     ("Nausea", "Dizziness", "Stomach upset", "Headache", "Drowsiness")),
    (("antacid",),
     ("Constipation", "Diarrhea", "Nausea", "Stomach cramps")),
    (("antihistamine",),
     ("Drowsiness", "Dry mouth", "Dizziness", "Headache", "Nausea")),
]
DEFAULT_SIDE_EFFECTS = ("Nausea", "Dizziness", "Headache", "Stomach upset", "Allergic reactions (rare)")

DEFAULT_CONTRAINDICATIONS = ("Pregnant women", "Children under 12", "People with allergies to ingredients")
DEFAULT_PRECAUTIONS = ("Take with food if stomach upset occurs", "Avoid alcohol", "Consult doctor if symptoms persist")
DEFAULT_DOSAGE = "As prescribed by doctor"
DEFAULT_RESULTS = "Provides relief from symptoms as indicated"
UNKNOWN_MEDICINE = "Unknown Medicine"


def lookup(table: KeywordTable, name: str, default: Sequence[str]) -> List[str]:
    key = (name or "").lower()
    for keywords, values in table:
        if any(k in key for k in keywords):
            return list(values)
    return list(default)


def fallback_uses(medicine_name: str) -> List[str]:
    return lookup(USES_TABLE, medicine_name, DEFAULT_USES)


def fallback_side_effects(medicine_name: str) -> List[str]:
    return lookup(SIDE_EFFECTS_TABLE, medicine_name, DEFAULT_SIDE_EFFECTS)


def fallback_contraindications() -> List[str]:
    return list(DEFAULT_CONTRAINDICATIONS)


def fallback_precautions() -> List[str]:
    return list(DEFAULT_PRECAUTIONS)
