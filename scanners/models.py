# scanners/models.py
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["high", "medium", "low"]
Grade = Literal["A", "B", "C", "D", "F"]
ScanType = Literal["food", "medicine"]
DietaryRestriction = Literal["vegan", "vegetarian", "diabetic", "none"]


class _WireModel(BaseModel):
    # camelCase on the wire (model JSON), snake_case in Python
    model_config = ConfigDict(populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class AllergyAlert(_WireModel):
    allergen: str
    severity: Severity = "low"
    found: bool = False


class NutritionScore(_WireModel):
    grade: Grade = "C"
    score: int = Field(70, ge=0, le=100)
    reasons: List[str] = []


class MedicineInfo(_WireModel):
    name: str
    generic_name: str = Field("", alias="genericName")
    uses: List[str] = []
    indications: List[str] = []
    side_effects: List[str] = Field([], alias="sideEffects")
    contraindications: List[str] = []
    dosage: str = ""
    precautions: List[str] = []
    interactions: Optional[List[str]] = None
    results: str = ""


class ScanResult(_WireModel):
    scan_type: ScanType = Field(alias="scanType")
    extracted_text: str = Field("", alias="extractedText")
    warnings: List[str] = []
    is_safe: bool = Field(True, alias="isSafe")
    # food payload
    ingredients: List[str] = []
    allergens: List[AllergyAlert] = []
    nutrition_score: NutritionScore = Field(default_factory=NutritionScore, alias="nutritionScore")
    safe_alternatives: List[str] = Field([], alias="safeAlternatives")
    # medicine payload
    medicine_info: Optional[MedicineInfo] = Field(None, alias="medicineInfo")


class UserProfile(_WireModel):
    allergies: List[str] = []
    dietary_restrictions: DietaryRestriction = Field("none", alias="dietaryRestrictions")
    health_conditions: List[str] = Field([], alias="healthConditions")


class RashAnalysis(_WireModel):
    condition: str = "Unknown Rash"
    severity: Literal["mild", "moderate", "severe"] = "mild"
    description: str = ""
    possible_causes: List[str] = Field([], alias="possibleCauses")
    recommendations: List[str] = []
    urgency: Literal["low", "medium", "high"] = "low"
    when_to_see_doctor: List[str] = Field([], alias="whenToSeeDoctor")
    symptoms: List[str] = []


class SkinRashResult(_WireModel):
    analysis: RashAnalysis
    extracted_text: str = Field("", alias="extractedText")
    confidence: float = 0.7


class VoiceIndicators(_WireModel):
    slow_speech: bool = Field(False, alias="slowSpeech")
    flat_tone: bool = Field(False, alias="flatTone")
    pauses: bool = False
    low_volume: bool = Field(False, alias="lowVolume")


class VoiceAnalysis(_WireModel):
    score: int = Field(70, ge=0, le=100)
    tone: Literal["happy", "neutral", "sad", "flat"] = "neutral"
    energy: Literal["high", "medium", "low"] = "medium"
    indicators: VoiceIndicators = Field(default_factory=VoiceIndicators)
    detected_mood: str = Field("Neutral", alias="detectedMood")
    confidence: float = 0.5


class MedicineSuggestion(_WireModel):
    name: str
    description: str
    usage: str


class MedicalResponse(_WireModel):
    response: str
    suggestions: Optional[List[MedicineSuggestion]] = None
