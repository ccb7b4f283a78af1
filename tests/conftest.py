import json
from types import SimpleNamespace

import pytest


class FakeModel:
    """
    Scripted stand-in for utils.gemini_client.GenerativeModel.

    Each entry in `script` is either a string (returned as response text) or an
    exception instance (raised). Every call's content parts are recorded.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.calls = []

    def generate_content(self, contents):
        self.calls.append(list(contents))
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return SimpleNamespace(text=item)


class FakeChatClient:
    """
    Scripted stand-in for the OpenAI client: chat.completions.create pops the
    next script entry (text, or an exception to raise) and records the model name.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.models = []
        self.prompts = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, model, messages, **kwargs):
        self.models.append(model)
        self.prompts.append(messages[0]["content"][0]["text"])
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        message = SimpleNamespace(content=item)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class RecordingSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


def as_model_text(payload: dict, fenced: bool = False) -> str:
    body = json.dumps(payload, ensure_ascii=False)
    return f"```json\n{body}\n```" if fenced else body


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def food_payload():
    return {
        "scanType": "food",
        "extractedText": "Ingredients: oats, peanuts, sugar",
        "warnings": ["Contains peanuts"],
        "isSafe": False,
        "ingredients": ["oats", "peanuts", "sugar"],
        "allergens": [{"allergen": "Peanuts", "severity": "high", "found": True}],
        "nutritionScore": {"grade": "B", "score": 82, "reasons": ["Whole grain oats"]},
        "safeAlternatives": ["Plain oat bar"],
        "medicineInfo": None,
    }


@pytest.fixture
def medicine_payload():
    return {
        "scanType": "medicine",
        "extractedText": "Crocin 500 Paracetamol Tablets IP",
        "warnings": ["Do not exceed 4 tablets in 24 hours"],
        "isSafe": True,
        "ingredients": [],
        "allergens": [],
        "nutritionScore": {"grade": "C", "score": 70, "reasons": []},
        "safeAlternatives": [],
        "medicineInfo": {
            "name": "Crocin",
            "genericName": "Paracetamol",
            "uses": ["Fever", "Headache"],
            "indications": ["Mild to moderate pain"],
            "sideEffects": ["Nausea"],
            "contraindications": ["Severe liver disease"],
            "dosage": "1 tablet every 6 hours",
            "precautions": ["Avoid alcohol"],
            "interactions": ["Warfarin"],
            "results": "Fever comes down within an hour",
        },
    }
