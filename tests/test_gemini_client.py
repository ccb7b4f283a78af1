import base64
import io
from types import SimpleNamespace

import pytest
from PIL import Image

import config
from conftest import FakeChatClient
from scanners.errors import ConfigurationError
from utils.gemini_client import (
    GenerationConfig, GenerativeModel, ImagePart, build_client, build_messages, generate_with_fallback, get_model,
    model_candidates,
)
from utils.images import bytes_to_jpeg_base64, image_to_jpeg_base64


class FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(content="  {\"ok\": true}  "):
    completions = FakeCompletions(content)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def test_build_messages_keeps_part_order():
    msgs = build_messages([ImagePart("QUJD"), "Describe this"])
    assert msgs == [{"role": "user", "content": [
        {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,QUJD"}},
        {"type": "text", "text": "Describe this"},
    ]}]


def test_generate_content_uses_generation_config():
    client, completions = fake_client()
    model = GenerativeModel(client, "gemini-2.0-flash")
    resp = model.generate_content(["hi"])
    assert resp.text == '{"ok": true}'
    assert completions.kwargs["model"] == "gemini-2.0-flash"
    assert completions.kwargs["temperature"] == pytest.approx(0.3)
    assert completions.kwargs["top_p"] == pytest.approx(0.9)
    assert completions.kwargs["max_tokens"] == 2000


def test_none_content_becomes_empty_text():
    client, _ = fake_client(content=None)
    assert GenerativeModel(client, "m").generate_content(["hi"]).text == ""


def test_get_model_defaults_to_preferred_candidate(monkeypatch):
    monkeypatch.setattr(config, "GEMINI_MODEL", "")
    client, _ = fake_client()
    model = get_model(client)
    assert model.model_name == config.MODEL_CANDIDATES[0]
    assert model.generation_config == GenerationConfig()

    small = get_model(client, "gemini-1.5-pro", GenerationConfig(max_output_tokens=500))
    assert small.model_name == "gemini-1.5-pro"
    assert small.generation_config.max_output_tokens == 500


def test_get_model_without_client():
    with pytest.raises(ConfigurationError, match="Gemini API key not configured"):
        get_model(None)


def test_build_client_without_key(monkeypatch):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "")
    with pytest.raises(ConfigurationError):
        build_client()


def test_build_client_points_at_gemini_endpoint(monkeypatch):
    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")
    client = build_client()
    assert str(client.base_url).startswith(config.GEMINI_BASE_URL.rstrip("/"))


def test_image_helpers_produce_jpeg_base64():
    img = Image.new("RGBA", (8, 8), (255, 0, 0, 255))
    b64 = image_to_jpeg_base64(img)
    assert base64.b64decode(b64)[:2] == b"\xff\xd8"

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    assert base64.b64decode(bytes_to_jpeg_base64(buf.getvalue()))[:2] == b"\xff\xd8"


def test_model_candidates_put_configured_model_first(monkeypatch):
    monkeypatch.setattr(config, "GEMINI_MODEL", "gemini-1.5-flash")
    names = model_candidates()
    assert names[0] == "gemini-1.5-flash"
    assert sorted(names) == sorted(config.MODEL_CANDIDATES)


def test_generate_with_fallback_walks_candidates():
    client = FakeChatClient(RuntimeError("404 model not found"), RuntimeError("503"), "ok")
    resp = generate_with_fallback(client, ["hi"], ["a", "b", "c"], GenerationConfig(temperature=0.7))
    assert resp.text == "ok"
    assert client.models == ["a", "b", "c"]


def test_generate_with_fallback_reraises_last_error():
    client = FakeChatClient(RuntimeError("first"), ValueError("last"))
    with pytest.raises(ValueError, match="last"):
        generate_with_fallback(client, ["hi"], ["a", "b"])


def test_generate_with_fallback_needs_client():
    with pytest.raises(ConfigurationError):
        generate_with_fallback(None, ["hi"], ["a"])
