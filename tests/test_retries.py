import pytest

from conftest import FakeModel
from utils.utils_retries import generate_content_with_retry, is_rate_limit_error


class FakeAPIStatusError(Exception):
    def __init__(self, message, status_code):
        super().__init__(message)
        self.status_code = status_code


def test_rate_limit_signatures():
    assert is_rate_limit_error(Exception("Error code: 429 - quota"))
    assert is_rate_limit_error(Exception("[GoogleGenerativeAI Error]: Resource exhausted"))
    assert is_rate_limit_error(FakeAPIStatusError("Too many requests", 429))
    assert not is_rate_limit_error(Exception("Error code: 400 - bad image"))
    assert not is_rate_limit_error(FakeAPIStatusError("Server error", 500))


def test_backs_off_2s_then_4s_and_returns_third_attempt(sleep):
    model = FakeModel(Exception("429 Too Many Requests"), Exception("Resource exhausted"), "ok")
    resp = generate_content_with_retry(model, ["prompt"], max_retries=3, sleep=sleep)
    assert resp.text == "ok"
    assert sleep.calls == [2, 4]
    assert len(model.calls) == 3


def test_non_rate_limit_error_is_not_retried(sleep):
    model = FakeModel(ValueError("invalid argument"), "never reached")
    with pytest.raises(ValueError, match="invalid argument"):
        generate_content_with_retry(model, ["prompt"], max_retries=3, sleep=sleep)
    assert sleep.calls == []
    assert len(model.calls) == 1


def test_last_error_reraised_after_exhausting_attempts(sleep):
    errors = [Exception("429 first"), Exception("429 second")]
    model = FakeModel(*errors)
    with pytest.raises(Exception) as excinfo:
        generate_content_with_retry(model, ["prompt"], max_retries=2, sleep=sleep)
    assert excinfo.value is errors[1]
    assert sleep.calls == [2]
    assert len(model.calls) == 2


def test_contents_passed_through_unchanged(sleep):
    model = FakeModel("ok")
    generate_content_with_retry(model, ["a", "b"], sleep=sleep)
    assert model.calls == [["a", "b"]]
