# utils/utils_retries.py
import logging
import time

from tenacity import Retrying, before_sleep_log, retry_if_exception, stop_after_attempt, wait_exponential

log = logging.getLogger(__name__)


def is_rate_limit_error(err: BaseException) -> bool:
    """429 / 'Resource exhausted' from the Gemini API. Everything else is not retried."""
    if getattr(err, "status_code", None) == 429:
        return True
    msg = str(err)
    return "429" in msg or "resource exhausted" in msg.lower()


def generate_content_with_retry(model, contents, max_retries: int = 3, sleep=time.sleep):
    """
    model.generate_content(contents) with exponential backoff on rate limits.

    max_retries is the total number of attempts. Waits 2**attempt seconds
    (2s, 4s, 8s ...) between attempts; the last error is re-raised.
    """
    retryer = Retrying(
        reraise=True,
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=2, exp_base=2),
        retry=retry_if_exception(is_rate_limit_error),
        before_sleep=before_sleep_log(log, logging.WARNING),
        sleep=sleep,
    )
    return retryer(model.generate_content, contents)
