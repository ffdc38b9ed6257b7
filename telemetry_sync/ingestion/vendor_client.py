import requests
from typing import Any, Dict, Optional
from tenacity import Retrying, retry_if_exception_type, retry_if_not_exception_type, stop_after_attempt, wait_exponential
from ..utils.logging import get_logger

logger = get_logger(__name__)

class FetchError(RuntimeError):
    """A vendor request failed or returned a payload of the wrong shape."""

class VendorClient:
    def __init__(self, timeout_s: int = 30, attempts: int = 1):
        self.timeout_s = timeout_s
        self.attempts = max(1, attempts)

    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        retrying = Retrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_exponential(min=1, max=10),
            # requests.JSONDecodeError subclasses RequestException
            retry=retry_if_exception_type(requests.RequestException) & retry_if_not_exception_type(requests.JSONDecodeError),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info(f"Retrying {url} (attempt {attempt.retry_state.attempt_number}/{self.attempts})")
                r = requests.get(url, params=params, timeout=self.timeout_s)
                r.raise_for_status()
                return r.json()
