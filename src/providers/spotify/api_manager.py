"""
api_manager.py

HTTP retry engine for the Spotify Web API.

Responsibilities:
- Bounded retries with exponential backoff
- Honour Retry-After on 429
- HTTP / network failure -> PodsyncError(transport_error) translation

Does NOT:
- Refresh tokens (auth provider owns that)
- Parse response bodies
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

import config
from errors import PodsyncError, transport_error
from logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = config.DEFAULT_MAX_RETRIES
    backoff_base_sec: float = config.DEFAULT_BACKOFF_BASE_SEC


# ============================================================
# Error detection helpers
# ============================================================


def is_transient_status(status_code: int) -> bool:
    return status_code in config.TRANSIENT_STATUS_CODES


def _retry_after_seconds(response: requests.Response) -> Optional[float]:
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return max(0.0, float(raw))
    except (TypeError, ValueError):
        return None


def _error_detail(response: requests.Response) -> str:
    """
    Spotify errors look like {"error": {"status": 404, "message": "..."}}.
    """
    try:
        payload = response.json()
    except ValueError:
        return (response.text or "").strip()[:200]

    err = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(err, dict):
        return str(err.get("message") or "")
    if isinstance(err, str):
        return err
    return ""


def _describe(name: str, response: requests.Response) -> str:
    detail = _error_detail(response)
    msg = f"{name} failed (HTTP {response.status_code})"
    return f"{msg}: {detail}" if detail else msg


# ============================================================
# Retry engine
# ============================================================


def execute_with_retry(
    operation: Callable[[], requests.Response],
    name: str,
    policy: RetryPolicy = RetryPolicy(),
) -> requests.Response:
    """
    Run ``operation`` until it returns a non-error response.

    Transient HTTP statuses and connection/timeout errors are retried up to
    ``policy.max_retries`` attempts in total. Anything else fails immediately.
    """
    attempts = max(1, policy.max_retries)
    last_error: Optional[PodsyncError] = None

    for attempt in range(attempts):
        delay = policy.backoff_base_sec * (2**attempt)

        try:
            response = operation()
        except (requests.ConnectionError, requests.Timeout) as e:
            last_error = transport_error(f"{name} failed: {e}")
        except requests.RequestException as e:
            raise transport_error(f"{name} failed: {e}") from e
        else:
            if response.status_code < 400:
                return response

            if not is_transient_status(response.status_code):
                raise transport_error(
                    _describe(name, response), response.status_code
                )

            last_error = transport_error(
                _describe(name, response), response.status_code
            )
            retry_after = _retry_after_seconds(response)
            if retry_after is not None:
                delay = retry_after

        if attempt == attempts - 1:
            break

        logger.warning(
            "%s failed (attempt %d/%d), retrying in %.1fs: %s",
            name,
            attempt + 1,
            attempts,
            delay,
            last_error.message,
        )
        time.sleep(delay)

    assert last_error is not None
    raise last_error
