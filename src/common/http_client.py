"""HTTP access for Composer repository metadata.

Metadata files are fetched with a timeout, retried on connection errors,
rate limiting and server errors, and kept in an in-process cache so a package
queried through several pools is downloaded once per run.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional, Tuple

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

Response = Tuple[int, Dict[str, str], str]

# url -> (response, stored_at)
_http_cache: Dict[str, Tuple[Response, float]] = {}


def clear_cache() -> None:
    """Drop every cached response."""
    _http_cache.clear()


def _cache_lookup(url: str) -> Optional[Response]:
    entry = _http_cache.get(url)
    if entry is None:
        return None
    response, stored_at = entry
    if time.time() - stored_at >= Constants.HTTP_CACHE_TTL_SEC:
        del _http_cache[url]
        return None
    return response


def _retry_delay(attempt: int, headers: Dict[str, str]) -> float:
    """Seconds to wait before the next attempt; honors a numeric Retry-After."""
    retry_after = headers.get("Retry-After")
    if retry_after and retry_after.isdigit():
        return float(retry_after)
    return Constants.HTTP_RETRY_BACKOFF_SEC * (2 ** attempt)


def _trace(message: str, **fields: Any) -> None:
    if is_debug_enabled(logger):
        logger.debug(message, extra=extra_context(component="http_client", action="GET", **fields))


def robust_get(url: str, *, headers: Optional[Dict[str, str]] = None, **kwargs: Any) -> Response:
    """GET ``url`` with retries and caching.

    Only 200 and 404 responses are cached; a 404 is a definitive "no such
    metadata file" for a Composer repository. Returns status 0 with an
    explanatory body when no attempt produced a usable response, or the last
    retryable status when retries ran out.
    """
    cached = _cache_lookup(url)
    if cached is not None:
        _trace("HTTP cache hit", event="cache_hit", target=safe_url(url))
        return cached

    target = safe_url(url)
    failure = "no attempt made"
    last_response: Optional[Response] = None
    attempts = max(1, Constants.HTTP_RETRY_MAX)

    for attempt in range(attempts):
        retry_headers: Dict[str, str] = {}
        with Timer() as timer:
            try:
                resp = requests.get(url, timeout=Constants.REQUEST_TIMEOUT, headers=headers, **kwargs)
            except requests.Timeout:
                failure = "timeout"
                resp = None
            except requests.RequestException as exc:
                failure = str(exc)
                resp = None

        if resp is not None:
            result = (resp.status_code, dict(resp.headers), resp.text)
            _trace(
                "HTTP response",
                event="http_response",
                target=target,
                status_code=resp.status_code,
                attempt=attempt + 1,
                duration_ms=timer.duration_ms(),
            )
            if resp.status_code not in Constants.HTTP_RETRY_STATUSES:
                if resp.status_code in Constants.HTTP_CACHEABLE_STATUSES:
                    _http_cache[url] = (result, time.time())
                return result
            last_response = result
            retry_headers = result[1]
            failure = f"HTTP {resp.status_code}"
        else:
            _trace("HTTP request failed", event="http_exception", target=target, outcome=failure, attempt=attempt + 1)

        if attempt + 1 < attempts:
            time.sleep(_retry_delay(attempt, retry_headers))

    logger.warning("GET %s failed after %d attempts: %s", target, attempts, failure)
    if last_response is not None:
        return last_response
    return 0, {}, f"Request failed after {attempts} attempts: {failure}"


def get_json(url: str, *, headers: Optional[Dict[str, str]] = None, **kwargs: Any) -> Tuple[int, Dict[str, str], Optional[Any]]:
    """GET ``url`` and decode a JSON body.

    Returns:
        Tuple of (status_code, headers_dict, parsed_json_or_none); the payload
        is None for non-200 responses and undecodable bodies.
    """
    status_code, response_headers, text = robust_get(url, headers=headers, **kwargs)
    if status_code != 200 or not text:
        return status_code, response_headers, None
    try:
        return status_code, response_headers, json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Invalid JSON received from %s", safe_url(url))
        return status_code, response_headers, None
