#api.py
import json
from typing import Any, Dict, Optional

import requests

from config import API_BASE_URL, HTTP_TIMEOUT_SECONDS, JSON_HEADERS, SESSION
from exceptions import TransportFailure
from logger import get_logger

log = get_logger("api")


def decode_body(resp: requests.Response) -> Any:
    """JSON body of a response, or None when it is empty or not JSON."""
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        log.debug(f"Non-JSON body from {resp.request.method if resp.request else '?'} {resp.url}: {resp.text[:200]}")
        return None


def send_request(
    method: str,
    path: str,
    *,
    payload: Optional[Dict[str, Any]] = None,
    params: Optional[Dict[str, Any]] = None,
) -> requests.Response:
    """
    Issue one request against the order API.

    2xx responses come back unchanged. Everything else raises TransportFailure:
    with ``status`` set when the server answered, ``unreachable`` set when it
    never did (connection refused, timeout).
    """
    url = f"{API_BASE_URL}{path}"
    method = method.upper()

    if payload is not None:
        log.debug(f"[API Request] {method} {path} {json.dumps(payload, default=str)}")
    else:
        log.debug(f"[API Request] {method} {path} params={params or {}}")

    try:
        resp = SESSION.request(
            method,
            url,
            json=payload,
            params=params,
            headers=JSON_HEADERS,
            timeout=HTTP_TIMEOUT_SECONDS,
        )
    except (requests.ConnectionError, requests.Timeout) as e:
        log.warning(f"[API Unreachable] {method} {path}: {e}")
        raise TransportFailure(str(e), method=method, path=path, unreachable=True) from e
    except requests.RequestException as e:
        log.warning(f"[API Request Error] {method} {path}: {e}")
        raise TransportFailure(str(e), method=method, path=path) from e

    log.debug(f"[API Response] {resp.status_code} {method} {path} {resp.text[:500]}")

    if not resp.ok:
        body = decode_body(resp)
        log.info(f"[API Error] {resp.status_code} {resp.reason} {method} {path}")
        raise TransportFailure(
            f"{resp.status_code} {resp.reason}",
            method=method,
            path=path,
            status=resp.status_code,
            reason=resp.reason or "",
            body=body,
        )

    return resp
