"""
Outbound HTTP for the geocoding fallback.

Mapbox takes its token as a query parameter, so error messages built from the request URL
would leak it into logs. `get_json` rewrites status errors with the secret parameters
masked before they propagate.
"""

from __future__ import annotations

from typing import Any

import httpx

USER_AGENT = "zipradius/0.1.0"
SECRET_PARAMS = frozenset({"access_token"})


def redact_url(url: httpx.URL) -> str:
    """`url` as text with secret query parameters replaced by `***`."""
    params = [(k, "***" if k in SECRET_PARAMS else v) for k, v in url.params.multi_items()]
    return str(url.copy_with(params=params))


def get_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 10,
    transport: httpx.BaseTransport | None = None,
) -> Any:
    """GET `url` and decode the JSON body.

    Raises:
        httpx.HTTPStatusError: non-2xx response (message has secrets masked).
        httpx.TransportError: connection failures and timeouts.
        ValueError: body is not JSON.
    """
    request_headers = {"User-Agent": USER_AGENT, **(headers or {})}
    with httpx.Client(timeout=timeout_seconds, transport=transport) as client:
        resp = client.get(url, params=params, headers=request_headers)
        if resp.is_error:
            raise httpx.HTTPStatusError(
                f"HTTP {resp.status_code} from {redact_url(resp.request.url)}",
                request=resp.request,
                response=resp,
            )
        return resp.json()
