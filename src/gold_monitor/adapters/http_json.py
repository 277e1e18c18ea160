"""Shared JSON request helper for upstream adapters."""

import httpx

from gold_monitor.domain.errors import UpstreamError


async def get_json(  # noqa: PLR0913
    http_client: httpx.AsyncClient,
    url: str,
    *,
    source: str,
    timeout: float,
    params: dict[str, object] | None = None,
    headers: dict[str, str] | None = None,
) -> object:
    """GET a JSON document, mapping transport and HTTP failures to UpstreamError."""
    try:
        response = await http_client.get(
            url, params=params, headers=headers, timeout=timeout
        )
        response.raise_for_status()
    except httpx.TimeoutException as exc:
        raise UpstreamError(f"{source} timed out after {timeout}s") from exc
    except httpx.HTTPStatusError as exc:
        raise UpstreamError(
            f"{source} error: {exc.response.status_code} {exc.response.reason_phrase}"
        ) from exc
    except httpx.HTTPError as exc:
        raise UpstreamError(f"{source} request failed: {exc}") from exc
    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamError(f"{source} returned malformed JSON") from exc
