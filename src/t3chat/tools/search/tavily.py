"""Minimal Tavily search client over the shared httpx client."""

from typing import Any

import httpx

from t3chat.config.settings import Settings
from t3chat.utils.logging import get_logger


logger = get_logger(__name__)


async def tavily_search(
    client: httpx.AsyncClient,
    settings: Settings,
    query: str,
    **params: Any,
) -> dict[str, Any]:
    """
    Run one Tavily search.

    Args:
        client: Shared HTTP client
        settings: Settings holding the Tavily key and base URL
        query: Search query
        **params: Tavily request fields (max_results, topic, ...); None
            values are omitted

    Returns:
        Decoded response body

    Raises:
        httpx.HTTPError: Transport failure or non-2xx status
    """
    body = {"query": query}
    body.update({k: v for k, v in params.items() if v is not None})

    logger.debug("Tavily search", query=query, params=list(body))

    response = await client.post(
        f"{settings.tavily_base_url.rstrip('/')}/search",
        json=body,
        headers={"Authorization": f"Bearer {settings.tavily_api_key}"},
        timeout=settings.search_timeout_seconds,
    )
    response.raise_for_status()
    return response.json()
