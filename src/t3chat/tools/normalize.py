"""Normalization helpers shared by the search tools."""

import asyncio
import re
from typing import Any, Callable, Iterable, TypeVar

import httpx

from t3chat.utils.logging import get_logger


logger = get_logger(__name__)

T = TypeVar("T")

_DOMAIN_RE = re.compile(r"^https?://([^/?#]+)", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")

IMAGE_VALIDATOR_HEADERS = {
    "Accept": "image/*",
    "User-Agent": "Mozilla/5.0 (compatible; ImageValidator/1.0)",
}


def extract_domain(url: str) -> str:
    """Host part of an http(s) URL, or the empty string."""
    match = _DOMAIN_RE.match(url)
    return match.group(1) if match else ""


def _url_of(item: Any) -> str:
    if isinstance(item, dict):
        return item.get("url", "")
    return getattr(item, "url", "")


def dedupe_by_domain_and_url(
    items: Iterable[T], url_of: Callable[[T], str] = _url_of
) -> list[T]:
    """
    Keep an item only if both its URL and its domain are new.

    The first item seen for a domain wins, so at most one result per
    domain survives. Order is preserved and the operation is idempotent.
    """
    seen_urls: set[str] = set()
    seen_domains: set[str] = set()
    kept: list[T] = []

    for item in items:
        url = url_of(item)
        domain = extract_domain(url)
        if url in seen_urls or domain in seen_domains:
            continue
        seen_urls.add(url)
        seen_domains.add(domain)
        kept.append(item)

    return kept


def sanitize_url(url: str) -> str:
    """Percent-encode runs of whitespace."""
    return _WHITESPACE_RE.sub("%20", url)


async def validate_image_url(
    client: httpx.AsyncClient, url: str, timeout: float = 5.0
) -> str | None:
    """
    Check that a URL serves an image.

    Issues a HEAD request following redirects.

    Returns:
        The final URL after redirects when the response is 2xx with an
        ``image/*`` content type, otherwise None. Network errors and
        timeouts count as invalid.
    """
    try:
        response = await client.head(
            url,
            headers=IMAGE_VALIDATOR_HEADERS,
            follow_redirects=True,
            timeout=timeout,
        )
    except httpx.HTTPError as e:
        logger.debug("Image validation failed", url=url, error=str(e))
        return None

    content_type = response.headers.get("content-type", "")
    if not response.is_success or not content_type.startswith("image/"):
        return None
    return str(response.url) if response.history else url


async def validate_images(
    client: httpx.AsyncClient,
    images: list[dict[str, Any]],
    timeout: float = 5.0,
) -> list[dict[str, str]]:
    """
    Validate image candidates concurrently.

    Candidates are deduplicated first. Images with a failed validation
    or an empty description are dropped.
    """
    candidates = [
        {"url": sanitize_url(image["url"]), "description": image.get("description") or ""}
        for image in dedupe_by_domain_and_url(images)
        if image.get("url")
    ]
    validated = await asyncio.gather(
        *(validate_image_url(client, c["url"], timeout) for c in candidates)
    )
    return [
        {"url": final_url, "description": candidate["description"]}
        for candidate, final_url in zip(candidates, validated)
        if final_url is not None and candidate["description"]
    ]
