"""Tests for search result normalization."""

import httpx
import pytest

from t3chat.tools.normalize import (
    dedupe_by_domain_and_url,
    extract_domain,
    sanitize_url,
    validate_image_url,
    validate_images,
)


def _image_handler(request: httpx.Request) -> httpx.Response:
    url = str(request.url)
    if "redirect" in url:
        return httpx.Response(302, headers={"location": "https://cdn.example.com/final.png"})
    if "broken" in url:
        return httpx.Response(404)
    if "page" in url:
        return httpx.Response(200, headers={"content-type": "text/html"})
    if "timeout" in url:
        raise httpx.ConnectTimeout("timed out", request=request)
    return httpx.Response(200, headers={"content-type": "image/png"})


class TestDedupe:
    """Tests for domain and URL deduplication."""

    def test_one_result_per_domain(self):
        items = [
            {"url": "https://a.com/1"},
            {"url": "https://a.com/2"},
            {"url": "https://b.com/1"},
            {"url": "https://b.com/1"},
        ]
        assert dedupe_by_domain_and_url(items) == [
            {"url": "https://a.com/1"},
            {"url": "https://b.com/1"},
        ]

    def test_idempotent(self):
        items = [{"url": f"https://site{i % 3}.org/{i}"} for i in range(10)]
        once = dedupe_by_domain_and_url(items)
        assert dedupe_by_domain_and_url(once) == once

    def test_custom_url_getter(self):
        items = [("https://a.com/x", 1), ("https://a.com/y", 2)]
        assert dedupe_by_domain_and_url(items, url_of=lambda i: i[0]) == [("https://a.com/x", 1)]

    def test_extract_domain(self):
        assert extract_domain("https://www.example.com/path?q=1") == "www.example.com"
        assert extract_domain("http://host:8080#frag") == "host:8080"
        assert extract_domain("ftp://example.com") == ""

    def test_sanitize_url(self):
        assert sanitize_url("https://a.com/my  image.png") == "https://a.com/my%20image.png"


class TestImageValidation:
    """Tests for image URL validation."""

    @pytest.mark.asyncio
    async def test_valid_image(self, mock_http):
        async with mock_http(_image_handler) as client:
            assert await validate_image_url(client, "https://img.com/a.png") == "https://img.com/a.png"

    @pytest.mark.asyncio
    async def test_redirect_returns_final_url(self, mock_http):
        async with mock_http(_image_handler) as client:
            final = await validate_image_url(client, "https://img.com/redirect.png")
        assert final == "https://cdn.example.com/final.png"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "url",
        ["https://img.com/broken.png", "https://img.com/page", "https://img.com/timeout.png"],
    )
    async def test_invalid_images(self, mock_http, url):
        async with mock_http(_image_handler) as client:
            assert await validate_image_url(client, url) is None

    @pytest.mark.asyncio
    async def test_validate_images_drops_failures_and_empty_descriptions(self, mock_http):
        images = [
            {"url": "https://one.com/a.png", "description": "A cat"},
            {"url": "https://two.com/broken.png", "description": "Broken"},
            {"url": "https://three.com/b.png", "description": ""},
            {"url": "https://one.com/c.png", "description": "Same domain"},
        ]
        async with mock_http(_image_handler) as client:
            valid = await validate_images(client, images)

        assert valid == [{"url": "https://one.com/a.png", "description": "A cat"}]
