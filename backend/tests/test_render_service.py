"""
QuickAI Backend - Render Service Tests
=======================================

URL construction and the single GET against a mocked transport.
"""

import httpx
import pytest

from quickai.exceptions import ImageRenderError
from quickai.services.render_service import RenderService


class TestBuildUrl:

    def test_default_url(self):
        url = RenderService().build_url("a red fox")
        assert url == (
            "https://image.pollinations.ai/prompt/a%20red%20fox"
            "?width=1024&height=1024&nologo=true"
        )

    def test_prompt_is_one_path_segment(self):
        url = RenderService(base_url="https://render.test/").build_url("cats & dogs / 50%?")
        assert url.startswith("https://render.test/prompt/cats%20%26%20dogs%20%2F%2050%25%3F?")

    def test_uri_component_safe_characters_kept(self):
        url = RenderService().build_url("wow!(it's)*~")
        assert "/prompt/wow!(it's)*~?" in url

    def test_custom_size(self):
        assert "width=512&height=512" in RenderService(size=512).build_url("x")


class TestRender:

    @pytest.mark.asyncio
    async def test_returns_body(self, mock_http):
        with mock_http(lambda request: httpx.Response(200, content=b"\x89PNG...")):
            assert await RenderService().render("a red fox") == b"\x89PNG..."

    @pytest.mark.asyncio
    async def test_error_status(self, mock_http):
        with mock_http(lambda request: httpx.Response(502)):
            with pytest.raises(ImageRenderError, match="status code 502"):
                await RenderService().render("a red fox")

    @pytest.mark.asyncio
    async def test_empty_body(self, mock_http):
        with mock_http(lambda request: httpx.Response(200, content=b"")):
            with pytest.raises(ImageRenderError, match="no data"):
                await RenderService().render("a red fox")
