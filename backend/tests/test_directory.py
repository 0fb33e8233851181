"""
Tests for the NAVER WORKS user directory lookup.
"""
import asyncio

import httpx
import pytest

from ops_notifier.core.exceptions import RecipientLookupError
from ops_notifier.services.naver_works.directory import RecipientResolver

from conftest import API_URL


class TestRecipientResolver:

    @pytest.mark.unit
    def test_resolves_known_user(self, http_client, naver_works):
        naver_works.add_user("kim@example.com", "u-100")
        resolver = RecipientResolver(http_client, API_URL)

        user_id = asyncio.run(resolver.resolve_user_id("token-x", "kim@example.com"))

        assert user_id == "u-100"
        request = naver_works.requests[-1]
        assert request.headers["Authorization"] == "Bearer token-x"

    @pytest.mark.unit
    def test_email_is_path_encoded(self, http_client, naver_works):
        naver_works.add_user("ops+alerts@example.com", "u-7")
        resolver = RecipientResolver(http_client, API_URL)

        asyncio.run(resolver.resolve_user_id("t", "ops+alerts@example.com"))

        raw_path = naver_works.requests[-1].url.raw_path.decode()
        assert "ops%2Balerts%40example.com" in raw_path
        assert naver_works.lookups == ["ops+alerts@example.com"]

    @pytest.mark.unit
    def test_unknown_user(self, http_client):
        resolver = RecipientResolver(http_client, API_URL)

        with pytest.raises(RecipientLookupError) as exc_info:
            asyncio.run(resolver.resolve_user_id("t", "ghost@example.com"))

        assert exc_info.value.error_code == "RECIPIENT_NOT_FOUND"
        assert exc_info.value.details == {"email": "ghost@example.com", "upstream_status": 404}

    @pytest.mark.unit
    def test_lookup_is_not_cached(self, http_client, naver_works):
        naver_works.add_user("kim@example.com")
        resolver = RecipientResolver(http_client, API_URL)

        asyncio.run(resolver.resolve_user_id("t", "kim@example.com"))
        asyncio.run(resolver.resolve_user_id("t", "kim@example.com"))

        assert len(naver_works.lookups) == 2

    @pytest.mark.unit
    def test_response_without_user_id(self):
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"email": "x"}))
        )
        resolver = RecipientResolver(client, API_URL)

        with pytest.raises(RecipientLookupError):
            asyncio.run(resolver.resolve_user_id("t", "kim@example.com"))

    @pytest.mark.unit
    def test_server_error(self):
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(503))
        )
        resolver = RecipientResolver(client, API_URL)

        with pytest.raises(RecipientLookupError) as exc_info:
            asyncio.run(resolver.resolve_user_id("t", "kim@example.com"))

        assert exc_info.value.message == "User lookup failed"
        assert exc_info.value.details["upstream_status"] == 503
