"""Tests for PagerDutySink — HTTP mocking, status handling, client management."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from rwmonitor.alerting.sink import PagerDutySink
from rwmonitor.core.config import PAGERDUTY_EVENT_URL, PagerDutyConfig
from rwmonitor.core.exceptions import DeliveryError


def _mock_response(status_code: int = 200, text: str = "{}") -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        text=text,
        request=httpx.Request("POST", PAGERDUTY_EVENT_URL),
    )


def _payload() -> dict[str, object]:
    return {"service_key": "pd", "event_type": "trigger", "description": "x"}


class TestPagerDutySink:
    async def test_send_success(self) -> None:
        sink = PagerDutySink(PagerDutyConfig())
        client = sink._get_client()
        try:
            with patch.object(client, "post", new_callable=AsyncMock) as mock_post:
                mock_post.return_value = _mock_response(200)
                await sink.send(_payload())
            mock_post.assert_awaited_once_with(PAGERDUTY_EVENT_URL, json=_payload())
        finally:
            await sink.close()

    async def test_redirect_status_is_success(self) -> None:
        sink = PagerDutySink(PagerDutyConfig())
        client = sink._get_client()
        try:
            with patch.object(client, "post", new_callable=AsyncMock) as mock_post:
                mock_post.return_value = _mock_response(302)
                await sink.send(_payload())
        finally:
            await sink.close()

    @pytest.mark.parametrize("status", [400, 403, 500, 503])
    async def test_error_status_raises(self, status: int) -> None:
        sink = PagerDutySink(PagerDutyConfig())
        client = sink._get_client()
        try:
            with patch.object(client, "post", new_callable=AsyncMock) as mock_post:
                mock_post.return_value = _mock_response(status, "boom")
                with pytest.raises(DeliveryError, match=str(status)):
                    await sink.send(_payload())
        finally:
            await sink.close()

    async def test_transport_error_raises(self) -> None:
        sink = PagerDutySink(PagerDutyConfig())
        client = sink._get_client()
        try:
            with patch.object(client, "post", new_callable=AsyncMock) as mock_post:
                mock_post.side_effect = httpx.ConnectTimeout("timed out")
                with pytest.raises(DeliveryError, match="timed out"):
                    await sink.send(_payload())
        finally:
            await sink.close()

    async def test_custom_event_url(self) -> None:
        sink = PagerDutySink(PagerDutyConfig(event_url="https://pd.test/events"))
        client = sink._get_client()
        try:
            with patch.object(client, "post", new_callable=AsyncMock) as mock_post:
                mock_post.return_value = _mock_response(200)
                await sink.send(_payload())
            assert mock_post.call_args[0][0] == "https://pd.test/events"
        finally:
            await sink.close()

    async def test_client_reused(self) -> None:
        sink = PagerDutySink(PagerDutyConfig())
        try:
            assert sink._get_client() is sink._get_client()
        finally:
            await sink.close()

    async def test_close_releases_client(self) -> None:
        sink = PagerDutySink(PagerDutyConfig())
        mock_client = MagicMock()
        mock_client.is_closed = False
        mock_client.aclose = AsyncMock()
        sink._http = mock_client
        await sink.close()
        mock_client.aclose.assert_awaited_once()
        assert sink._http is None

    async def test_close_without_client(self) -> None:
        sink = PagerDutySink(PagerDutyConfig())
        await sink.close()
