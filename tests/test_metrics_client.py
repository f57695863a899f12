"""Tests for the HTTP metrics client."""

from unittest.mock import patch

import httpx
import pytest

from etcd_audit.infrastructure.metrics_client import (
    MetricsClient,
    MetricsClientConfig,
    MetricsSourceError,
)


def _response(status: int, text: str) -> httpx.Response:
    request = httpx.Request("GET", "https://api.example.com:6443/metrics")
    return httpx.Response(status, text=text, request=request)


def test_fetch_success() -> None:
    client = MetricsClient("https://api.example.com:6443", token="token")
    with patch.object(
        client,
        "_get_with_retries",
        return_value=_response(200, 'apiserver_storage_objects{resource="pods"} 1'),
    ):
        assert client.fetch().startswith("apiserver_storage_objects")


def test_fetch_error_status() -> None:
    client = MetricsClient("https://api.example.com:6443", token="token")
    with (
        patch.object(
            client, "_get_with_retries", return_value=_response(403, "forbidden")
        ),
        pytest.raises(MetricsSourceError, match="403"),
    ):
        client.fetch()


def test_retries_then_fails() -> None:
    client = MetricsClient(
        "https://api.example.com:6443",
        config=MetricsClientConfig(max_retries=1, retry_base_delay_seconds=0),
    )
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client._client = httpx.Client(
        base_url=client.base_url, transport=httpx.MockTransport(refuse)
    )
    with pytest.raises(MetricsSourceError, match="refused"):
        client.fetch()
    client.close()


def test_bearer_header() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("Authorization", ""))
        return httpx.Response(200, text="ok")

    client = MetricsClient("https://api.example.com:6443", token="secret")
    client._client = httpx.Client(
        base_url=client.base_url, transport=httpx.MockTransport(handler)
    )
    with client:
        assert client.fetch() == "ok"
    assert seen == ["Bearer secret"]
