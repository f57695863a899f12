"""HTTP client for scraping API server metrics directly."""

import time
from dataclasses import dataclass

import httpx


class MetricsSourceError(RuntimeError):
    """Metrics scrape failed."""


@dataclass(frozen=True)
class MetricsClientConfig:
    """Runtime tuning options for metrics scrapes."""

    timeout_seconds: float = 30.0
    max_retries: int = 2
    retry_base_delay_seconds: float = 0.3
    verify_tls: bool = True


class MetricsClient:
    """Prometheus text-format scraper with Bearer auth support."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        config: MetricsClientConfig | None = None,
    ) -> None:
        """Create metrics client.

        Parameters
        ----------
        base_url : str
            API server base URL.
        token : str | None
            Bearer token with permission to read `/metrics`.
        config : MetricsClientConfig | None
            Runtime tuning options.
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.config = config or MetricsClientConfig()
        self._client: httpx.Client | None = None

    def __enter__(self) -> "MetricsClient":
        self._ensure_client()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def close(self) -> None:
        """Close underlying HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _ensure_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.config.timeout_seconds,
                verify=self.config.verify_tls,
            )
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "text/plain"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get_with_retries(self, path: str) -> httpx.Response:
        """Perform GET with retry/backoff.

        Parameters
        ----------
        path : str
            Metrics path.

        Returns
        -------
        httpx.Response
            Final response object.
        """
        client = self._ensure_client()
        last_exc: Exception | None = None
        for attempt in range(self.config.max_retries + 1):
            try:
                response = client.get(path, headers=self._headers())
                if response.status_code >= 500 and attempt < self.config.max_retries:
                    time.sleep(self.config.retry_base_delay_seconds * (2**attempt))
                    continue
                return response
            except httpx.HTTPError as exc:
                last_exc = exc
                if attempt < self.config.max_retries:
                    time.sleep(self.config.retry_base_delay_seconds * (2**attempt))
                    continue
                break
        raise MetricsSourceError(f"Metrics scrape failed: {last_exc}") from last_exc

    def fetch(self, path: str = "/metrics") -> str:
        """Scrape metrics endpoint and return exposition text."""
        response = self._get_with_retries(path)
        if response.status_code >= 400:
            body = response.text[:200]
            raise MetricsSourceError(
                f"Metrics endpoint error {response.status_code} for {path}: {body}"
            )
        return response.text
