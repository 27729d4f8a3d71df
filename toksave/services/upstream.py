import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from toksave.config.settings import UpstreamConfig
from toksave.core.errors import NetworkError, TransportError
from toksave.utils.locale import safe_url_for_log

logger = logging.getLogger(__name__)

ERROR_BODY_MAX_CHARS = 200


class UpstreamClient:
    """
    RapidAPI video info endpoint.
    One GET per call, no retries and no redirects.
    """

    def __init__(self, upstream: UpstreamConfig, client: Optional[httpx.AsyncClient] = None):
        self.upstream = upstream
        self.client = client or httpx.AsyncClient(timeout=upstream.timeout_seconds)

    def build_url(self, url: str) -> str:
        return f"{self.upstream.endpoint}?url={quote(url.strip(), safe='')}"

    def headers(self) -> dict:
        return {
            "x-rapidapi-key": self.upstream.api_key,
            "x-rapidapi-host": self.upstream.api_host,
        }

    async def fetch_info(self, url: str) -> Any:
        """Return the decoded JSON body for a video URL"""
        try:
            resp = await self.client.get(self.build_url(url), headers=self.headers())
        except httpx.HTTPError as e:
            logger.error(f"Upstream request failed for {safe_url_for_log(url)}: {e!r}")
            raise NetworkError(f"Upstream request failed: {e.__class__.__name__}") from e

        if not resp.is_success:
            logger.error(
                f"Upstream HTTP {resp.status_code} for {safe_url_for_log(url)}: "
                f"{resp.text[:ERROR_BODY_MAX_CHARS]}"
            )
            raise TransportError(resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            logger.error(f"Upstream returned invalid JSON for {safe_url_for_log(url)}")
            raise NetworkError("Upstream response is not valid JSON") from e

    async def aclose(self) -> None:
        await self.client.aclose()
