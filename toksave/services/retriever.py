import logging
from typing import Optional

from toksave.core.errors import InvalidUrl, NormalizationError, RetrievalError, UpstreamReportedError
from toksave.core.validator import is_supported_url
from toksave.i18n import i18n
from toksave.models.record import CanonicalVideoRecord
from toksave.services.normalizer import normalize
from toksave.services.upstream import UpstreamClient
from toksave.utils.locale import safe_url_for_log

logger = logging.getLogger(__name__)


class VideoRetriever:
    """Validate, fetch once, normalize. History and UI state belong to the caller."""

    def __init__(self, client: UpstreamClient):
        self.client = client

    async def retrieve(self, url: str) -> CanonicalVideoRecord:
        """
        Resolve a TikTok URL to a canonical record.

        Raises InvalidUrl before any network call, TransportError or
        NetworkError when the upstream call fails, and the NormalizationError
        from the normalizer unchanged.
        """
        if not is_supported_url(url):
            raise InvalidUrl(url)

        clean_url = url.strip()
        payload = await self.client.fetch_info(clean_url)

        try:
            record = normalize(payload)
        except NormalizationError as e:
            logger.warning(f"Could not normalize payload for {safe_url_for_log(clean_url)}: {e.code}")
            raise

        logger.debug(f"Normalized {record.id} from {safe_url_for_log(clean_url)}")
        return record


def describe_error(error: RetrievalError, locale: Optional[str] = None) -> str:
    """The single user-facing message for a failed retrieval"""
    if isinstance(error, UpstreamReportedError):
        return error.message

    return i18n.get(error.message_key, locale, **error.message_args())
