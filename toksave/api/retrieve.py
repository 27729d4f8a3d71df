import functools

from fastapi import APIRouter, Request, Depends, HTTPException, Query

from toksave.core.errors import (
    InvalidUrl,
    NetworkError,
    NormalizationError,
    RetrievalError,
    TransportError,
)
from toksave.core.state import state
from toksave.core.validator import is_supported_url
from toksave.core.logging import log_debug, log_info, log_error, log_warning
from toksave.infra.concurrency import single_flight
from toksave.models.record import HistoryEntry
from toksave.models.request import RetrieveRequest
from toksave.models.response import RetrieveResponse, ValidationResponse
from toksave.services.links import build_download_links
from toksave.services.retriever import describe_error
from toksave.utils.locale import get_locale, safe_url_for_log
from toksave.i18n import i18n

router = APIRouter()

ERROR_STATUS = (
    (InvalidUrl, 400),
    (TransportError, 502),
    (NetworkError, 503),
    (NormalizationError, 422),
)

def status_for(error: RetrievalError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return 500

@router.get("/validate", response_model=ValidationResponse)
async def validate_url(url: str = Query(..., description="URL to check")):
    """Inline validation feedback, no request is made upstream"""
    return ValidationResponse(url=url, supported=is_supported_url(url))

@router.post("/retrieve", response_model=RetrieveResponse, dependencies=[Depends(single_flight)])
async def retrieve_video(request: Request, retrieve_request: RetrieveRequest):
    """Resolve a TikTok URL to download links and metadata"""

    locale = get_locale(request.headers.get("accept-language"))
    _ = functools.partial(i18n.get, locale=locale)
    safe_url = safe_url_for_log(retrieve_request.url)

    try:
        log_info(request, _("log.retrieving", url=safe_url))
        record = await state.retriever.retrieve(retrieve_request.url)

        entry = HistoryEntry.from_record(record, source_url=retrieve_request.url.strip())
        await state.history.record(entry)

        downloads = build_download_links(record)
        log_info(request, _("log.retrieved", id=record.id))
        log_debug(request, f"{len(downloads)} download links for {record.id}")
        return RetrieveResponse(video=record, downloads=downloads)

    except RetrievalError as e:
        log_warning(request, _("log.retrieve_failed", url=safe_url, code=e.code))
        raise HTTPException(
            status_code=status_for(e),
            detail=describe_error(e, locale),
            headers={
                "X-Error-Code": e.code,
                "X-Retryable": "true" if e.retryable else "false"
            }
        )
    except Exception as e:
        log_error(request, f"Retrieve error: {str(e)}")
        raise HTTPException(status_code=500, detail=_("error.internal"))
