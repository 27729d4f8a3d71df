from fastapi import APIRouter, Request

from toksave.core.logging import log_info
from toksave.core.state import state
from toksave.models.response import HistoryResponse

router = APIRouter()


@router.get("/history", response_model=HistoryResponse)
async def get_history():
    """Recent downloads, most recent first"""
    return HistoryResponse(items=state.history.entries)


@router.delete("/history", response_model=HistoryResponse)
async def clear_history(request: Request):
    """Forget every recent download"""
    items = await state.history.clear()
    log_info(request, "History cleared")
    return HistoryResponse(items=items)
