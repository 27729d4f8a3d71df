from fastapi import HTTPException, Request
from typing import AsyncIterator, Set
from toksave.utils.locale import get_locale
from toksave.i18n import i18n
import functools

class SingleFlightGuard:
    """
    At most one outstanding retrieval per client.
    Used as a yield dependency: the slot is held for the whole request and
    released on the way out, whatever the outcome.
    """

    def __init__(self):
        self.active: Set[str] = set()

    # Keyed by peer address, which assumes the local single-user deployment (no reverse proxy)
    @staticmethod
    def client_key(request: Request) -> str:
        return request.client.host if request.client else "anonymous"

    async def __call__(self, request: Request) -> AsyncIterator[None]:
        key = self.client_key(request)

        if key in self.active:
            locale = get_locale(request.headers.get("accept-language"))
            _ = functools.partial(i18n.get, locale=locale)
            raise HTTPException(
                status_code=409,
                detail=_("error.request_in_progress")
            )

        # Check and add must stay free of awaits
        self.active.add(key)
        try:
            yield
        finally:
            self.active.discard(key)

single_flight = SingleFlightGuard()
