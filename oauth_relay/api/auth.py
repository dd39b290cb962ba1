from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from oauth_relay.api.dependencies import get_callback_handler, request_origin
from oauth_relay.models.callback import CallbackRequest
from oauth_relay.services.callback_handler import CallbackHandler, to_response

# ========================== GET /auth =====================================
# GitHub redirects the browser here after the user approves the OAuth app.
# We trade the code for a token and send the browser on to the admin UI.

router = APIRouter(tags=["oauth"])


@router.get("/auth")
async def oauth_callback(
    request: Request,
    handler: Annotated[CallbackHandler, Depends(get_callback_handler)],
    # All optional here: missing provider/code is a 400 from the handler,
    # not FastAPI's 422.
    provider: str | None = Query(None),
    site_id: str | None = Query(None),
    code: str | None = Query(None),
    state: str | None = Query(None),
) -> Response:
    origin = request_origin(request)
    callback = CallbackRequest.from_query(
        provider=provider,
        site_id=site_id,
        code=code,
        state=state,
    )
    result = await handler.run(
        callback,
        origin=origin,
        self_url=f"{origin}{request.url.path}",
    )
    return to_response(result)
