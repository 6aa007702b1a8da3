"""
Test Status Code Router

Answers with whatever HTTP status the caller asks for, so API clients can
exercise their error and retry handling. Admission control still applies.
"""

import logging
import random

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse

from helpdesk.core.auth import admit_request
from helpdesk.core.timestamps import utc_now
from helpdesk.models.contracts.common import StatusCodeResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/test-status-code",
    tags=["test-status-code"],
    dependencies=[Depends(admit_request)],
)

RETRY_AFTER_RANGE = (5, 30)

# Statuses whose responses must not carry a body
_BODYLESS = {204, 304}


@router.get("/{status_code}", response_model=StatusCodeResponse)
async def echo_status_code(status_code: int) -> Response:
    """
    Respond with the requested status code.

    A 429 also carries a Retry-After header between 5 and 30 seconds.

    Raises:
        HTTPException: 400 if the code is outside 100-599
    """
    if not 100 <= status_code <= 599:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid status code. Must be between 100 and 599",
        )

    headers = {}
    if status_code == status.HTTP_429_TOO_MANY_REQUESTS:
        headers["Retry-After"] = str(random.randint(*RETRY_AFTER_RANGE))

    if status_code < 200 or status_code in _BODYLESS:
        return Response(status_code=status_code, headers=headers)

    body = StatusCodeResponse(
        message=f"Test response with status code {status_code}",
        timestamp=utc_now(),
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )
