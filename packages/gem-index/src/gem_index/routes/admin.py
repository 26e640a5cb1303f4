# SPDX-License-Identifier: MIT
"""Operator endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..deps import get_publisher
from ..index.publisher import IndexPublisher, PublishPartialFailure
from ..models.responses import PublishResponse

router = APIRouter()


@router.post("/update-specs", response_model=PublishResponse)
async def update_specs(
    publisher: Annotated[IndexPublisher, Depends(get_publisher)],
):
    """Regenerate every index artifact now.

    Responds 503 listing the failed keys when some artifacts could not be
    written; the ones that were written stay in place.
    """
    try:
        result = await publisher.publish_all()
    except PublishPartialFailure as e:
        body = PublishResponse(
            success=False,
            message=str(e),
            artifacts=e.written,
            failed=sorted(e.failed),
        )
        return JSONResponse(status_code=503, content=body.model_dump())

    return PublishResponse(
        success=True,
        message="Index files updated successfully",
        gems_count=result.record_count,
        artifacts=result.keys,
    )
