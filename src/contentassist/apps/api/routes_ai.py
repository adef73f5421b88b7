from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request, status

from contentassist.core.orchestration.assist import ConversationOrchestrator
from contentassist.core.orchestration.schemas import AssistRequest

from .deps import get_orchestrator
from .envelope import success_body

router = APIRouter()


@router.post("/assist", status_code=status.HTTP_201_CREATED)
async def assist(
    payload: AssistRequest,
    request: Request,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    answer = await orchestrator.assist(payload.query, payload.request_id)
    return success_body(request, answer, status.HTTP_201_CREATED)
