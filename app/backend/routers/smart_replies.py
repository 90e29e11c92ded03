from __future__ import annotations

from fastapi import APIRouter, Request

from app.backend.response import success_response
from app.backend.schemas import ApiEnvelope, SmartRepliesRequest
from app.backend.services import smart_reply_service


router = APIRouter(prefix="/api/smart-replies", tags=["smart-replies"])


@router.post("", response_model=ApiEnvelope)
async def create_smart_replies(request: Request, payload: SmartRepliesRequest):
	result = await smart_reply_service.generate_smart_replies(payload.messages)
	return success_response(
		request=request,
		data=result.model_dump(by_alias=True),
	)


@router.get("/status", response_model=ApiEnvelope)
def status(request: Request):
	return success_response(
		request=request,
		data=smart_reply_service.provider_status(),
	)
