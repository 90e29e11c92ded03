from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.backend import constants


class ApiError(BaseModel):
	model_config = ConfigDict(extra="forbid")

	code: str
	message: str
	evidence: List[str] = Field(default_factory=list)


class ApiEnvelope(BaseModel):
	model_config = ConfigDict(extra="allow")

	ok: bool
	generated_at: str
	request_id: Optional[str] = None
	data: Optional[Dict[str, Any]] = None
	error: Optional[ApiError] = None


class ConversationMessage(BaseModel):
	model_config = ConfigDict(extra="ignore", frozen=True)

	user: str = Field(..., min_length=1, description="Display name of the sender.")
	text: str = Field(default="", description="Message body; may be empty.")


class SmartRepliesRequest(BaseModel):
	model_config = ConfigDict(extra="forbid")

	messages: List[ConversationMessage] = Field(
		...,
		description="Recent chat messages, oldest first.",
	)


class SmartReplyResult(BaseModel):
	model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

	replies: List[str] = Field(default_factory=list, max_length=constants.MAX_SMART_REPLIES)
	is_ai: bool = Field(default=False, alias="isAI")
	model: Optional[str] = None

	@model_validator(mode="after")
	def _check_source(self) -> "SmartReplyResult":
		if any(not reply.strip() for reply in self.replies):
			raise ValueError("replies must not contain blank entries")
		if self.is_ai and not self.model:
			raise ValueError("model is required when isAI is true")
		if not self.is_ai and self.model is not None:
			raise ValueError("model must be unset for heuristic replies")
		return self


class ProviderStatusData(BaseModel):
	model_config = ConfigDict(extra="forbid")

	provider_mode: str
	model: Optional[str] = None
	provider_ready: bool = True
	timeout_s: float
	provider_warnings: List[str] = Field(default_factory=list)
