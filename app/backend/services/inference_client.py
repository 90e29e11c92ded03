from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Sequence

import openai
from pydantic import StrictStr, TypeAdapter, ValidationError

from app.backend import constants
from app.backend.schemas import ConversationMessage


FailureKind = Literal[
	"unconfigured",
	"remote_rejected",
	"network_failure",
	"empty_response",
	"malformed_content",
]

SMART_REPLY_SYSTEM_PROMPT = """
You are a smart reply assistant for a live chat application. Your job is to generate 3 short, contextually relevant, and natural reply suggestions based on the conversation.

Guidelines:
- Each reply should be 5-50 characters
- Make them casual, friendly, and conversational
- Match the tone of the conversation
- Use emojis sparingly and naturally
- Avoid generic responses
- Be authentic and human-like

Return ONLY a valid JSON array of 3 strings, nothing else. Example: ["That's awesome!", "Let's go!", "I'm down"]
""".strip()

_USER_DIRECTIVE = "Generate 3 smart reply suggestions as a JSON array."
_EXCERPT_CHARS = 120

_REPLY_LIST = TypeAdapter(List[StrictStr])


class InferenceError(Exception):
	def __init__(
		self,
		*,
		kind: FailureKind,
		message: str,
		status_code: Optional[int] = None,
		detail: Optional[str] = None,
	):
		super().__init__(message)
		self.kind = kind
		self.message = message
		self.status_code = status_code
		self.detail = detail

	@property
	def reason(self) -> str:
		"""Informational sub-kind of a rejection; callers treat them all alike."""
		if self.kind != "remote_rejected" or self.status_code is None:
			return self.kind
		if self.status_code == 401:
			return "unauthorized"
		if self.status_code == 429:
			return "rate_limited"
		if self.status_code >= 500:
			return "server_error"
		return "rejected"


@dataclass(frozen=True)
class ParsedReplies:
	replies: List[str]
	model: str


def build_conversation_context(
	messages: Sequence[ConversationMessage],
	window: int = constants.CONTEXT_WINDOW_MESSAGES,
) -> str:
	recent = list(messages)[-window:] if window > 0 else []
	return "\n".join(f"{message.user}: {message.text}" for message in recent)


def build_prompt_messages(messages: Sequence[ConversationMessage]) -> List[Dict[str, str]]:
	context = build_conversation_context(messages)
	return [
		{"role": "system", "content": SMART_REPLY_SYSTEM_PROMPT},
		{
			"role": "user",
			"content": f"Recent conversation:\n{context}\n\n{_USER_DIRECTIVE}",
		},
	]


def build_inference_client(*, api_key: str, base_url: str, timeout_s: float) -> openai.AsyncOpenAI:
	if not api_key:
		raise InferenceError(kind="unconfigured", message="Inference API key not configured.")
	# Transient failures degrade to heuristic replies rather than being retried.
	return openai.AsyncOpenAI(
		api_key=api_key,
		base_url=base_url,
		timeout=timeout_s,
		max_retries=0,
	)


def _excerpt(raw: str) -> str:
	text = " ".join(raw.split())
	if len(text) <= _EXCERPT_CHARS:
		return text
	return text[:_EXCERPT_CHARS] + "..."


def _strip_code_fence(raw: str) -> str:
	candidate = raw.strip()
	if candidate.startswith("```"):
		candidate = re.sub(r"^```[a-zA-Z]*\s*", "", candidate)
		candidate = re.sub(r"\s*```$", "", candidate)
	return candidate


def parse_reply_content(raw: str) -> List[str]:
	"""Validate model output as a JSON array of reply strings.

	Blank entries are dropped and at most three replies are kept, in order.
	"""
	candidate = _strip_code_fence(raw)
	try:
		parsed = _REPLY_LIST.validate_json(candidate)
	except ValidationError as exc:
		raise InferenceError(
			kind="malformed_content",
			message="Inference provider returned content that is not a JSON array of strings.",
			detail=_excerpt(raw),
		) from exc
	replies = [item for item in parsed if item.strip()]
	if not replies:
		raise InferenceError(
			kind="malformed_content",
			message="Inference provider returned no usable replies.",
			detail=_excerpt(raw),
		)
	return replies[: constants.MAX_SMART_REPLIES]


def _extract_content(response: Any) -> str:
	choices = getattr(response, "choices", None)
	if not choices:
		return ""
	message = getattr(choices[0], "message", None)
	content = getattr(message, "content", None)
	if not isinstance(content, str):
		return ""
	return content.strip()


async def request_replies(
	messages: Sequence[ConversationMessage],
	*,
	client: Any,
	model: str,
	timeout_s: float,
) -> ParsedReplies:
	"""Ask the inference provider for reply suggestions in one round trip.

	Raises ``InferenceError`` for every failure the caller is expected to
	absorb. Cancelling the awaiting task aborts the in-flight request.
	"""
	try:
		response = await asyncio.wait_for(
			client.chat.completions.create(
				model=model,
				messages=build_prompt_messages(messages),
				temperature=constants.INFERENCE_TEMPERATURE,
				max_tokens=constants.INFERENCE_MAX_TOKENS,
			),
			timeout=timeout_s,
		)
	except openai.APIStatusError as exc:
		raise InferenceError(
			kind="remote_rejected",
			message=f"Inference provider rejected the request (HTTP {exc.status_code}).",
			status_code=exc.status_code,
		) from exc
	except asyncio.TimeoutError as exc:
		raise InferenceError(
			kind="network_failure",
			message=f"Inference provider did not answer within {timeout_s:.1f}s.",
		) from exc
	except openai.APIConnectionError as exc:
		raise InferenceError(
			kind="network_failure",
			message=f"Inference provider unreachable: {exc.__class__.__name__}.",
		) from exc

	raw = _extract_content(response)
	if not raw:
		raise InferenceError(
			kind="empty_response",
			message="Inference provider returned no message content.",
		)
	return ParsedReplies(replies=parse_reply_content(raw), model=model)
