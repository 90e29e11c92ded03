from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from app.backend import constants
from app.backend.schemas import ConversationMessage, ProviderStatusData, SmartReplyResult
from app.backend.services import heuristic_replies, inference_client
from app.backend.settings import SmartReplySettings, load_settings


logger = logging.getLogger(__name__)

SettingsProvider = Callable[[], SmartReplySettings]
ClientFactory = Callable[..., Any]


class SmartReplyService:
	"""Arbitrates between provider-generated and heuristic smart replies.

	``generate`` is total: every failure, including an unconfigured key,
	resolves to heuristic replies with ``is_ai`` unset. Cancellation of the
	awaiting task is the only thing that propagates.
	"""

	def __init__(
		self,
		*,
		settings_provider: SettingsProvider = load_settings,
		client_factory: Optional[ClientFactory] = None,
		rng: Optional[heuristic_replies.RandomSource] = None,
	):
		self._settings_provider = settings_provider
		self._client_factory = client_factory
		self._rng = rng

	def suggest_locally(self, messages: Sequence[ConversationMessage]) -> SmartReplyResult:
		return SmartReplyResult(replies=heuristic_replies.classify(messages, rng=self._rng), is_ai=False)

	async def generate(self, messages: Sequence[ConversationMessage]) -> SmartReplyResult:
		try:
			settings = self._settings_provider()
		except Exception:
			logger.exception("Smart reply settings could not be loaded; using heuristic replies")
			return self.suggest_locally(messages)
		if not settings.remote_enabled:
			logger.debug("Inference API key not configured; using heuristic replies")
			return self.suggest_locally(messages)

		try:
			parsed = await self._request_remote(messages, settings)
		except inference_client.InferenceError as exc:
			self._log_failure(exc)
			return self.suggest_locally(messages)
		except Exception:
			logger.exception("Unexpected smart reply provider failure; using heuristic replies")
			return self.suggest_locally(messages)
		return SmartReplyResult(replies=parsed.replies, is_ai=True, model=parsed.model)

	async def _request_remote(
		self,
		messages: Sequence[ConversationMessage],
		settings: SmartReplySettings,
	) -> inference_client.ParsedReplies:
		factory = self._client_factory or inference_client.build_inference_client
		client = factory(
			api_key=settings.api_key,
			base_url=settings.base_url,
			timeout_s=settings.timeout_s,
		)
		try:
			return await inference_client.request_replies(
				messages,
				client=client,
				model=settings.model,
				timeout_s=settings.timeout_s,
			)
		finally:
			try:
				await client.close()
			except Exception:
				logger.warning("Failed to close inference client", exc_info=True)

	@staticmethod
	def _log_failure(exc: inference_client.InferenceError) -> None:
		if exc.kind == "remote_rejected":
			logger.warning(
				"Smart reply provider rejected request: status=%s reason=%s",
				exc.status_code,
				exc.reason,
			)
		elif exc.detail:
			logger.warning("Smart reply provider failure (%s): %s content=%r", exc.kind, exc.message, exc.detail)
		else:
			logger.warning("Smart reply provider failure (%s): %s", exc.kind, exc.message)

	def provider_status(self) -> Dict[str, object]:
		settings = self._settings_provider()
		warnings: List[str] = []
		if not settings.remote_enabled:
			warnings.append(f"Inference API key not configured. Set {constants.API_KEY_ENV} to enable AI replies.")
		status = ProviderStatusData(
			provider_mode="remote" if settings.remote_enabled else "heuristic",
			model=settings.model if settings.remote_enabled else None,
			provider_ready=settings.remote_enabled,
			timeout_s=settings.timeout_s,
			provider_warnings=warnings,
		)
		return status.model_dump()


_DEFAULT_SERVICE = SmartReplyService()


async def generate_smart_replies(messages: Sequence[ConversationMessage]) -> SmartReplyResult:
	return await _DEFAULT_SERVICE.generate(messages)


def provider_status() -> Dict[str, object]:
	return _DEFAULT_SERVICE.provider_status()
