from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from app.backend import constants


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SmartReplySettings:
	api_key: str
	base_url: str
	model: str
	timeout_s: float

	@property
	def remote_enabled(self) -> bool:
		return bool(self.api_key)


def _str_env(name: str, default: str) -> str:
	return os.getenv(name, "").strip() or default


def _timeout_env() -> float:
	raw = os.getenv(constants.TIMEOUT_ENV, "").strip()
	if not raw:
		return constants.DEFAULT_INFERENCE_TIMEOUT_S
	try:
		value = float(raw)
	except ValueError:
		logger.warning("%s=%r is not numeric; using %.1fs", constants.TIMEOUT_ENV, raw, constants.DEFAULT_INFERENCE_TIMEOUT_S)
		return constants.DEFAULT_INFERENCE_TIMEOUT_S
	if value <= 0:
		logger.warning("%s must be greater than zero; using %.1fs", constants.TIMEOUT_ENV, constants.DEFAULT_INFERENCE_TIMEOUT_S)
		return constants.DEFAULT_INFERENCE_TIMEOUT_S
	return value


def load_settings() -> SmartReplySettings:
	"""Read inference settings from the environment.

	Called on every request so key rotation takes effect without a restart.
	"""
	return SmartReplySettings(
		api_key=os.getenv(constants.API_KEY_ENV, "").strip(),
		base_url=_str_env(constants.BASE_URL_ENV, constants.DEFAULT_INFERENCE_BASE_URL),
		model=_str_env(constants.MODEL_ENV, constants.DEFAULT_INFERENCE_MODEL),
		timeout_s=_timeout_env(),
	)


def configure_logging() -> None:
	level_name = _str_env(constants.LOG_LEVEL_ENV, constants.DEFAULT_LOG_LEVEL).upper()
	level = getattr(logging, level_name, None)
	if not isinstance(level, int):
		level = logging.INFO
	logging.basicConfig(
		level=level,
		format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
	)
