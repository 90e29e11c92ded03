import asyncio
import os
from types import SimpleNamespace
from unittest import TestCase
from unittest.mock import patch

import httpx
import openai
from fastapi.testclient import TestClient

from app.backend import constants
from app.backend.main import app


_URL = "https://inference.test/openai/v1/chat/completions"


class _FakeCompletions:
	def __init__(self, *, content=None, error: Exception | None = None):
		self._content = content
		self._error = error
		self.calls = []

	async def create(self, **kwargs):
		self.calls.append(kwargs)
		await asyncio.sleep(0)
		if self._error is not None:
			raise self._error
		return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self._content))])


class _FakeClient:
	def __init__(self, **kwargs):
		self.chat = SimpleNamespace(completions=_FakeCompletions(**kwargs))

	async def close(self) -> None:
		return None


class ApiContractsTests(TestCase):
	def setUp(self) -> None:
		self._prev_key = os.environ.pop(constants.API_KEY_ENV, None)
		self.client = TestClient(app)

	def tearDown(self) -> None:
		if self._prev_key is None:
			os.environ.pop(constants.API_KEY_ENV, None)
		else:
			os.environ[constants.API_KEY_ENV] = self._prev_key

	def test_health_returns_envelope(self) -> None:
		response = self.client.get("/api/health")
		self.assertEqual(response.status_code, 200)
		payload = response.json()
		self.assertTrue(payload["ok"])
		self.assertEqual(payload["data"]["status"], "ok")
		self.assertIn("request_id", payload)
		self.assertEqual(response.headers["X-Request-ID"], payload["request_id"])
		self.assertIn("X-Process-Time", response.headers)

	def test_request_id_header_is_echoed(self) -> None:
		response = self.client.get("/api/health", headers={"X-Request-ID": "req-123"})
		self.assertEqual(response.headers["X-Request-ID"], "req-123")
		self.assertEqual(response.json()["request_id"], "req-123")

	def test_smart_replies_without_key_uses_heuristics(self) -> None:
		response = self.client.post(
			"/api/smart-replies",
			json={"messages": [{"user": "A", "text": "Are you coming?"}]},
		)
		self.assertEqual(response.status_code, 200)
		payload = response.json()
		self.assertTrue(payload["ok"])
		self.assertEqual(
			payload["data"],
			{
				"replies": ["Good question!", "Let me think...", "Not sure tbh"],
				"isAI": False,
				"model": None,
			},
		)

	def test_smart_replies_empty_conversation_returns_greeting(self) -> None:
		response = self.client.post("/api/smart-replies", json={"messages": []})
		self.assertEqual(response.status_code, 200)
		self.assertEqual(
			response.json()["data"]["replies"],
			["Hey there! 👋", "What's up?", "How's it going?"],
		)

	def test_smart_replies_with_provider_returns_ai_replies(self) -> None:
		fake = _FakeClient(content='["A","B","C","D"]')
		with patch.dict(os.environ, {constants.API_KEY_ENV: "test-key"}, clear=False), patch(
			"app.backend.services.inference_client.build_inference_client",
			return_value=fake,
		) as factory:
			response = self.client.post(
				"/api/smart-replies",
				json={"messages": [{"user": "A", "text": "Are you coming?"}]},
			)
		self.assertEqual(response.status_code, 200)
		data = response.json()["data"]
		self.assertEqual(data["replies"], ["A", "B", "C"])
		self.assertTrue(data["isAI"])
		self.assertEqual(data["model"], constants.DEFAULT_INFERENCE_MODEL)
		factory.assert_called_once()
		self.assertEqual(factory.call_args.kwargs["api_key"], "test-key")
		self.assertEqual(len(fake.chat.completions.calls), 1)

	def test_smart_replies_provider_rejection_degrades_silently(self) -> None:
		rejected = httpx.Response(429, request=httpx.Request("POST", _URL))
		fake = _FakeClient(error=openai.RateLimitError("slow down", response=rejected, body=None))
		with patch.dict(os.environ, {constants.API_KEY_ENV: "test-key"}, clear=False), patch(
			"app.backend.services.inference_client.build_inference_client",
			return_value=fake,
		):
			response = self.client.post(
				"/api/smart-replies",
				json={"messages": [{"user": "A", "text": "thanks!"}]},
			)
		self.assertEqual(response.status_code, 200)
		data = response.json()["data"]
		self.assertFalse(data["isAI"])
		self.assertIsNone(data["model"])
		self.assertEqual(data["replies"], ["That's awesome! 🔥", "So cool!", "Let's gooo!"])

	def test_missing_messages_rejected(self) -> None:
		for body in ({}, {"messages": "hello"}, {"messages": [{"text": "no user"}]}, {"messages": [{"user": "", "text": "x"}]}):
			with self.subTest(body=body):
				response = self.client.post("/api/smart-replies", json=body)
				self.assertEqual(response.status_code, 422)
				payload = response.json()
				self.assertFalse(payload["ok"])
				self.assertEqual(payload["error"]["code"], "validation_error")
				self.assertGreaterEqual(len(payload["error"]["evidence"]), 1)

	def test_status_reports_provider_mode(self) -> None:
		response = self.client.get("/api/smart-replies/status")
		self.assertEqual(response.status_code, 200)
		data = response.json()["data"]
		self.assertEqual(data["provider_mode"], "heuristic")
		self.assertFalse(data["provider_ready"])

		with patch.dict(os.environ, {constants.API_KEY_ENV: "test-key"}, clear=False):
			data = self.client.get("/api/smart-replies/status").json()["data"]
		self.assertEqual(data["provider_mode"], "remote")
		self.assertEqual(data["model"], constants.DEFAULT_INFERENCE_MODEL)

	def test_unknown_route_returns_error_envelope(self) -> None:
		response = self.client.get("/api/unknown")
		self.assertEqual(response.status_code, 404)
		payload = response.json()
		self.assertFalse(payload["ok"])
		self.assertEqual(payload["error"]["code"], "http_404")
