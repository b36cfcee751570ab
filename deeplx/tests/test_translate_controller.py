import json
import os
import time
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from deeplx.main import app
from deeplx.models import TranslationFailure, TranslationSuccess
from deeplx.services import drain_background_tasks, get_default_cache, submit_background_task


def success(**overrides):
    values = dict(
        id=123000, data="Hallo", alternatives=["Hi"], source_lang="EN", target_lang="DE", method="Free", cached=False
    )
    values.update(overrides)
    return TranslationSuccess(**values)


class ControllerTestCase(unittest.TestCase):
    env = {"TOKEN": "", "DL_SESSION": "", "DEEPLX_UPSTREAM_URL": ""}

    def setUp(self):
        patcher = patch.dict(os.environ, self.env)
        patcher.start()
        self.addCleanup(patcher.stop)
        get_default_cache().clear()
        self.client = TestClient(app)

    def tearDown(self):
        drain_background_tasks(timeout=5)
        get_default_cache().clear()


class TestTranslateEndpoint(ControllerTestCase):
    @patch("deeplx.controllers.translate_controller.translate_text")
    def test_translate(self, mock_translate):
        mock_translate.return_value = success()

        resp = self.client.post("/translate", json={"text": "Hi", "source_lang": "en", "target_lang": "DE"})

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {
            "code": 200,
            "id": 123000,
            "data": "Hallo",
            "alternatives": ["Hi"],
            "source_lang": "EN",
            "target_lang": "DE",
            "method": "Free",
            "cached": False,
        })
        self.assertEqual(resp.headers["access-control-allow-origin"], "*")
        mock_translate.assert_called_with("Hi", "DE", source_lang="en", use_cache=True)

    @patch("deeplx.controllers.translate_controller.translate_text")
    def test_cache_override(self, mock_translate):
        mock_translate.return_value = success()
        self.client.post("/translate", json={"text": "Hi", "target_lang": "DE", "cache": False})
        self.assertFalse(mock_translate.call_args.kwargs["use_cache"])

    @patch("deeplx.controllers.translate_controller.translate_text")
    def test_explicit_null_cache_disables_caching(self, mock_translate):
        mock_translate.return_value = success()
        for path in ("/translate", "/v2/translate"):
            self.client.post(path, json={"text": "Hi", "target_lang": "DE", "cache": None})
            self.assertFalse(mock_translate.call_args.kwargs["use_cache"])

    @patch("deeplx.controllers.translate_controller.translate_text")
    def test_failure_uses_code_as_status(self, mock_translate):
        mock_translate.return_value = TranslationFailure(code=429, message="Too many requests")
        resp = self.client.post("/translate", json={"text": "Hi", "target_lang": "DE"})
        self.assertEqual(resp.status_code, 429)
        self.assertEqual(resp.json(), {"code": 429, "message": "Too many requests"})

    def test_empty_text(self):
        with patch("deeplx.services.deepl_client_service.requests.post") as mock_post:
            resp = self.client.post("/translate", json={"text": "", "target_lang": "DE"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], 400)
        mock_post.assert_not_called()

    def test_invalid_json(self):
        resp = self.client.post("/translate", content=b"{not json", headers={"Content-Type": "application/json"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"code": 400, "message": "Invalid JSON in request body"})
        self.assertEqual(resp.headers["access-control-allow-origin"], "*")

    def test_wrong_body_shape(self):
        for body in ([1, 2], {"text": ["a"], "target_lang": "DE"}):
            resp = self.client.post("/translate", json=body)
            self.assertEqual(resp.status_code, 400)
            self.assertEqual(resp.json(), {"code": 400, "message": "Invalid request body"})

    @patch("deeplx.controllers.translate_controller.translate_text")
    def test_unexpected_fault(self, mock_translate):
        mock_translate.side_effect = RuntimeError("boom")
        resp = self.client.post("/translate", json={"text": "Hi", "target_lang": "DE"})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"code": 500, "message": "Internal server error", "error": "boom"})
        self.assertEqual(resp.headers["access-control-allow-origin"], "*")


class TestEndToEnd(ControllerTestCase):
    """Full stack with only the upstream HTTP call mocked."""

    def upstream(self, mock_post, text, lang="EN"):
        mock_post.return_value.status_code = 200
        mock_post.return_value.json.return_value = {"result": {"lang": lang, "texts": [{"text": text}]}}

    @patch("deeplx.services.deepl_client_service.requests.post")
    def test_translate_then_cached(self, mock_post):
        self.upstream(mock_post, "Hallo")

        first = self.client.post("/translate", json={"text": "Hi", "target_lang": "DE"}).json()
        drain_background_tasks(timeout=5)
        second = self.client.post("/translate", json={"text": "Hi", "target_lang": "DE"}).json()

        self.assertEqual(first["data"], "Hallo")
        self.assertEqual(first["method"], "Free")
        self.assertFalse(first["cached"])
        self.assertTrue(second["cached"])
        self.assertEqual(second["data"], "Hallo")
        self.assertEqual(mock_post.call_count, 1)

    @patch("deeplx.services.deepl_client_service.requests.post")
    def test_v2_joins_lines(self, mock_post):
        self.upstream(mock_post, "Bonjour\nMonde")

        resp = self.client.post(
            "/v2/translate", json={"text": ["Hello", "World"], "source_lang": "DE", "target_lang": "FR"}
        )

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {
            "translations": [{"detected_source_language": "EN", "text": "Bonjour\nMonde"}],
            "cached": False,
        })
        sent = json.loads(mock_post.call_args.kwargs["data"])
        self.assertEqual(sent["params"]["texts"][0]["text"], "Hello\nWorld")
        self.assertEqual(sent["params"]["lang"]["source_lang_user_selected"], "EN")
        self.assertEqual(sent["params"]["lang"]["target_lang"], "FR")

    @patch("deeplx.services.deepl_client_service.requests.post")
    def test_v2_failure_shape(self, mock_post):
        mock_post.return_value.status_code = 429
        resp = self.client.post("/v2/translate", json={"text": "Hello", "target_lang": "FR"})
        self.assertEqual(resp.status_code, 429)
        self.assertEqual(resp.json()["code"], 429)

    @patch("deeplx.services.deepl_client_service.requests.post")
    def test_v2_then_cached(self, mock_post):
        self.upstream(mock_post, "Bonjour")
        body = {"text": ["Hello"], "target_lang": "FR"}

        first = self.client.post("/v2/translate", json=body).json()
        drain_background_tasks(timeout=5)
        second = self.client.post("/v2/translate", json=body).json()

        self.assertFalse(first["cached"])
        self.assertEqual(second, {
            "translations": [{"detected_source_language": "EN", "text": "Bonjour"}],
            "cached": True,
        })
        self.assertEqual(mock_post.call_count, 1)


class TestV1Endpoint(ControllerTestCase):
    def test_requires_session(self):
        resp = self.client.post("/v1/translate", content=b"garbage")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"code": 401, "message": "DL_SESSION is not configured in worker environment."})

    @patch("deeplx.controllers.translate_controller.translate_text")
    def test_uses_session_and_no_cache_by_default(self, mock_translate):
        mock_translate.return_value = success(method="Pro")
        with patch.dict(os.environ, {"DL_SESSION": "sess"}):
            resp = self.client.post("/v1/translate", json={"text": "Hi", "target_lang": "DE"})
        self.assertEqual(resp.json()["method"], "Pro")
        kwargs = mock_translate.call_args.kwargs
        self.assertEqual(kwargs["dl_session"], "sess")
        self.assertFalse(kwargs["use_cache"])

    @patch("deeplx.services.deepl_client_service.requests.post")
    def test_session_cookie_reaches_upstream(self, mock_post):
        mock_post.return_value.status_code = 200
        mock_post.return_value.json.return_value = {"result": {"lang": "EN", "texts": [{"text": "Hallo"}]}}
        with patch.dict(os.environ, {"DL_SESSION": "sess"}):
            resp = self.client.post("/v1/translate", json={"text": "Hi", "target_lang": "DE"})
        self.assertEqual(resp.json()["method"], "Pro")
        self.assertEqual(mock_post.call_args.kwargs["headers"]["Cookie"], "dl_session=sess")


class TestAccessToken(ControllerTestCase):
    env = {"TOKEN": "secret", "DL_SESSION": "", "DEEPLX_UPSTREAM_URL": ""}

    @patch("deeplx.controllers.translate_controller.translate_text")
    def test_rejected_before_body_parsing(self, mock_translate):
        for path in ("/translate", "/v1/translate", "/v2/translate"):
            resp = self.client.post(path, content=b"{not json")
            self.assertEqual(resp.status_code, 401)
            self.assertEqual(resp.json(), {"code": 401, "message": "Invalid access token"})
        mock_translate.assert_not_called()

    @patch("deeplx.controllers.translate_controller.translate_text")
    def test_accepted_credentials(self, mock_translate):
        mock_translate.return_value = success()
        body = {"text": "Hi", "target_lang": "DE"}
        for headers, params in (
            ({"Authorization": "Bearer secret"}, None),
            ({"Authorization": "DeepL-Auth-Key secret"}, None),
            ({}, {"token": "secret"}),
        ):
            resp = self.client.post("/translate", json=body, headers=headers, params=params)
            self.assertEqual(resp.status_code, 200)

    def test_wrong_credentials(self):
        body = {"text": "Hi", "target_lang": "DE"}
        for headers in ({"Authorization": "Basic secret"}, {"Authorization": "Bearer nope"}, {"Authorization": "secret"}):
            resp = self.client.post("/translate", json=body, headers=headers)
            self.assertEqual(resp.status_code, 401)

    @patch("deeplx.controllers.translate_controller.translate_text")
    def test_cache_defaults_off_when_protected(self, mock_translate):
        mock_translate.return_value = success()
        headers = {"Authorization": "Bearer secret"}
        self.client.post("/translate", json={"text": "Hi", "target_lang": "DE"}, headers=headers)
        self.assertFalse(mock_translate.call_args.kwargs["use_cache"])
        self.client.post("/v2/translate", json={"text": "Hi", "target_lang": "DE", "cache": True}, headers=headers)
        self.assertTrue(mock_translate.call_args.kwargs["use_cache"])

    def test_index_is_public(self):
        self.assertEqual(self.client.get("/").status_code, 200)


class TestRouting(ControllerTestCase):
    def test_index(self):
        resp = self.client.get("/")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["code"], 200)
        self.assertIn("message", data)
        self.assertIn("repository", data)

    def test_health(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.json()["status"], "ok")
        self.assertFalse(resp.json()["checks"]["access_token"])

    def test_not_found(self):
        for method, path in (("GET", "/nope"), ("GET", "/translate"), ("DELETE", "/v2/translate")):
            resp = self.client.request(method, path)
            self.assertEqual(resp.status_code, 404)
            self.assertEqual(resp.json(), {"code": 404, "message": "Not Found"})
            self.assertEqual(resp.headers["access-control-allow-origin"], "*")

    def test_preflight(self):
        resp = self.client.options("/v2/translate")
        self.assertEqual(resp.status_code, 204)
        self.assertEqual(resp.content, b"")
        self.assertEqual(resp.headers["access-control-allow-origin"], "*")
        self.assertEqual(resp.headers["access-control-max-age"], "86400")
        self.assertIn("POST", resp.headers["access-control-allow-methods"])


class TestLifecycle(ControllerTestCase):
    def test_shutdown_waits_for_cache_writes(self):
        done = []

        def slow_write():
            time.sleep(0.2)
            done.append(1)

        with TestClient(app) as client:
            self.assertEqual(client.get("/").status_code, 200)
            submit_background_task(slow_write)
        self.assertEqual(done, [1])


if __name__ == "__main__":
    unittest.main()
