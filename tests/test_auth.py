import unittest

from fastapi.testclient import TestClient

from api.auth import is_authorized, token_from_header
from fakes import FakeTranslator, make_settings
from main import create_app


class TestTokenFromHeader(unittest.TestCase):
    def test_bare_token(self):
        self.assertEqual(token_from_header("secret"), "secret")

    def test_known_schemes(self):
        self.assertEqual(token_from_header("Bearer secret"), "secret")
        self.assertEqual(token_from_header("DeepL-Auth-Key secret"), "secret")

    def test_scheme_is_case_sensitive(self):
        self.assertEqual(token_from_header("bearer secret"), "")

    def test_malformed_header_is_treated_as_absent(self):
        self.assertEqual(token_from_header("Basic secret"), "")
        self.assertEqual(token_from_header("Bearer secret extra"), "")
        self.assertEqual(token_from_header("Bearer  secret"), "")
        self.assertEqual(token_from_header(None), "")


class TestIsAuthorized(unittest.TestCase):
    def test_empty_token_disables_auth(self):
        self.assertTrue(is_authorized("", None, None))
        self.assertTrue(is_authorized("", "Bearer wrong", "wrong"))

    def test_either_channel_may_match(self):
        self.assertTrue(is_authorized("secret", "Bearer secret", None))
        self.assertTrue(is_authorized("secret", None, "secret"))
        self.assertTrue(is_authorized("secret", "Bearer wrong", "secret"))
        self.assertTrue(is_authorized("secret", "Basic secret", "secret"))

    def test_mismatch(self):
        self.assertFalse(is_authorized("secret", None, None))
        self.assertFalse(is_authorized("secret", "Bearer wrong", "wrong"))
        self.assertFalse(is_authorized("secret", "Basic secret", None))


class TestProtectedRoutes(unittest.TestCase):
    def setUp(self):
        self.translator = FakeTranslator()
        app = create_app(make_settings(token="secret"), self.translator)
        self.client = TestClient(app)
        self.body = {"text": "Hello", "target_lang": "ZH"}

    def test_header_tokens_are_accepted(self):
        for header in ("secret", "Bearer secret", "DeepL-Auth-Key secret"):
            response = self.client.post(
                "/translate", json=self.body, headers={"Authorization": header}
            )
            self.assertEqual(response.status_code, 200, header)

    def test_query_token_is_accepted(self):
        response = self.client.post("/translate?token=secret", json=self.body)
        self.assertEqual(response.status_code, 200)

    def test_rejected_requests_never_reach_translator(self):
        paths = ["/translate", "/v1/translate", "/v2/translate", "/v1/chat/completions"]
        for path in paths:
            response = self.client.post(
                path, json=self.body, headers={"Authorization": "Bearer wrong"}
            )
            self.assertEqual(response.status_code, 401, path)
            self.assertEqual(
                response.json(), {"code": 401, "message": "Invalid access token"}
            )
        self.assertEqual(self.translator.requests, [])

    def test_root_is_public(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["code"], 200)


if __name__ == "__main__":
    unittest.main()
