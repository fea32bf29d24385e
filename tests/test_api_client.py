import io
import os
import tempfile
import unittest
from unittest import mock

import requests
from fastapi.testclient import TestClient

from helpers import FakeApiState, build_fake_api

from skilllink.app import create_context
from skilllink.backends.http import ApiClient
from skilllink.backends.rest import RestBackend
from skilllink.config import Settings
from skilllink.core.errors import (
    ApiError,
    AuthenticationError,
    ResponseDecodeError,
    SessionInvalidatedError,
    TransportError,
)
from skilllink.core.models import ClientUser, LoginCredentials, RegisterData


class RestSessionTests(unittest.TestCase):
    def setUp(self):
        self.state = FakeApiState()
        self.http = TestClient(build_fake_api(self.state), base_url="http://testserver")
        self.invalidations = []
        settings = Settings(api_url="http://testserver/api", use_demo_api=False, storage_url="sqlite://")
        self.ctx = create_context(settings, http=self.http, on_invalidated=self.invalidations.append)
        self.session = self.ctx.session
        self.credentials = self.ctx.credentials

    def tearDown(self):
        self.ctx.close()

    def login(self):
        ok = self.session.login(LoginCredentials(email="emily@example.com", password="secret", role="client"))
        self.assertTrue(ok)
        self.state.calls.clear()
        self.state.auth_headers.clear()

    def test_login_stores_tokens_and_user(self):
        self.login()
        user = self.session.current_user
        self.assertIsInstance(user, ClientUser)
        self.assertEqual(user.jobs_posted, 3)
        self.assertIsNotNone(self.credentials.access_token())
        self.assertIsNotNone(self.credentials.refresh_token())
        self.assertEqual(self.credentials.stored_user(), user)
        self.assertTrue(self.session.is_authenticated())

    def test_login_rejected_reports_message(self):
        ok = self.session.login(LoginCredentials(email="emily@example.com", password="nope", role="client"))
        self.assertFalse(ok)
        self.assertEqual(self.session.last_error, "Invalid credentials")
        self.assertIsNone(self.credentials.access_token())
        self.assertEqual(self.state.calls["/auth/refresh/"], 0)

    def test_register_returns_worker(self):
        ok = self.session.register(RegisterData(
            full_name="New Worker", email="new@example.com", password="pw", role="worker", skills=["Tiling"],
        ))
        self.assertTrue(ok)
        self.assertEqual(self.session.current_user.role, "worker")
        self.assertEqual(self.session.current_user.skills, ["Tiling"])

    def test_requests_carry_bearer_token(self):
        self.login()
        jobs = self.ctx.backend.get_jobs()
        self.assertEqual([j.id for j in jobs], ["j1"])
        self.assertEqual(self.state.auth_headers, [f"Bearer {self.credentials.access_token()}"])

    def test_401_refreshes_once_and_retries_original(self):
        self.login()
        old_access = self.credentials.access_token()
        self.state.revoke_access()

        jobs = self.ctx.backend.get_jobs()

        self.assertEqual([j.id for j in jobs], ["j1"])
        self.assertEqual(self.state.calls["/jobs/"], 2)
        self.assertEqual(self.state.calls["/auth/refresh/"], 1)
        new_access = self.credentials.access_token()
        self.assertNotEqual(new_access, old_access)
        self.assertEqual(self.state.auth_headers, [f"Bearer {old_access}", f"Bearer {new_access}"])
        self.assertTrue(self.session.is_authenticated())
        self.assertEqual(self.invalidations, [])

    def test_refresh_failure_invalidates_session(self):
        self.login()
        self.state.revoke_access()
        self.state.refresh_fails = True

        with self.assertRaises(SessionInvalidatedError):
            self.ctx.backend.get_jobs()

        self.assertEqual(self.state.calls["/jobs/"], 1)
        self.assertEqual(self.state.calls["/auth/refresh/"], 1)
        self.assertIsNone(self.credentials.access_token())
        self.assertIsNone(self.credentials.refresh_token())
        self.assertIsNone(self.credentials.stored_user())
        self.assertFalse(self.session.is_authenticated())
        self.assertEqual(len(self.invalidations), 1)

    def test_second_401_is_not_retried_again(self):
        self.login()
        self.state.jobs_status = 401

        with self.assertRaises(AuthenticationError) as caught:
            self.ctx.backend.get_jobs()

        self.assertNotIsInstance(caught.exception, SessionInvalidatedError)
        self.assertEqual(self.state.calls["/jobs/"], 2)
        self.assertEqual(self.state.calls["/auth/refresh/"], 1)

    def test_non_401_failure_is_not_retried(self):
        self.login()
        self.state.jobs_status = 500

        with self.assertRaises(ApiError) as caught:
            self.ctx.backend.get_jobs()

        self.assertEqual(caught.exception.status_code, 500)
        self.assertEqual(caught.exception.message, "Forced failure")
        self.assertEqual(self.state.calls["/jobs/"], 1)
        self.assertEqual(self.state.calls["/auth/refresh/"], 0)

    def test_missing_envelope_is_a_decode_error(self):
        self.login()
        with self.assertRaises(ResponseDecodeError):
            self.ctx.backend.get_workers()

    def test_logout_clears_locally_when_server_fails(self):
        self.login()
        self.state.logout_fails = True

        self.session.logout()

        self.assertEqual(self.state.calls["/auth/logout/"], 1)
        self.assertIsNone(self.credentials.access_token())
        self.assertIsNone(self.credentials.stored_user())
        self.assertFalse(self.session.is_authenticated())

    def test_initialize_restores_session_from_server(self):
        self.login()
        fresh = create_context(
            Settings(api_url="http://testserver/api", use_demo_api=False, storage_url="sqlite://"),
            engine=self.ctx.engine,
            http=self.http,
        )
        fresh.start()
        self.assertTrue(fresh.session.is_authenticated())
        self.assertEqual(fresh.session.current_user.id, "c9")
        self.assertEqual(self.state.calls["/auth/user/"], 1)
        fresh.session.close()

    def test_initialize_after_server_revocation_and_failed_refresh(self):
        self.login()
        self.state.revoke_access()
        self.state.refresh_fails = True

        state = self.session.initialize()

        self.assertEqual(state.value, "unauthenticated")
        self.assertIsNone(self.session.current_user)
        self.assertIsNone(self.credentials.stored_user())


class ApiClientTransportTests(unittest.TestCase):
    def test_network_failure_is_transport_error(self):
        http = mock.Mock()
        http.request.side_effect = requests.ConnectionError("connection refused")
        client = ApiClient("http://api.invalid", http=http)

        with self.assertRaises(TransportError):
            client.request("GET", "/jobs/", authenticated=False)
        self.assertEqual(http.request.call_count, 1)

    def test_non_success_envelope_is_api_error(self):
        response = mock.Mock(status_code=200, content=b"{}")
        response.json.return_value = {"data": None, "success": False, "message": "Job closed"}
        http = mock.Mock()
        http.request.return_value = response
        client = ApiClient("http://api.invalid/", http=http)

        with self.assertRaises(ApiError) as caught:
            client.request("POST", "/applications/", {"jobId": "j1"}, authenticated=False)
        self.assertEqual(caught.exception.message, "Job closed")
        args, kwargs = http.request.call_args
        self.assertEqual(args, ("POST", "http://api.invalid/applications/"))
        self.assertEqual(kwargs["json"], {"jobId": "j1"})
        self.assertNotIn("Authorization", kwargs["headers"])

class UploadAndLogoutTests(unittest.TestCase):
    def setUp(self):
        self.http = mock.Mock()
        self.hooks = mock.Mock()
        self.hooks.access_token.return_value = "old-access"
        self.client = ApiClient("http://api.invalid", http=self.http, hooks=self.hooks)
        self.backend = RestBackend(self.client)

    @staticmethod
    def response(status, body):
        response = mock.Mock(status_code=status, content=b"{}")
        response.json.return_value = body
        return response

    def test_upload_retried_after_refresh_resends_whole_file(self):
        bodies = []
        replies = [
            self.response(401, {"success": False, "message": "Token expired"}),
            self.response(200, {"data": {"url": "https://cdn.invalid/me.png"}, "success": True}),
        ]

        def send(method, url, **kwargs):
            content = kwargs["files"]["file"][1]
            bodies.append(content.read() if hasattr(content, "read") else content)
            return replies.pop(0)

        self.http.request.side_effect = send
        with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as fh:
            fh.write(b"PAYLOAD")
        self.addCleanup(os.remove, fh.name)

        url = self.backend.upload_file(fh.name, "profile")

        self.assertEqual(url, "https://cdn.invalid/me.png")
        self.assertEqual(bodies, [b"PAYLOAD", b"PAYLOAD"])
        self.hooks.refresh.assert_called_once_with()

    def test_open_file_handles_are_rewound_on_retry(self):
        bodies = []
        replies = [
            self.response(401, {"success": False, "message": "Token expired"}),
            self.response(200, {"data": {"ok": True}, "success": True}),
        ]

        def send(method, url, **kwargs):
            bodies.append(kwargs["files"]["file"][1].read())
            return replies.pop(0)

        self.http.request.side_effect = send
        self.client.request("POST", "/upload/", files={"file": ("a.txt", io.BytesIO(b"abc"))})
        self.assertEqual(bodies, [b"abc", b"abc"])

    def test_logout_without_refresh_token_skips_server(self):
        self.backend.logout(None)
        self.http.request.assert_not_called()

    def test_logout_sends_refresh_token(self):
        self.http.request.return_value = self.response(200, {"data": None, "success": True})
        self.backend.logout("r-token")
        args, kwargs = self.http.request.call_args
        self.assertEqual(args, ("POST", "http://api.invalid/auth/logout/"))
        self.assertEqual(kwargs["json"], {"refresh": "r-token"})



if __name__ == "__main__":
    unittest.main()
