"""RequestExecutor 및 덤프 tracer 단위 테스트."""

import gzip
import json
import tempfile
import threading
import unittest
import zlib
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from unittest.mock import MagicMock

import requests
import urllib3

from jira_rest_client.config import JiraConfig
from jira_rest_client.exceptions import (
    DecodeError,
    JiraApiError,
    ResourceNotFoundError,
    TransportError,
)
from jira_rest_client.services.jira_service import JiraService
from jira_rest_client.services.transport import JSON_CONTENT_TYPE, RequestExecutor
from jira_rest_client.utils.debug_dump import FileDumpTracer

URL = "https://jira.example.com/rest/api/2/issue/CRASH-1"


def _config(**overrides) -> JiraConfig:
    values = {
        "base_url": "https://jira.example.com",
        "login": "alice",
        "password": "secret",
    }
    values.update(overrides)
    return JiraConfig(**values)


def _response(status: int = 200, body: bytes = b"", headers: dict | None = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.headers = headers or {}
    resp.raw.read.return_value = body
    return resp


class TestRequestExecutor(unittest.TestCase):
    """RequestExecutor.execute 테스트."""

    def setUp(self) -> None:
        self.session = MagicMock()
        self.executor = RequestExecutor(_config(), session=self.session)

    def test_returns_raw_body(self) -> None:
        self.session.request.return_value = _response(body=b'{"key": "CRASH-1"}')

        self.assertEqual(self.executor.execute("GET", URL), b'{"key": "CRASH-1"}')
        self.session.request.return_value.close.assert_called_once()

    def test_get_has_no_content_type(self) -> None:
        self.session.request.return_value = _response(body=b"{}")
        self.executor.execute("GET", URL)

        kwargs = self.session.request.call_args.kwargs
        self.assertNotIn("Content-Type", kwargs["headers"])
        self.assertEqual(kwargs["headers"]["Accept"], "application/json")
        self.assertEqual(kwargs["headers"]["Accept-Encoding"], "gzip")
        self.assertIsNone(kwargs["data"])
        self.assertEqual(kwargs["timeout"], 30)

    def test_accept_override(self) -> None:
        self.session.request.return_value = _response(body=b"<feed/>")
        self.executor.execute("GET", URL, accept="application/atom+xml")

        headers = self.session.request.call_args.kwargs["headers"]
        self.assertEqual(headers["Accept"], "application/atom+xml")

    def test_body_sets_json_content_type(self) -> None:
        self.session.request.return_value = _response()
        self.executor.execute("PUT", URL, b'{"fields": {}}')

        args = self.session.request.call_args
        self.assertEqual(args.args, ("PUT", URL))
        self.assertEqual(args.kwargs["headers"]["Content-Type"], JSON_CONTENT_TYPE)
        self.assertEqual(args.kwargs["data"], b'{"fields": {}}')

    # ─── gzip ────────────────────────────────────────────────────────────

    def test_gzip_body_is_decompressed(self) -> None:
        self.session.request.return_value = _response(
            body=gzip.compress(b'{"total": 3}'),
            headers={"Content-Encoding": "gzip"},
        )
        self.assertEqual(self.executor.execute("GET", URL), b'{"total": 3}')
        self.session.request.return_value.raw.read.assert_called_once_with(decode_content=False)

    def test_other_encodings_left_to_urllib3(self) -> None:
        self.session.request.return_value = _response(
            body=b"{}", headers={"Content-Encoding": "deflate"},
        )
        self.executor.execute("GET", URL)
        self.session.request.return_value.raw.read.assert_called_once_with(decode_content=True)

    def test_corrupt_gzip_raises_decode_error(self) -> None:
        self.session.request.return_value = _response(
            body=b"definitely not gzip",
            headers={"Content-Encoding": "gzip"},
        )
        with self.assertRaises(DecodeError):
            self.executor.execute("GET", URL)

    def test_corrupt_deflate_raises_decode_error(self) -> None:
        resp = _response(headers={"Content-Encoding": "deflate"})
        resp.raw.read.side_effect = urllib3.exceptions.DecodeError("bad deflate")
        self.session.request.return_value = resp

        with self.assertRaises(DecodeError):
            self.executor.execute("GET", URL)
        resp.close.assert_called_once()

    # ─── 오류 매핑 ───────────────────────────────────────────────────────

    def test_connection_error(self) -> None:
        self.session.request.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(TransportError):
            self.executor.execute("GET", URL)

    def test_timeout(self) -> None:
        self.session.request.side_effect = requests.Timeout()
        with self.assertRaises(TransportError) as ctx:
            self.executor.execute("GET", URL)
        self.assertIn("30", str(ctx.exception))

    def test_body_read_failure(self) -> None:
        resp = _response()
        resp.raw.read.side_effect = urllib3.exceptions.ProtocolError("reset")
        self.session.request.return_value = resp

        with self.assertRaises(TransportError):
            self.executor.execute("GET", URL)
        resp.close.assert_called_once()

    def test_not_found(self) -> None:
        self.session.request.return_value = _response(
            status=404, body=b'{"errorMessages": ["Issue Does Not Exist"]}',
        )
        with self.assertRaises(ResourceNotFoundError) as ctx:
            self.executor.execute("GET", URL)
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertIn("Issue Does Not Exist", ctx.exception.body)

    def test_server_error(self) -> None:
        self.session.request.return_value = _response(status=500, body=b"boom")
        with self.assertRaises(JiraApiError) as ctx:
            self.executor.execute("GET", URL)
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.body, "boom")
        self.assertNotIsInstance(ctx.exception, ResourceNotFoundError)

    # ─── tracer ──────────────────────────────────────────────────────────

    def test_tracer_receives_request_and_response(self) -> None:
        calls = []
        executor = RequestExecutor(
            _config(), tracer=lambda kind, payload: calls.append((kind, payload)),
            session=self.session,
        )
        self.session.request.return_value = _response(body=b'{"id": "1"}')

        executor.execute("POST", URL, b'{"body": "hi"}')

        self.assertEqual(
            calls,
            [("request", b'{"body": "hi"}'), ("response", b'{"id": "1"}')],
        )

    def test_tracer_sees_error_responses(self) -> None:
        calls = []
        executor = RequestExecutor(
            _config(), tracer=lambda kind, payload: calls.append(kind),
            session=self.session,
        )
        self.session.request.return_value = _response(status=400, body=b"bad")

        with self.assertRaises(JiraApiError):
            executor.execute("GET", URL)
        self.assertEqual(calls, ["response"])

    def test_dump_dir_enables_file_tracer(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            executor = RequestExecutor(_config(dump_dir=tmp), session=self.session)
            self.session.request.return_value = _response(body=b"{}")

            executor.execute("PUT", URL, b'{"fields": {}}')

            self.assertEqual(Path(tmp, "last_body.txt").read_bytes(), b'{"fields": {}}')
            self.assertEqual(Path(tmp, "last_response.txt").read_bytes(), b"{}")


ISSUE_JSON = json.dumps({"id": "10001", "key": "CRASH-1", "fields": {}}).encode()

ATOM_FEED = (
    b'<?xml version="1.0" encoding="UTF-8"?>'
    b'<feed xmlns="http://www.w3.org/2005/Atom">'
    b"<title>Activity</title><id>urn:feed</id></feed>"
)


class _EncodingHandler(BaseHTTPRequestHandler):
    """경로에 따라 gzip/deflate/손상된 본문을 돌려주는 로컬 서버 핸들러."""

    def do_GET(self) -> None:
        self.server.last_headers = dict(self.headers)

        content_type = "application/json"
        encoding = None
        body = ISSUE_JSON
        if self.path.endswith("/gzip"):
            body, encoding = gzip.compress(body), "gzip"
        elif self.path.endswith("/deflate"):
            body, encoding = zlib.compress(body), "deflate"
        elif self.path.endswith("/broken"):
            body, encoding = b"not compressed at all", "deflate"
        elif self.path.startswith("/activity"):
            body, content_type = gzip.compress(ATOM_FEED), "application/atom+xml"
            encoding = "gzip"

        self.send_response(200)
        self.send_header("Content-Type", content_type)
        if encoding:
            self.send_header("Content-Encoding", encoding)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args) -> None:
        pass


class TestEncodingOverHttp(unittest.TestCase):
    """실제 HTTP 응답(모킹 없음)으로 압축 협상과 해제를 검증."""

    @classmethod
    def setUpClass(cls) -> None:
        cls.server = ThreadingHTTPServer(("127.0.0.1", 0), _EncodingHandler)
        cls.server.last_headers = {}
        cls.thread = threading.Thread(target=cls.server.serve_forever, daemon=True)
        cls.thread.start()
        host, port = cls.server.server_address
        cls.base_url = f"http://{host}:{port}"

    @classmethod
    def tearDownClass(cls) -> None:
        cls.server.shutdown()
        cls.server.server_close()
        cls.thread.join()

    def setUp(self) -> None:
        self.service = JiraService(_config(base_url=self.base_url))
        # 로컬 서버로 직접 연결 (프록시 환경 변수 무시)
        self.service._executor._session.trust_env = False
        self.addCleanup(self.service._executor._session.close)

    def test_requests_only_gzip(self) -> None:
        self.service.get_issue("gzip")
        self.assertEqual(self.server.last_headers.get("Accept-Encoding"), "gzip")
        self.assertEqual(self.server.last_headers.get("Accept"), "application/json")

    def test_gzip_issue(self) -> None:
        self.assertEqual(self.service.get_issue("gzip").key, "CRASH-1")

    def test_deflate_issue(self) -> None:
        """gzip 외 인코딩이 와도 urllib3가 풀어서 정상 디코딩."""
        self.assertEqual(self.service.get_issue("deflate").key, "CRASH-1")

    def test_plain_issue(self) -> None:
        self.assertEqual(self.service.get_issue("plain").key, "CRASH-1")

    def test_broken_deflate_is_decode_error(self) -> None:
        with self.assertRaises(DecodeError):
            self.service.get_issue("broken")

    def test_activity_requests_atom(self) -> None:
        feed = self.service.user_activity("alice")

        self.assertEqual(feed.title, "Activity")
        self.assertEqual(
            self.server.last_headers.get("Accept"), "application/atom+xml",
        )


class TestSessionSetup(unittest.TestCase):
    """세션 구성 테스트."""

    def test_basic_auth(self) -> None:
        executor = RequestExecutor(_config())
        self.assertEqual(executor._session.auth, ("alice", "secret"))
        self.assertTrue(executor._session.verify)

    def test_insecure_is_opt_in_and_logged(self) -> None:
        with self.assertLogs("jira_rest_client.services.transport", "WARNING"):
            executor = RequestExecutor(_config(verify_tls=False))
        self.assertFalse(executor._session.verify)


class TestFileDumpTracer(unittest.TestCase):
    """FileDumpTracer 테스트."""

    def test_overwrites_last_payload(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            tracer = FileDumpTracer(Path(tmp) / "dumps")
            tracer("response", b"first")
            tracer("response", b"second")

            self.assertEqual(tracer.response_path.read_bytes(), b"second")
            self.assertFalse(tracer.request_path.exists())

    def test_unknown_kind(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ValueError):
                FileDumpTracer(tmp)("other", b"")


if __name__ == "__main__":
    unittest.main()
