"""HTTP 요청 실행기.

인증이 설정된 세션으로 요청을 보내고, gzip 응답을 풀어 원본 바이트를 돌려줍니다.
"""

from __future__ import annotations

import gzip
import logging
import zlib

import requests
import urllib3

from jira_rest_client.config import JiraConfig
from jira_rest_client.exceptions import (
    DecodeError,
    JiraApiError,
    ResourceNotFoundError,
    TransportError,
)
from jira_rest_client.utils.debug_dump import FileDumpTracer, Tracer

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json;charset=UTF-8"
JSON_ACCEPT = "application/json"


class RequestExecutor:
    """Jira 요청 실행기.

    Args:
        config: Jira 연결 설정.
        tracer: 요청/응답 본문을 받는 훅. None이면 config.dump_dir이
            설정된 경우 FileDumpTracer를 사용합니다.
        session: 테스트 등에서 주입할 requests 세션.
    """

    def __init__(
        self,
        config: JiraConfig,
        tracer: Tracer | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._config = config
        self._session = session or self._build_session()
        if tracer is None and config.dump_dir:
            tracer = FileDumpTracer(config.dump_dir)
        self._tracer = tracer

    def _build_session(self) -> requests.Session:
        """인증이 설정된 HTTP 세션을 생성합니다."""
        session = requests.Session()
        session.auth = (self._config.login, self._config.password)
        session.verify = self._config.verify_tls
        if not self._config.verify_tls:
            logger.warning(
                "TLS 인증서 검증이 비활성화되었습니다: %s", self._config.base_url,
            )
        return session

    def _trace(self, kind: str, payload: bytes) -> None:
        if self._tracer is not None:
            self._tracer(kind, payload)

    def execute(
        self,
        method: str,
        url: str,
        body: bytes | None = None,
        accept: str = JSON_ACCEPT,
    ) -> bytes:
        """요청을 실행하고 응답 본문을 돌려줍니다.

        Args:
            method: HTTP 메서드.
            url: 쿼리스트링까지 완성된 URL.
            body: JSON 요청 본문 (선택).
            accept: Accept 헤더 값 (기본: application/json).

        Returns:
            압축이 풀린 응답 본문.

        Raises:
            TransportError: 연결 실패, 시간 초과 등 네트워크 오류.
            ResourceNotFoundError: HTTP 404.
            JiraApiError: 그 밖의 HTTP 오류 응답.
            DecodeError: 압축된 본문이 손상되었을 때.
        """
        # 압축은 직접 해제하는 gzip만 허용
        headers = {"Accept": accept, "Accept-Encoding": "gzip"}
        if body is not None:
            headers["Content-Type"] = JSON_CONTENT_TYPE
            self._trace("request", body)

        logger.debug("%s %s", method, url)

        try:
            resp = self._session.request(
                method,
                url,
                data=body,
                headers=headers,
                timeout=self._config.timeout,
                stream=True,
            )
        except requests.ConnectionError as e:
            raise TransportError(f"Jira 서버 연결 실패: {e}") from e
        except requests.Timeout as e:
            raise TransportError(
                f"Jira API 요청 시간 초과 ({self._config.timeout}초)"
            ) from e
        except requests.RequestException as e:
            raise TransportError(f"Jira 요청 실패: {e}") from e

        try:
            contents = self._read_body(resp)
        finally:
            resp.close()

        self._trace("response", contents)
        logger.debug("응답 HTTP %s (%d bytes)", resp.status_code, len(contents))

        if resp.status_code == 404:
            raise ResourceNotFoundError(
                f"리소스를 찾을 수 없습니다: {url}",
                status_code=404,
                body=contents.decode("utf-8", errors="replace"),
            )
        if resp.status_code >= 400:
            text = contents.decode("utf-8", errors="replace")
            raise JiraApiError(
                f"Jira API 오류 (HTTP {resp.status_code}): {text[:200]}",
                status_code=resp.status_code,
                body=text,
            )

        return contents

    def _read_body(self, resp: requests.Response) -> bytes:
        """응답 본문을 읽습니다.

        gzip은 직접 풀어 손상 시 DecodeError로 알리고,
        그 밖의 Content-Encoding은 urllib3의 디코딩에 맡깁니다.
        """
        is_gzip = resp.headers.get("Content-Encoding", "").lower() == "gzip"
        try:
            raw = resp.raw.read(decode_content=not is_gzip)
        except urllib3.exceptions.DecodeError as e:
            raise DecodeError(f"응답 압축 해제 실패: {e}") from e
        except urllib3.exceptions.HTTPError as e:
            raise TransportError(f"응답 본문 수신 실패: {e}") from e

        if not is_gzip:
            return raw

        try:
            return gzip.decompress(raw)
        except (OSError, EOFError, zlib.error) as e:
            raise DecodeError(f"gzip 응답 해제 실패: {e}") from e
