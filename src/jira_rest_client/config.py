"""설정 관리 모듈.

환경변수에서 Jira 연결 설정을 로드합니다.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from jira_rest_client.exceptions import ConfigError

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class JiraConfig:
    """Jira 연결 설정.

    verify_tls=False 는 자체 서명 인증서를 쓰는 서버를 위한 명시적 옵션이며,
    기본값은 항상 검증입니다.
    """

    base_url: str
    login: str
    password: str
    api_path: str = "/rest/api/2"
    activity_path: str = "/activity"
    verify_tls: bool = True
    timeout: int = 30
    dump_dir: str | None = None


@dataclass(frozen=True)
class SearchConfig:
    """검색 페이지 설정."""

    max_results: int = 50


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 전체 설정."""

    jira: JiraConfig
    search: SearchConfig


def _require_env(name: str) -> str:
    """환경변수를 가져오고, 없으면 ConfigError를 발생시킵니다."""
    value = os.environ.get(name, "").strip()
    if not value:
        raise ConfigError(
            f"필수 환경변수 '{name}'이 설정되지 않았습니다.\n"
            f"  export {name}=\"your-value\""
        )
    return value


def _int_env(name: str, default: int) -> int:
    """정수 환경변수를 읽습니다."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"환경변수 '{name}'은 정수여야 합니다: {raw!r}") from e


def _bool_env(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


def load_config() -> AppConfig:
    """환경변수에서 설정을 로드합니다.

    필수 환경변수:
        JIRA_BASE_URL, JIRA_LOGIN, JIRA_PASSWORD

    선택 환경변수:
        JIRA_API_PATH (기본: /rest/api/2)
        JIRA_ACTIVITY_PATH (기본: /activity)
        JIRA_INSECURE_SKIP_VERIFY (기본: false, TLS 인증서 검증 생략)
        JIRA_TIMEOUT (기본: 30)
        JIRA_DUMP_DIR (설정 시 마지막 요청/응답 본문을 파일로 저장)
        JIRA_MAX_RESULTS (기본: 50)
    """
    jira = JiraConfig(
        base_url=_require_env("JIRA_BASE_URL").rstrip("/"),
        login=_require_env("JIRA_LOGIN"),
        password=_require_env("JIRA_PASSWORD"),
        api_path=os.environ.get("JIRA_API_PATH", "/rest/api/2").strip(),
        activity_path=os.environ.get("JIRA_ACTIVITY_PATH", "/activity").strip(),
        verify_tls=not _bool_env("JIRA_INSECURE_SKIP_VERIFY"),
        timeout=_int_env("JIRA_TIMEOUT", 30),
        dump_dir=os.environ.get("JIRA_DUMP_DIR", "").strip() or None,
    )

    search = SearchConfig(
        max_results=_int_env("JIRA_MAX_RESULTS", 50),
    )

    return AppConfig(jira=jira, search=search)
