"""커스텀 예외 정의."""


class JiraClientError(Exception):
    """프로젝트 최상위 예외."""


class ConfigError(JiraClientError):
    """설정 관련 오류."""


class PaginationError(JiraClientError):
    """잘못된 페이지 인자 (maxResults <= 0 등)."""


class DecodeError(JiraClientError):
    """응답 본문(gzip/JSON/XML) 해석 실패."""


class JiraApiError(JiraClientError):
    """Jira API 호출 실패.

    HTTP 오류 응답뿐 아니라, 본문이 비어 있어야 하는 요청(이슈 저장,
    버전 추가)에 본문이 돌아온 경우에도 발생합니다.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class ResourceNotFoundError(JiraApiError):
    """요청한 리소스(이슈, 프로젝트 등)를 찾을 수 없음."""


class TransportError(JiraApiError):
    """네트워크 수준 실패 (연결 실패, 시간 초과)."""
