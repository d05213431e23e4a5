"""검색 결과 및 페이지 계산 모델."""

from __future__ import annotations

from dataclasses import dataclass, field

from jira_rest_client.exceptions import DecodeError, PaginationError
from jira_rest_client.models.issue import Issue


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


@dataclass(frozen=True)
class Pagination:
    """검색 결과에서 계산한 페이지 정보 (서버가 보내주지 않음)."""

    total: int
    start_at: int
    max_results: int
    page: int
    page_count: int
    pages: list[int] = field(default_factory=list)

    @classmethod
    def compute(cls, total: int, start_at: int, max_results: int) -> "Pagination":
        """전체 개수, 시작 위치, 페이지 크기로부터 페이지 정보를 계산합니다.

        Args:
            total: 전체 이슈 수.
            start_at: 0부터 시작하는 시작 위치.
            max_results: 페이지 크기.

        Returns:
            page_count = ceil(total / max_results),
            page = ceil(start_at / max_results),
            pages = [0, page_count) 인 Pagination.

        Raises:
            PaginationError: max_results가 0 이하이거나 total/start_at이 음수일 때.

        Examples:
            >>> p = Pagination.compute(total=95, start_at=20, max_results=25)
            >>> (p.page_count, p.page, p.pages)
            (4, 1, [0, 1, 2, 3])
        """
        if max_results <= 0:
            raise PaginationError(
                f"maxResults는 1 이상이어야 합니다: {max_results}"
            )
        if total < 0 or start_at < 0:
            raise PaginationError(
                f"total/startAt은 음수일 수 없습니다: total={total}, startAt={start_at}"
            )

        page_count = _ceil_div(total, max_results)
        return cls(
            total=total,
            start_at=start_at,
            max_results=max_results,
            page=_ceil_div(start_at, max_results),
            page_count=page_count,
            pages=list(range(page_count)),
        )


@dataclass(frozen=True)
class SearchResult:
    """JQL 검색 결과."""

    total: int = 0
    start_at: int = 0
    max_results: int = 0
    expand: str = ""
    issues: list[Issue] = field(default_factory=list)
    pagination: Pagination | None = None

    @classmethod
    def from_api_response(cls, data: dict) -> "SearchResult":
        """Jira search API 응답에서 SearchResult 생성.

        서버가 돌려준 maxResults가 0이면 페이지를 계산할 수 없으므로
        pagination은 None입니다.

        Raises:
            DecodeError: total/startAt이 음수인 등 응답 값이 올바르지 않을 때.
        """
        total = data.get("total", 0)
        start_at = data.get("startAt", 0)
        max_results = data.get("maxResults", 0)

        pagination = None
        if max_results > 0:
            try:
                pagination = Pagination.compute(total, start_at, max_results)
            except PaginationError as e:
                raise DecodeError(f"검색 응답의 페이지 값이 올바르지 않습니다: {e}") from e

        return cls(
            total=total,
            start_at=start_at,
            max_results=max_results,
            expand=data.get("expand", ""),
            issues=[Issue.from_api_response(i) for i in data.get("issues", [])],
            pagination=pagination,
        )
