"""Jira REST API 서비스.

이슈 검색/조회/생성/저장, 코멘트, 버전, 활동 스트림 기능을 제공합니다.
Jira REST API v2 사용: https://docs.atlassian.com/software/jira/docs/api/REST/latest/
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote, urlencode

from jira_rest_client.config import JiraConfig
from jira_rest_client.exceptions import (
    DecodeError,
    JiraApiError,
    JiraClientError,
    PaginationError,
)
from jira_rest_client.models.activity import ATOM_ACCEPT, ActivityFeed
from jira_rest_client.models.issue import Comment, Issue, IssueRef, Version
from jira_rest_client.models.search import SearchResult
from jira_rest_client.services.transport import RequestExecutor
from jira_rest_client.utils.jql import assignee_jql, user_stream_filter

logger = logging.getLogger(__name__)


class JiraService:
    """Jira REST API를 캡슐화하는 서비스 클래스."""

    def __init__(
        self,
        config: JiraConfig,
        executor: RequestExecutor | None = None,
    ) -> None:
        self._config = config
        self._executor = executor or RequestExecutor(config)

    # ─── URL / 본문 처리 ────────────────────────────────────────────────

    def _api_url(self, *segments: str, **params: Any) -> str:
        """API URL을 만듭니다. 경로 조각과 쿼리 값은 모두 URL 인코딩됩니다."""
        path = "".join(f"/{quote(str(s), safe='')}" for s in segments)
        url = f"{self._config.base_url}{self._config.api_path}{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    @staticmethod
    def _encode(payload: dict) -> bytes:
        return json.dumps(payload, ensure_ascii=False).encode("utf-8")

    @staticmethod
    def _decode_json(contents: bytes, what: str, expected: type = dict) -> Any:
        if not contents:
            raise DecodeError(f"{what} 응답 본문이 비어 있습니다.")
        try:
            data = json.loads(contents)
        except ValueError as e:
            raise DecodeError(f"{what} 응답 JSON 해석 실패: {e}") from e
        if not isinstance(data, expected):
            raise DecodeError(
                f"{what} 응답 형식이 올바르지 않습니다: {type(data).__name__}"
            )
        return data

    @staticmethod
    def _expect_empty(contents: bytes, what: str) -> None:
        """본문이 없어야 하는 요청에서 본문이 오면 오류로 처리합니다."""
        if contents:
            text = contents.decode("utf-8", errors="replace")
            raise JiraApiError(f"{what} 실패: {text}", body=text)

    # ─── 이슈 검색 ──────────────────────────────────────────────────────

    def search(
        self,
        jql: str,
        max_results: int = 50,
        start_at: int = 0,
    ) -> SearchResult:
        """JQL로 이슈를 검색합니다.

        Args:
            jql: JQL 쿼리 문자열.
            max_results: 페이지 크기 (1 이상).
            start_at: 0부터 시작하는 시작 위치.

        Returns:
            페이지 정보가 계산된 검색 결과.

        Raises:
            PaginationError: max_results가 0 이하이거나 start_at이 음수일 때.
            DecodeError: 응답을 해석할 수 없을 때.
            JiraApiError: API 호출 실패 시.
        """
        if max_results <= 0:
            raise PaginationError(f"maxResults는 1 이상이어야 합니다: {max_results}")
        if start_at < 0:
            raise PaginationError(f"startAt은 음수일 수 없습니다: {start_at}")

        url = self._api_url(
            "search", jql=jql, startAt=start_at, maxResults=max_results,
        )
        contents = self._executor.execute("GET", url)
        result = SearchResult.from_api_response(self._decode_json(contents, "검색"))

        logger.info(
            "검색 완료: %r → %d/%d건 (startAt=%d)",
            jql, len(result.issues), result.total, result.start_at,
        )
        return result

    def issues_assigned_to(
        self,
        user: str,
        max_results: int = 50,
        start_at: int = 0,
    ) -> SearchResult:
        """담당자로 이슈를 검색합니다."""
        return self.search(assignee_jql(user), max_results=max_results, start_at=start_at)

    # ─── 이슈 조회 / 저장 / 생성 ────────────────────────────────────────

    def get_issue(self, issue_id: str) -> Issue:
        """이슈를 ID 또는 키로 조회합니다.

        Raises:
            ResourceNotFoundError: 이슈를 찾을 수 없을 때.
            DecodeError: 응답을 해석할 수 없을 때.
        """
        contents = self._executor.execute("GET", self._api_url("issue", issue_id))
        issue = Issue.from_api_response(self._decode_json(contents, "이슈 조회"))
        logger.info("이슈 조회 완료: %s", issue.key or issue_id)
        return issue

    def save_issue(self, issue: Issue) -> None:
        """이슈를 저장합니다.

        서버가 관리하는 보고자, 담당자, 생성일은 전송 전에 issue에서 지워집니다.

        Raises:
            JiraClientError: 이슈 키가 없을 때.
            JiraApiError: 서버가 오류 본문을 돌려줬을 때.
        """
        if not issue.key:
            raise JiraClientError("저장할 이슈의 키가 없습니다.")
        if issue.fields is not None:
            issue.fields.clear_server_fields()

        contents = self._executor.execute(
            "PUT",
            self._api_url("issue", issue.key),
            self._encode(issue.to_payload()),
        )
        self._expect_empty(contents, f"이슈 {issue.key} 저장")
        logger.info("이슈 저장 완료: %s", issue.key)

    def create_issue(self, issue: Issue) -> IssueRef:
        """새 이슈를 생성합니다.

        Returns:
            생성된 이슈의 id/key/self.
        """
        contents = self._executor.execute(
            "POST", self._api_url("issue"), self._encode(issue.to_payload()),
        )
        ref = IssueRef.from_api_response(self._decode_json(contents, "이슈 생성"))
        logger.info("이슈 생성 완료: %s", ref.key)
        return ref

    # ─── 코멘트 ─────────────────────────────────────────────────────────

    def add_comment(self, issue_key: str, comment: Comment) -> Comment:
        """이슈에 코멘트를 추가하고, 서버가 돌려준 코멘트를 반환합니다."""
        contents = self._executor.execute(
            "POST",
            self._api_url("issue", issue_key, "comment"),
            self._encode(comment.to_payload()),
        )
        created = Comment.from_api_response(self._decode_json(contents, "코멘트 추가"))
        logger.info("코멘트 추가 완료: %s (id=%s)", issue_key, created.id)
        return created

    # ─── 버전 ───────────────────────────────────────────────────────────

    def get_all_versions(self, project_key: str) -> list[Version]:
        """프로젝트의 전체 버전 목록을 조회합니다."""
        contents = self._executor.execute(
            "GET", self._api_url("project", project_key, "versions"),
        )
        data = self._decode_json(contents, "버전 목록", expected=list)
        versions = [Version.from_api_response(v) for v in data]
        logger.info("프로젝트 %s 버전 %d개 조회", project_key, len(versions))
        return versions

    def add_version_to_issue(self, issue: IssueRef | Issue, version: Version) -> None:
        """이슈의 versions 필드에 버전을 추가합니다.

        응답 본문이 비어 있으면 성공, 본문이 있으면 그 내용을 담은 JiraApiError입니다.
        """
        if not version.id:
            raise JiraClientError(f"버전 '{version.name}'에 id가 없습니다.")

        payload = {"update": {"versions": [{"add": {"id": version.id}}]}}
        contents = self._executor.execute(
            "PUT", self._api_url("issue", issue.key), self._encode(payload),
        )
        self._expect_empty(contents, f"이슈 {issue.key} 버전 추가")
        logger.info("이슈 %s에 버전 추가: %s", issue.key, version.name or version.id)

    def create_version(self, version: Version) -> Version:
        """새 버전을 생성합니다. 서버가 부여한 id가 담긴 Version을 반환합니다."""
        contents = self._executor.execute(
            "POST", self._api_url("version"), self._encode(version.to_payload()),
        )
        created = Version.from_api_response(self._decode_json(contents, "버전 생성"))
        logger.info("버전 생성 완료: %s (id=%s)", created.name, created.id)
        return created

    # ─── 활동 스트림 ────────────────────────────────────────────────────

    def user_activity(self, user: str) -> ActivityFeed:
        """사용자의 활동 스트림을 조회합니다."""
        query = urlencode({"streams": user_stream_filter(user)})
        url = f"{self._config.base_url}{self._config.activity_path}?{query}"
        return self.activity(url)

    def activity(self, url: str) -> ActivityFeed:
        """주어진 URL의 Atom 활동 피드를 조회합니다."""
        contents = self._executor.execute("GET", url, accept=ATOM_ACCEPT)
        feed = ActivityFeed.from_xml(contents)
        logger.info("활동 피드 조회: %s (%d건)", feed.title, len(feed.entries))
        return feed
