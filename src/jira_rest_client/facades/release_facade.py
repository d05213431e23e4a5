"""릴리스(버전) 워크플로우 Facade.

JiraService의 단일 API 호출을 조합하여 버전 관련 고수준 워크플로우를 제공합니다.

주요 워크플로우:
    1. 버전 확보 (있으면 재사용, 없으면 생성)
    2. 기존 이슈에 버전 태깅
    3. 버전이 지정된 새 이슈 등록 (크래시 리포트 등)
"""

from __future__ import annotations

import logging
from typing import Any

from jira_rest_client.config import AppConfig
from jira_rest_client.models.issue import Issue, IssueRef, Version
from jira_rest_client.services.jira_service import JiraService

logger = logging.getLogger(__name__)


class ReleaseFacade:
    """버전 관리 워크플로우를 조합하는 Facade 클래스."""

    def __init__(self, config: AppConfig, service: JiraService | None = None) -> None:
        self._config = config
        self._jira = service or JiraService(config.jira)

    @property
    def service(self) -> JiraService:
        return self._jira

    # ─── 워크플로우 1: 버전 확보 ────────────────────────────────────────

    def ensure_version(
        self,
        project_key: str,
        name: str,
        description: str = "",
    ) -> Version:
        """프로젝트에 해당 이름의 버전이 있으면 반환하고, 없으면 생성합니다.

        Args:
            project_key: 프로젝트 키 (예: "CRASH").
            name: 버전명 (예: "1.4.2").
            description: 새로 만들 때의 설명 (선택).

        Returns:
            서버 id가 있는 버전.
        """
        for version in self._jira.get_all_versions(project_key):
            if version.name == name:
                logger.debug("기존 버전 사용: %s %s", project_key, name)
                return version

        return self._jira.create_version(
            Version(name=name, description=description, project=project_key),
        )

    # ─── 워크플로우 2: 기존 이슈에 버전 태깅 ────────────────────────────

    def tag_issue(self, issue_key: str, project_key: str, version_name: str) -> Version:
        """이슈에 버전을 추가합니다. 버전이 없으면 먼저 생성합니다."""
        version = self.ensure_version(project_key, version_name)
        self._jira.add_version_to_issue(IssueRef(id="", key=issue_key), version)

        logger.info("워크플로우 완료: %s → 버전 %s", issue_key, version.name)
        return version

    # ─── 워크플로우 3: 이슈 등록 ────────────────────────────────────────

    def report_issue(
        self,
        project_key: str,
        issue_type: str,
        summary: str,
        description: str = "",
        version_name: str | None = None,
        custom_fields: dict[str, Any] | None = None,
    ) -> IssueRef:
        """새 이슈를 등록합니다.

        Args:
            project_key: 프로젝트 키.
            issue_type: 이슈 타입명 (Bug, Task ...).
            summary: 이슈 제목.
            description: 이슈 설명 (선택).
            version_name: 영향 받는 버전명 (선택, 없으면 생성).
            custom_fields: customfield_* 값 (선택).

        Returns:
            생성된 이슈 참조.
        """
        issue = Issue.new(project_key, issue_type)
        issue.fields.summary = summary
        issue.fields.description = description
        if custom_fields:
            issue.fields.custom_fields.update(custom_fields)
        if version_name:
            issue.fields.add_version(self.ensure_version(project_key, version_name))

        ref = self._jira.create_issue(issue)
        logger.info("워크플로우 완료: 이슈 %s 등록 (%s)", ref.key, summary)
        return ref
