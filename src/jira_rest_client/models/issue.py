"""Jira 이슈 및 관련 데이터 모델.

서버로 다시 보내는 모델은 to_payload()로 JSON 객체를 만들며,
빈 값(None, "", 0, False, 빈 리스트/딕셔너리)은 생략합니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from jira_rest_client.exceptions import DecodeError

JIRA_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"

CUSTOM_FIELD_PREFIX = "customfield_"

# 크래시 리포트 프로젝트에서 쓰던 커스텀 필드 ID
CRASH_REPORT_ID_FIELD = "customfield_10021"
BACKTRACE_HASH_FIELD = "customfield_10022"
CRASH_COUNT_FIELD = "customfield_10023"

_EMPTY = (None, "", 0, False, [], {})


def _omit_empty(payload: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in payload.items() if v not in _EMPTY}


@dataclass(frozen=True)
class IssueType:
    """이슈 타입 정보."""

    name: str = ""
    id: str = ""
    self_url: str = ""
    description: str = ""
    icon_url: str = ""
    subtask: bool = False

    @classmethod
    def from_api_response(cls, data: dict) -> "IssueType":
        return cls(
            name=data.get("name", ""),
            id=data.get("id", ""),
            self_url=data.get("self", ""),
            description=data.get("description", ""),
            icon_url=data.get("iconUrl", ""),
            subtask=data.get("subtask", False),
        )

    def to_payload(self) -> dict[str, Any]:
        return _omit_empty({
            "self": self.self_url,
            "id": self.id,
            "description": self.description,
            "iconUrl": self.icon_url,
            "name": self.name,
            "subtask": self.subtask,
        })


@dataclass(frozen=True)
class JiraProject:
    """프로젝트 정보."""

    key: str = ""
    id: str = ""
    self_url: str = ""
    name: str = ""
    avatar_urls: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_api_response(cls, data: dict) -> "JiraProject":
        return cls(
            key=data.get("key", ""),
            id=data.get("id", ""),
            self_url=data.get("self", ""),
            name=data.get("name", ""),
            avatar_urls=dict(data.get("avatarUrls") or {}),
        )

    def to_payload(self) -> dict[str, Any]:
        return _omit_empty({
            "self": self.self_url,
            "id": self.id,
            "key": self.key,
            "name": self.name,
            "avatarUrls": self.avatar_urls,
        })


@dataclass(frozen=True)
class User:
    """Jira 사용자 (보고자, 담당자)."""

    name: str = ""
    key: str = ""
    self_url: str = ""
    display_name: str = ""
    email_address: str = ""
    active: bool = False

    @classmethod
    def from_api_response(cls, data: dict) -> "User":
        return cls(
            name=data.get("name", ""),
            key=data.get("key", ""),
            self_url=data.get("self", ""),
            display_name=data.get("displayName", ""),
            email_address=data.get("emailAddress", ""),
            active=data.get("active", False),
        )

    def to_payload(self) -> dict[str, Any]:
        return _omit_empty({
            "self": self.self_url,
            "name": self.name,
            "key": self.key,
            "emailAddress": self.email_address,
            "displayName": self.display_name,
            "active": self.active,
        })


@dataclass(frozen=True)
class Version:
    """프로젝트 버전."""

    name: str = ""
    id: str = ""
    self_url: str = ""
    description: str = ""
    project: str = ""
    project_id: int = 0

    @classmethod
    def from_api_response(cls, data: dict) -> "Version":
        """Jira REST API 응답에서 Version 생성."""
        return cls(
            name=data.get("name", ""),
            id=str(data.get("id", "")),
            self_url=data.get("self", ""),
            description=data.get("description", ""),
            project=data.get("project", ""),
            project_id=data.get("projectId", 0),
        )

    def to_payload(self) -> dict[str, Any]:
        return _omit_empty({
            "id": self.id,
            "self": self.self_url,
            "name": self.name,
            "description": self.description,
            "project": self.project,
            "projectId": self.project_id,
        })


@dataclass(frozen=True)
class Comment:
    """이슈 코멘트."""

    body: str
    id: str = ""
    self_url: str = ""

    @classmethod
    def from_api_response(cls, data: dict) -> "Comment":
        return cls(
            body=data.get("body", ""),
            id=str(data.get("id", "")),
            self_url=data.get("self", ""),
        )

    def to_payload(self) -> dict[str, Any]:
        return _omit_empty({"body": self.body})


@dataclass(frozen=True)
class IssueRef:
    """이슈 생성 응답에 담긴 최소 참조 정보."""

    id: str
    key: str
    self_url: str = ""

    @classmethod
    def from_api_response(cls, data: dict) -> "IssueRef":
        return cls(
            id=str(data.get("id", "")),
            key=data.get("key", ""),
            self_url=data.get("self", ""),
        )


@dataclass
class IssueFields:
    """이슈 필드 블록.

    customfield_* 값은 custom_fields 딕셔너리에 필드 ID를 키로 보관합니다.
    """

    issue_type: IssueType | None = None
    summary: str = ""
    description: str = ""
    reporter: User | None = None
    assignee: User | None = None
    project: JiraProject | None = None
    created: str = ""
    versions: list[Version] | None = None
    custom_fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api_response(cls, data: dict) -> "IssueFields":
        """Jira REST API의 fields 객체에서 IssueFields 생성."""
        versions = data.get("versions")
        return cls(
            issue_type=_nested(IssueType, data.get("issuetype")),
            summary=data.get("summary") or "",
            description=data.get("description") or "",
            reporter=_nested(User, data.get("reporter")),
            assignee=_nested(User, data.get("assignee")),
            project=_nested(JiraProject, data.get("project")),
            created=data.get("created") or "",
            versions=(
                [Version.from_api_response(v) for v in versions]
                if versions is not None else None
            ),
            custom_fields={
                k: v for k, v in data.items()
                if k.startswith(CUSTOM_FIELD_PREFIX) and v is not None
            },
        )

    def to_payload(self) -> dict[str, Any]:
        payload = _omit_empty({
            "issuetype": self.issue_type.to_payload() if self.issue_type else None,
            "summary": self.summary,
            "description": self.description,
            "reporter": self.reporter.to_payload() if self.reporter else None,
            "assignee": self.assignee.to_payload() if self.assignee else None,
            "project": self.project.to_payload() if self.project else None,
            "created": self.created,
            "versions": [v.to_payload() for v in self.versions or []],
        })
        payload.update(
            (k, v) for k, v in self.custom_fields.items() if v is not None
        )
        return payload

    def add_version(self, version: Version) -> None:
        """버전을 추가합니다. 같은 이름의 버전이 이미 있으면 무시합니다."""
        if self.versions is None:
            self.versions = []
        if any(v.name == version.name for v in self.versions):
            return
        self.versions.append(version)

    def clear_server_fields(self) -> None:
        """서버가 관리하는 필드(보고자, 담당자, 생성일)를 비웁니다."""
        self.reporter = None
        self.assignee = None
        self.created = ""

    @property
    def created_at(self) -> datetime | None:
        """생성일을 datetime으로 변환합니다. (예: 2014-03-07T10:15:30.000+0100)"""
        if not self.created:
            return None
        try:
            return datetime.strptime(self.created, JIRA_DATE_FORMAT)
        except ValueError as e:
            raise DecodeError(f"생성일 형식이 올바르지 않습니다: {self.created!r}") from e


@dataclass
class Issue:
    """Jira 이슈."""

    id: str = ""
    key: str = ""
    self_url: str = ""
    expand: str = ""
    fields: IssueFields | None = None

    @classmethod
    def new(cls, project_key: str, issue_type: str) -> "Issue":
        """생성 요청용 빈 이슈를 만듭니다."""
        return cls(
            fields=IssueFields(
                issue_type=IssueType(name=issue_type),
                project=JiraProject(key=project_key),
                versions=[],
            ),
        )

    @classmethod
    def from_api_response(cls, data: dict) -> "Issue":
        """Jira REST API 응답에서 Issue 생성."""
        fields = data.get("fields")
        return cls(
            id=str(data.get("id", "")),
            key=data.get("key", ""),
            self_url=data.get("self", ""),
            expand=data.get("expand", ""),
            fields=IssueFields.from_api_response(fields) if fields is not None else None,
        )

    def to_payload(self) -> dict[str, Any]:
        return _omit_empty({
            "id": self.id,
            "key": self.key,
            "self": self.self_url,
            "expand": self.expand,
            "fields": self.fields.to_payload() if self.fields else None,
        })


def _nested(model, data: dict | None):
    return model.from_api_response(data) if data else None
