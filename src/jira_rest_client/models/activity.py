"""Jira 활동 스트림(Atom 피드) 모델.

https://www.w3.org/2005/Atom 네임스페이스의 feed 문서를 읽기 전용 모델로 변환합니다.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime

from jira_rest_client.exceptions import DecodeError

ATOM_NS = "http://www.w3.org/2005/Atom"
ATOM_ACCEPT = "application/atom+xml"
_NS = {"atom": ATOM_NS}


@dataclass(frozen=True)
class Link:
    href: str
    rel: str = ""


@dataclass(frozen=True)
class Person:
    name: str = ""
    uri: str = ""
    email: str = ""


@dataclass(frozen=True)
class Text:
    body: str = ""
    type: str = ""


@dataclass(frozen=True)
class Category:
    term: str = ""


@dataclass(frozen=True)
class ActivityItem:
    """피드의 entry 하나 (사용자 활동 1건)."""

    title: str
    id: str
    links: list[Link] = field(default_factory=list)
    updated: datetime | None = None
    author: Person = field(default_factory=Person)
    summary: Text = field(default_factory=Text)
    category: Category = field(default_factory=Category)


@dataclass(frozen=True)
class ActivityFeed:
    """활동 스트림 피드."""

    title: str
    id: str
    links: list[Link] = field(default_factory=list)
    updated: datetime | None = None
    author: Person = field(default_factory=Person)
    entries: list[ActivityItem] = field(default_factory=list)

    @classmethod
    def from_xml(cls, content: bytes) -> "ActivityFeed":
        """Atom XML 본문에서 ActivityFeed 생성.

        Raises:
            DecodeError: XML이 아니거나 루트가 Atom feed가 아닐 때.
        """
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise DecodeError(f"활동 피드 XML 해석 실패: {e}") from e

        if root.tag != f"{{{ATOM_NS}}}feed":
            raise DecodeError(f"Atom feed 문서가 아닙니다: <{root.tag}>")

        return cls(
            title=_text(root, "title"),
            id=_text(root, "id"),
            links=_links(root),
            updated=_timestamp(root),
            author=_person(root.find("atom:author", _NS)),
            entries=[_entry(e) for e in root.findall("atom:entry", _NS)],
        )


def _text(elem: ET.Element, name: str) -> str:
    return elem.findtext(f"atom:{name}", default="", namespaces=_NS).strip()


def _links(elem: ET.Element) -> list[Link]:
    return [
        Link(href=link.get("href", ""), rel=link.get("rel", ""))
        for link in elem.findall("atom:link", _NS)
    ]


def _person(elem: ET.Element | None) -> Person:
    if elem is None:
        return Person()
    return Person(
        name=_text(elem, "name"),
        uri=_text(elem, "uri"),
        email=_text(elem, "email"),
    )


def _timestamp(elem: ET.Element) -> datetime | None:
    raw = _text(elem, "updated")
    if not raw:
        return None
    # RFC 3339의 "Z"는 3.11 미만의 fromisoformat이 처리하지 못함
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError as e:
        raise DecodeError(f"updated 시각 형식이 올바르지 않습니다: {raw!r}") from e


def _entry(elem: ET.Element) -> ActivityItem:
    summary = elem.find("atom:summary", _NS)
    category = elem.find("atom:category", _NS)
    return ActivityItem(
        title=_text(elem, "title"),
        id=_text(elem, "id"),
        links=_links(elem),
        updated=_timestamp(elem),
        author=_person(elem.find("atom:author", _NS)),
        summary=(
            Text(body=summary.text or "", type=summary.get("type", ""))
            if summary is not None else Text()
        ),
        category=(
            Category(term=category.get("term", ""))
            if category is not None else Category()
        ),
    )
