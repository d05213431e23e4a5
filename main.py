#!/usr/bin/env python3
"""Jira REST Client - CLI 진입점.

사용법:
    python main.py issue PROJ-123                   # 이슈 조회
    python main.py search "project = PROJ" -n 25    # JQL 검색
    python main.py assigned jdoe --start 50         # 담당자 이슈 검색
    python main.py versions PROJ                    # 버전 목록
    python main.py create-version PROJ 1.4.2        # 버전 생성
    python main.py tag PROJ-123 1.4.2               # 이슈에 버전 추가 (없으면 생성)
    python main.py comment PROJ-123 "확인했습니다"   # 코멘트 추가
    python main.py activity jdoe                    # 사용자 활동 스트림
"""

from __future__ import annotations

import argparse
import logging
import sys

from jira_rest_client.config import AppConfig, load_config
from jira_rest_client.exceptions import JiraClientError
from jira_rest_client.facades.release_facade import ReleaseFacade
from jira_rest_client.models.issue import Comment, Issue
from jira_rest_client.models.search import SearchResult


def _setup_logging(verbose: bool) -> None:
    """로깅을 설정합니다."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _print_issue(issue: Issue) -> None:
    """이슈 정보를 출력합니다."""
    fields = issue.fields
    print()
    print("========================================")
    print(f"  이슈 키  : {issue.key} (id {issue.id})")
    if fields is not None:
        print(f"  이슈 타입: {fields.issue_type.name if fields.issue_type else ''}")
        print(f"  요약     : {fields.summary}")
        if fields.assignee:
            print(f"  담당자   : {fields.assignee.display_name or fields.assignee.name}")
        if fields.created:
            print(f"  생성일   : {fields.created}")
        if fields.versions:
            print(f"  버전     : {', '.join(v.name for v in fields.versions)}")
    print("========================================")


def _print_search(result: SearchResult) -> None:
    """검색 결과를 출력합니다."""
    print(f"\n🔎 {result.total}건 중 {result.start_at + 1}번째부터:")
    for issue in result.issues:
        summary = issue.fields.summary if issue.fields else ""
        print(f"  {issue.key:<12} {summary}")
    if result.pagination:
        p = result.pagination
        print(f"\n  페이지 {p.page + 1}/{p.page_count}")


# ─── 서브커맨드 핸들러 ────────────────────────────────────────────────────


def _handle_issue(facade: ReleaseFacade, config: AppConfig, args: argparse.Namespace) -> None:
    """이슈 조회."""
    _print_issue(facade.service.get_issue(args.issue_key))


def _handle_search(facade: ReleaseFacade, config: AppConfig, args: argparse.Namespace) -> None:
    """JQL 검색."""
    result = facade.service.search(
        args.jql,
        max_results=args.max_results or config.search.max_results,
        start_at=args.start,
    )
    _print_search(result)


def _handle_assigned(facade: ReleaseFacade, config: AppConfig, args: argparse.Namespace) -> None:
    """담당자 이슈 검색."""
    result = facade.service.issues_assigned_to(
        args.user,
        max_results=args.max_results or config.search.max_results,
        start_at=args.start,
    )
    _print_search(result)


def _handle_versions(facade: ReleaseFacade, config: AppConfig, args: argparse.Namespace) -> None:
    """버전 목록 조회."""
    versions = facade.service.get_all_versions(args.project_key)
    print(f"\n📋 프로젝트 {args.project_key} 버전:")
    if versions:
        for version in versions:
            print(f"  → {version.name} (id {version.id})")
    else:
        print("  (버전 없음)")


def _handle_create_version(facade: ReleaseFacade, config: AppConfig, args: argparse.Namespace) -> None:
    """버전 확보 (없으면 생성)."""
    version = facade.ensure_version(
        args.project_key, args.name, description=args.description or "",
    )
    print(f"\n✅ 버전 {version.name} (id {version.id})")


def _handle_tag(facade: ReleaseFacade, config: AppConfig, args: argparse.Namespace) -> None:
    """이슈에 버전 추가."""
    project_key = args.project or args.issue_key.split("-")[0]
    version = facade.tag_issue(args.issue_key, project_key, args.version)
    print(f"\n✅ 이슈 {args.issue_key}에 버전 {version.name}이(가) 추가되었습니다.")


def _handle_comment(facade: ReleaseFacade, config: AppConfig, args: argparse.Namespace) -> None:
    """코멘트 추가."""
    comment = facade.service.add_comment(args.issue_key, Comment(body=args.body))
    print(f"\n💬 코멘트 등록 (id {comment.id}): {comment.body}")


def _handle_activity(facade: ReleaseFacade, config: AppConfig, args: argparse.Namespace) -> None:
    """사용자 활동 스트림 조회."""
    feed = facade.service.user_activity(args.user)
    print(f"\n📰 {feed.title}")
    for entry in feed.entries[: args.limit]:
        when = entry.updated.strftime("%Y-%m-%d %H:%M") if entry.updated else ""
        print(f"  {when:<16} {entry.title}")


# ─── CLI 파서 ────────────────────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    """CLI 인자 파서를 구성합니다."""
    parser = argparse.ArgumentParser(
        prog="jira-rest-client",
        description="Jira 이슈/버전/활동 스트림 조회 및 관리 도구",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="상세 로그 출력",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    # issue
    p_issue = sub.add_parser("issue", help="이슈 조회")
    p_issue.add_argument("issue_key", help="Jira 이슈 키 또는 ID (예: PROJ-123)")

    # search / assigned
    p_search = sub.add_parser("search", help="JQL 검색")
    p_search.add_argument("jql", help="JQL 쿼리")
    p_assigned = sub.add_parser("assigned", help="담당자 이슈 검색")
    p_assigned.add_argument("user", help="담당자 사용자명")
    for p in (p_search, p_assigned):
        p.add_argument("-n", "--max-results", type=int, default=None, help="페이지 크기 (기본: 설정값)")
        p.add_argument("--start", type=int, default=0, help="시작 위치 (기본: 0)")

    # versions
    p_versions = sub.add_parser("versions", help="프로젝트 버전 목록")
    p_versions.add_argument("project_key", help="프로젝트 키")

    # create-version
    p_create_version = sub.add_parser("create-version", help="버전 생성 (이미 있으면 재사용)")
    p_create_version.add_argument("project_key", help="프로젝트 키")
    p_create_version.add_argument("name", help="버전명")
    p_create_version.add_argument("--description", "-d", default="", help="버전 설명")

    # tag
    p_tag = sub.add_parser("tag", help="이슈에 버전 추가")
    p_tag.add_argument("issue_key", help="Jira 이슈 키")
    p_tag.add_argument("version", help="버전명")
    p_tag.add_argument("--project", "-p", default=None, help="프로젝트 키 (기본: 이슈 키에서 추출)")

    # comment
    p_comment = sub.add_parser("comment", help="코멘트 추가")
    p_comment.add_argument("issue_key", help="Jira 이슈 키")
    p_comment.add_argument("body", help="코멘트 내용")

    # activity
    p_activity = sub.add_parser("activity", help="사용자 활동 스트림")
    p_activity.add_argument("user", help="사용자명")
    p_activity.add_argument("--limit", type=int, default=20, help="출력 개수 (기본: 20)")

    return parser


# ─── 메인 ────────────────────────────────────────────────────────────────


def main() -> None:
    """CLI 메인 함수."""
    parser = _build_parser()
    args = parser.parse_args()
    _setup_logging(args.verbose)

    try:
        config = load_config()
        facade = ReleaseFacade(config)

        handlers = {
            "issue": _handle_issue,
            "search": _handle_search,
            "assigned": _handle_assigned,
            "versions": _handle_versions,
            "create-version": _handle_create_version,
            "tag": _handle_tag,
            "comment": _handle_comment,
            "activity": _handle_activity,
        }

        handler = handlers[args.command]
        handler(facade, config, args)

    except JiraClientError as e:
        print(f"\n❌ {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n👋 중단되었습니다.")
        sys.exit(130)


if __name__ == "__main__":
    main()
