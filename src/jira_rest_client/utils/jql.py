"""JQL 조립 유틸리티.

사용자 입력을 JQL 문자열 리터럴로 안전하게 감쌉니다.
URL 인코딩은 JiraService에서 쿼리스트링을 만들 때 처리합니다.
"""

import re

_SPECIAL = re.compile(r'(["\\])')


def quote_value(value: str) -> str:
    """JQL 문자열 리터럴로 감쌉니다.

    Examples:
        >>> quote_value('jdoe')
        '"jdoe"'
        >>> quote_value('say "hi"')
        '"say \\\\"hi\\\\""'
    """
    return '"' + _SPECIAL.sub(r"\\\1", value) + '"'


def assignee_jql(user: str) -> str:
    """담당자 검색 JQL을 만듭니다.

    Examples:
        >>> assignee_jql("jdoe")
        'assignee="jdoe"'
    """
    return f"assignee={quote_value(user)}"


def user_stream_filter(user: str) -> str:
    """활동 스트림의 streams 파라미터 값을 만듭니다."""
    return f"user IS {user}"
