"""JQL 유틸리티 단위 테스트."""

import unittest

from jira_rest_client.utils.jql import assignee_jql, quote_value, user_stream_filter


class TestJql(unittest.TestCase):
    """JQL 조립 함수 테스트."""

    def test_quote_plain_value(self) -> None:
        self.assertEqual(quote_value("jdoe"), '"jdoe"')

    def test_quote_escapes_quotes_and_backslashes(self) -> None:
        self.assertEqual(quote_value('a"b\\c'), '"a\\"b\\\\c"')

    def test_assignee_jql(self) -> None:
        self.assertEqual(assignee_jql("jane doe"), 'assignee="jane doe"')

    def test_user_stream_filter(self) -> None:
        self.assertEqual(user_stream_filter("alice"), "user IS alice")


if __name__ == "__main__":
    unittest.main()
