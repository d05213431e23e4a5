"""요청/응답 본문 덤프 훅.

RequestExecutor에 tracer로 주입하면 마지막 요청 본문과 응답 본문을
지정한 디렉토리에 저장합니다. JIRA_DUMP_DIR이 설정된 경우에만 사용됩니다.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

# tracer(kind, payload): kind는 "request" 또는 "response"
Tracer = Callable[[str, bytes], None]

REQUEST_DUMP_FILE = "last_body.txt"
RESPONSE_DUMP_FILE = "last_response.txt"


class FileDumpTracer:
    """마지막 요청/응답 본문을 파일로 덮어쓰는 tracer."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)
        self._directory.mkdir(parents=True, exist_ok=True)

    @property
    def request_path(self) -> Path:
        return self._directory / REQUEST_DUMP_FILE

    @property
    def response_path(self) -> Path:
        return self._directory / RESPONSE_DUMP_FILE

    def __call__(self, kind: str, payload: bytes) -> None:
        match kind:
            case "request":
                path = self.request_path
            case "response":
                path = self.response_path
            case _:
                raise ValueError(f"알 수 없는 덤프 종류: {kind}")

        path.write_bytes(payload)
        logger.debug("%s 본문 저장: %s (%d bytes)", kind, path, len(payload))
