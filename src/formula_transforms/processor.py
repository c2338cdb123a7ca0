from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .config import TransformsConfig
from .rules import Transform
from .syntax import parse, unparse
from .types import FileResult
from .utils import read_text, split_header, write_atomic

logger = logging.getLogger(__name__)


class FormulaProcessor:
    """Runs the configured transforms over generated formula files.

    Holds no per-file state, so one processor can be shared by worker threads.
    """

    def __init__(self, config: Optional[TransformsConfig] = None, *, dry_run: bool = False):
        self.config = config or TransformsConfig()
        self.transforms: List[Transform] = self.config.build()
        self.dry_run = dry_run

    def is_target(self, content: str) -> bool:
        return self.config.marker in content

    def transform_text(self, content: str, path: str = "<string>") -> Tuple[Optional[str], List[str]]:
        """Return (new text, applied transform names); new text is None if nothing applied."""
        header, body = split_header(content)
        try:
            ast = parse(body, path)
        except SyntaxError as e:
            # report lines of the whole file, not of the header-less body
            if e.lineno:
                e.lineno += header.count("\n")
            raise

        applied: List[str] = []
        for transform in self.transforms:
            if not transform.applies(content, ast):
                logger.debug("%s: %s not applicable", path, transform.name)
                continue
            ast = transform.apply(content, ast)
            applied.append(transform.name)

        if not applied:
            return None, applied
        return header + unparse(ast), applied

    def process(self, path: str) -> FileResult:
        try:
            content = read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            return FileResult(path=path, status="failed", error=f"read failed: {e}")

        if not self.is_target(content):
            return FileResult(path=path, status="skipped")

        try:
            output, applied = self.transform_text(content, path)
        except SyntaxError as e:
            return FileResult(path=path, status="failed", error=f"{e.msg} (line {e.lineno})")

        if output is None:
            return FileResult(path=path, status="unchanged")
        if self.dry_run:
            return FileResult(path=path, status="would_process", applied=applied)

        try:
            write_atomic(path, output)
        except OSError as e:
            return FileResult(path=path, status="failed", applied=applied, error=f"write failed: {e}")
        return FileResult(path=path, status="processed", applied=applied)
