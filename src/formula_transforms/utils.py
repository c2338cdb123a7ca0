from __future__ import annotations
import glob
import os
import tempfile
from pathlib import Path
from typing import List, Tuple

DEFAULT_GLOB = os.path.join("Formula", "*.rb")


def iter_formula_files(paths: List[str]) -> List[str]:
    """Given paths or, when empty, every file under Formula/ (sorted)."""
    if paths:
        return list(paths)
    return sorted(glob.glob(DEFAULT_GLOB))


def read_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def split_header(content: str) -> Tuple[str, str]:
    """Split off the leading run of comment and blank lines."""
    lines = content.splitlines(keepends=True)
    n = 0
    for line in lines:
        if line.startswith("#") or not line.strip():
            n += 1
        else:
            break
    header = "".join(lines[:n])
    return header, content[len(header):]


def write_atomic(path: str, text: str) -> None:
    """Replace `path` with `text`; the old file stays intact if anything fails."""
    target = Path(path)
    fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        if target.exists():
            os.chmod(tmp, target.stat().st_mode & 0o7777)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
