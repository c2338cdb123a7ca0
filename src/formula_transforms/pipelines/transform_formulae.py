from __future__ import annotations

import argparse
import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional

from tqdm import tqdm

from ..config import load_config
from ..processor import FormulaProcessor
from ..rules import ConfigError
from ..types import FileResult
from ..utils import iter_formula_files


def format_result(r: FileResult) -> str:
    if r.status == "skipped":
        return f"[SKIP] {r.path}: not a goreleaser formula"
    if r.status == "unchanged":
        return f"[OK] {r.path}: unchanged"
    if r.status == "would_process":
        return f"[DRY] {r.path}: would apply {', '.join(r.applied)}"
    if r.status == "processed":
        return f"[DONE] {r.path}: applied {', '.join(r.applied)}"
    return f"[FAIL] {r.path}: {r.error}"


def run(processor: FormulaProcessor, files: List[str], workers: int = 1, err_log: Optional[str] = None) -> List[FileResult]:
    results: List[FileResult] = []
    err_f = None
    if err_log:
        os.makedirs(os.path.dirname(err_log) or ".", exist_ok=True)
        err_f = open(err_log, "a", encoding="utf-8")

    try:
        pbar = tqdm(total=len(files), desc="Formula transforms", unit="file", disable=len(files) < 2)
        with ThreadPoolExecutor(max_workers=max(1, workers)) as ex:
            fut2path = {ex.submit(processor.process, f): f for f in files}
            for fut in as_completed(fut2path):
                r = fut.result()
                results.append(r)
                tqdm.write(format_result(r))
                if err_f and r.status == "failed":
                    err_f.write(f"{r.path}: {r.error}\n")
                    err_f.flush()
                pbar.update(1)
        pbar.close()
    finally:
        if err_f:
            err_f.close()
    return results


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Hoist and reorder install/test/caveats in GoReleaser-generated formulae.")
    ap.add_argument("files", nargs="*", help="Formula files (default: Formula/*.rb)")
    ap.add_argument("--config", type=str, default=None, help="Path to transforms.yml")
    ap.add_argument("--workers", type=int, default=1, help="Concurrency (threads)")
    ap.add_argument("--dry-run", action="store_true", help="Report what would change without writing")
    ap.add_argument("--err_log", type=str, default=None, help="Error log path (append)")
    ap.add_argument("--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = load_config(args.config)
        processor = FormulaProcessor(cfg, dry_run=args.dry_run)
    except ConfigError as e:
        print(f"[ERROR] {e}", flush=True)
        return 2

    files = iter_formula_files(args.files)
    results = run(processor, files, workers=args.workers, err_log=args.err_log)

    counts = {}
    for r in results:
        counts[r.status] = counts.get(r.status, 0) + 1
    summary = " ".join(f"{k}={v}" for k, v in sorted(counts.items()))
    print(f"[PIPE] files={len(files)} {summary}".rstrip(), flush=True)
    return 1 if counts.get("failed") else 0


if __name__ == "__main__":
    raise SystemExit(main())
