from __future__ import annotations

import os
import sys
import time
import argparse
import json as _json
import concurrent.futures as _fut
import zipfile
import zlib

from typing import Any, Dict, List, Optional

from sbunpack import __version__
from sbunpack.errors import UnpackagerError
from sbunpack.project import UnpackagedProject
from sbunpack.unpack import unpackage_file


_EXISTS_POLICIES = ("overwrite", "skip", "rename", "fail")


def _next_nonconflicting_path(path: str) -> str:
    if not os.path.exists(path) and not os.path.lexists(path):
        return path
    base_dir = os.path.dirname(path)
    root, ext = os.path.splitext(os.path.basename(path))
    i = 1
    while True:
        candidate = os.path.join(base_dir, f"{root} ({i}){ext}")
        if not os.path.exists(candidate) and not os.path.lexists(candidate):
            return candidate
        i += 1


def output_path_for(source: str, project: UnpackagedProject, outdir: str) -> str:
    """<outdir>/<source stem><project extension>"""
    stem = os.path.splitext(os.path.basename(source))[0] or "project"
    return os.path.join(outdir, stem + project.extension)


def _unpackage_one(path: str) -> Dict[str, Any]:
    res: Dict[str, Any] = {"path": path, "status": "unknown"}
    try:
        project = unpackage_file(path)
    except (UnpackagerError, OSError, ValueError, RuntimeError, zipfile.BadZipFile, zlib.error) as exc:
        res["status"] = "fail"
        res["message"] = str(exc)
        return res
    res["status"] = "ok"
    res["type"] = project.type
    res["size"] = len(project.data)
    res["project"] = project
    return res


def _run_all(paths: List[str], jobs: int) -> List[Dict[str, Any]]:
    with _fut.ThreadPoolExecutor(max_workers=max(1, int(jobs))) as ex:
        return list(ex.map(_unpackage_one, paths))


def _write_project(project: UnpackagedProject, dst: str, exists: str) -> Optional[str]:
    """Write project to dst under the exists policy; None when skipped."""
    if os.path.exists(dst) or os.path.islink(dst):
        if exists == "overwrite":
            if os.path.isdir(dst) and not os.path.islink(dst):
                raise RuntimeError(f"Cannot overwrite directory with file: {dst}")
        elif exists == "skip":
            return None
        elif exists == "rename":
            dst = _next_nonconflicting_path(dst)
        else:
            raise RuntimeError(f"Destination exists: {dst}")
    os.makedirs(os.path.dirname(dst) or ".", exist_ok=True)
    with open(dst, "wb") as fh:
        fh.write(project.data)
    return dst


def _public(res: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in res.items() if k != "project"}


def cmd_unpack(
    inputs: List[str],
    *,
    outdir: str = ".",
    exists: str = "rename",
    jobs: int = 4,
    as_json: bool = False,
    quiet: bool = False,
) -> bool:
    """Recover the projects inside packaged files and write them to outdir.

    Args:
        inputs: Packaged .html/.zip files (or bare projects).
        outdir: Output directory; created when missing.
        exists: What to do when the output file exists: overwrite, skip,
            rename (append ' (n)' before the extension) or fail.
        jobs: Maximum parallel workers.
        as_json: When True, print a JSON result summary.
        quiet: Limit output to the summary.

    Returns:
        True when every input was unpackaged, False otherwise.
    """
    if exists not in _EXISTS_POLICIES:
        raise ValueError(f"unknown exists policy: {exists}")
    t0 = time.time()
    results = _run_all(inputs, jobs)
    # Writes stay on this thread so rename decisions cannot race
    for r in results:
        if r["status"] != "ok":
            continue
        dst = _write_project(r["project"], output_path_for(r["path"], r["project"], outdir), exists)
        if dst is None:
            r["status"] = "skipped"
        else:
            r["output"] = dst

    ok = sum(1 for r in results if r["status"] == "ok")
    skipped = sum(1 for r in results if r["status"] == "skipped")
    failed = sum(1 for r in results if r["status"] == "fail")
    if as_json:
        print(_json.dumps({"results": [_public(r) for r in results], "ok": ok, "skipped": skipped, "failed": failed}))
        return failed == 0
    for r in results:
        if r["status"] == "fail":
            print(f"Error: {r['path']}: {r['message']}", file=sys.stderr)
        elif r["status"] == "skipped":
            if not quiet:
                print(f"    skipping: {r['path']} (exists)")
        elif not quiet:
            print(f" unpackaged: {r['path']} -> {r['output']} ({r['type']}, {r['size']} bytes)")
    dt = max(0.000001, time.time() - t0)
    print(f"Summary: ok={ok} skipped={skipped} failed={failed} in {dt:.1f}s")
    return failed == 0


def cmd_identify(inputs: List[str], *, jobs: int = 4, as_json: bool = False) -> bool:
    """Print the project type found in each input without writing anything."""
    results = _run_all(inputs, jobs)
    failed = sum(1 for r in results if r["status"] == "fail")
    if as_json:
        print(_json.dumps({"results": [_public(r) for r in results], "failed": failed}))
        return failed == 0
    for r in results:
        if r["status"] == "fail":
            print(f"Error: {r['path']}: {r['message']}", file=sys.stderr)
        else:
            print(f"{r['type']}\t{r['size']}\t{r['path']}")
    return failed == 0


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="sbunpack",
        description="Recover Scratch projects (sb, sb2, sb3) from packaged HTML and zip files",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_unpack = sub.add_parser("unpack", help="Write the project inside each input")
    ap_unpack.add_argument("inputs", nargs="+", help="Packaged files")
    ap_unpack.add_argument("--outdir", default=".", help="Output directory")
    ap_unpack.add_argument(
        "--exists",
        choices=list(_EXISTS_POLICIES),
        default="rename",
        help=(
            "What to do if a destination file exists: overwrite, skip, "
            "rename (append ' (n)' before extension), or fail. Default: rename"
        ),
    )
    ap_unpack.add_argument("--jobs", "-j", type=int, default=4, help="Parallel jobs (default 4)")
    ap_unpack.add_argument("--json", action="store_true", help="Emit JSON result summary")
    ap_unpack.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    ap_identify = sub.add_parser("identify", help="Show the project type inside each input")
    ap_identify.add_argument("inputs", nargs="+", help="Packaged files")
    ap_identify.add_argument("--jobs", "-j", type=int, default=4, help="Parallel jobs (default 4)")
    ap_identify.add_argument("--json", action="store_true", help="Emit JSON result summary")

    args = ap.parse_args(argv)
    try:
        if args.cmd == "unpack":
            success = cmd_unpack(
                args.inputs,
                outdir=args.outdir,
                exists=args.exists,
                jobs=args.jobs,
                as_json=args.json,
                quiet=args.quiet,
            )
        elif args.cmd == "identify":
            success = cmd_identify(args.inputs, jobs=args.jobs, as_json=args.json)
        else:
            raise RuntimeError("Unknown command")
    except (ValueError, RuntimeError, UnpackagerError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
