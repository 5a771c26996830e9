from __future__ import annotations

import argparse
import sys
from typing import Any

from .. import __version__
from ..checks.model import Findings
from ..checks.registry import load_registry
from ..checks.report import build_registry_payload, build_report_payload, render_json, render_registry_text, render_text
from ..checks.runner import run_error_codes_check
from ..config.loader import load_config
from ..contracts.validate import validate_file
from ..core.context import RunContext
from ..core.logging import log_event
from ..errors import ScriptError
from ..exit_codes import ERR_FINDINGS, ERR_INTERNAL, ERR_USAGE, OK
from .output import emit, render_error, resolve_output_format, write_out_file


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="errcode-audit", description="cross-check a compiler's error-code catalog")
    p.add_argument("--version", action="version", version=f"errcode-audit {__version__}")
    p.add_argument("--repo-root", help="compiler repository root (defaults to the current directory)")
    p.add_argument("--config", help="YAML config path, relative to the repository root")
    p.add_argument("--run-id", help="run identifier")
    p.add_argument("--format", choices=["text", "json"], default=None, help="output format")
    p.add_argument("--json", action="store_true", help="emit JSON output")
    p.add_argument("--log-json", action="store_true", help="emit structured log events as JSON lines")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="show warnings and stage timings")
    vg.add_argument("--quiet", action="store_true", help="only emit errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    check_p = sub.add_parser("check", help="verify registry, explanations, UI tests and compiler usage")
    check_p.add_argument(
        "--search-path",
        action="append",
        dest="search_paths",
        default=None,
        help="compiler source root to scan for code usage (repeatable; overrides config)",
    )
    check_p.add_argument("--out-file", help="also write the JSON report to this path")

    sub.add_parser("registry", help="list declared error codes")
    sub.add_parser("config", help="print the effective configuration")
    sub.add_parser("version", help="print version")

    val_p = sub.add_parser("validate-output", help="validate a JSON report against its schema")
    val_p.add_argument("--schema", required=True)
    val_p.add_argument("--file", required=True)
    return p


def _run_check(ctx: RunContext, ns: argparse.Namespace, as_json: bool) -> int:
    config = load_config(ctx.repo_root, ns.config)
    result = run_error_codes_check(ctx.repo_root, config, search_paths=ns.search_paths, ctx=ctx)
    payload = build_report_payload(result, run_id=ctx.run_id, verbose=ctx.verbose)
    if ns.out_file:
        write_out_file(ns.out_file, render_json(payload))
    rendered = render_json(payload) if as_json else render_text(payload, quiet=ctx.quiet, verbose=ctx.verbose)
    if rendered:
        print(rendered)
    return ERR_FINDINGS if result.failed else OK


def _run_registry(ctx: RunContext, ns: argparse.Namespace, as_json: bool) -> int:
    config = load_config(ctx.repo_root, ns.config)
    registry, findings = load_registry(ctx.repo_root, config, Findings())
    payload = build_registry_payload(registry, findings.errors, run_id=ctx.run_id)
    print(render_json(payload) if as_json else render_registry_text(payload))
    return ERR_FINDINGS if findings.failed else OK


def main(argv: list[str] | None = None) -> int:
    raw_argv = argv if argv is not None else sys.argv[1:]
    p = build_parser()
    ns = p.parse_args(raw_argv)
    if ns.format and ns.json and ns.format != "json":
        print("conflicting output flags: use either --format json or --json", file=sys.stderr)
        return ERR_USAGE
    fmt = resolve_output_format(cli_json=ns.json, cli_format=ns.format)
    ctx = RunContext.from_args(ns.run_id, ns.repo_root, fmt, ns.verbose, ns.quiet, ns.log_json)
    as_json = ctx.output_format == "json"
    try:
        log_event(ctx, "info", "cli", "start", cmd=ns.cmd, fmt=ctx.output_format, repo_root=str(ctx.repo_root))
        if ns.cmd == "check":
            return _run_check(ctx, ns, as_json)
        if ns.cmd == "registry":
            return _run_registry(ctx, ns, as_json)
        if ns.cmd == "config":
            payload: dict[str, Any] = {
                "schema_version": 1,
                "tool": "errcode-audit",
                "status": "ok",
                "run_id": ctx.run_id,
                "config": load_config(ctx.repo_root, ns.config).as_dict(),
            }
            emit(payload, as_json)
            return OK
        if ns.cmd == "version":
            emit({"schema_version": 1, "tool": "errcode-audit", "status": "ok", "version": __version__}, as_json)
            return OK
        if ns.cmd == "validate-output":
            validate_file(ns.schema, ns.file)
            emit({"schema_version": 1, "tool": "errcode-audit", "status": "ok", "schema": ns.schema, "file": ns.file}, as_json)
            return OK
        return ERR_USAGE
    except ScriptError as exc:
        print(render_error(as_json=as_json, message=str(exc), code=exc.code), file=sys.stderr)
        return exc.code
    except Exception as exc:  # pragma: no cover
        print(render_error(as_json=as_json, message=f"internal error: {exc}", code=ERR_INTERNAL), file=sys.stderr)
        return ERR_INTERNAL


if __name__ == "__main__":
    raise SystemExit(main())
