"""CLI payload output helpers."""

from __future__ import annotations

from pathlib import Path

from ..core.serialize import dumps_json


def emit(payload: dict[str, object], as_json: bool) -> None:
    print(dumps_json(payload, pretty=not as_json))


def resolve_output_format(*, cli_json: bool, cli_format: str | None) -> str:
    if cli_json:
        return "json"
    return cli_format or "text"


def render_error(*, as_json: bool, message: str, code: int) -> str:
    if as_json:
        return dumps_json(
            {
                "schema_name": "errcode-audit.error.v1",
                "schema_version": 1,
                "tool": "errcode-audit",
                "status": "error",
                "errors": [{"code": code, "message": message}],
            },
            pretty=False,
        )
    return message


def write_out_file(out_file: str | None, rendered: str) -> None:
    if not out_file:
        return
    path = Path(out_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(rendered + "\n", encoding="utf-8")
