from __future__ import annotations

import re
from pathlib import Path

from ..config.loader import AuditConfig
from ..errors import ScriptError
from ..exit_codes import ERR_CONFIG
from .model import Findings, Registry, is_error_code

_DECLARATION_START = re.compile(r"^[A-Z][0-9]{4}")


def expected_reference(code: str) -> str:
    return f'include_str!("./error_codes/{code}.md")'


def _reference_expression(raw: str) -> str:
    text = raw.strip()
    return text[:-1].rstrip() if text.endswith(",") else text


def extract_error_codes(text: str, findings: Findings, *, source: str = "") -> tuple[Registry, Findings]:
    codes: list[str] = []
    seen: set[str] = set()
    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not _DECLARATION_START.match(line):
            continue
        head, sep, tail = line.partition(":")
        if not sep:
            findings.error(
                "ERRCODE_MALFORMED_LINE",
                f'expected a line with the format `Exxxx: include_str!("..")`, but got "{line}" without a `:` delimiter',
                path=source,
                line=lineno,
            )
            continue
        code = head.strip()
        if not is_error_code(code):
            findings.error(
                "ERRCODE_MALFORMED_CODE",
                f"`{code}` is not a valid error code: expected one letter followed by four digits",
                path=source,
                line=lineno,
            )
            continue
        if code in seen:
            findings.error("ERRCODE_DUPLICATE", f"found duplicate error code: `{code}`", path=source, line=lineno, error_code=code)
            continue
        reference = _reference_expression(tail)
        expected = expected_reference(code)
        if reference != expected:
            findings.error(
                "ERRCODE_REFERENCE_MISMATCH",
                f"error code `{code}` expected to reference docs with `{expected}` but instead found `{reference}`",
                path=source,
                line=lineno,
                error_code=code,
            )
            continue
        seen.add(code)
        codes.append(code)
    return Registry.from_codes(codes), findings


def load_registry(repo_root: Path, config: AuditConfig, findings: Findings) -> tuple[Registry, Findings]:
    path = repo_root / config.registry_path
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ScriptError(f"failed to read error code registry `{config.registry_path}`: {exc}", ERR_CONFIG) from exc
    return extract_error_codes(text, findings, source=config.registry_path)
