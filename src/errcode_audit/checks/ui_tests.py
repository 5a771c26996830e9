from __future__ import annotations

import re
from pathlib import Path

from ..config.loader import AuditConfig
from .model import Findings, Registry

_DIAGNOSTIC_HEADER = re.compile(r"^error\[([A-Z][0-9]{4})\]")


def fixture_cites_code(text: str, code: str) -> bool:
    for raw_line in text.splitlines():
        match = _DIAGNOSTIC_HEADER.match(raw_line.strip())
        if match and match.group(1) == code:
            return True
    return False


def check_error_code_tests(
    tests_root: Path,
    registry: Registry,
    findings: Findings,
    *,
    config: AuditConfig,
    no_longer_emitted: frozenset[str] = frozenset(),
) -> Findings:
    tests_rel = config.tests_path.rstrip("/")
    for code in registry:
        fixture = tests_root / f"{code}{config.fixture_extension}"
        shown = f"{tests_rel}/{fixture.name}"
        exempt = code in config.exempt_from_ui_test

        if exempt:
            if fixture.exists():
                findings.error(
                    "ERRCODE_TEST_EXEMPTION_STALE",
                    f"error code `{code}` has a UI test in `{shown}`, it shouldn't be listed in `exempt_from_ui_test`",
                    path=shown,
                    error_code=code,
                )
            continue
        if not fixture.exists():
            findings.warn(
                "ERRCODE_TEST_MISSING",
                f"error code `{code}` needs to have at least one UI test in the `{tests_rel}/` directory",
                error_code=code,
            )
            continue

        try:
            text = fixture.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            findings.warn(
                "ERRCODE_TEST_UNREADABLE",
                f"failed to read UI test file `{shown}` for `{code}` but the file exists; the test is assumed to work: {exc}",
                path=shown,
                error_code=code,
            )
            continue

        # Fixtures cannot cite codes the compiler no longer emits.
        if code in no_longer_emitted:
            continue

        if not fixture_cites_code(text, code):
            findings.warn(
                "ERRCODE_TEST_CODE_NOT_CITED",
                f"error code `{code}` has a UI test file, but doesn't contain its own error code",
                path=shown,
                error_code=code,
            )
    return findings
