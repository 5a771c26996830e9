"""Long-form explanation audit.

Each explanation document is scanned once; the resulting facts decide whether
the document carries a tested negative example and whether its code has been
retired from the compiler.
"""

from __future__ import annotations

from pathlib import Path

from ..config.loader import NO_LONGER_EMITTED_SENTINEL, AuditConfig
from ..core.walk import display_path, no_filter, walk
from .model import ExplanationFacts, Findings, Registry

FENCE = "```"
COMPILE_FAIL_MARKER = "compile_fail"
IGNORE_MARKER = "ignore"


def scan_explanation(text: str, code: str, *, sentinel: str = NO_LONGER_EMITTED_SENTINEL) -> ExplanationFacts:
    has_code_example = False
    has_valid_negative_test = False
    uses_ignore_marker = False
    no_longer_emitted = False
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line.startswith(FENCE):
            has_code_example = True
            if COMPILE_FAIL_MARKER in line and code in line:
                has_valid_negative_test = True
            if IGNORE_MARKER in line:
                uses_ignore_marker = True
                has_valid_negative_test = True
        elif line.startswith(sentinel):
            no_longer_emitted = True
            has_code_example = True
            has_valid_negative_test = True
    return ExplanationFacts(
        has_code_example=has_code_example,
        has_valid_negative_test=has_valid_negative_test,
        uses_ignore_marker=uses_ignore_marker,
        no_longer_emitted=no_longer_emitted,
    )


def check_error_code_docs(
    docs_root: Path,
    registry: Registry,
    findings: Findings,
    *,
    config: AuditConfig,
    repo_root: Path | None = None,
) -> tuple[frozenset[str], Findings]:
    no_longer_emitted: list[str] = []
    documented: set[str] = set()

    def _unreadable(path: Path, exc: OSError) -> None:
        shown = display_path(path, repo_root)
        findings.warn("ERRCODE_FILE_UNREADABLE", f"failed to read `{shown}`: {exc}", path=shown)

    for path, contents in walk(docs_root, no_filter, _unreadable):
        shown = display_path(path, repo_root)
        if path.suffix != config.docs_extension:
            findings.error(
                "ERRCODE_DOC_UNEXPECTED_FILE",
                f"found unexpected non-markdown file in error code docs directory: {shown}",
                path=shown,
            )
            continue

        code = path.name.split(".", 1)[0]
        if code not in registry:
            findings.error(
                "ERRCODE_DOC_UNREGISTERED",
                f"found valid file `{shown}` in error code docs directory without corresponding entry in `{config.registry_path}`",
                path=shown,
            )
            continue
        documented.add(code)

        facts = scan_explanation(contents, code, sentinel=config.no_longer_emitted_sentinel)
        if facts.uses_ignore_marker:
            findings.warn(
                "ERRCODE_DOC_IGNORE_MARKER",
                f"error code `{code}` uses the ignore header; add the code to `exempt_from_doctest` instead",
                path=shown,
                error_code=code,
            )
        if facts.no_longer_emitted:
            no_longer_emitted.append(code)
        if not facts.has_code_example:
            findings.warn(
                "ERRCODE_DOC_NO_EXAMPLE",
                f"error code `{code}` doesn't have a code example, all error codes are expected to have one (even if untested)",
                path=shown,
                error_code=code,
            )
            continue

        exempt = code in config.exempt_from_doctest
        if not facts.has_valid_negative_test and not exempt:
            findings.error(
                "ERRCODE_DOC_NO_COMPILE_FAIL",
                f"`{shown}` doesn't use its own error code in compile_fail example",
                path=shown,
                error_code=code,
            )
        elif facts.has_valid_negative_test and exempt:
            findings.error(
                "ERRCODE_DOC_EXEMPTION_STALE",
                f"`{shown}` has a compile_fail doctest with its own error code, it shouldn't be listed in `exempt_from_doctest`",
                path=shown,
                error_code=code,
            )

    for code in registry:
        if code not in documented:
            findings.warn(
                "ERRCODE_DOC_MISSING",
                f"error code `{code}` has no long-form explanation in `{config.docs_path}`",
                error_code=code,
            )

    return frozenset(no_longer_emitted), findings
