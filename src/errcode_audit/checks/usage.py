from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from ..config.loader import AuditConfig
from ..core.walk import display_path, filter_dirs, walk_many
from .model import Findings, Registry

# Matches foo(a, E0111, a), foo(a, E0111), foo(E0111, a) and #[error = "E0111"].
USAGE_PATTERN = re.compile(r'[(,"\s]([A-Z][0-9]{4})[,)"]')


def find_error_codes(line: str, *, comment_prefix: str = "//") -> list[str]:
    if line.lstrip().startswith(comment_prefix):
        return []
    return USAGE_PATTERN.findall(line)


def check_error_codes_used(
    search_roots: Iterable[Path],
    registry: Registry,
    findings: Findings,
    *,
    config: AuditConfig,
    no_longer_emitted: frozenset[str] = frozenset(),
    repo_root: Path | None = None,
) -> Findings:
    found: set[str] = set()
    extensions = set(config.source_extensions)

    def _skip(path: Path) -> bool:
        return filter_dirs(path, config.excluded_dirs)

    def _unreadable(path: Path, exc: OSError) -> None:
        shown = display_path(path, repo_root)
        findings.warn("ERRCODE_FILE_UNREADABLE", f"failed to read `{shown}`: {exc}", path=shown)

    for path, contents in walk_many(search_roots, _skip, _unreadable):
        if path.suffix not in extensions:
            continue
        for lineno, line in enumerate(contents.splitlines(), start=1):
            for code in find_error_codes(line, comment_prefix=config.comment_prefix):
                if code not in registry:
                    findings.error(
                        "ERRCODE_UNDECLARED_USE",
                        f"error code `{code}` is used in the compiler but not defined and documented in `{config.registry_path}`",
                        path=display_path(path, repo_root),
                        line=lineno,
                        error_code=code,
                    )
                    continue
                found.add(code)

    for code in registry:
        if code not in found and code not in no_longer_emitted:
            findings.error("ERRCODE_NEVER_EMITTED", f"error code `{code}` exists, but is not emitted by the compiler", error_code=code)
        if code in found and code in no_longer_emitted:
            findings.warn(
                "ERRCODE_EMITTED_BUT_RETIRED",
                f'error code `{code}` is used when it\'s marked as "no longer emitted"',
                error_code=code,
            )
    return findings
