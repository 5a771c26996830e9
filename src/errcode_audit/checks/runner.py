from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ..config.loader import AuditConfig
from ..core.context import RunContext
from ..core.logging import log_event
from .explanations import check_error_code_docs
from .model import Finding, Findings, Registry
from .registry import load_registry
from .ui_tests import check_error_code_tests
from .usage import check_error_codes_used


@dataclass(frozen=True)
class StageResult:
    id: str
    duration_ms: int
    budget_ms: int
    findings: tuple[Finding, ...] = ()

    @property
    def errors(self) -> int:
        return sum(1 for f in self.findings if f.is_error)

    @property
    def warnings(self) -> int:
        return sum(1 for f in self.findings if not f.is_error)

    @property
    def status(self) -> str:
        return "fail" if self.errors else "pass"

    @property
    def budget_status(self) -> str:
        return "pass" if self.duration_ms <= self.budget_ms else "warn"


@dataclass(frozen=True)
class AuditResult:
    registry: Registry
    no_longer_emitted: frozenset[str]
    findings: tuple[Finding, ...]
    stages: tuple[StageResult, ...]

    @property
    def failed(self) -> bool:
        return any(f.is_error for f in self.findings)

    @property
    def status(self) -> str:
        return "fail" if self.failed else "pass"


def _stage_result(stage_id: str, config: AuditConfig, findings: Findings, start: float, mark: int, ctx: RunContext | None) -> StageResult:
    elapsed_ms = int((time.perf_counter() - start) * 1000)
    result = StageResult(
        id=stage_id,
        duration_ms=elapsed_ms,
        budget_ms=config.budget_for(stage_id),
        findings=findings.since(mark),
    )
    if ctx is not None:
        log_event(
            ctx,
            "info",
            "stage",
            "done",
            stage=stage_id,
            duration_ms=elapsed_ms,
            budget_status=result.budget_status,
            errors=result.errors,
            warnings=result.warnings,
        )
    return result


def resolve_search_roots(repo_root: Path, config: AuditConfig, search_paths: Sequence[str] | None = None) -> list[Path]:
    raw = list(search_paths) if search_paths else list(config.search_paths)
    roots: list[Path] = []
    for item in raw:
        path = Path(item)
        roots.append(path if path.is_absolute() else repo_root / path)
    return roots


def run_error_codes_check(
    repo_root: Path,
    config: AuditConfig,
    *,
    search_paths: Sequence[str] | None = None,
    ctx: RunContext | None = None,
) -> AuditResult:
    findings = Findings()
    stages: list[StageResult] = []

    start, mark = time.perf_counter(), len(findings)
    registry, findings = load_registry(repo_root, config, findings)
    stages.append(_stage_result("registry", config, findings, start, mark, ctx))
    if ctx is not None:
        log_event(ctx, "info", "registry", "summary", count=len(registry), highest=registry.highest or "none")

    start, mark = time.perf_counter(), len(findings)
    no_longer_emitted, findings = check_error_code_docs(
        repo_root / config.docs_path, registry, findings, config=config, repo_root=repo_root
    )
    stages.append(_stage_result("explanations", config, findings, start, mark, ctx))

    start, mark = time.perf_counter(), len(findings)
    findings = check_error_code_tests(
        repo_root / config.tests_path, registry, findings, config=config, no_longer_emitted=no_longer_emitted
    )
    stages.append(_stage_result("ui_tests", config, findings, start, mark, ctx))

    start, mark = time.perf_counter(), len(findings)
    findings = check_error_codes_used(
        resolve_search_roots(repo_root, config, search_paths),
        registry,
        findings,
        config=config,
        no_longer_emitted=no_longer_emitted,
        repo_root=repo_root,
    )
    stages.append(_stage_result("usage", config, findings, start, mark, ctx))

    return AuditResult(
        registry=registry,
        no_longer_emitted=no_longer_emitted,
        findings=findings.items,
        stages=tuple(stages),
    )
