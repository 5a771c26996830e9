from __future__ import annotations

from typing import Any

from ..contracts.ids import REGISTRY, REPORT
from ..contracts.validate import validate
from ..core.serialize import dumps_json
from .model import Finding, Registry
from .runner import AuditResult

TOOL = "errcode-audit"


def _visible(findings: tuple[Finding, ...], verbose: bool) -> list[Finding]:
    return [f for f in findings if f.is_error or verbose]


def build_report_payload(result: AuditResult, *, run_id: str = "", verbose: bool = False) -> dict[str, Any]:
    errors = sum(1 for f in result.findings if f.is_error)
    payload: dict[str, Any] = {
        "schema_name": REPORT,
        "schema_version": 1,
        "tool": TOOL,
        "kind": "error-codes-check",
        "run_id": run_id,
        "status": result.status,
        "summary": {
            "codes": len(result.registry),
            "highest": result.registry.highest,
            "errors": errors,
            "warnings": len(result.findings) - errors,
            "no_longer_emitted": sorted(result.no_longer_emitted),
        },
        "stages": [
            {
                "id": stage.id,
                "status": stage.status,
                "duration_ms": stage.duration_ms,
                "budget_ms": stage.budget_ms,
                "budget_status": stage.budget_status,
                "errors": stage.errors,
                "warnings": stage.warnings,
            }
            for stage in result.stages
        ],
        "findings": [f.as_dict() for f in _visible(result.findings, verbose)],
    }
    validate(REPORT, payload)
    return payload


def build_registry_payload(registry: Registry, errors: tuple[Finding, ...], *, run_id: str = "") -> dict[str, Any]:
    payload: dict[str, Any] = {
        "schema_name": REGISTRY,
        "schema_version": 1,
        "tool": TOOL,
        "status": "fail" if errors else "pass",
        "run_id": run_id,
        "count": len(registry),
        "highest": registry.highest,
        "codes": list(registry.codes),
        "errors": [f.message for f in errors],
    }
    validate(REGISTRY, payload)
    return payload


def render_json(payload: dict[str, Any]) -> str:
    return dumps_json(payload)


def _render_finding(row: dict[str, Any]) -> str:
    prefix = "error" if row["severity"] == "error" else "warning"
    loc = ""
    if row["path"]:
        loc = f" {row['path']}:{row['line']}" if row["line"] else f" {row['path']}"
    return f"{prefix}: {row['message']} [{row['rule']}]{loc}"


def render_text(payload: dict[str, Any], *, quiet: bool = False, verbose: bool = False) -> str:
    summary = payload.get("summary", {})
    out: list[str] = []
    if not quiet:
        out.append(f"Found {int(summary.get('codes', 0))} error codes")
        highest = summary.get("highest")
        out.append(f"Highest error code: `{highest}`" if highest else "Highest error code: none")
    for row in payload.get("findings", []):
        out.append(_render_finding(row))
    if verbose:
        for stage in payload.get("stages", []):
            out.append(
                f"stage {stage['id']}: {stage['status']} [{int(stage['duration_ms'])}ms/{int(stage['budget_ms'])}ms "
                f"{stage['budget_status']}] errors={stage['errors']} warnings={stage['warnings']}"
            )
    if not quiet or payload.get("status") == "fail":
        out.append(
            f"summary: status={payload.get('status')} errors={int(summary.get('errors', 0))} "
            f"warnings={int(summary.get('warnings', 0))}"
        )
    return "\n".join(out)


def render_registry_text(payload: dict[str, Any]) -> str:
    out = [f"Found {payload['count']} error codes"]
    out.append(f"Highest error code: `{payload['highest']}`" if payload["highest"] else "Highest error code: none")
    out.extend(payload["codes"])
    out.extend(f"error: {msg}" for msg in payload["errors"])
    return "\n".join(out)


__all__ = [
    "build_registry_payload",
    "build_report_payload",
    "render_json",
    "render_registry_text",
    "render_text",
]
