from __future__ import annotations

from .model import ExplanationFacts, Finding, Findings, Registry, Severity, is_error_code
from .runner import AuditResult, StageResult, run_error_codes_check

__all__ = [
    "AuditResult",
    "ExplanationFacts",
    "Finding",
    "Findings",
    "Registry",
    "Severity",
    "StageResult",
    "is_error_code",
    "run_error_codes_check",
]
