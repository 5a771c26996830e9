from __future__ import annotations

CONFIG = "errcode-audit.config.v1"
REPORT = "errcode-audit.report.v1"
REGISTRY = "errcode-audit.registry.v1"
