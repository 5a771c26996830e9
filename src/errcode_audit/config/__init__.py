from __future__ import annotations

from .loader import DEFAULT_CONFIG_REL, AuditConfig, load_config

__all__ = ["AuditConfig", "DEFAULT_CONFIG_REL", "load_config"]
