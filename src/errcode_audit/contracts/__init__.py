from __future__ import annotations

from .validate import validate, validate_file

__all__ = ["validate", "validate_file"]
