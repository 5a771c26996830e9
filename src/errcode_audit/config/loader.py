from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..contracts.ids import CONFIG
from ..contracts.validate import validate
from ..errors import ScriptError
from ..exit_codes import ERR_CONFIG

DEFAULT_CONFIG_REL = Path("configs/error-codes.yaml")
CONFIG_ENV = "ERRCODE_AUDIT_CONFIG"

# Codes whose explanation cannot carry a doctest; a code example is still expected.
EXEMPT_FROM_DOCTEST = ("E0464", "E0570", "E0601", "E0602", "E0640", "E0717")

# Codes without a UI test yet.
EXEMPT_FROM_UI_TEST = ("E0461", "E0465", "E0514", "E0554", "E0640", "E0717", "E0729")

NO_LONGER_EMITTED_SENTINEL = "#### Note: this error code is no longer emitted by the compiler"

_DEFAULT_BUDGETS = {"registry": 200, "explanations": 1500, "ui_tests": 800, "usage": 5000}


@dataclass(frozen=True)
class AuditConfig:
    registry_path: str = "compiler/rustc_error_codes/src/error_codes.rs"
    docs_path: str = "compiler/rustc_error_codes/src/error_codes/"
    tests_path: str = "tests/ui/error-codes/"
    search_paths: tuple[str, ...] = ("compiler",)
    docs_extension: str = ".md"
    fixture_extension: str = ".stderr"
    source_extensions: tuple[str, ...] = (".rs",)
    comment_prefix: str = "//"
    no_longer_emitted_sentinel: str = NO_LONGER_EMITTED_SENTINEL
    exempt_from_doctest: frozenset[str] = frozenset(EXEMPT_FROM_DOCTEST)
    exempt_from_ui_test: frozenset[str] = frozenset(EXEMPT_FROM_UI_TEST)
    excluded_dirs: tuple[str, ...] = (".git", "target", "node_modules", "__pycache__", ".venv")
    stage_budgets_ms: Mapping[str, int] = field(default_factory=lambda: dict(_DEFAULT_BUDGETS))

    def budget_for(self, stage_id: str) -> int:
        return int(self.stage_budgets_ms.get(stage_id, _DEFAULT_BUDGETS.get(stage_id, 0)))

    def as_dict(self) -> dict[str, Any]:
        raw = asdict(self)
        raw["search_paths"] = list(self.search_paths)
        raw["source_extensions"] = list(self.source_extensions)
        raw["excluded_dirs"] = list(self.excluded_dirs)
        raw["exempt_from_doctest"] = sorted(self.exempt_from_doctest)
        raw["exempt_from_ui_test"] = sorted(self.exempt_from_ui_test)
        raw["stage_budgets_ms"] = dict(sorted(self.stage_budgets_ms.items()))
        return raw


def config_from_mapping(data: Mapping[str, Any]) -> AuditConfig:
    try:
        validate(CONFIG, dict(data))
    except ScriptError as exc:
        raise ScriptError(f"invalid error-codes config: {exc}", ERR_CONFIG) from exc
    overrides: dict[str, Any] = {}
    for key, value in data.items():
        if key in {"search_paths", "source_extensions", "excluded_dirs"}:
            overrides[key] = tuple(value)
        elif key in {"exempt_from_doctest", "exempt_from_ui_test"}:
            overrides[key] = frozenset(value)
        elif key == "stage_budgets_ms":
            overrides[key] = {**_DEFAULT_BUDGETS, **value}
        else:
            overrides[key] = value
    return replace(AuditConfig(), **overrides)


def _resolve_config_path(repo_root: Path, config_path: str | None) -> Path | None:
    raw = config_path or os.environ.get(CONFIG_ENV)
    if raw:
        path = Path(raw)
        path = path if path.is_absolute() else repo_root / path
        if not path.is_file():
            raise ScriptError(f"config file not found: {path}", ERR_CONFIG)
        return path
    default = repo_root / DEFAULT_CONFIG_REL
    return default if default.is_file() else None


def load_config(repo_root: Path, config_path: str | None = None) -> AuditConfig:
    path = _resolve_config_path(repo_root, config_path)
    if path is None:
        return AuditConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ScriptError(f"failed to parse {path}: {exc}", ERR_CONFIG) from exc
    if data is None:
        return AuditConfig()
    if not isinstance(data, dict):
        raise ScriptError(f"{path}: root must be mapping", ERR_CONFIG)
    return config_from_mapping(data)
