from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

REGISTRY_REL = "compiler/rustc_error_codes/src/error_codes.rs"
DOCS_REL = "compiler/rustc_error_codes/src/error_codes"
TESTS_REL = "tests/ui/error-codes"
SOURCE_REL = "compiler/rustc_middle/src/errors.rs"


def registry_line(code: str, target: str | None = None) -> str:
    return f'{code}: include_str!("./error_codes/{target or code}.md"),'


def registry_text(codes: list[str]) -> str:
    lines = ["macro_rules! error_codes {", "    ($macro:path) => (", "        $macro!("]
    lines.extend(f"            {registry_line(code)}" for code in codes)
    lines.extend(["        );", "    )", "}"])
    return "\n".join(lines) + "\n"


def explanation(code: str) -> str:
    return "\n".join(
        [
            f"An example of erroneous code for {code}.",
            "",
            f"```compile_fail,{code}",
            "fn main() { let x: u8 = 256; }",
            "```",
            "",
        ]
    )


def fixture(code: str) -> str:
    return f"error[{code}]: something went wrong\n  --> $DIR/{code}.rs:1:1\n\nerror: aborting due to 1 previous error\n"


def source_for(codes: list[str]) -> str:
    lines = ["// Diagnostics emitted by the middle end."]
    lines.extend(f'    struct_span_code_err!(self.dcx(), span, {code}, "message");' for code in codes)
    return "\n".join(lines) + "\n"


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def write_compiler_tree(repo: Path, codes: list[str]) -> Path:
    """Lay out a compiler checkout in which every code passes every stage."""
    write(repo / REGISTRY_REL, registry_text(codes))
    for code in codes:
        write(repo / DOCS_REL / f"{code}.md", explanation(code))
        write(repo / TESTS_REL / f"{code}.stderr", fixture(code))
    write(repo / SOURCE_REL, source_for(codes))
    return repo


def run_cli(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    env["PYTHONPATH"] = str(ROOT / "src")
    env.setdefault("RUN_ID", "pytest-run")
    env.pop("ERRCODE_AUDIT_CONFIG", None)
    return subprocess.run(
        [sys.executable, "-m", "errcode_audit", *args],
        cwd=(cwd or ROOT),
        env=env,
        text=True,
        capture_output=True,
        check=False,
    )
