"""Sorted recursive file walking with a caller-supplied skip predicate.

Every walk yields ``(path, contents)`` pairs in a stable order so that two runs
over the same tree visit files identically. Skip predicates receive the path
relative to the walked root.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, Iterator

SkipFn = Callable[[Path], bool]
ErrorFn = Callable[[Path, OSError], None]

EXCLUDED_DIRS = frozenset(
    {
        ".git",
        "target",
        "node_modules",
        "__pycache__",
        ".venv",
    }
)


def filter_dirs(path: Path, excluded: Iterable[str] = EXCLUDED_DIRS) -> bool:
    names = set(excluded)
    return any(part in names for part in path.parts)


def no_filter(_path: Path) -> bool:
    return False


def iter_paths(root: Path, skip: SkipFn = no_filter) -> list[Path]:
    if root.is_file():
        return [] if skip(Path(root.name)) else [root]
    if not root.is_dir():
        return []
    out: list[Path] = []
    for path in sorted(root.rglob("*"), key=lambda p: p.as_posix()):
        if not path.is_file():
            continue
        if skip(path.relative_to(root)):
            continue
        out.append(path)
    return out


def walk(root: Path, skip: SkipFn = no_filter, on_error: ErrorFn | None = None) -> Iterator[tuple[Path, str]]:
    for path in iter_paths(root, skip):
        try:
            contents = path.read_text(encoding="utf-8", errors="ignore")
        except OSError as exc:
            if on_error is None:
                raise
            on_error(path, exc)
            continue
        yield path, contents


def walk_many(
    roots: Iterable[Path], skip: SkipFn = no_filter, on_error: ErrorFn | None = None
) -> Iterator[tuple[Path, str]]:
    for root in roots:
        yield from walk(root, skip, on_error)


def display_path(path: Path, repo_root: Path | None = None) -> str:
    if repo_root is not None:
        try:
            return path.relative_to(repo_root).as_posix()
        except ValueError:
            pass
    return path.as_posix()
