"""Path helpers for exported search trees and provenance metadata.

Environment variables win; otherwise paths resolve against the repository
root, found by walking up to a .git directory or falling back to the CWD.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path


def _find_git_root(start: Path) -> Path | None:
    for cur in [start] + list(start.parents)[:4]:
        if (cur / ".git").exists():
            return cur
    return None


def repo_root() -> Path:
    """TTT_REPO_ROOT, else the nearest parent holding .git, else the CWD."""
    env = os.getenv("TTT_REPO_ROOT")
    if env:
        return Path(env)
    git_root = _find_git_root(Path(__file__).resolve())
    if git_root is not None:
        return git_root
    return Path.cwd()


def tree_dir() -> Path:
    p = os.getenv("TTT_TREE_DIR")
    return Path(p) if p else repo_root() / "trees"


def _git(*args: str) -> str | None:
    try:
        out = subprocess.check_output(
            ["git", "-C", str(repo_root()), *args],
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=2.0,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    return out


def get_git_commit() -> str | None:
    """Current commit hash, read from .git/HEAD when the git binary is unavailable."""
    out = _git("rev-parse", "HEAD")
    if out is not None:
        return out.strip()
    head = repo_root() / ".git" / "HEAD"
    try:
        txt = head.read_text().strip()
    except OSError:
        return None
    if txt.startswith("ref:"):
        ref_file = repo_root() / ".git" / txt.split()[1]
        return ref_file.read_text().strip() if ref_file.exists() else None
    return txt or None


def get_git_is_dirty() -> bool | None:
    """True with uncommitted changes, False when clean, None outside a repo."""
    out = _git("status", "--porcelain")
    if out is None:
        return None
    return len(out.strip()) > 0
