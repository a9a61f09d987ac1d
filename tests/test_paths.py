from pathlib import Path

from ttt_search.paths import get_git_commit, get_git_is_dirty, repo_root, tree_dir


def test_repo_root_prefers_cwd_when_no_git_and_no_env(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("TTT_REPO_ROOT", raising=False)
    monkeypatch.delenv("TTT_TREE_DIR", raising=False)
    monkeypatch.chdir(tmp_path)
    import ttt_search.paths as P

    monkeypatch.setattr(P, "_find_git_root", lambda start: None)

    assert repo_root() == tmp_path
    assert tree_dir() == tmp_path / "trees"


def test_env_overrides(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("TTT_REPO_ROOT", str(tmp_path / "root"))
    monkeypatch.delenv("TTT_TREE_DIR", raising=False)
    assert tree_dir() == tmp_path / "root" / "trees"
    monkeypatch.setenv("TTT_TREE_DIR", str(tmp_path / "elsewhere"))
    assert tree_dir() == tmp_path / "elsewhere"


def test_git_metadata_outside_repo(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("TTT_REPO_ROOT", str(tmp_path))
    assert get_git_commit() is None
    assert get_git_is_dirty() is None


def test_git_commit_read_from_head_file(tmp_path: Path, monkeypatch):
    git = tmp_path / ".git"
    (git / "refs" / "heads").mkdir(parents=True)
    (git / "HEAD").write_text("ref: refs/heads/main\n")
    (git / "refs" / "heads" / "main").write_text("abc123\n")
    monkeypatch.setenv("TTT_REPO_ROOT", str(tmp_path))
    import ttt_search.paths as P

    monkeypatch.setattr(P, "_git", lambda *args: None)
    assert get_git_commit() == "abc123"
