import importlib.util
import json
from pathlib import Path

import pytest

from theme_gallery.domain.theme import RepoStats


SCRIPTS = Path(__file__).resolve().parent.parent / "scripts"


def _load(name):
    spec = importlib.util.spec_from_file_location(name, SCRIPTS / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.setenv("THEMES_OUTPUT_PATH", str(tmp_path / "themes.json"))
    return tmp_path


def test_build_without_token_exits_non_zero(clean_env):
    build_themes = _load("build_themes")
    assert build_themes.main() == 1
    assert not (clean_env / "themes.json").exists()


def test_refresh_without_artifact_exits_non_zero(clean_env):
    refresh_stats = _load("refresh_stats")
    assert refresh_stats.main([]) == 1


def test_refresh_updates_stale_stats(clean_env, monkeypatch):
    artifact = clean_env / "themes.json"
    artifact.write_text(json.dumps([{
        "id": "acme/theme-x",
        "repoOwner": "acme",
        "repoName": "theme-x",
        "loadingStats": False,
        "themes": [{"id": "x.md", "fileName": "x.md", "title": "X"}],
        "stats": {"stars": 0, "lastCommitAt": "", "error": True},
    }]), encoding="utf-8")
    monkeypatch.setenv("REFRESH_DELAY_SECONDS", "0")

    refresh_stats = _load("refresh_stats")
    monkeypatch.setattr(
        refresh_stats.GitHubRestClient,
        "get_repository_stats",
        lambda self, owner, name: RepoStats(stars=99, last_commit_at="2024-03-03T00:00:00Z"),
    )

    assert refresh_stats.main([]) == 0
    data = json.loads(artifact.read_text(encoding="utf-8"))
    assert data[0]["stats"] == {"stars": 99, "lastCommitAt": "2024-03-03T00:00:00Z", "error": False}
