import tempfile

from config.config_manager import get_config, load_config, reset_config


def test_defaults(monkeypatch):
    for name in ("REPO_WORKSPACE_DIR", "DEFAULT_BRANCH", "GIT_TIMEOUT_SECONDS", "CORS_ORIGINS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    config = load_config()
    assert config.workspace_dir == tempfile.gettempdir()
    assert config.default_branch == "main"
    assert config.git_timeout_seconds == 300
    assert config.cors_origins == ["*"]
    assert config.log_level == "INFO"


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("REPO_WORKSPACE_DIR", str(tmp_path))
    monkeypatch.setenv("DEFAULT_BRANCH", "develop")
    monkeypatch.setenv("GIT_TIMEOUT_SECONDS", "30")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    config = load_config()
    assert config.workspace_dir == str(tmp_path)
    assert config.default_branch == "develop"
    assert config.git_timeout_seconds == 30
    assert config.cors_origins == ["http://a.test", "http://b.test"]
    assert config.log_level == "DEBUG"


def test_bad_integer_falls_back(monkeypatch):
    monkeypatch.setenv("GRAPH_COMMIT_LIMIT", "lots")
    assert load_config().graph_commit_limit == 500


def test_get_config_is_cached(monkeypatch):
    first = get_config()
    monkeypatch.setenv("DEFAULT_BRANCH", "other")
    assert get_config() is first
    reset_config()
    assert get_config().default_branch == "other"
