from __future__ import annotations

import pytest

from flora import create_app


@pytest.fixture()
def env(tmp_path, monkeypatch):
    monkeypatch.setenv("FLORA_SECRET_KEY", "test-secret")
    monkeypatch.setenv("LLM_PROVIDER", "none")
    monkeypatch.delenv("FLORA_ENV", raising=False)
    monkeypatch.delenv("FLORA_DEBUG", raising=False)
    return {"log_dir": str(tmp_path / "logs")}


def test_overrides_set_config_fields(env, llm_backend):
    app = create_app({**env, "DEBUG": True, "max_upload_mb": 2}, backend=llm_backend)

    config = app.config["CONTAINER"].config
    assert config.DEBUG is True
    assert app.config["MAX_CONTENT_LENGTH"] == 2 * 1024 * 1024
    assert not hasattr(config, "debug")


def test_unknown_override_is_rejected(env, llm_backend):
    with pytest.raises(TypeError):
        create_app({**env, "no_such_setting": 1}, backend=llm_backend)


def test_production_override_still_requires_secret(env, monkeypatch, llm_backend):
    monkeypatch.delenv("FLORA_SECRET_KEY")

    with pytest.raises(RuntimeError):
        create_app({**env, "environment": "production"}, backend=llm_backend)


def test_entry_point_shuts_container_down(app, monkeypatch):
    import flora_app

    monkeypatch.setattr(flora_app, "create_app", lambda: app)
    monkeypatch.setattr(flora_app.socketio, "run", lambda *args, **kwargs: None)
    store = app.config["CONTAINER"].session_store
    store.get_or_create("s1")

    assert flora_app.main() == 0
    assert len(store) == 0
