from __future__ import annotations

from pathlib import Path

from config import JsonConfigStore, default_model_path, load_settings


def test_config_read_write(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    store = JsonConfigStore(path=path)

    assert store.get_model_path() == ""
    assert store.get_sample_rate() == 16000
    assert store.get_device() == ""

    store.set_model_path("/models/vosk-en")
    store.set("sample_rate", 44100)
    store.set("device", "2")

    reloaded = JsonConfigStore(path=path)
    assert reloaded.get_model_path() == "/models/vosk-en"
    assert reloaded.get_sample_rate() == 44100
    assert reloaded.get_device() == "2"


def test_config_invalid_json_fallback(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{invalid", encoding="utf-8")

    store = JsonConfigStore(path=path)
    assert store.get_model_path() == ""
    assert store.get_sample_rate() == 16000


def test_config_non_object_json_fallback(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text('["not", "a", "mapping"]', encoding="utf-8")

    assert JsonConfigStore(path=path).get("model_path") is None


def test_default_path_lives_under_xdg_config(tmp_path: Path) -> None:
    store = JsonConfigStore()

    assert store.path == tmp_path / "config" / "glu-code" / "config.json"


def test_load_settings_defaults(tmp_path: Path) -> None:
    settings = load_settings(JsonConfigStore(path=tmp_path / "c.json"), environ={})

    assert settings.model_path == default_model_path()
    assert settings.sample_rate == 16000
    assert settings.device is None
    assert settings.codex_args == ()


def test_load_settings_precedence(tmp_path: Path) -> None:
    store = JsonConfigStore(path=tmp_path / "c.json")
    store.set_model_path("/from/file")
    store.set("sample_rate", 22050)
    store.set("device", "file-mic")
    environ = {"VOSK_MODEL_PATH": "/from/env", "STT_SAMPLE_RATE": "48000", "STT_DEVICE": "5"}

    from_file = load_settings(store, environ={})
    assert (from_file.model_path, from_file.sample_rate, from_file.device) == ("/from/file", 22050, "file-mic")

    from_env = load_settings(store, environ=environ)
    assert (from_env.model_path, from_env.sample_rate, from_env.device) == ("/from/env", 48000, "5")

    explicit = load_settings(store, environ=environ, model_path="/from/cli", sample_rate=8000, device="0")
    assert (explicit.model_path, explicit.sample_rate, explicit.device) == ("/from/cli", 8000, "0")


def test_load_settings_ignores_bad_sample_rate(tmp_path: Path) -> None:
    store = JsonConfigStore(path=tmp_path / "c.json")
    store.set("sample_rate", "fast")

    settings = load_settings(store, environ={"STT_SAMPLE_RATE": "-1"})

    assert settings.sample_rate == 16000


def test_load_settings_expands_home(tmp_path: Path, monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setenv("HOME", str(tmp_path))

    settings = load_settings(JsonConfigStore(path=tmp_path / "c.json"), environ={}, model_path="~/models/en")

    assert settings.model_path == str(tmp_path / "models" / "en")


def test_codex_args_accept_list_or_string(tmp_path: Path) -> None:
    store = JsonConfigStore(path=tmp_path / "c.json")

    store.set("codex_args", ["--model", "o4-mini"])
    assert load_settings(store, environ={}).codex_args == ("--model", "o4-mini")

    store.set("codex_args", "--full-auto --model 'o4 mini'")
    assert load_settings(store, environ={}).codex_args == ("--full-auto", "--model", "o4 mini")

    store.set("codex_args", 7)
    assert load_settings(store, environ={}).codex_args == ()
