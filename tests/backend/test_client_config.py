import io
import stat

import pytest
from rich.console import Console

from sipp.backend import config as client_config
from sipp.backend.config import ClientConfig, config_path, load_client_config, run_auth, save_client_config


def test_config_path_honours_environment_override(monkeypatch, tmp_path):
    monkeypatch.setenv("SIPP_CONFIG", str(tmp_path / "custom.json"))
    assert config_path() == tmp_path / "custom.json"


def test_config_path_defaults_to_home(monkeypatch, tmp_path):
    monkeypatch.delenv("SIPP_CONFIG", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert config_path() == tmp_path / ".config" / "sipp" / "config.json"


def test_save_and_load_round_trip_with_private_permissions(tmp_path):
    path = tmp_path / "nested" / "config.json"

    save_client_config(ClientConfig(remote_url="https://paste.example", api_key="k"), path)

    assert load_client_config(path) == ClientConfig(remote_url="https://paste.example", api_key="k")
    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_saved_config_is_indented_json_with_null_key(tmp_path):
    path = save_client_config(ClientConfig(remote_url="https://paste.example"), tmp_path / "config.json")

    text = path.read_text(encoding="utf-8")
    assert text.endswith("}\n")
    assert '  "remote_url": "https://paste.example"' in text
    assert '"api_key": null' in text


def test_missing_config_is_empty(tmp_path):
    assert load_client_config(tmp_path / "absent.json") == ClientConfig()


@pytest.mark.parametrize("raw", ["", "{not json", '{"remote_url": 5}', "[]"])
def test_corrupt_config_is_ignored(tmp_path, raw):
    path = tmp_path / "config.json"
    path.write_text(raw, encoding="utf-8")

    assert load_client_config(path) == ClientConfig()


def test_run_auth_saves_answers_and_blank_key_as_null(monkeypatch, tmp_path):
    path = tmp_path / "config.json"
    answers = iter(["https://paste.example/", ""])
    monkeypatch.setattr(client_config.Prompt, "ask", lambda *args, **kwargs: next(answers))

    saved = run_auth(Console(file=io.StringIO()), path)

    assert saved == ClientConfig(remote_url="https://paste.example", api_key=None)
    assert load_client_config(path) == saved
