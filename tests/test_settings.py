"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from omnipub.settings import ConfigurationError, load_config
from omnipub.settings.loader import CONFIG_ENV_VAR


def test_defaults_without_config_file() -> None:
    config = load_config()
    upload = config.upload
    assert config.source is None
    assert upload.api == "https://api.example.com/v2"
    assert upload.workers == 10
    assert upload.max_conns == 256
    assert upload.key_env == "OMNIPUB_API_KEY"
    assert upload.collection_id is None
    assert upload.dir == Path(".")
    assert (config.http.timeout, config.http.idle_timeout) == (15.0, 90.0)


def test_toml_values_then_overrides(tmp_path: Path) -> None:
    path = tmp_path / "custom.toml"
    path.write_text(
        '[upload]\nworkers = 4\ncollection = 3\nbackoff_ms = 250\nsave_failures = "f.txt"\n'
        "[http]\ntimeout = 5\n",
        encoding="utf-8",
    )

    config = load_config(path, overrides={"workers": 8, "collection": None})

    assert config.upload.workers == 8
    assert config.upload.collection_id == 3
    assert config.upload.backoff_ms == 250
    assert config.upload.save_failures == Path("f.txt")
    assert config.http.timeout == 5.0


def test_default_file_in_working_directory_is_picked_up(tmp_path: Path) -> None:
    (tmp_path / "omnipub.toml").write_text("[upload]\nmax_conns = 32\n", encoding="utf-8")
    assert load_config().upload.max_conns == 32


def test_env_var_selects_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "env.toml"
    path.write_text('[upload]\nkey_env = "OTHER_KEY"\n', encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    assert load_config().upload.key_env == "OTHER_KEY"


def test_explicit_missing_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "missing.toml")


@pytest.mark.parametrize(
    "overrides",
    [{"workers": 0}, {"max_conns": 0}, {"backoff_ms": -1}, {"collection": -2}, {"deadline": 0}],
)
def test_invalid_values_rejected(overrides: dict[str, int]) -> None:
    with pytest.raises(ConfigurationError):
        load_config(overrides=overrides)


def test_unknown_option_rejected(tmp_path: Path) -> None:
    path = tmp_path / "bad.toml"
    path.write_text("[upload]\nthreads = 3\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(path)
