import re
from pathlib import Path

import pytest

from image_fingerprint.config.defaults import DEFAULTS
from image_fingerprint.config.loader import load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    loaded = load_config(config_path)
    assert loaded == DEFAULTS
    assert loaded is not DEFAULTS  # caller can mutate safely


def test_load_config_merges_overrides(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """
        [resample]
        filter = "bilinear"

        [batch]
        max_workers = 2
        """,
        encoding="utf-8",
    )

    loaded = load_config(config_path)

    assert loaded["resample"]["filter"] == "bilinear"
    assert loaded["batch"]["max_workers"] == 2
    assert loaded["batch"]["recursive"] == DEFAULTS["batch"]["recursive"]
    assert loaded["logging"]["level"] == DEFAULTS["logging"]["level"]


def test_load_config_raises_value_error_on_bad_toml(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("this is not valid toml", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(config_path)


def test_load_config_rejects_directories(tmp_path: Path) -> None:
    with pytest.raises(IsADirectoryError):
        load_config(tmp_path)


@pytest.mark.parametrize(
    ("toml_text", "bad_key"),
    [
        ('[resample]\nfilter = "gaussian"\n', "resample.filter"),
        ("[resample]\nfilter = 3\n", "resample.filter"),
        ('[batch]\nmax_workers = "four"\n', "batch.max_workers"),
        ("[batch]\nmax_workers = 0\n", "batch.max_workers"),
        ("[batch]\nmax_workers = true\n", "batch.max_workers"),
        ('[batch]\nrecursive = "yes"\n', "batch.recursive"),
        ('[logging]\nlevel = "verbose"\n', "logging.level"),
        ('resample = "box"\n', "[resample]"),
    ],
)
def test_load_config_rejects_bad_values(tmp_path: Path, toml_text: str, bad_key: str) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(toml_text, encoding="utf-8")

    with pytest.raises(ValueError, match=re.escape(bad_key)):
        load_config(config_path)


def test_load_config_accepts_mixed_case_names(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('[resample]\nfilter = "Lanczos"\n\n[logging]\nlevel = "DEBUG"\n', encoding="utf-8")

    loaded = load_config(config_path)

    assert loaded["resample"]["filter"] == "Lanczos"
    assert loaded["logging"]["level"] == "DEBUG"
