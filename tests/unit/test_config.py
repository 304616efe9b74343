from pathlib import Path

import pytest
from pydantic import ValidationError

from autofile.models.exceptions import ConfigurationError
from autofile.utils import config
from autofile.utils.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.similarity_threshold == 0.7
    assert settings.get_excluded_folders() == set()
    assert settings.get_enabled_preprocessors() == ["image_renamer", "heic_converter"]
    assert settings.queue_max_size == 0
    assert settings.queue_overflow_policy == "block"
    assert settings.embedding_cache_size == 1024


def test_excluded_folders_parsed_from_comma_list():
    settings = Settings(_env_file=None, excluded_folders="Archive, Old Files,,  ")

    assert settings.get_excluded_folders() == {"Archive", "Old Files"}


def test_values_read_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("EXCLUDED_FOLDERS", "Trash")
    monkeypatch.setenv("SIMILARITY_THRESHOLD", "0.55")
    monkeypatch.setenv("CATEGORY_DESTINATIONS", '{"image": "Media/Photos"}')
    monkeypatch.setenv("WATCH_DIR", str(tmp_path))

    settings = Settings(_env_file=None)

    assert settings.get_excluded_folders() == {"Trash"}
    assert settings.similarity_threshold == 0.55
    assert settings.category_destinations == {"image": Path("Media/Photos")}
    assert settings.watch_dir == tmp_path


def test_values_read_from_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("OLLAMA_EMBEDDING_MODEL=all-minilm\nQUEUE_OVERFLOW_POLICY=drop_oldest\n")

    settings = Settings(_env_file=env_file)

    assert settings.ollama_embedding_model == "all-minilm"
    assert settings.queue_overflow_policy == "drop_oldest"


@pytest.mark.parametrize("field,value", [("similarity_threshold", 1.5), ("queue_overflow_policy", "drop_newest")])
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})


def test_missing_home_is_configuration_error(monkeypatch):
    def no_home():
        raise RuntimeError("Could not determine home directory.")

    monkeypatch.setattr(config.Path, "home", staticmethod(no_home))

    with pytest.raises(ConfigurationError):
        config.get_home_dir()
