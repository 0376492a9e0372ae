"""
Tests for configuration loading.
"""

import pytest

from therapyslots.adapters.memory_store import MemoryStore
from therapyslots.adapters.mongo_store import MongoStore
from therapyslots.config import AppConfig, build_store
from therapyslots.domain.models import Mode


def _write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestAppConfig:
    def test_defaults(self):
        config = AppConfig()

        assert config.timezone == "UTC"
        assert config.store.backend == "memory"
        assert config.defaults.mode is Mode.ONLINE
        assert config.logging.level == "INFO"

    def test_load_from_yaml(self, tmp_path):
        path = _write(
            tmp_path,
            "timezone: Asia/Kolkata\n"
            "store:\n  seed_file: seed.yaml\n"
            "defaults:\n  mode: offline\n"
            "logging:\n  level: debug\n",
        )

        config = AppConfig.load_from_yaml(path)

        assert config.timezone == "Asia/Kolkata"
        assert config.store.seed_file == tmp_path / "seed.yaml"
        assert config.defaults.mode is Mode.OFFLINE
        assert config.logging.level == "DEBUG"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "config.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = _write(tmp_path, "store: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(path)

    def test_mongo_backend_requires_uri(self):
        with pytest.raises(ValueError, match="store.uri is required"):
            AppConfig(store={"backend": "mongo"})

    @pytest.mark.parametrize(
        "data",
        [
            {"timezone": "Mars/Olympus_Mons"},
            {"logging": {"level": "LOUD"}},
            {"defaults": {"mode": "HYBRID"}},
            {"store": {"backend": "sqlite"}},
        ],
    )
    def test_invalid_values(self, data):
        with pytest.raises(ValueError):
            AppConfig(**data)


class TestBuildStore:
    def test_memory_store(self, tmp_path):
        config = AppConfig(store={"seed_file": str(tmp_path / "seed.yaml")})

        store = build_store(config)

        assert isinstance(store, MemoryStore)
        assert store.seed_file == tmp_path / "seed.yaml"

    def test_mongo_store(self):
        config = AppConfig(store={"backend": "mongo", "uri": "mongodb://db:27017", "database": "clinic"})

        store = build_store(config)

        assert isinstance(store, MongoStore)
        assert store.database == "clinic"
