"""Unit tests for Config loading."""

from pathlib import Path

import pytest

from composeapp.config import Config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("COMPOSEAPP_CONFIG_FILE", "COMPOSEAPP_PIN__STRATEGY", "COMPOSEAPP_REGISTRY__USERNAME"):
        monkeypatch.delenv(name, raising=False)


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.pin.strategy == "registry"
        assert config.bundle.root == Path(".")
        assert config.bundle.ignore_file == ".composeappignores"
        assert config.bundle.descriptor_file == "docker-compose.yml"
        assert config.registry.credentials is None

    def test_yaml_file(self, tmp_path, monkeypatch):
        path = tmp_path / "composeapp.yaml"
        path.write_text(
            "pin:\n  strategy: engine\nregistry:\n  username: bot\n  password: pw\n"
            "  insecure: [localhost:5000]\n"
        )
        monkeypatch.setenv("COMPOSEAPP_CONFIG_FILE", str(path))

        config = Config()

        assert config.pin.strategy == "engine"
        assert config.registry.credentials == ("bot", "pw")
        assert config.registry.insecure == ["localhost:5000"]

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "composeapp.yaml"
        path.write_text("pin:\n  strategy: engine\n")
        monkeypatch.setenv("COMPOSEAPP_CONFIG_FILE", str(path))
        monkeypatch.setenv("COMPOSEAPP_PIN__STRATEGY", "registry")

        assert Config().pin.strategy == "registry"
