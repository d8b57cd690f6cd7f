"""Unit tests for the pin and publish commands."""

from unittest.mock import AsyncMock

import pytest
import yaml

from composeapp.cli.commands import pin as pin_command
from composeapp.cli.commands import publish as publish_command
from composeapp.domain.shared.error import ResolutionError

DIGEST = "sha256:" + "a" * 64


@pytest.fixture
def compose_file(tmp_path):
    path = tmp_path / "docker-compose.yml"
    path.write_text(yaml.safe_dump({"services": {"web": {"image": "nginx:stable"}}}))
    return path


async def fake_pin(config, descriptor, *, verbose=False):
    descriptor.set_image("web", f"docker.io/library/nginx@{DIGEST}")


class TestPinCommand:
    def test_write_rewrites_file(self, compose_file, monkeypatch):
        monkeypatch.setattr(pin_command, "pin_descriptor", fake_pin)

        pin_command.pin(compose_file, write=True)

        data = yaml.safe_load(compose_file.read_text())
        assert data["services"]["web"]["image"] == f"docker.io/library/nginx@{DIGEST}"

    def test_prints_without_write(self, compose_file, monkeypatch, capsys):
        monkeypatch.setattr(pin_command, "pin_descriptor", fake_pin)

        pin_command.pin(compose_file)

        assert f"nginx@{DIGEST}" in capsys.readouterr().out
        assert "nginx:stable" in compose_file.read_text()

    def test_error_exits(self, compose_file, monkeypatch):
        monkeypatch.setattr(
            pin_command, "pin_descriptor", AsyncMock(side_effect=ResolutionError("registry down"))
        )
        with pytest.raises(SystemExit) as exc:
            pin_command.pin(compose_file)
        assert exc.value.code == 1

    def test_missing_file_exits(self, tmp_path):
        with pytest.raises(SystemExit):
            pin_command.pin(tmp_path / "missing.yml")


class TestPublishCommand:
    def test_passes_target_and_pin_flag(self, compose_file, monkeypatch):
        publish_app = AsyncMock()
        monkeypatch.setattr(publish_command, "publish_app", publish_app)

        publish_command.publish("ghcr.io/o/app:v1", file=compose_file, pin=False)

        args, kwargs = publish_app.await_args
        assert args[2] == "ghcr.io/o/app:v1"
        assert kwargs["pin"] is False
