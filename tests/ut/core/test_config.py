import ssl

import pytest
import yaml

from parley.core.helpers.utils import load_object
from tests.fake.fake_media import FakeMediaRoom
from parley.bootstrap.config import settings
from parley.bootstrap.config.settings import ParleyConfig
from tests.helpers import FakeParleyConfig


@pytest.mark.ut
def test_config_loaded_from_yaml(parley_config):
    assert parley_config.server.host == "127.0.0.1"
    assert parley_config.server.port == 0
    assert parley_config.server.limit_concurrency == 10
    assert parley_config.server.max_message_size == 64 * 1024
    assert parley_config.server.tls is None
    assert parley_config.media.room_factory == "tests.fake.fake_media:create_room"
    assert parley_config.get_server_ssl_ctx() is None


@pytest.mark.ut
def test_defaults_apply(tmp_path, monkeypatch):
    file = tmp_path / "parley.yaml"
    file.write_text(yaml.dump({"media": {"room_factory": "pkg.mod:factory"}}))
    monkeypatch.setenv("TEST_PARLEYCONFIG", str(file))

    config = FakeParleyConfig()

    assert config.server.port == 7000
    assert config.server.backlog == 128
    assert config.server.timeout_graceful_shutdown == 5.0


@pytest.mark.ut
@pytest.mark.parametrize("data", [
    {},
    {"media": {"room_factory": "not an import path"}},
    {"media": {"room_factory": "a:b"}, "server": {"tls": {"certfile": "/nope.pem", "keyfile": "/nope.key"}}},
])
def test_invalid_config_rejected(tmp_path, monkeypatch, data):
    from pydantic import ValidationError

    file = tmp_path / "parley.yaml"
    file.write_text(yaml.dump(data))
    monkeypatch.setenv("TEST_PARLEYCONFIG", str(file))

    with pytest.raises(ValidationError):
        FakeParleyConfig()


@pytest.mark.ut
def test_room_factory_resolves_to_media_room(parley_config):
    factory = load_object(parley_config.media.room_factory)

    room = factory()

    assert isinstance(room, FakeMediaRoom)
    assert room.peers == {}


@pytest.fixture
def yaml_only(tmp_path, monkeypatch):
    file = tmp_path / "parley.yaml"
    file.write_text(yaml.dump({
        "server": {"host": "0.0.0.0", "backlog": 64},
        "media": {"room_factory": "a:b"},
    }))
    monkeypatch.setattr(settings, "get_configfile", lambda: file)
    return file


@pytest.mark.ut
def test_environment_overrides_file(yaml_only, monkeypatch):
    monkeypatch.setenv("PARLEY_SERVER__PORT", "9999")
    monkeypatch.setenv("PARLEY_MEDIA__ROOM_FACTORY", "x.y:z")

    config = ParleyConfig()

    assert config.server.port == 9999
    assert config.server.host == "0.0.0.0"
    assert config.server.backlog == 64
    assert config.media.room_factory == "x.y:z"


@pytest.mark.ut
def test_environment_accepts_json_sections(yaml_only, monkeypatch):
    monkeypatch.setenv("PARLEY_SERVER", '{"port": 9001, "limit_concurrency": 3}')

    config = ParleyConfig()

    assert config.server.port == 9001
    assert config.server.limit_concurrency == 3
    assert config.media.room_factory == "a:b"


@pytest.mark.ut
def test_file_used_without_environment(yaml_only, monkeypatch):
    monkeypatch.delenv("PARLEY_SERVER__PORT", raising=False)
    monkeypatch.delenv("PARLEY_SERVER", raising=False)

    config = ParleyConfig()

    assert config.server.port == 7000
    assert config.server.host == "0.0.0.0"


@pytest.mark.ut
def test_tls_settings_build_server_context(tls_config, tls_files):
    assert tls_config.server.tls.certfile == tls_files.certfile

    ctx = tls_config.get_server_ssl_ctx()

    assert isinstance(ctx, ssl.SSLContext)
    assert ctx.verify_mode == ssl.CERT_NONE
