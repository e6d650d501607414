import asyncio
import os
from typing import Generator

import pytest
import pytest_asyncio
import yaml

from parley.core.connections.registry import ConnectionRegistry
from parley.core.helpers.spawn import TaskSpawner
from tests.fake.fake_media import FakeMediaPeer, FakeMediaRoom
from tests.fake.fake_transport import FakeChannel, FakeSerializer, FakeTransport
from tests.helpers import FakeParleyConfig
from tests.utils import TLSFiles, generate_cert_pair, write_pem


@pytest.fixture
def serializer():
    return FakeSerializer()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def channel():
    return FakeChannel()


@pytest_asyncio.fixture
async def spawner():
    spawner = TaskSpawner(asyncio.get_running_loop())
    yield spawner
    await spawner.cancel_all()


@pytest_asyncio.fixture
async def media_peer():
    return FakeMediaPeer(response={"ok": True})


@pytest.fixture
def room():
    return FakeMediaRoom(response={"ok": True})


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def config_file(tmp_path):
    file = tmp_path / "parley.yaml"

    data = {
        "server": {
            "host": "127.0.0.1",
            "port": 0,
            "backlog": 10,
            "timeout_graceful_shutdown": 1,
            "limit_concurrency": 10,
            "max_buffer_size": 1024 * 1024,
            "max_message_size": 64 * 1024,
        },
        "media": {
            "room_factory": "tests.fake.fake_media:create_room",
        },
    }

    file.write_text(yaml.dump(data))
    return file


@pytest.fixture
def parley_config(config_file) -> Generator[FakeParleyConfig, None, None]:
    backup = os.environ.copy()

    try:
        os.environ["TEST_PARLEYCONFIG"] = str(config_file)
        yield FakeParleyConfig()
    finally:
        os.environ.clear()
        os.environ.update(backup)


@pytest.fixture(scope="session")
def tls_files(tmp_path_factory) -> TLSFiles:
    ca_cert, server_key, server_cert = generate_cert_pair()
    base = tmp_path_factory.mktemp("tls")

    files = TLSFiles(
        cafile=base / "ca.pem",
        certfile=base / "server.pem",
        keyfile=base / "server.key",
    )
    write_pem(ca_cert, files.cafile)
    write_pem(server_cert, files.certfile)
    write_pem(server_key, files.keyfile)
    return files


@pytest.fixture
def tls_config(tmp_path, monkeypatch, tls_files) -> FakeParleyConfig:
    file = tmp_path / "parley-tls.yaml"
    file.write_text(yaml.dump({
        "server": {
            "host": "127.0.0.1",
            "port": 0,
            "tls": {
                "certfile": str(tls_files.certfile),
                "keyfile": str(tls_files.keyfile),
            },
        },
        "media": {"room_factory": "tests.fake.fake_media:create_room"},
    }))
    monkeypatch.setenv("TEST_PARLEYCONFIG", str(file))
    return FakeParleyConfig()
