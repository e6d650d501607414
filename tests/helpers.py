import asyncio
import os
import struct

from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, YamlConfigSettingsSource

from parley.bootstrap.config.settings import ParleyConfig
from parley.core.routing.app import SignalingApplication
from parley.core.service.call import CallService


class FakeParleyConfig(ParleyConfig, BaseSettings):
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (YamlConfigSettingsSource(settings_cls, yaml_file=os.environ["TEST_PARLEYCONFIG"]),)


def build_app(spawner, room, registry) -> SignalingApplication:
    calls = CallService(room=room, registry=registry, spawner=spawner)
    app = SignalingApplication(spawner)

    @app.request("join")
    async def join(session, data):
        return await calls.join(session, data)

    @app.request("mediaMessage")
    async def media_message(session, data):
        return await calls.relay(session, data)

    @app.request("leave")
    async def leave(session, data):
        return await calls.leave(session, data["request_id"])

    @app.closed
    async def closed(session):
        if session.connection is not None:
            await calls.leave(session)

    return app


async def settle(rounds: int = 5) -> None:
    """Yield to the event loop until chained callbacks have run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


async def write_frame(writer: asyncio.StreamWriter, serializer, obj) -> None:
    payload = serializer.serialize(obj)
    writer.write(struct.pack("!I", len(payload)) + payload)
    await writer.drain()


async def read_frame(reader: asyncio.StreamReader, serializer, timeout: float = 2.0):
    header = await asyncio.wait_for(reader.readexactly(4), timeout)
    length = struct.unpack("!I", header)[0]
    payload = await asyncio.wait_for(reader.readexactly(length), timeout)
    return serializer.deserialize(payload)
