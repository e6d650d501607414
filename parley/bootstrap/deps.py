import json
from functools import lru_cache

from pydantic import ValidationError

from parley.bootstrap.config.settings import ParleyConfig
from parley.core.controlplane import ControlPlane
from parley.core.facade import ParleyCore
from parley.core.helpers.utils import load_object
from parley.core.ports.media import MediaRoom
from parley.core.routing.app import SignalingApplication
from parley.infra.msgpack_serializer import MsgPackSerializer


@lru_cache
def get_cp() -> ControlPlane:
    config = get_config()

    return ControlPlane(
        config=config,
        app=get_app(),
        serializer=MsgPackSerializer(),
        room_factory=get_room,
    )


@lru_cache
def get_core() -> ParleyCore:
    cp = get_cp()
    return cp.build_core()


@lru_cache
def get_app() -> SignalingApplication:
    return SignalingApplication()


def get_room() -> MediaRoom:
    path = get_config().media.room_factory
    try:
        factory = load_object(path)
    except ImportError as ex:
        raise SystemExit(f"[config] Unable to load media.room_factory: {ex}")

    return factory()


@lru_cache
def get_config() -> ParleyConfig:
    try:
        return ParleyConfig()  # type: ignore[call-arg]
    except FileNotFoundError as ex:
        raise SystemExit(f"Provide a correct configuration file path: {ex}")
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(p) for p in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))
