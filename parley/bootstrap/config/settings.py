import ssl
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from typing import Annotated
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from pydantic_core.core_schema import ValidationInfo

from parley.bootstrap.config.loader import get_configfile


class TLSSettings(BaseModel):
    certfile: Annotated[
        Path,
        Field(
            description="Path to the server TLS certificate chain (PEM)."
        )
    ]

    keyfile: Annotated[
        Path,
        Field(
            description="Path to the server TLS private key (PEM)."
        )
    ]

    @field_validator("certfile", "keyfile")
    @classmethod
    def validate_path(cls, v: Path, _: ValidationInfo) -> Path:
        if not v.exists():
            raise ValueError(f"Path {v} does not exist.")
        return v


class ServerSettings(BaseModel):
    host: Annotated[
        str,
        Field(
            description="Bind address for signaling clients.",
            default="127.0.0.1"
        )
    ]

    port: Annotated[
        int,
        Field(
            description="TCP port for signaling clients.",
            default=7000
        )
    ]

    tls: Annotated[
        TLSSettings | None,
        Field(
            description=(
                "TLS configuration for client connections.\n"
                "Leave unset to serve plain TCP, e.g. behind a TLS-terminating proxy."
            ),
            default=None
        )
    ]

    backlog: Annotated[
        int,
        Field(
            description="Maximum number of pending TCP connections.",
            default=128
        )
    ]

    timeout_graceful_shutdown: Annotated[
        float,
        Field(
            description="Maximum time allowed for graceful shutdown.",
            default=5.0
        )
    ]

    limit_concurrency: Annotated[
        int,
        Field(
            description="Maximum number of simultaneously connected clients.",
            default=1024
        )
    ]

    max_buffer_size: Annotated[
        int,
        Field(
            description="Maximum allowed buffer size for incoming data.",
            default=4 * 1024 * 1024
        )
    ]

    max_message_size: Annotated[
        int,
        Field(
            description="Maximum allowed size for a single frame.",
            default=1 * 1024 * 1024
        )
    ]


class MediaSettings(BaseModel):
    room_factory: Annotated[
        str,
        Field(
            description=(
                "Import path of a zero-argument callable returning the MediaRoom,\n"
                "in the form 'package.module:attribute'.\n"
                "The room binds Parley to the media engine; it creates one media\n"
                "peer per joined participant."
            ),
            pattern=r"^[\w.]+:[\w.]+$"
        )
    ]


class ParleyConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PARLEY_",
        env_nested_delimiter="__",
        extra="allow"
    )

    server: Annotated[
        ServerSettings,
        Field(
            description=(
                "Signaling server configuration.\n"
                "Controls where clients connect, whether TLS is used, and runtime\n"
                "limits such as concurrency, buffer sizes, and graceful shutdown."
            ),
            default_factory=ServerSettings
        )
    ]

    media: Annotated[
        MediaSettings,
        Field(
            description="Media engine integration."
        )
    ]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # environment overrides the file
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=get_configfile()),
        )

    def get_server_ssl_ctx(self) -> ssl.SSLContext | None:
        tls = self.server.tls
        if tls is None:
            return None

        ctx = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
        ctx.load_cert_chain(certfile=tls.certfile, keyfile=tls.keyfile)
        return ctx
