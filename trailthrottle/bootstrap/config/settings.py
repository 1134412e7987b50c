from typing import Annotated, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from trailthrottle.bootstrap.config.loader import get_configfile


class ThrottleConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TRAILTHROTTLE_",
        extra="ignore"
    )

    default_delay: Annotated[
        float,
        Field(
            description=(
                "Window length, in seconds, used when a throttle is created without\n"
                "an explicit delay. Zero still defers the callback to a later turn\n"
                "of the scheduler."
            ),
            default=0.0,
            ge=0.0
        )
    ]

    negative_delay: Annotated[
        Literal["clamp", "reject"],
        Field(
            description=(
                "What to do with a negative delay.\n"
                "clamp  → treat it as zero and log a warning (default).\n"
                "reject → raise ValueError when the throttle is created."
            ),
            default="clamp"
        )
    ]

    scheduler: Annotated[
        Literal["loop", "thread"],
        Field(
            description=(
                "Deferred-execution backend used when none is injected.\n"
                "loop   → the running asyncio event loop (default).\n"
                "thread → one threading.Timer per window."
            ),
            default="loop"
        )
    ]

    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        Field(
            description="Level passed to setup_logging() by applications that opt in.",
            default="WARNING"
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
        sources: tuple[PydanticBaseSettingsSource, ...] = (init_settings, env_settings)

        configfile = get_configfile()
        if configfile is not None:
            sources += (YamlConfigSettingsSource(settings_cls, yaml_file=configfile),)

        return sources
