"""
Layered settings for the command line.

Values are resolved from the lowest to the highest priority:

1. ``config/defaults.json`` shipped with the package (section ``cli``),
2. a JSON settings file (``--config`` or ``~/.anomalica.json`` if present),
3. environment variables prefixed with ``ANOMALICA_`` (``ANOMALICA_FILE``,
   ``ANOMALICA_COLUMN``, ``ANOMALICA_THRESHOLD``, ``ANOMALICA_JSON_OUTPUT``,
   ``ANOMALICA_DELIMITER``, ``ANOMALICA_BATCH_SIZE``),
4. explicit overrides (command-line flags); ``None`` means "not given".

Every layer goes through the same pydantic validation: unknown keys in the
settings file are rejected and the threshold must be positive.

Examples
--------
>>> from anomalica.settings import load_settings
>>> settings = load_settings(file="data.csv", threshold=2.5)
>>> settings.threshold, settings.file
(2.5, 'data.csv')
"""

import logging
from contextvars import ContextVar
from pathlib import Path
from typing import Optional

from pydantic import ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    InitSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from ._utils import read_config, read_json, validate_natural_number, validate_positive

logger = logging.getLogger(__name__)

ENV_PREFIX = "ANOMALICA_"
USER_SETTINGS_PATH = Path("~/.anomalica.json")

_errors = read_config("messages")["errors"]
_defaults = read_config("defaults")["cli"]

# values of the settings file being loaded by load_settings()
_FILE_VALUES: ContextVar[Optional[dict]] = ContextVar(
    "anomalica_settings_file", default=None
)


class Settings(BaseSettings):
    """Resolved command-line settings."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="forbid")

    file: Optional[str] = _defaults["file"]
    column: Optional[str] = _defaults["column"]
    threshold: float = _defaults["threshold"]
    json_output: bool = _defaults["json_output"]
    delimiter: str = _defaults["delimiter"]
    batch_size: int = _defaults["batch_size"]

    @field_validator("threshold")
    @classmethod
    def _positive_threshold(cls, v: float) -> float:
        validate_positive(v, _errors["threshold_not_positive_f"].format(v))
        return v

    @field_validator("batch_size")
    @classmethod
    def _natural_batch_size(cls, v: int) -> int:
        validate_natural_number(
            v, _errors["not_natural_number_f"].format("batch_size", v)
        )
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        file_settings = InitSettingsSource(
            settings_cls, init_kwargs=_FILE_VALUES.get() or {}
        )
        return init_settings, env_settings, file_settings

    def require_input(self) -> "Settings":
        """
        Check that an input file is set.

        Raises
        ------
        ValueError
            If no input file is set.
        """
        if not self.file:
            raise ValueError(_errors["input_file_required"])
        return self


def _settings_path(config_path) -> Optional[Path]:
    if config_path is not None:
        return Path(config_path)
    user_path = USER_SETTINGS_PATH.expanduser()
    return user_path if user_path.is_file() else None


def load_settings(config_path=None, **overrides) -> Settings:
    """
    Resolve settings from defaults, a settings file, environment and overrides.

    Parameters
    ----------
    config_path : str or Path, optional
        JSON settings file. If None, ``~/.anomalica.json`` is used when it
        exists.
    **overrides
        Highest-priority values; entries set to ``None`` are ignored.

    Returns
    -------
    Settings
        Validated settings; call :meth:`Settings.require_input` before
        analysing.

    Raises
    ------
    FileNotFoundError
        If ``config_path`` is given and does not exist.
    ValueError
        If the settings file is not a JSON object or has unknown keys, or a
        value from any layer fails validation.
    """
    path = _settings_path(config_path)
    data = {}
    if path is not None:
        data = read_json(path)
        logger.info("Using settings file '%s'.", path)

    token = _FILE_VALUES.set(data)
    try:
        settings = Settings(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as e:
        raise ValueError(_errors["invalid_settings_f"].format(e)) from e
    finally:
        _FILE_VALUES.reset(token)
    logger.debug("Resolved settings: %s", settings.model_dump())
    return settings
