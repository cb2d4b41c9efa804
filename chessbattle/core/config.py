"""
Configuration
----

The computer's difficulty tiers are the only parameters of the game itself. Everything else here is ambient
(log level, which tier / color to start a new game with).

Settings are read from a TOML file, named by the CHESSBATTLE_CONFIG_TOML environment variable
(default: chessbattle.toml in the working directory). A missing file means "use the defaults".

ex.
    log_level = "DEBUG"
    default_difficulty = "Hard"

    [[difficulties]]
    name = "Hard"
    search_depth = 3
    randomness = 0.1
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from chessbattle.core.exceptions import ConfigError
from chessbattle.core.shared_types import Color

CONFIG_PATH_ENV = "CHESSBATTLE_CONFIG_TOML"
LOG_LEVEL_ENV = "CHESSBATTLE_LOG_LEVEL"
DIFFICULTY_ENV = "CHESSBATTLE_DIFFICULTY"
DEFAULT_CONFIG_PATH = "chessbattle.toml"


class Difficulty(BaseModel):
    """How hard the computer plays: how many plies it searches, and how often it just plays a random move."""

    model_config = ConfigDict(frozen=True)

    name: str
    search_depth: int = Field(ge=1)
    randomness: float = Field(ge=0.0, le=1.0)


EASY = Difficulty(name="Easy", search_depth=1, randomness=0.3)
MEDIUM = Difficulty(name="Medium", search_depth=2, randomness=0.2)
HARD = Difficulty(name="Hard", search_depth=3, randomness=0.1)
DEFAULT_DIFFICULTIES: tuple[Difficulty, ...] = (EASY, MEDIUM, HARD)


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    log_level: str = "INFO"
    default_difficulty: str = MEDIUM.name
    human_color: Color = Color.WHITE
    difficulties: tuple[Difficulty, ...] = DEFAULT_DIFFICULTIES

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @model_validator(mode="after")
    def validate_default_difficulty(self) -> "Settings":
        names = [difficulty.name for difficulty in self.difficulties]
        if len(set(names)) != len(names):
            raise ValueError(f"Difficulty names must be unique, got {names}")
        if self.default_difficulty not in names:
            raise ValueError(
                f"Default difficulty {self.default_difficulty!r} not in {', '.join(names)}"
            )
        return self

    def difficulty(self, name: Optional[str] = None) -> Difficulty:
        """Look up a tier by name (the default tier if no name is given)."""
        wanted = name or self.default_difficulty
        for difficulty in self.difficulties:
            if difficulty.name.lower() == wanted.lower():
                return difficulty
        raise ConfigError(
            f"Unknown difficulty {wanted!r}. Pick one from {', '.join(d.name for d in self.difficulties)}"
        )


def load_settings(
    path: Optional[str | Path] = None, environ: Optional[Mapping[str, str]] = None
) -> Settings:
    """Read the TOML file (if any) and apply environment overrides on top."""
    environ = os.environ if environ is None else environ
    config_path = Path(path or environ.get(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH))

    raw: dict = {}
    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                raw = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Cannot read settings from {config_path}: {e}") from e

    if LOG_LEVEL_ENV in environ:
        raw["log_level"] = environ[LOG_LEVEL_ENV]
    if DIFFICULTY_ENV in environ:
        raw["default_difficulty"] = environ[DIFFICULTY_ENV]

    try:
        return Settings.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {config_path}: {e}") from e
