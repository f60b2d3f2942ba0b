from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict


class ParserBackend(str, Enum):
    optimistic = "optimistic"
    pydantic = "pydantic"


class ParserSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="optimistic_json_", extra="ignore")

    debug: bool = False

    # When True, incomplete strings and numbers raise instead of degrading to raw text
    strict: bool = False
    backend: ParserBackend = ParserBackend.optimistic

    # dict when True, SimpleNamespace records when False
    associative: bool = True


# singleton
settings = ParserSettings()
