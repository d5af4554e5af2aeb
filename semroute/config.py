"""Router configuration: YAML route file models and environment settings."""

from pathlib import Path

import yaml
from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from semroute.errors import ConfigError
from semroute.models import RouteDefinition


class LLMConfig(BaseModel):
    """Downstream model a route hands its requests to."""

    model: str = Field(min_length=1, description="Model identifier, e.g. 'gemini/gemini-1.5-flash'")


class RouteConfig(BaseModel):
    """One entry of the ``routes`` list."""

    name: str = Field(min_length=1)
    description: str = ""
    utterances: list[str] = Field(default_factory=list)
    llm: LLMConfig
    score_threshold: float

    @field_validator("utterances")
    @classmethod
    def _no_blank_utterances(cls, v: list[str]) -> list[str]:
        for index, utterance in enumerate(v):
            if not utterance.strip():
                raise ValueError(f"utterance {index} is blank")
        return v

    def to_definition(self) -> RouteDefinition:
        return RouteDefinition(
            name=self.name,
            description=self.description,
            utterances=tuple(self.utterances),
            score_threshold=self.score_threshold,
            handler_id=self.llm.model,
        )


class RouterConfig(BaseModel):
    """Top-level route file."""

    encoder_name: str = Field(min_length=1, description="Embedding model identifier")
    encoder_type: str | None = Field(
        default=None,
        description="Embedding provider, used as the LiteLLM prefix when encoder_name has none",
    )
    default_route: str | None = Field(
        default=None,
        description="Route used when no match clears its threshold (defaults to the first route)",
    )
    routes: list[RouteConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_route_names(self) -> "RouterConfig":
        names = [route.name for route in self.routes]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate route names: {', '.join(duplicates)}")
        if self.default_route is not None and self.default_route not in names:
            raise ValueError(f"default_route '{self.default_route}' is not a configured route")
        return self

    def definitions(self) -> list[RouteDefinition]:
        return [route.to_definition() for route in self.routes]


class RouterSettings(BaseSettings):
    """Process-level settings read from the environment or a ``.env`` file."""

    model_config = SettingsConfigDict(
        env_prefix="SEMROUTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SEMROUTE_API_KEY", "API_KEY"),
        description="API key passed to the embedding and LLM providers",
    )
    api_base: str | None = Field(default=None, description="Optional provider base URL")
    embed_concurrency: int = Field(
        default=8,
        ge=1,
        description="Maximum concurrent embedding requests while building the route store",
    )
    request_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Timeout in seconds for a single embedding request",
    )


def parse_router_config(data: object) -> RouterConfig:
    """Validate already-deserialized route file data."""
    if data is None:
        raise ConfigError("Router config is empty")
    try:
        return RouterConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid router config: {e}") from e


def load_router_config(path: str | Path) -> RouterConfig:
    """Read and validate a YAML route file."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read router config {path}: {e}") from e
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    return parse_router_config(data)
