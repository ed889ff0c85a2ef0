"""Review gate configuration.

Loads settings from two files under ``.ai-context/``:
  * config.json:  pipeline configuration (committed with the repository)
  * secrets.yaml: provider credentials (optional, never committed)

``config.json`` is read through the YAML loader; JSON is a subset of YAML so
the same loader handles both files.  The loaded configuration is immutable
and is passed explicitly to every component.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from review_gate.errors import ErrorKind, ReviewGateError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

AI_CONTEXT_DIR = ".ai-context"
CONFIG_FILENAME = "config.json"
SECRETS_FILENAME = "secrets.yaml"
INDEX_FILENAME = "index.json"

Severity = Literal["blocker", "warning", "nit"]


def config_path(root: Path) -> Path:
    return Path(root) / AI_CONTEXT_DIR / CONFIG_FILENAME


def secrets_path(root: Path) -> Path:
    return Path(root) / AI_CONTEXT_DIR / SECRETS_FILENAME


def index_path(root: Path) -> Path:
    return Path(root) / AI_CONTEXT_DIR / INDEX_FILENAME


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Parse *path* as YAML/JSON and return the top-level mapping.

    Raises:
        ReviewGateError: CONFIGURATION when the file is unreadable, malformed
            or not a mapping.
    """
    try:
        with path.open(encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        raise ReviewGateError(ErrorKind.CONFIGURATION, f"Cannot read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ReviewGateError(ErrorKind.CONFIGURATION, f"Failed to parse {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ReviewGateError(
            ErrorKind.CONFIGURATION,
            f"Expected a mapping at the top of {path}, got {type(data).__name__}",
        )
    return data


# ---------------------------------------------------------------------------
# Secrets models
# ---------------------------------------------------------------------------


class AnthropicSecrets(BaseModel):
    api_key: Optional[str] = None


class OpenAISecrets(BaseModel):
    api_key:      Optional[str] = None
    organization: Optional[str] = None


class AwsSecrets(BaseModel):
    access_key_id:     Optional[str] = None
    secret_access_key: Optional[str] = None
    session_token:     Optional[str] = None
    region:            Optional[str] = "us-east-1"


class Secrets(BaseModel):
    anthropic: AnthropicSecrets = Field(default_factory=AnthropicSecrets)
    openai:    OpenAISecrets    = Field(default_factory=OpenAISecrets)
    aws:       AwsSecrets       = Field(default_factory=AwsSecrets)


# ---------------------------------------------------------------------------
# Pipeline configuration
# ---------------------------------------------------------------------------


class ReviewGateConfig(BaseModel):
    """Configuration record shared by the index and review commands.

    Field aliases match the camelCase keys of ``.ai-context/config.json``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    llm_model:   str = Field(alias="llmModel", min_length=1)
    embed_model: str = Field(alias="embedModel", min_length=1)

    include_globs: List[str] = Field(default_factory=lambda: ["**/*"], alias="includeGlobs")
    ignore_globs:  List[str] = Field(default_factory=list, alias="ignoreGlobs")

    chunk_max_chars:     int = Field(default=1200, alias="chunkMaxChars", gt=0)
    chunk_overlap_chars: int = Field(default=200, alias="chunkOverlapChars", ge=0)
    top_k:               int = Field(default=8, alias="topK", ge=1)
    # Reserved: declared by the config format, not applied by retrieval.
    max_context_chunks_per_file: int = Field(default=3, alias="maxContextChunksPerFile", ge=1)

    block_on_severities: List[Severity] = Field(
        default_factory=lambda: ["blocker"], alias="blockOnSeverities",
    )
    max_prompt_chars: int = Field(default=24000, alias="maxPromptChars", gt=0)

    context_ratio:          float          = Field(default=0.7, alias="contextRatio", gt=0, le=1)
    max_diff_chars:         Optional[int]  = Field(default=None, alias="maxDiffChars", gt=0)
    review_max_attempts:    int            = Field(default=3, alias="reviewMaxAttempts", ge=1)
    review_backoff_seconds: float          = Field(default=1.0, alias="reviewBackoffSeconds", ge=0)
    review_max_tokens:      int            = Field(default=2048, alias="reviewMaxTokens", gt=0)
    embed_concurrency:      int            = Field(default=1, alias="embedConcurrency", ge=1)

    embedding_provider: Literal["ollama", "aws_bedrock"] = Field(
        default="ollama", alias="embeddingProvider",
    )
    llm_provider: Literal["ollama", "anthropic", "openai", "aws_bedrock"] = Field(
        default="ollama", alias="llmProvider",
    )
    ollama_base_url:         str   = Field(default="http://localhost:11434", alias="ollamaBaseUrl")
    request_timeout_seconds: float = Field(default=120.0, alias="requestTimeoutSeconds", gt=0)
    log_level:               str   = Field(default="warning", alias="logLevel")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        if not isinstance(logging.getLevelName(value.upper()), int):
            raise ValueError(f"unknown log level: {value}")
        return value.lower()

    @model_validator(mode="after")
    def _warn_on_large_overlap(self) -> "ReviewGateConfig":
        if self.chunk_overlap_chars >= self.chunk_max_chars:
            logger.warning(
                "chunkOverlapChars (%d) is not smaller than chunkMaxChars (%d); "
                "chunks will overlap heavily",
                self.chunk_overlap_chars, self.chunk_max_chars,
            )
        return self

    @property
    def context_budget_chars(self) -> int:
        """Characters granted to the retrieved-context buffer of the prompt."""
        return int(self.max_prompt_chars * self.context_ratio)

    @property
    def diff_budget_chars(self) -> int:
        """Hard truncation cap applied to the staged diff."""
        return self.max_diff_chars or self.max_prompt_chars

    def review_config(self) -> "ReviewConfig":
        return ReviewConfig(
            llm_model=self.llm_model,
            block_on_severities=list(self.block_on_severities),
            max_prompt_chars=self.max_prompt_chars,
        )


class ReviewConfig(BaseModel):
    """The narrowed projection of the configuration used by the gate."""

    model_config = ConfigDict(frozen=True)

    llm_model:           str
    block_on_severities: List[Severity]
    max_prompt_chars:    int


# ---------------------------------------------------------------------------
# Public loaders
# ---------------------------------------------------------------------------


def load_config(root: Path) -> ReviewGateConfig:
    """Load and validate ``.ai-context/config.json`` under *root*.

    Raises:
        ReviewGateError: CONFIGURATION when the file is missing or invalid.
    """
    path = config_path(root)
    if not path.exists():
        raise ReviewGateError(ErrorKind.CONFIGURATION, f"Configuration file not found at {path}")

    data = _load_yaml(path)
    try:
        config = ReviewGateConfig.model_validate(data)
    except ValidationError as exc:
        raise ReviewGateError(ErrorKind.CONFIGURATION, f"Invalid configuration in {path}: {exc}") from exc

    logger.info(
        "Config loaded (embed_model=%s via %s, llm_model=%s via %s, top_k=%d)",
        config.embed_model, config.embedding_provider,
        config.llm_model, config.llm_provider,
        config.top_k,
    )
    return config


def load_secrets(root: Path) -> Secrets:
    """Load the optional secrets file; a missing file yields empty secrets."""
    path = secrets_path(root)
    if not path.exists():
        logger.debug("Secrets file not found: %s", path)
        return Secrets()

    data = _load_yaml(path)
    try:
        return Secrets.model_validate(data)
    except ValidationError as exc:
        raise ReviewGateError(ErrorKind.CONFIGURATION, f"Invalid secrets in {path}: {exc}") from exc
