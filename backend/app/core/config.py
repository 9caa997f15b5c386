"""
Service configuration.
Centralizes tunable parameters for the API, the LLM explanation call and the cache.
Values come from the process environment (a local .env file is honoured).
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Mapping, Optional

from dotenv import load_dotenv, find_dotenv
from pydantic import BaseModel, Field, field_validator

# Load .env file (walks up directories to find it)
load_dotenv(find_dotenv())

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"

GROQ_CHAT_COMPLETIONS_URL = "https://api.groq.com/openai/v1/chat/completions"


class Settings(BaseModel):
    """Main configuration for the PharmaGuard service."""

    app_name: str = Field(default="PharmaGuard API", description="Title shown in the OpenAPI docs")

    environment: Literal["development", "production", "test"] = Field(
        default="development",
        description="Deployment environment"
    )

    port: int = Field(default=3080, ge=1, le=65535, description="Port used when run as a script")

    log_level: str = Field(default="INFO", description="Root logging level")

    # LLM
    groq_api_key: str = Field(default="", description="API key for the Groq chat-completions API")
    groq_model: str = Field(default="llama3-70b-8192", description="Model used for explanations")
    groq_api_url: str = Field(default=GROQ_CHAT_COMPLETIONS_URL)

    llm_timeout_seconds: float = Field(
        default=8.0,
        gt=0.0,
        description="Upper bound for one explanation call; the call is abandoned after this"
    )
    llm_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    llm_max_tokens: int = Field(default=300, gt=0)

    # Upload
    max_upload_mb: int = Field(default=50, gt=0, description="Maximum accepted VCF size in megabytes")

    # Lookup tables
    data_dir: Path = Field(
        default=DEFAULT_DATA_DIR,
        description="Directory holding drug_gene_map.json, gene_variant_map.json and phenotype_rules.json"
    )

    # Cache
    cache_max_entries: int = Field(
        default=0,
        ge=0,
        description="Maximum explanation cache entries (0 = unbounded)"
    )

    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


# Environment variable → settings field
_ENV_FIELDS = {
    "APP_NAME": "app_name",
    "APP_ENV": "environment",
    "NODE_ENV": "environment",
    "PORT": "port",
    "LOG_LEVEL": "log_level",
    "GROQ_API_KEY": "groq_api_key",
    "GROQ_MODEL": "groq_model",
    "GROQ_API_URL": "groq_api_url",
    "LLM_TIMEOUT_SECONDS": "llm_timeout_seconds",
    "LLM_TEMPERATURE": "llm_temperature",
    "LLM_MAX_TOKENS": "llm_max_tokens",
    "MAX_UPLOAD_MB": "max_upload_mb",
    "PHARMAGUARD_DATA_DIR": "data_dir",
    "CACHE_MAX_ENTRIES": "cache_max_entries",
}


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from an environment mapping (defaults to os.environ)."""
    env = os.environ if environ is None else environ
    values = {}
    for var, field_name in _ENV_FIELDS.items():
        raw = env.get(var)
        if raw is not None and raw != "":
            values[field_name] = raw

    origins = env.get("CORS_ORIGINS")
    if origins:
        values["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]

    return Settings(**values)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return load_settings()
