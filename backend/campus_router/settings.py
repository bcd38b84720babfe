from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_out_dir() -> str:
    # Keep runtime artifacts in backend/out by default to avoid polluting source assets.
    return str(Path(__file__).resolve().parents[1] / "out")


class Settings(BaseSettings):
    """Validated settings (env-driven), keeping config out of code for easy extension."""

    model_config = SettingsConfigDict(
        # Support both "repo root/.env" and "backend/.env" (local dev)
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    out_dir: str = Field(default_factory=_default_out_dir, alias="OUT_DIR")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Where the campus graph snapshot comes from at startup: a JSON file path or an
    # http(s) URL. Empty means the snapshot store file under OUT_DIR.
    graph_source: str = Field(default="", alias="GRAPH_SOURCE")
    graph_source_timeout_s: float = Field(default=10.0, ge=0.5, le=120.0, alias="GRAPH_SOURCE_TIMEOUT_S")

    search_result_limit: int = Field(default=5, ge=1, le=100, alias="SEARCH_RESULT_LIMIT")
    cors_allow_origins: str = Field(default="*", alias="CORS_ALLOW_ORIGINS")

    @model_validator(mode="after")
    def _normalise(self) -> "Settings":
        self.graph_source = str(self.graph_source or "").strip()
        self.log_level = str(self.log_level or "INFO").strip().upper() or "INFO"
        return self

    def cors_origins(self) -> list[str]:
        origins = [part.strip() for part in self.cors_allow_origins.split(",")]
        return [origin for origin in origins if origin] or ["*"]


settings = Settings()
