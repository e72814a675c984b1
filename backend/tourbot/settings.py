from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

REPO_ROOT = Path(__file__).resolve().parents[2]
ENV_FILE = REPO_ROOT / ".env"
PACKAGED_DATA_DIR = Path(__file__).resolve().parent / "data"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE), env_file_encoding="utf-8", extra="ignore"
    )

    # human-readable console logs instead of JSON
    DEBUG: bool = False

    # corpus directory (defaults to the packaged seed data)
    DATA_DIR: Path | None = None

    # CORS allow origins (comma-separated). Default empty (no cross-origin).
    CORS_ALLOW_ORIGINS: str = ""

    # Generator (OpenAI-compatible chat completions)
    LLM_PROVIDER: str = "openrouter"
    LLM_API_KEY: str | None = None
    LLM_BASE_URL: str = "https://openrouter.ai/api/v1"
    LLM_MODEL: str = "google/gemma-2-9b-it"
    LLM_TEMPERATURE: float = 0.7
    LLM_TIMEOUT_SECONDS: float = 30.0
    LLM_CONNECT_TIMEOUT_SECONDS: float = 5.0
    APP_PUBLIC_URL: str = "http://localhost:5173"

    # Conversation memory
    HISTORY_LIMIT: int = 10
    RECENCY_TURNS: int = 1

    # Retrieval
    INDEX_MATCH_THRESHOLD: float = 0.35
    LOCATION_FALLBACK_THRESHOLD: float = 0.6
    RESULT_LIMITS: str = "destinations=5,foods=6,tours=4,policies=3,tips=4"
    SPECIAL_BLOCK_LIMIT: int = 8

    @property
    def allow_origins(self) -> list[str]:
        s = (self.CORS_ALLOW_ORIGINS or "").strip()
        if s == "*":
            return ["*"]
        if s == "":
            return []
        return [part.strip() for part in s.split(",") if part.strip()]

    @property
    def data_dir(self) -> Path:
        # Blank values count as unset; an empty DATA_DIR would otherwise resolve to the cwd.
        raw_env = os.getenv("DATA_DIR")
        if raw_env is not None and raw_env.strip():
            return Path(raw_env.strip()).expanduser().resolve()
        if self.DATA_DIR is not None:
            candidate_str = str(self.DATA_DIR).strip()
            if candidate_str and candidate_str not in {".", "./", ".\\"}:
                return Path(self.DATA_DIR).expanduser().resolve()
        return PACKAGED_DATA_DIR

    @property
    def llm_base_url(self) -> str:
        return self.LLM_BASE_URL.rstrip("/") or "https://openrouter.ai/api/v1"

    @property
    def parsed_result_limits(self) -> ResultLimits:
        return ResultLimits.from_string(self.RESULT_LIMITS)


@dataclass(slots=True, frozen=True)
class ResultLimits:
    destinations: int = 5
    foods: int = 6
    tours: int = 4
    policies: int = 3
    tips: int = 4

    @classmethod
    def from_string(cls, payload: str | None) -> ResultLimits:
        base = cls()
        if not payload:
            return base
        mapping: dict[str, int] = {}
        for part in payload.split(","):
            if "=" not in part:
                continue
            key, value = part.split("=", 1)
            key = key.strip().lower()
            try:
                mapping[key] = max(0, int(value.strip()))
            except ValueError:
                continue
        return cls(
            destinations=mapping.get("destinations", base.destinations),
            foods=mapping.get("foods", base.foods),
            tours=mapping.get("tours", base.tours),
            policies=mapping.get("policies", base.policies),
            tips=mapping.get("tips", base.tips),
        )


settings = Settings()
