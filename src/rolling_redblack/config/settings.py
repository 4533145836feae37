# Copyright 2025 iGenius S.p.A
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized environment configuration for rolling-redblack.

    Env var naming: ROLLING_REDBLACK_<FIELD_NAME>.
    A .env file in CWD or ~/.rolling_redblack/.env is read automatically.
    """

    model_config = SettingsConfigDict(
        env_prefix="ROLLING_REDBLACK_",
        env_file=(".env", "~/.rolling_redblack/.env"),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # --- General -------------------------------------------------------------
    log_level: str = "INFO"
    home: Path = Field(
        default=Path("~/.rolling_redblack").expanduser(),
        description="Path to rolling-redblack home directory",
    )
    defaults_file: Path | None = Field(
        default_factory=lambda data: data["home"] / "defaults.yaml",
        alias="ROLLING_REDBLACK_DEFAULTS",
        description="Path to YAML with stage type overrides",
    )

    # --- Validation pipelines ------------------------------------------------
    pipeline_enabled: bool = Field(
        default=True,
        description="Whether the validation pipeline stage is available to the planner",
    )  # ROLLING_REDBLACK_PIPELINE_ENABLED
    pipeline_stage_type: str = Field(
        default="pipeline",
        description="Stage type used to invoke a validation pipeline",
    )

    # --- Failure compensation ------------------------------------------------
    compensation_timeout_minutes: int = Field(
        default=20,
        ge=1,
        description="Timeout override for the unpin stage emitted when a rollout fails",
    )  # ROLLING_REDBLACK_COMPENSATION_TIMEOUT_MINUTES


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Cached accessor. Call this wherever you need settings.
    Tests can `cache_clear()` before reading to pick up monkeypatched env.
    """
    return Settings()


def reload_settings_cache() -> None:
    get_settings.cache_clear()  # type: ignore[attr-defined]
