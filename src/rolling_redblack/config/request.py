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

from collections.abc import Mapping
import copy
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from rolling_redblack.exceptions import ConfigurationError
from rolling_redblack.helpers.logger import setup_logger
from rolling_redblack.platform.protocols import PipelineCapability

logger = setup_logger(__name__)

FULL_ROLLOUT = 100


class Capacity(BaseModel):
    """Server group capacity. min <= desired <= max is the cloud driver's problem."""

    model_config = ConfigDict(frozen=True)

    min: int = Field(default=0, ge=0)
    max: int = Field(default=0, ge=0)
    desired: int = Field(default=0, ge=0)


class PipelineBeforeCleanup(BaseModel):
    """Validation pipeline to run after every traffic step."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    application: str | None = None
    pipeline_id: str | None = Field(default=None, alias="pipelineId")
    pipeline_parameters: dict[str, Any] = Field(
        default_factory=dict, alias="pipelineParameters"
    )

    @field_validator("pipeline_parameters", mode="before")
    @classmethod
    def _none_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def is_configured(self) -> bool:
        return bool(self.application and self.pipeline_id)


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["regions", "zones", "namespaces"] = "regions"
    value: str

    def singular_type(self) -> str:
        return self.type[:-1]

    @classmethod
    def from_context(cls, context: Mapping[str, Any]) -> "Location":
        for key in ("namespace", "region", "zone"):
            if context.get(key):
                return cls(type=f"{key}s", value=context[key])
        for key, kind in (
            ("namespaces", "namespaces"),
            ("regions", "regions"),
            ("zones", "zones"),
            ("availabilityZones", "regions"),
        ):
            candidates = context.get(key)
            if isinstance(candidates, Mapping):
                candidates = list(candidates)
            if candidates:
                return cls(type=kind, value=candidates[0])
        raise ValueError("Unable to determine a location (region, zone or namespace)")


def _cluster_name(context: Mapping[str, Any]) -> str | None:
    if context.get("cluster"):
        return context["cluster"]
    moniker = context.get("moniker") or {}
    if moniker.get("cluster"):
        return moniker["cluster"]
    application = context.get("application")
    if not application:
        return None
    stack = context.get("stack") or ""
    detail = context.get("freeFormDetails") or ""
    if detail:
        return f"{application}-{stack}-{detail}"
    return f"{application}-{stack}" if stack else application


def normalize_percentages(values: list[int] | None) -> list[int]:
    """Dedupe in first-seen order and make sure the rollout ends at 100%.

    A 100 that shows up early is moved to the end, so the sequence never
    carries two of them.
    """
    seen: list[int] = []
    for p in values or []:
        if isinstance(p, bool) or not isinstance(p, int):
            raise ValueError(f"Target percentage must be an integer, got {p!r}")
        if not 1 <= p <= FULL_ROLLOUT:
            raise ValueError(f"Target percentage must be between 1 and 100, got {p}")
        if p not in seen:
            seen.append(p)
    if FULL_ROLLOUT in seen:
        seen.remove(FULL_ROLLOUT)
    seen.append(FULL_ROLLOUT)
    return seen


class DeploymentRequest(BaseModel):
    """Rolling red/black deployment request, as read from the deploy stage context."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    target_percentages: list[int] = Field(
        default_factory=lambda: [FULL_ROLLOUT], alias="targetPercentages"
    )
    scale_down: bool = Field(default=False, alias="scaleDown")
    delay_before_scale_down: int = Field(default=0, ge=0, alias="delayBeforeScaleDown")
    delay_before_cleanup: int = Field(default=0, ge=0, alias="delayBeforeCleanup")
    pipeline_before_cleanup: PipelineBeforeCleanup | None = Field(
        default=None, alias="pipelineBeforeCleanup"
    )
    saved_capacity: Capacity | None = Field(default=None, alias="savedCapacity")
    location: Location
    cluster: str | None = None
    moniker: dict[str, Any] | None = None
    account: str | None = None
    credentials: str | None = None
    cloud_provider: str | None = Field(default=None, alias="cloudProvider")
    target_healthy_deploy_percentage: int | None = Field(
        default=None, ge=0, le=100, alias="targetHealthyDeployPercentage"
    )
    target_size: int | None = Field(default=None, alias="targetSize")

    @model_validator(mode="before")
    @classmethod
    def _from_stage_context(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        if "location" not in data:
            data["location"] = Location.from_context(data)
        # savedCapacity is only there once the pre-stage planner ran
        if "savedCapacity" not in data and "saved_capacity" not in data:
            data["savedCapacity"] = data.get("capacity")
        data["cluster"] = data.get("cluster") or _cluster_name(data)
        data.setdefault("account", data.get("credentials"))
        data.setdefault("credentials", data.get("account"))
        for key in ("delayBeforeScaleDown", "delayBeforeCleanup"):
            if data.get(key) is None:
                data.pop(key, None)
        return data

    @field_validator("target_percentages", mode="before")
    @classmethod
    def _normalize_percentages(cls, v: Any) -> list[int]:
        return normalize_percentages(v)

    @property
    def has_validation_pipeline(self) -> bool:
        return bool(self.pipeline_before_cleanup and self.pipeline_before_cleanup.is_configured)

    @classmethod
    def from_context(cls, context: Mapping[str, Any]) -> "DeploymentRequest":
        return cls.model_validate(context)


def require_pipeline_capability(
    pipeline_before_cleanup: PipelineBeforeCleanup | None,
    pipeline: PipelineCapability | None,
) -> None:
    """Raise ConfigurationError if a validation pipeline is requested but not wired."""
    if pipeline is None and pipeline_before_cleanup and pipeline_before_cleanup.is_configured:
        raise ConfigurationError(
            "Rolling red/black with a validation pipeline cannot be run without "
            "pipeline stages enabled. Set ROLLING_REDBLACK_PIPELINE_ENABLED=true."
        )


def normalize_request(
    context: Mapping[str, Any],
    pipeline: PipelineCapability | None,
) -> tuple[DeploymentRequest, dict[str, Any]]:
    """Parse the deploy stage context and return it with a cleaned-up payload.

    Returns the request and a copy of `context` in which any `targetSize`
    override is reset to 0, so it cannot fight the zero-capacity provisioning.

    Raises:
        ConfigurationError: a validation pipeline is requested but no pipeline
            capability is wired.
    """
    request = DeploymentRequest.from_context(context)
    require_pipeline_capability(request.pipeline_before_cleanup, pipeline)

    payload = copy.deepcopy(dict(context))
    if request.target_size:
        logger.debug(f"Clearing targetSize={request.target_size} override")
        payload["targetSize"] = 0
    return request, payload
