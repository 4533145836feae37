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

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from rolling_redblack.config.registry import StageTypeRegistry, pipeline_capability
from rolling_redblack.config.request import (
    PipelineBeforeCleanup,
    normalize_request,
    require_pipeline_capability,
)
from rolling_redblack.config.settings import Settings, get_settings
from rolling_redblack.planning.compensation import compose_on_failure_stages
from rolling_redblack.planning.forward import compose_after_stages
from rolling_redblack.planning.prestage import compose_before_stages
from rolling_redblack.planning.source import lookup_source_server_group
from rolling_redblack.platform.protocols import ActionRecord, PipelineCapability, Plan

ROLLING_RED_BLACK = "rollingredblack"


@dataclass(frozen=True)
class StageRecord:
    """The deploy stage being planned, with its ancestry nearest first."""

    id: str
    context: Mapping[str, Any]
    ancestry: Sequence[ActionRecord] = ()


@dataclass(frozen=True)
class RollingRedBlackStrategy:
    """Plans a rolling red/black deploy around a deploy stage.

    The execution engine calls the three entry points at different moments:
    >>> strategy = RollingRedBlackStrategy.from_settings()
    >>> context = strategy.compose_before_stages(stage)    # before the deploy
    >>> plan = strategy.compose_after_stages(stage)        # once it is deployed
    >>> plan = strategy.compose_on_failure_stages(stage)   # if the rollout failed

    Instances only hold read-only configuration and can be shared between
    concurrent planning calls.
    """

    registry: StageTypeRegistry = field(default_factory=StageTypeRegistry)
    pipeline: PipelineCapability | None = None
    compensation_timeout_minutes: int = 20
    name: str = ROLLING_RED_BLACK

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "RollingRedBlackStrategy":
        s = settings or get_settings()
        return cls(
            registry=StageTypeRegistry.from_defaults(),
            pipeline=pipeline_capability(s),
            compensation_timeout_minutes=s.compensation_timeout_minutes,
        )

    def compose_before_stages(self, stage: StageRecord) -> dict[str, Any]:
        """Return the deploy context rewritten for zero-capacity provisioning.

        Only the pipeline reference is read here; the rest of the request is
        validated once the server group is deployed.
        """
        pbc = PipelineBeforeCleanup.model_validate(
            stage.context.get("pipelineBeforeCleanup") or {}
        )
        require_pipeline_capability(pbc, self.pipeline)
        return compose_before_stages(stage.context)

    def compose_after_stages(self, stage: StageRecord) -> Plan:
        request, _ = normalize_request(stage.context, self.pipeline)
        source = lookup_source_server_group(
            stage.id, stage.ancestry, request, self.registry.ancestor_types
        )
        return compose_after_stages(stage.id, request, source, self.registry, self.pipeline)

    def compose_on_failure_stages(self, stage: StageRecord) -> Plan:
        return compose_on_failure_stages(
            stage.id,
            stage.context,
            stage.ancestry,
            self.registry,
            timeout_minutes=self.compensation_timeout_minutes,
        )
