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

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from rolling_redblack.config.defaults import get_section
from rolling_redblack.config.settings import Settings, get_settings
from rolling_redblack.platform.protocols import PipelineCapability


class StageTypeRegistry(BaseModel):
    """Stage type identifiers the planner emits, keyed by what the stage does."""

    model_config = ConfigDict(frozen=True)

    determine_target: str = "determineTargetServerGroup"
    pin: str = "pinServerGroup"
    resize: str = "resizeServerGroup"
    disable: str = "disableServerGroup"
    scale_down: str = "scaleDownCluster"
    wait: str = "wait"
    # stage types whose output names the server group being replaced
    ancestor_types: tuple[str, ...] = Field(
        default=("createServerGroup", "cloneServerGroup")
    )

    @classmethod
    def from_defaults(cls) -> "StageTypeRegistry":
        """Built-in types, overridden by the `stage_types` section of defaults.yaml."""
        return cls.model_validate(get_section("stage_types"))


@dataclass(frozen=True)
class PipelineStage:
    """The pipeline capability when it is wired in."""

    stage_type: str = "pipeline"


def pipeline_capability(settings: Settings | None = None) -> PipelineCapability | None:
    s = settings or get_settings()
    if not s.pipeline_enabled:
        return None
    return PipelineStage(stage_type=s.pipeline_stage_type)
