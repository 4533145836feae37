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
from typing import Any

from rolling_redblack.config.request import DeploymentRequest
from rolling_redblack.platform.protocols import (
    Plan,
    ResizeAction,
    ServerGroupSource,
    StageSpec,
    SyntheticStageOwner,
)


def base_context(request: DeploymentRequest) -> dict[str, Any]:
    """Context shared by every stage the planner emits."""
    return {
        request.location.singular_type(): request.location.value,
        "cluster": request.cluster,
        "moniker": request.moniker,
        "credentials": request.account or request.credentials,
        "cloudProvider": request.cloud_provider,
    }


def pin_context(
    base: Mapping[str, Any], source: ServerGroupSource, **flags: Any
) -> dict[str, Any]:
    """Context for pinning or unpinning the source server group."""
    return {
        **base,
        "serverGroupName": source.server_group_name,
        "action": ResizeAction.scale_to_server_group,
        "source": source,
        "useNameAsLabel": True,  # keep the UI from relabelling the stage
        **flags,
    }


class StageSequence:
    """Accumulates the stages of one planning call.

    Ids are ``<parent id>-<n>`` in emission order, which keeps plans
    reproducible and lets later stages refer to earlier ones.
    """

    def __init__(
        self,
        parent_id: str,
        owner: SyntheticStageOwner = SyntheticStageOwner.STAGE_AFTER,
    ):
        self.parent_id = parent_id
        self.owner = owner
        self._stages: Plan = []

    def add(self, stage_type: str, name: str, context: Mapping[str, Any]) -> StageSpec:
        stage = StageSpec(
            id=f"{self.parent_id}-{len(self._stages) + 1}",
            type=stage_type,
            name=name,
            context=context,
            parent_id=self.parent_id,
            owner=self.owner,
        )
        self._stages.append(stage)
        return stage

    def __len__(self) -> int:
        return len(self._stages)

    def plan(self) -> Plan:
        return list(self._stages)
