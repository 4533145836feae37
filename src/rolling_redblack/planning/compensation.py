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
from typing import Any

from rolling_redblack.config.registry import StageTypeRegistry
from rolling_redblack.config.request import DeploymentRequest
from rolling_redblack.helpers.logger import setup_logger
from rolling_redblack.planning.source import lookup_source_server_group
from rolling_redblack.planning.stages import StageSequence, base_context, pin_context
from rolling_redblack.platform.protocols import ActionRecord, Plan

logger = setup_logger(__name__)

MINUTE_MS = 60 * 1000


def compose_on_failure_stages(
    parent_id: str,
    context: Mapping[str, Any],
    ancestry: Sequence[ActionRecord],
    registry: StageTypeRegistry,
    timeout_minutes: int = 20,
) -> Plan:
    """Unpin the source server group after a failed rollout.

    The source is looked up again rather than taken from the forward plan.
    Failing to find it is logged and yields an empty plan: compensation must
    never fail on its own.
    """
    try:
        request = DeploymentRequest.from_context(context)
        source = lookup_source_server_group(
            parent_id, ancestry, request, registry.ancestor_types
        )
    except Exception as e:
        logger.warning(
            f"Failed to lookup source server group during composeOnFailureStages: {e}"
        )
        return []

    if source is None:
        return []

    stages = StageSequence(parent_id)
    unpin = pin_context(
        base_context(request),
        source,
        unpinMinimumCapacity=True,
        # the rollout may have failed on a timeout, so give this one its own
        stageTimeoutMs=timeout_minutes * MINUTE_MS,
    )
    stages.add(registry.pin, f"Unpin {source.server_group_name}", unpin)
    return stages.plan()
