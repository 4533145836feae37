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

from collections.abc import Iterable, Mapping, Sequence

from rolling_redblack.config.request import DeploymentRequest
from rolling_redblack.exceptions import PlanningError
from rolling_redblack.helpers.logger import setup_logger
from rolling_redblack.platform.protocols import ActionRecord, ServerGroupSource

logger = setup_logger(__name__)


def find_ancestor(
    ancestry: Sequence[ActionRecord], types: Iterable[str]
) -> ActionRecord | None:
    """First record, nearest first, whose type is one of `types`."""
    wanted = set(types)
    return next((record for record in ancestry if record.type in wanted), None)


def lookup_source_server_group(
    stage_id: str,
    ancestry: Sequence[ActionRecord],
    request: DeploymentRequest,
    ancestor_types: Iterable[str],
) -> ServerGroupSource | None:
    """Find the server group the deploy is replacing.

    The nearest create/clone server group ancestor reports it under
    ``source``. No ancestor, or an ancestor without a source name, means this
    is a first deployment and `None` is returned.

    Raises:
        PlanningError: the ancestry itself cannot be walked.
    """
    if ancestry is None or isinstance(ancestry, (str, bytes, Mapping)):
        raise PlanningError(stage_id, "ancestry is not a sequence of stages")
    try:
        parent = find_ancestor(ancestry, ancestor_types)
    except (AttributeError, TypeError) as e:
        raise PlanningError(stage_id, f"malformed ancestry: {e}") from e

    if parent is None:
        logger.debug(f"No create/clone server group ancestor for stage {stage_id}")
        return None

    if not isinstance(parent.context, Mapping):
        raise PlanningError(stage_id, f"stage {parent.id} has no readable context")
    source = parent.context.get("source")
    if source is None:
        return None
    if not isinstance(source, Mapping):
        raise PlanningError(
            stage_id, f"stage {parent.id} reports a malformed source: {source!r}"
        )

    name = source.get("serverGroupName") or source.get("asgName")
    if not name:
        return None

    return ServerGroupSource(
        region=source.get("region"),
        server_group_name=name,
        credentials=request.credentials or request.account,
        cloud_provider=request.cloud_provider,
    )
