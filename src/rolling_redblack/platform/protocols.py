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
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable


class SyntheticStageOwner(str, Enum):
    """Where a synthetic stage runs relative to its parent."""

    STAGE_BEFORE = "STAGE_BEFORE"
    STAGE_AFTER = "STAGE_AFTER"


class ResizeAction(str, Enum):
    """Resize modes understood by the cloud driver."""

    scale_exact = "scale_exact"
    scale_up = "scale_up"
    scale_down = "scale_down"
    scale_to_cluster = "scale_to_cluster"
    scale_to_server_group = "scale_to_server_group"


class TargetServerGroup(str, Enum):
    """Dynamic targets resolved by the execution engine at run time."""

    current_asg_dynamic = "current_asg_dynamic"
    ancestor_asg_dynamic = "ancestor_asg_dynamic"
    oldest_asg_dynamic = "oldest_asg_dynamic"


@dataclass(frozen=True)
class DeferredReference:
    """A value that only exists once the execution engine runs stage `stage_id`.

    It is never a plain string so it cannot be mistaken for a resolved name;
    the runtime expression is only produced when the plan is serialized.
    """

    stage_id: str
    key: str = "asgName"

    @property
    def expression(self) -> str:
        return "${#stage('" + self.stage_id + "')['context']['" + self.key + "']}"


@dataclass(frozen=True)
class ServerGroupSource:
    """The server group being replaced by the rollout."""

    region: str | None
    server_group_name: str
    credentials: str | None
    cloud_provider: str | None

    def to_context(self) -> dict[str, Any]:
        return {
            "region": self.region,
            "serverGroupName": self.server_group_name,
            "credentials": self.credentials,
            "cloudProvider": self.cloud_provider,
        }


@dataclass(frozen=True)
class ActionRecord:
    """An already-executed (or planned) stage in the deploy stage's ancestry."""

    id: str
    type: str
    context: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StageSpec:
    """A synthetic stage handed to the execution engine.

    Attributes
    ----------
    id: str
        Deterministic id (``<parent>-<n>``) so later stages can reference it.
    type: str
        Stage type identifier understood by the execution engine.
    name: str
        Display name.
    context: Mapping[str, Any]
        Read-only stage context.
    parent_id: str
        Id of the deploy stage that owns this stage.
    owner: SyntheticStageOwner
        Whether the stage runs before or after its parent.
    """

    id: str
    type: str
    name: str
    context: Mapping[str, Any]
    parent_id: str
    owner: SyntheticStageOwner = SyntheticStageOwner.STAGE_AFTER

    def __post_init__(self):
        object.__setattr__(self, "context", freeze(self.context))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the execution engine's JSON shape."""
        return {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "parentStageId": self.parent_id,
            "syntheticStageOwner": self.owner.value,
            "context": to_jsonable(self.context),
        }


def freeze(value: Any) -> Any:
    """Read-only copy of a context value: mappings become proxies, lists tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze(v) for v in value)
    return value


Plan = list[StageSpec]


@runtime_checkable
class PipelineCapability(Protocol):
    """Runs another pipeline as a stage. Not every deployment has one wired."""

    @property
    def stage_type(self) -> str: ...


def to_jsonable(value: Any) -> Any:
    """Render plan values (enums, sources, deferred references) as plain JSON."""
    if isinstance(value, DeferredReference):
        return value.expression
    if isinstance(value, ServerGroupSource):
        return value.to_context()
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "model_dump"):
        return to_jsonable(value.model_dump(by_alias=True))
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return [to_jsonable(v) for v in value]
    return value
