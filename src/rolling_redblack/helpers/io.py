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
import json
from typing import IO, Any

import yaml

from rolling_redblack.planning.strategy import StageRecord
from rolling_redblack.platform.protocols import ActionRecord, Plan


def load_document(stream: IO[str]) -> dict[str, Any]:
    """
    Read a YAML (or JSON, which is valid YAML) document from `stream`
    """
    data = yaml.safe_load(stream) or {}
    if not isinstance(data, dict):
        raise ValueError("Expected a mapping at the top level of the document")
    return data


def stage_record_from_document(data: Mapping[str, Any]) -> StageRecord:
    """Build the deploy stage to plan from ``{stage: {id, context, ancestry}}``.

    Ancestry entries are ``{id, type, context}`` mappings, nearest first.
    """
    stage = data.get("stage", data)
    if not isinstance(stage, Mapping):
        raise ValueError("`stage` must be a mapping")
    ancestry = [
        ActionRecord(
            id=str(a.get("id", "")),
            type=a.get("type", ""),
            context=a.get("context") or {},
        )
        for a in stage.get("ancestry") or []
    ]
    return StageRecord(
        id=str(stage.get("id", "deploy")),
        context=stage.get("context") or {},
        ancestry=ancestry,
    )


def dump_plan(plan: Plan) -> str:
    return json.dumps([s.to_dict() for s in plan], indent=2)
