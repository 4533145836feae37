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

import io
import json

import pytest

from rolling_redblack.helpers.io import dump_plan, load_document, stage_record_from_document
from rolling_redblack.platform.protocols import ActionRecord, StageSpec


def test_load_document_accepts_json_and_yaml():
    assert load_document(io.StringIO('{"stage": {"id": "a"}}')) == {"stage": {"id": "a"}}
    assert load_document(io.StringIO("stage:\n  id: a\n")) == {"stage": {"id": "a"}}
    assert load_document(io.StringIO("")) == {}


def test_load_document_rejects_lists():
    with pytest.raises(ValueError, match="mapping"):
        load_document(io.StringIO("- a\n"))


def test_stage_record_from_document():
    record = stage_record_from_document(
        {
            "stage": {
                "id": 42,
                "context": {"region": "us-east-1"},
                "ancestry": [{"id": "c", "type": "createServerGroup", "context": None}],
            }
        }
    )
    assert record.id == "42"
    assert record.context == {"region": "us-east-1"}
    assert record.ancestry == [ActionRecord(id="c", type="createServerGroup", context={})]


def test_stage_record_defaults():
    record = stage_record_from_document({"context": {"zone": "a"}})
    assert record.id == "deploy"
    assert record.ancestry == []


def test_dump_plan():
    stage = StageSpec(id="d-1", type="wait", name="wait", context={"waitTime": 5}, parent_id="d")
    assert json.loads(dump_plan([stage])) == [
        {
            "id": "d-1",
            "type": "wait",
            "name": "wait",
            "parentStageId": "d",
            "syntheticStageOwner": "STAGE_AFTER",
            "context": {"waitTime": 5},
        }
    ]
