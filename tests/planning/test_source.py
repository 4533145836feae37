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

import pytest

from rolling_redblack.config.request import DeploymentRequest
from rolling_redblack.exceptions import PlanningError
from rolling_redblack.planning.source import find_ancestor, lookup_source_server_group
from rolling_redblack.platform.protocols import ActionRecord, ServerGroupSource

ANCESTORS = ("createServerGroup", "cloneServerGroup")


@pytest.fixture
def request_(deploy_context) -> DeploymentRequest:
    return DeploymentRequest.from_context(deploy_context)


def test_source_from_nearest_create_stage(request_, ancestry_with_source):
    source = lookup_source_server_group("deploy", ancestry_with_source, request_, ANCESTORS)

    assert source == ServerGroupSource(
        region="us-east-1",
        server_group_name="myapp-prod-v041",
        credentials="prod",
        cloud_provider="aws",
    )


def test_nearest_ancestor_wins(request_):
    ancestry = [
        ActionRecord(
            id="clone-2",
            type="cloneServerGroup",
            context={"source": {"region": "us-west-2", "asgName": "myapp-prod-v007"}},
        ),
        ActionRecord(
            id="create-1",
            type="createServerGroup",
            context={"source": {"region": "us-east-1", "serverGroupName": "myapp-prod-v003"}},
        ),
    ]

    source = lookup_source_server_group("deploy", ancestry, request_, ANCESTORS)

    assert source is not None
    assert source.server_group_name == "myapp-prod-v007"
    assert source.region == "us-west-2"


def test_no_ancestor_means_no_source(request_):
    ancestry = [ActionRecord(id="wait-1", type="wait")]
    assert lookup_source_server_group("deploy", ancestry, request_, ANCESTORS) is None
    assert lookup_source_server_group("deploy", [], request_, ANCESTORS) is None


def test_ancestor_without_source_name_means_no_source(request_, ancestry_without_source):
    assert (
        lookup_source_server_group("deploy", ancestry_without_source, request_, ANCESTORS)
        is None
    )
    ancestry = [
        ActionRecord(id="create-1", type="createServerGroup", context={"source": {"region": "x"}})
    ]
    assert lookup_source_server_group("deploy", ancestry, request_, ANCESTORS) is None


@pytest.mark.parametrize("ancestry", [None, "createServerGroup", {"id": "x"}])
def test_unusable_ancestry_is_a_planning_error(request_, ancestry):
    with pytest.raises(PlanningError, match="ancestry is not a sequence"):
        lookup_source_server_group("deploy", ancestry, request_, ANCESTORS)


def test_malformed_record_is_a_planning_error(request_):
    with pytest.raises(PlanningError, match="malformed ancestry") as exc_info:
        lookup_source_server_group("deploy", [object()], request_, ANCESTORS)
    assert isinstance(exc_info.value.__cause__, AttributeError)
    assert exc_info.value.stage_id == "deploy"


def test_malformed_source_is_a_planning_error(request_):
    ancestry = [ActionRecord(id="create-1", type="createServerGroup", context={"source": "v041"})]
    with pytest.raises(PlanningError, match="malformed source"):
        lookup_source_server_group("deploy", ancestry, request_, ANCESTORS)


def test_find_ancestor_respects_custom_types():
    ancestry = [
        ActionRecord(id="a", type="createServerGroup"),
        ActionRecord(id="b", type="deployManifest"),
    ]
    found = find_ancestor(ancestry, ["deployManifest"])
    assert found is not None and found.id == "b"
