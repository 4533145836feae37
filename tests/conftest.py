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

from rolling_redblack.config.registry import PipelineStage, StageTypeRegistry
from rolling_redblack.platform.protocols import ActionRecord


@pytest.fixture(autouse=True)
def clear_caches_between_tests(monkeypatch, tmp_path):
    from rolling_redblack.config.defaults import reload_defaults_cache
    from rolling_redblack.config.settings import reload_settings_cache

    # keep a developer's ~/.rolling_redblack out of the tests
    monkeypatch.setenv("ROLLING_REDBLACK_HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    reload_settings_cache()
    reload_defaults_cache()
    yield
    reload_settings_cache()
    reload_defaults_cache()


@pytest.fixture
def registry() -> StageTypeRegistry:
    return StageTypeRegistry()


@pytest.fixture
def pipeline() -> PipelineStage:
    return PipelineStage()


@pytest.fixture
def deploy_context() -> dict:
    return {
        "region": "us-east-1",
        "cluster": "myapp-prod",
        "moniker": {"app": "myapp", "cluster": "myapp-prod", "stack": "prod"},
        "account": "prod",
        "cloudProvider": "aws",
        "targetPercentages": [50],
        "scaleDown": False,
        "savedCapacity": {"min": 1, "max": 3, "desired": 2},
        "targetHealthyDeployPercentage": 95,
    }


@pytest.fixture
def ancestry_with_source() -> list[ActionRecord]:
    return [
        ActionRecord(id="wait-1", type="wait", context={"waitTime": 5}),
        ActionRecord(
            id="create-1",
            type="createServerGroup",
            context={"source": {"region": "us-east-1", "serverGroupName": "myapp-prod-v041"}},
        ),
    ]


@pytest.fixture
def ancestry_without_source() -> list[ActionRecord]:
    return [ActionRecord(id="create-1", type="createServerGroup", context={})]
