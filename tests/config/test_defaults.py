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

from pathlib import Path
from types import SimpleNamespace

import pytest
import yaml

import rolling_redblack.config.defaults as mod


def _write_yaml(p: Path, data) -> None:
    p.write_text(yaml.safe_dump(data, sort_keys=False))


def test_find_defaults_file_prefers_settings_defaults_file(mocker, tmp_path: Path):
    defaults = tmp_path / "defaults.yaml"
    _write_yaml(defaults, {"a": 1})

    mocker.patch.object(
        mod, "get_settings", return_value=SimpleNamespace(defaults_file=str(defaults))
    )
    mocker.patch.object(mod, "_DEFAULT_FILES", [])

    assert mod._find_defaults_file() == defaults


def test_find_defaults_file_walks_search_order(mocker, tmp_path: Path):
    second = tmp_path / "second.yaml"
    _write_yaml(second, {"b": 2})

    mocker.patch.object(mod, "get_settings", return_value=SimpleNamespace(defaults_file=None))
    mocker.patch.object(
        mod, "_DEFAULT_FILES", [lambda: None, lambda: tmp_path / "missing.yaml", lambda: second]
    )

    assert mod._find_defaults_file() == second


def test_get_section_reads_nested_mapping(mocker, tmp_path: Path):
    defaults = tmp_path / "defaults.yaml"
    _write_yaml(defaults, {"stage_types": {"wait": "waitV2"}, "scalar": 3})
    mocker.patch.object(mod, "_find_defaults_file", return_value=defaults)

    assert mod.get_section("stage_types") == {"wait": "waitV2"}
    assert mod.get_section("scalar") == {}
    assert mod.get_section("missing.key") == {}


@pytest.mark.parametrize("content", ["", "- a\n- b\n"])
def test_non_mapping_defaults_are_ignored(mocker, tmp_path: Path, content):
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text(content)
    mocker.patch.object(mod, "_find_defaults_file", return_value=defaults)

    assert mod._load_defaults() == {}
