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

import json

from rich.table import Table

from rolling_redblack.platform.protocols import Plan, to_jsonable

# keys that are the same on every stage and only add noise in the table
_BASE_KEYS = {"cluster", "moniker", "credentials", "cloudProvider", "useNameAsLabel"}


def _summary(context) -> str:
    items = to_jsonable({k: v for k, v in context.items() if k not in _BASE_KEYS})
    return ", ".join(f"{k}={json.dumps(v)}" for k, v in items.items() if v is not None)


def plan_table(plan: Plan, title: str = "Rollout plan") -> Table:
    """Render a plan as a numbered table, one stage per row."""
    t = Table(title=title, show_lines=False, header_style="bold")
    t.add_column("#", justify="right", style="dim", no_wrap=True)
    t.add_column("Stage", style="bold", no_wrap=True)
    t.add_column("Type", style="cyan", no_wrap=True)
    t.add_column("Context", overflow="fold")
    for i, stage in enumerate(plan, start=1):
        t.add_row(str(i), stage.name, stage.type, _summary(stage.context))
    return t
