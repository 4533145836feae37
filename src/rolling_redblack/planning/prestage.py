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
import copy
from typing import Any

from rolling_redblack.helpers.logger import setup_logger

logger = setup_logger(__name__)

ZERO_CAPACITY = {"min": 0, "max": 0, "desired": 0}


def compose_before_stages(context: Mapping[str, Any]) -> dict[str, Any]:
    """Provision the new server group empty and keep the requested size aside.

    Returns an updated copy of the deploy stage context; the caller merges it
    back. The requested (or fallback) capacity moves to ``savedCapacity`` and
    ``capacity`` becomes zero, so the forward plan can grow the group step by
    step. Copying the capacity from the current source is switched off.
    Applying it to its own output changes nothing.
    """
    payload = copy.deepcopy(dict(context))

    if payload.get("useSourceCapacity"):
        payload["useSourceCapacity"] = False

    if payload.get("targetSize"):
        payload["targetSize"] = 0

    # a saved None means no capacity was requested; capacity is already zeroed then
    if "savedCapacity" not in payload:
        payload["savedCapacity"] = copy.deepcopy(payload.get("capacity"))
    saved = payload["savedCapacity"]
    payload["capacity"] = dict(ZERO_CAPACITY)

    logger.debug(f"Provisioning at zero capacity, saved capacity: {saved}")
    return payload
