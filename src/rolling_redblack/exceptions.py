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

"""Custom exceptions."""


class RollingRedBlackError(Exception):
    """Base class for all custom exceptions.

    Useful to catch all of them.
    """


class ConfigurationError(RollingRedBlackError):
    """A capability required by the request is not wired in this deployment."""


class PlanningError(RollingRedBlackError):
    """The deploy stage ancestry could not be inspected while planning."""

    def __init__(self, stage_id: str, reason: str):
        """Raise the PlanningError.

        Args:
            stage_id (str): Id of the stage being planned.
            reason (str): What went wrong while walking its ancestry.
        """
        self.stage_id = stage_id
        msg = f"Failed to determine source server group for stage '{stage_id}': {reason}"
        super().__init__(msg)
