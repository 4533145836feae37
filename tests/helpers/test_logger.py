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
import logging
import sys

from rich.logging import RichHandler

from rolling_redblack.helpers.logger import setup_logger


class _Tty(io.StringIO):
    def isatty(self):
        return True


def test_setup_logger_stderr_only_in_machine_mode(monkeypatch):
    monkeypatch.setattr(sys, "stdout", io.StringIO())
    logger = setup_logger(name="rolling_redblack.test_logger.machine", level=logging.INFO)

    assert logger.level == logging.INFO
    assert logger.propagate is False
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], RichHandler)


def test_setup_logger_splits_streams_on_tty(monkeypatch):
    monkeypatch.setattr(sys, "stdout", _Tty())
    logger = setup_logger(name="rolling_redblack.test_logger.tty", level="debug")

    assert logger.level == logging.DEBUG
    assert sorted(h.level for h in logger.handlers) == [logging.DEBUG, logging.WARNING]


def test_setup_logger_level_from_settings(monkeypatch):
    from rolling_redblack.config.settings import reload_settings_cache

    monkeypatch.setenv("ROLLING_REDBLACK_LOG_LEVEL", "warning")
    reload_settings_cache()

    logger = setup_logger(name="rolling_redblack.test_logger.settings")

    assert logger.level == logging.WARNING


def test_setup_logger_unknown_level_name_falls_back_to_info():
    logger = setup_logger(name="rolling_redblack.test_logger.unknown", level="LOUD")
    assert logger.level == logging.INFO


def test_setup_logger_idempotent():
    name = "rolling_redblack.test_logger.idempotent"
    logger_first = setup_logger(name=name, level=logging.INFO)
    handler_count = len(logger_first.handlers)
    logger_second = setup_logger(name=name, level=logging.DEBUG)
    assert logger_second is logger_first
    assert len(logger_second.handlers) == handler_count
    assert logger_second.level == logging.INFO
