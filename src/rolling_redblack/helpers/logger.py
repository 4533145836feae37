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

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        from rolling_redblack.config.settings import get_settings

        level = get_settings().log_level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        # getLevelName returns "Level FOO" for unknown names
        return resolved if isinstance(resolved, int) else logging.INFO
    return level


def _rich_handler(level: int, console: Console, tracebacks: bool) -> RichHandler:
    return RichHandler(
        level=level,
        console=console,
        rich_tracebacks=tracebacks,
        markup=False,
        show_time=True,
        show_level=True,
        show_path=False,
    )


def setup_logger(
    name: str = "rolling_redblack",
    level: int | str | None = None,
    console: Console | None = None,
    to_stderr: bool = False,
) -> logging.Logger:
    """Return a Rich-backed logger, configuring it on first use.

    Planning output is often piped as JSON, so when stdout is not a tty every
    record goes to stderr. Otherwise INFO and below go to stdout and warnings
    go to stderr. Calling it again for the same name returns the configured
    logger untouched.
    """
    machine_mode = not sys.stdout.isatty()
    to_stderr = to_stderr or machine_mode

    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(_resolve_level(level))
    logger.propagate = False

    stderr_console = Console(stderr=True)
    if to_stderr:
        logger.addHandler(_rich_handler(logging.NOTSET, stderr_console, tracebacks=True))
        return logger

    stdout_handler = _rich_handler(logging.DEBUG, console or Console(), tracebacks=False)
    stdout_handler.addFilter(lambda record: record.levelno <= logging.INFO)
    logger.addHandler(stdout_handler)
    logger.addHandler(_rich_handler(logging.WARNING, stderr_console, tracebacks=True))

    return logger
