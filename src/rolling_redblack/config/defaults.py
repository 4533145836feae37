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

from functools import lru_cache
import os
from pathlib import Path
from typing import Any

import yaml

from rolling_redblack.config.settings import get_settings
from rolling_redblack.helpers.logger import setup_logger

logger = setup_logger(__name__)

# Search order (first hit wins)
_DEFAULT_FILES = (
    lambda: Path(os.environ["ROLLING_REDBLACK_DEFAULTS"])
    if os.getenv("ROLLING_REDBLACK_DEFAULTS")
    else None,
    lambda: Path.cwd() / "defaults.yaml",
    lambda: Path.cwd() / ".rolling_redblack" / "defaults.yaml",
    lambda: Path.home() / ".rolling_redblack" / "defaults.yaml",
)


def _find_defaults_file() -> Path | None:
    s = get_settings()
    if s.defaults_file and Path(s.defaults_file).is_file():
        return Path(s.defaults_file)

    for f in _DEFAULT_FILES:
        p = f()
        if p and p.is_file():
            logger.debug(f"Using defaults file: {p}")
            return p
    return None


@lru_cache(maxsize=1)
def _load_defaults() -> dict[str, Any]:
    p = _find_defaults_file()
    if not p:
        return {}
    data = yaml.safe_load(p.read_text()) or {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring defaults file {p}: top level is not a mapping")
        return {}
    return data


def _get_by_dots(d: dict[str, Any], key: str) -> Any:
    cur: Any = d
    for part in key.split("."):
        if isinstance(cur, dict) and part in cur:
            cur = cur[part]
        else:
            return None
    return cur


def get_section(key: str) -> dict[str, Any]:
    """Return a mapping section of defaults.yaml, or an empty dict."""
    v = _get_by_dots(_load_defaults(), key)
    return dict(v) if isinstance(v, dict) else {}


def reload_defaults_cache() -> None:
    """If you change defaults.yaml at runtime/tests, clear cache."""
    _load_defaults.cache_clear()
