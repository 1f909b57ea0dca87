"""Environment-driven settings.

Decisions:
- Priority: real environment variable > project .env file > default.
- Running from a source checkout (pyproject.toml next to src/), the .env file
  and data/ live at the project root. An installed package uses the per-user
  app directory from click.get_app_dir instead.
- Only keys starting with SUPERCHARGED_ are read from the .env file.
- Unparseable .env lines are ignored.
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import click

APP_NAME = 'supercharged'
ENV_PREFIX = 'SUPERCHARGED_'


def resolve_home(package_dir: Path) -> Path:
    """Project root for a source checkout, else the user app directory."""
    root = package_dir.parent.parent
    if (root / 'pyproject.toml').exists() and (root / 'src').is_dir():
        return root
    return Path(click.get_app_dir(APP_NAME))


APP_HOME = resolve_home(Path(__file__).resolve().parent)
DEFAULT_DATA_FILE = APP_HOME / 'data' / 'tasks.json'


def read_env_file(path: Path) -> Dict[str, str]:
    """Parse KEY=VALUE lines from a .env file (prefixed keys only)."""
    values: Dict[str, str] = {}
    if not path.exists():
        return values
    try:
        lines = path.read_text().splitlines()
    except OSError:
        return values
    for line in lines:
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        k, v = line.split('=', 1)
        k = k.strip()
        v = v.strip().strip('"').strip("'")
        if k.startswith(ENV_PREFIX):
            values[k] = v
    return values


_ENV_FILE_VALUES = read_env_file(APP_HOME / '.env')


def env_value(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.environ.get(key)
    if value:
        return value
    return _ENV_FILE_VALUES.get(key, default)


def truthy(value: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


@dataclass
class Settings:
    data_file: Path
    alt_screen: bool = True
    show_completed: bool = True


def load_settings(data_file: Optional[Path] = None) -> Settings:
    """Resolve settings; an explicit data_file (e.g. from --data-file) wins."""
    raw_path = env_value(ENV_PREFIX + 'DATA_FILE')
    path = data_file or (Path(raw_path).expanduser() if raw_path else DEFAULT_DATA_FILE)
    return Settings(
        data_file=path,
        alt_screen=truthy(env_value(ENV_PREFIX + 'ALT_SCREEN'), True),
        show_completed=truthy(env_value(ENV_PREFIX + 'SHOW_COMPLETED'), True),
    )
