"""Settings resolution for hl-check.

Each setting is taken from the first place that defines it:
  1. Command-line flag.
  2. OS environment variable (HL_CHECK_*).
  3. .env file at --env-file, or the nearest .env walking up from cwd,
     stopping at the repo root (.git dir or file).
  4. Built-in default.

Unlike a plain dotenv loader, os.environ is never modified.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from hl_checker.core.hl_parser import DEFAULT_CALL

ENV_PREFIX = 'HL_CHECK_'
DEFAULT_THEME = 'mapledark'
COLOR_FILE = 'init.lua'
HIGHLIGHT_FILES = ('init.lua', 'plugins.lua')


@dataclass
class Settings:
    root: str = '.'
    theme: str = DEFAULT_THEME
    colors_path: str = ''
    sources: list[str] = field(default_factory=list)
    call: str = DEFAULT_CALL
    use_default_normal: bool = True
    env_path: Path | None = None  # .env actually consulted, if any

    @property
    def theme_dir(self) -> str:
        return os.path.join(self.root, 'lua', self.theme)


def find_dotenv(start: Path) -> Path | None:
    """Nearest .env at or above start, without crossing a .git boundary."""
    current = start.resolve()
    while True:
        candidate = current / '.env'
        if candidate.is_file():
            return candidate
        if (current / '.git').exists():
            return None
        if current.parent == current:
            return None
        current = current.parent


def read_dotenv(path: Path) -> dict[str, str]:
    """Parse KEY=value lines; quotes around values are dropped, '#' lines skipped."""
    values: dict[str, str] = {}
    for raw in path.read_text(encoding='utf-8').splitlines():
        line = raw.strip()
        if line.startswith('export '):
            line = line[len('export ') :].lstrip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, _, value = line.partition('=')
        key = key.strip()
        if key:
            values[key] = value.strip().strip('"').strip("'")
    return values


def _layered_env(environ: Mapping[str, str], env_file: str | None) -> tuple[dict[str, str], Path | None]:
    if env_file:
        path: Path | None = Path(env_file)
        if not path.is_file():
            path = None
    else:
        path = find_dotenv(Path.cwd())

    merged = read_dotenv(path) if path else {}
    merged.update({k: v for k, v in environ.items() if k.startswith(ENV_PREFIX)})
    return merged, path


def load_settings(
    *,
    root: str | None = None,
    theme: str | None = None,
    colors: str | None = None,
    sources: list[str] | None = None,
    call: str | None = None,
    use_default_normal: bool = True,
    env_file: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Resolve settings from flags, environment, .env and defaults."""
    env, env_path = _layered_env(os.environ if environ is None else environ, env_file)

    settings = Settings(
        root=root or env.get(ENV_PREFIX + 'ROOT') or '.',
        theme=theme or env.get(ENV_PREFIX + 'THEME') or DEFAULT_THEME,
        call=call or env.get(ENV_PREFIX + 'CALL') or DEFAULT_CALL,
        use_default_normal=use_default_normal,
        env_path=env_path,
    )
    settings.colors_path = colors or env.get(ENV_PREFIX + 'COLORS') or os.path.join(settings.theme_dir, COLOR_FILE)

    if sources:
        settings.sources = list(sources)
    elif env.get(ENV_PREFIX + 'SOURCES'):
        settings.sources = [p for p in env[ENV_PREFIX + 'SOURCES'].split(os.pathsep) if p]
    else:
        settings.sources = [os.path.join(settings.theme_dir, name) for name in HIGHLIGHT_FILES]
    return settings
