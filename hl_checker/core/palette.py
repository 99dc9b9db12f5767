"""Colour table loading and colour-reference resolution.

The colour source is a theme file containing a table such as:

    _cache.colors = {
      bg_dark = '#1a1a1b',
      fg = '#cbd5e1',
    }

Only the first balanced-brace block opened by one of TABLE_MARKERS is scanned,
so nested tables or colour literals elsewhere in the file are never picked up.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from types import MappingProxyType

from PIL import ImageColor

from hl_checker.core.types import ColorSourceError

# Tried in order; the first marker found wins
TABLE_MARKERS = ('_cache.colors = {', 'colors = {')

NONE_TOKEN = 'none'

_BINDING_RE = re.compile(r"""(\w+)\s*=\s*['"](#[0-9a-fA-F]{6})['"]""")
_HEX_RE = re.compile(r'^#[0-9a-fA-F]{6}$')
_REFERENCE_RE = re.compile(r'^[A-Za-z_]\w*\.(\w+)$')


def is_hex(value: str | None) -> bool:
    """True for a '#rrggbb' literal (either case)."""
    return bool(value) and _HEX_RE.match(value) is not None


def hex_to_rgb(hex_colour: str) -> tuple[int, int, int]:
    """Convert '#rrggbb' to an (r, g, b) tuple. Raises ValueError for anything else."""
    if not is_hex(hex_colour):
        raise ValueError(f'not a #rrggbb colour: {hex_colour!r}')
    r, g, b = ImageColor.getrgb(hex_colour)[:3]
    return (r, g, b)


def split_reference(token: str) -> str | None:
    """Return NAME for a 'namespace.NAME' reference such as 'c.bg_dark', else None."""
    m = _REFERENCE_RE.match(token)
    return m.group(1) if m else None


class ColorTable(Mapping[str, str]):
    """Read-only mapping of colour name to lower-case '#rrggbb'.

    Built once at startup and handed to every component that resolves colours.
    """

    def __init__(self, colours: Mapping[str, str] | None = None):
        self._colours = MappingProxyType({name: hex_val.lower() for name, hex_val in (colours or {}).items()})

    @classmethod
    def from_text(cls, text: str) -> ColorTable:
        block = _extract_table_block(text)
        colours: dict[str, str] = {}
        if block:
            for name, hex_val in _BINDING_RE.findall(block):
                # later duplicates overwrite earlier ones
                colours[name] = hex_val
        return cls(colours)

    def __getitem__(self, name: str) -> str:
        return self._colours[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._colours)

    def __len__(self) -> int:
        return len(self._colours)

    def __repr__(self) -> str:
        return f'ColorTable({dict(self._colours)!r})'

    def resolve(self, token: str | None) -> str | None:
        """Resolve a raw colour token to lower-case hex, or None if unresolvable.

        '#...' literals are trusted and returned lower-cased without lookup.
        'c.name' style references and bare names are looked up in the table.
        Never raises: unknown names simply come back as None.
        """
        if not token:
            return None
        if token.startswith('#'):
            return token.lower()
        name = split_reference(token)
        if name is not None:
            return self.get(name)
        return self.get(token)


def load_color_file(path: str) -> ColorTable:
    """Load the colour table from disk. An unreadable file is fatal."""
    try:
        with open(path, encoding='utf-8', errors='replace') as f:
            text = f.read()
    except OSError as exc:
        raise ColorSourceError(f'could not read colour definitions from {path}: {exc}') from exc
    return ColorTable.from_text(text)


def _extract_table_block(text: str) -> str | None:
    """Return the first balanced '{...}' block opened by a table marker.

    Walks forward counting braces from the marker, so a nested table inside
    the colour table does not end the block early. An unterminated block
    yields nothing.
    """
    start = -1
    for marker in TABLE_MARKERS:
        start = text.find(marker)
        if start != -1:
            break
    if start == -1:
        return None

    depth = 0
    for i in range(start, len(text)):
        if text[i] == '{':
            depth += 1
        elif text[i] == '}':
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None
