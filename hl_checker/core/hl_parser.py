"""Regex-based extraction of highlight group declarations.

Recognises one declaration per line:

    hl('GroupName', { fg = c.fg, bg = c.bg_dark, bold = true })

Does NOT attempt to parse Lua. Lines that do not match are skipped, so any
surrounding code (functions, comments, loops) is ignored. Colour tokens are
resolved through a ColorTable; Normal fallback is applied later, at check time.
"""

import os
import re
from collections.abc import Iterable

from hl_checker.core.palette import NONE_TOKEN, ColorTable
from hl_checker.core.types import ExtractionResult, HighlightRecord

DEFAULT_CALL = 'hl'

_BOLD_RE = re.compile(r'bold\s*=\s*true')


def declaration_pattern(call: str = DEFAULT_CALL) -> re.Pattern[str]:
    """Compile the pattern for `call('Name', { ... })`. The attribute block may not nest."""
    return re.compile(re.escape(call) + r"""\(['"]([^'"]+)['"],\s*\{([^}]+)\}\)""")


def parse_attributes(opts: str) -> dict[str, str]:
    """Split a flat `key = value, key = value` block into a dict.

    Quotes and surrounding whitespace are stripped from values. Pieces
    without '=' are ignored; a repeated key keeps its first value.
    """
    attrs: dict[str, str] = {}
    for piece in opts.split(','):
        key, sep, value = piece.partition('=')
        if not sep:
            continue
        key = key.strip()
        if key and key not in attrs:
            attrs[key] = value.strip().replace("'", '').replace('"', '')
    return attrs


class HighlightExtractor:
    """Turns text sources into HighlightRecords using a shared ColorTable."""

    def __init__(self, colours: ColorTable, call: str = DEFAULT_CALL):
        self.colours = colours
        self.call = call
        self._pattern = declaration_pattern(call)

    def parse_line(self, line: str, source: str = '') -> HighlightRecord | None:
        """Parse a single line. Returns None if it is not a declaration."""
        m = self._pattern.search(line)
        if not m:
            return None
        name, opts = m.group(1), m.group(2)
        attrs = parse_attributes(opts)
        fg, fg_is_none = self._colour_slot(attrs.get('fg'))
        bg, bg_is_none = self._colour_slot(attrs.get('bg'))
        return HighlightRecord(
            name=name,
            fg=fg,
            bg=bg,
            bold=_BOLD_RE.search(opts) is not None,
            source=source,
            fg_is_none=fg_is_none,
            bg_is_none=bg_is_none,
        )

    def parse_string(self, text: str, source: str = '') -> list[HighlightRecord]:
        records = []
        for line in text.splitlines():
            record = self.parse_line(line, source)
            if record is not None:
                records.append(record)
        return records

    def parse_file(self, path: str, source: str | None = None) -> list[HighlightRecord]:
        """Parse a file from disk, labelling records with its base name by default."""
        label = source if source is not None else os.path.basename(path)
        records = []
        with open(path, encoding='utf-8', errors='replace') as f:
            for line in f:
                record = self.parse_line(line, label)
                if record is not None:
                    records.append(record)
        return records

    def extract(self, paths: Iterable[str]) -> ExtractionResult:
        """Parse every source in order. Unreadable sources are skipped and reported."""
        result = ExtractionResult()
        for path in paths:
            try:
                result.records.extend(self.parse_file(path))
            except OSError:
                result.skipped.append(path)
        return result

    def _colour_slot(self, raw: str | None) -> tuple[str | None, bool]:
        if raw is None:
            return None, False
        if raw == NONE_TOKEN:
            return None, True
        return self.colours.resolve(raw), False
