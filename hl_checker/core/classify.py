"""Normal fallback substitution and WCAG classification.

Extraction leaves empty colour slots as None. Here every record gets the
Normal group's colours substituted for its empty slots, then is either
measured (ContrastResult) or set aside as unchecked:

  - a slot is still empty after substitution (no reference colour available)
  - a colour is not a measurable '#rrggbb' literal
  - fg equals bg: an intentionally invisible group such as EndOfBuffer
"""

from collections.abc import Iterable, Mapping

from hl_checker.core.contrast import contrast
from hl_checker.core.palette import is_hex
from hl_checker.core.types import NORMAL_GROUP, ContrastResult, HighlightRecord, NormalColors

DEFAULT_NORMAL_FG = '#cbd5e1'
DEFAULT_NORMAL_BG = '#1e1e1f'

# Colour-table entries consulted when Normal leaves a slot empty
_FG_TABLE_KEYS = ('fg',)
_BG_TABLE_KEYS = ('bg_dark', 'bg')


def find_normal_colors(
    records: Iterable[HighlightRecord],
    colours: Mapping[str, str],
    use_defaults: bool = True,
) -> NormalColors:
    """Work out the reference colours used for empty fg/bg slots.

    The last Normal declaration wins. Missing Normal slots fall back to the
    colour table ('fg'; 'bg_dark' then 'bg'), then to the baked defaults
    unless use_defaults is False.
    """
    normal = None
    for record in records:
        if record.name == NORMAL_GROUP:
            normal = record

    fg = normal.fg if normal is not None else None
    bg = normal.bg if normal is not None else None
    fg = fg or _first_entry(colours, _FG_TABLE_KEYS)
    bg = bg or _first_entry(colours, _BG_TABLE_KEYS)
    if use_defaults:
        fg = fg or DEFAULT_NORMAL_FG
        bg = bg or DEFAULT_NORMAL_BG
    return NormalColors(fg=fg, bg=bg)


def check_record(record: HighlightRecord, normal: NormalColors) -> ContrastResult | None:
    """Measure one record against its (fallback-substituted) colours. None means unchecked."""
    fg = normal.fg if record.fg_is_none or record.fg is None else record.fg
    bg = normal.bg if record.bg_is_none or record.bg is None else record.bg

    if not fg or not bg:
        return None
    if fg == bg:
        return None
    if not is_hex(fg) or not is_hex(bg):
        return None

    return ContrastResult(record=record, ratio=contrast(fg, bg), resolved_fg=fg, resolved_bg=bg)


def check_all(
    records: Iterable[HighlightRecord], normal: NormalColors
) -> tuple[list[ContrastResult], list[HighlightRecord]]:
    """Split records into measured results and unchecked records, preserving order."""
    results: list[ContrastResult] = []
    unchecked: list[HighlightRecord] = []
    for record in records:
        result = check_record(record, normal)
        if result is None:
            unchecked.append(record)
        else:
            results.append(result)
    return results, unchecked


def _first_entry(colours: Mapping[str, str], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = colours.get(key)
        if value:
            return value
    return None
