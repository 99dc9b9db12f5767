"""Shared types for hl-check: HighlightRecord, NormalColors, ContrastResult, Report."""

from __future__ import annotations

from dataclasses import dataclass, field

# WCAG 2.x minimum contrast ratios
WCAG_AA_NORMAL = 4.5  # normal text (below 18pt, or 14pt bold)
WCAG_AA_LARGE = 3.0  # large text (18pt+, or 14pt+ bold)
WCAG_AAA_NORMAL = 7.0
WCAG_AAA_LARGE = 4.5

NORMAL_GROUP = 'Normal'


class HlCheckError(RuntimeError):
    """Base error for hl-check."""


class ColorSourceError(HlCheckError):
    """The colour-definition source could not be opened or read."""


@dataclass(frozen=True)
class HighlightRecord:
    """One highlight group declaration, colours already resolved to hex (or None)."""

    name: str
    fg: str | None = None
    bg: str | None = None
    bold: bool = False
    source: str = ''  # origin file label, e.g. 'init.lua'
    fg_is_none: bool = False  # fg was explicitly the "none" sentinel
    bg_is_none: bool = False

    def fg_from_normal(self) -> bool:
        """True when the fg slot is filled from Normal at check time."""
        return self.fg_is_none or (self.fg is None and self.name != NORMAL_GROUP)

    def bg_from_normal(self) -> bool:
        return self.bg_is_none or (self.bg is None and self.name != NORMAL_GROUP)


@dataclass(frozen=True)
class NormalColors:
    """Reference colours substituted for empty fg/bg slots."""

    fg: str | None = None
    bg: str | None = None


@dataclass(frozen=True)
class ContrastResult:
    """A measured record. Pass flags are derived from the ratio."""

    record: HighlightRecord
    ratio: float
    resolved_fg: str
    resolved_bg: str

    @property
    def pass_aa_normal(self) -> bool:
        return self.ratio >= WCAG_AA_NORMAL

    @property
    def pass_aa_large(self) -> bool:
        return self.ratio >= WCAG_AA_LARGE

    @property
    def pass_aaa_normal(self) -> bool:
        return self.ratio >= WCAG_AAA_NORMAL

    @property
    def pass_aaa_large(self) -> bool:
        return self.ratio >= WCAG_AAA_LARGE


@dataclass
class ExtractionResult:
    """Records pulled from every readable source, plus the sources that could not be read."""

    records: list[HighlightRecord] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


@dataclass
class Report:
    """Aggregated results, ready for text/JSON output."""

    results: list[ContrastResult] = field(default_factory=list)  # ascending by ratio
    unchecked: list[HighlightRecord] = field(default_factory=list)
    aa_normal_failures: list[ContrastResult] = field(default_factory=list)
    aa_large_failures: list[ContrastResult] = field(default_factory=list)
    aaa_normal_failures: list[ContrastResult] = field(default_factory=list)
    aaa_large_failures: list[ContrastResult] = field(default_factory=list)
    by_file: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.results) + len(self.unchecked)

    @property
    def empty(self) -> bool:
        return not self.results and not self.unchecked

    @property
    def failure_count(self) -> int:
        return (
            len(self.aa_normal_failures)
            + len(self.aa_large_failures)
            + len(self.aaa_normal_failures)
            + len(self.aaa_large_failures)
        )
