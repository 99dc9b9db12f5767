"""Report builder. Aggregation plus text and JSON output for hl-check results."""

import json
from collections.abc import Callable
from typing import Any

from hl_checker.core.types import (
    WCAG_AA_LARGE,
    WCAG_AA_NORMAL,
    WCAG_AAA_LARGE,
    WCAG_AAA_NORMAL,
    ContrastResult,
    HighlightRecord,
    Report,
)

RULE = '=' * 80
THIN_RULE = '-' * 80

ICON_PASS = '✅'
ICON_LARGE_ONLY = '⚠️'
ICON_FAIL = '❌'


def build_report(results: list[ContrastResult], unchecked: list[HighlightRecord]) -> Report:
    """Sort results lowest ratio first, bucket failures per threshold, count per file."""
    ordered = sorted(results, key=lambda r: r.ratio)
    report = Report(results=ordered, unchecked=list(unchecked))
    for result in ordered:
        if not result.pass_aa_normal:
            report.aa_normal_failures.append(result)
        if not result.pass_aa_large:
            report.aa_large_failures.append(result)
        if not result.pass_aaa_normal:
            report.aaa_normal_failures.append(result)
        if not result.pass_aaa_large:
            report.aaa_large_failures.append(result)
        source = result.record.source
        report.by_file[source] = report.by_file.get(source, 0) + 1
    return report


def exit_code(report: Report) -> int:
    """1 if any result fails WCAG AA for normal text, else 0. AAA and unchecked never count."""
    return 1 if report.aa_normal_failures else 0


def _icon(passes_normal: bool, passes_large: bool) -> str:
    if passes_normal:
        return ICON_PASS
    return ICON_LARGE_ONLY if passes_large else ICON_FAIL


def _colour_pair(result: ContrastResult, marker: str) -> tuple[str, str]:
    h = result.record
    fg = result.resolved_fg
    bg = result.resolved_bg
    if h.fg_from_normal():
        fg += f' {marker}'
    if h.bg_from_normal():
        bg += f' {marker}'
    return fg, bg


def _failure_section(
    lines: list[str],
    title: str,
    failures: list[ContrastResult],
    passes_large: Callable[[ContrastResult], bool] | None,
) -> None:
    """Append one per-threshold failure listing.

    passes_large checks the matching large-text threshold; results that pass
    it are shown as a conditional pass.
    """
    if not failures:
        return
    lines.append(RULE)
    lines.append(title)
    lines.append(RULE)
    for result in failures:
        h = result.record
        fg, bg = _colour_pair(result, '(from Normal)')
        if passes_large is not None and passes_large(result):
            status = 'PASS (Large text)'
        else:
            status = 'FAIL'
        lines.append('')
        lines.append(f'  {h.name}')
        lines.append(f'    File: {h.source}')
        lines.append(f'    Colors: fg={fg} bg={bg}')
        lines.append(f'    Contrast Ratio: {result.ratio:.2f}:1')
        lines.append(f'    Bold: {str(h.bold).lower()}')
        lines.append(f'    Status: {status}')
    lines.append('')


def format_text(report: Report) -> str:
    """Format report as human-readable text."""
    if report.empty:
        return 'No highlight groups found.'

    checked = len(report.results)
    lines = [RULE, 'WCAG COLOR CONTRAST COMPLIANCE REPORT', RULE, '']
    lines.append(f'Total highlight groups found: {report.total}')
    lines.append(f'Highlight groups checked: {checked}')
    if report.unchecked:
        lines.append(f'Highlight groups unchecked (no colors): {len(report.unchecked)}')
    lines.append('')

    lines.append('SUMMARY:')
    lines.append(
        f'  WCAG AA (Normal text, ≥{WCAG_AA_NORMAL}:1): {checked - len(report.aa_normal_failures)}/{checked} pass'
    )
    lines.append(
        f'  WCAG AA (Large text, ≥{WCAG_AA_LARGE}:1):  {checked - len(report.aa_large_failures)}/{checked} pass'
    )
    lines.append(
        f'  WCAG AAA (Normal text, ≥{WCAG_AAA_NORMAL}:1): '
        f'{checked - len(report.aaa_normal_failures)}/{checked} pass'
    )
    lines.append(
        f'  WCAG AAA (Large text, ≥{WCAG_AAA_LARGE}:1): {checked - len(report.aaa_large_failures)}/{checked} pass'
    )
    lines.append('')

    lines.append('HIGHLIGHTS BY FILE:')
    for source, count in report.by_file.items():
        lines.append(f'  {source}: {count} highlight groups')
    lines.append('')

    if report.failure_count:
        lines.append(RULE)
        lines.append('FAILURES SUMMARY')
        lines.append(RULE)
        lines.append(f'  WCAG AA Normal failures: {len(report.aa_normal_failures)}')
        lines.append(f'  WCAG AA Large failures: {len(report.aa_large_failures)}')
        lines.append(f'  WCAG AAA Normal failures: {len(report.aaa_normal_failures)}')
        lines.append(f'  WCAG AAA Large failures: {len(report.aaa_large_failures)}')
        lines.append('')

    _failure_section(
        lines,
        f'FAILURES - WCAG AA (Normal Text, ≥{WCAG_AA_NORMAL}:1)',
        report.aa_normal_failures,
        lambda r: r.pass_aa_large,
    )
    _failure_section(lines, f'FAILURES - WCAG AA (Large Text, ≥{WCAG_AA_LARGE}:1)', report.aa_large_failures, None)
    _failure_section(
        lines,
        f'FAILURES - WCAG AAA (Normal Text, ≥{WCAG_AAA_NORMAL}:1)',
        report.aaa_normal_failures,
        lambda r: r.pass_aaa_large,
    )
    _failure_section(
        lines, f'FAILURES - WCAG AAA (Large Text, ≥{WCAG_AAA_LARGE}:1)', report.aaa_large_failures, None
    )

    lines.append('')
    lines.append(RULE)
    lines.append('ALL HIGHLIGHT GROUPS - DETAILED RESULTS')
    lines.append(RULE)
    lines.append('')
    lines.append(f'{"Highlight Group":<40} {"Ratio":<10} {"AA":<8} {"AAA":<8} {"File":<12} Colors')
    lines.append(THIN_RULE)
    for result in sorted(report.results, key=lambda r: r.record.name):
        h = result.record
        aa = _icon(result.pass_aa_normal, result.pass_aa_large)
        aaa = _icon(result.pass_aaa_normal, result.pass_aaa_large)
        fg, bg = _colour_pair(result, '(Normal)')
        lines.append(f'{h.name:<40} {result.ratio:6.2f}:1  {aa:<8} {aaa:<8} {h.source:<12} {fg} / {bg}')

    if report.unchecked:
        lines.append('')
        lines.append(RULE)
        lines.append('UNCHECKED HIGHLIGHT GROUPS (No colors defined)')
        lines.append(RULE)
        lines.append('')
        lines.append(f'{"Highlight Group":<40} {"File":<12} Colors')
        lines.append(THIN_RULE)
        for h in sorted(report.unchecked, key=lambda r: r.name):
            lines.append(f'{h.name:<40} {h.source:<12} fg={h.fg or "none"} bg={h.bg or "none"}')

    lines.append('')
    return '\n'.join(lines)


def _result_obj(result: ContrastResult) -> dict[str, Any]:
    h = result.record
    return {
        'name': h.name,
        'source': h.source,
        'fg': result.resolved_fg,
        'bg': result.resolved_bg,
        'fg_from_normal': h.fg_from_normal(),
        'bg_from_normal': h.bg_from_normal(),
        'bold': h.bold,
        'ratio': round(result.ratio, 2),
        'aa_normal': result.pass_aa_normal,
        'aa_large': result.pass_aa_large,
        'aaa_normal': result.pass_aaa_normal,
        'aaa_large': result.pass_aaa_large,
    }


def format_json(report: Report) -> str:
    """Format report as JSON."""
    checked = len(report.results)
    obj: dict[str, Any] = {
        'summary': {
            'total': report.total,
            'checked': checked,
            'unchecked': len(report.unchecked),
            'aa_normal_pass': checked - len(report.aa_normal_failures),
            'aa_large_pass': checked - len(report.aa_large_failures),
            'aaa_normal_pass': checked - len(report.aaa_normal_failures),
            'aaa_large_pass': checked - len(report.aaa_large_failures),
            'exit_code': exit_code(report),
        },
        'by_file': dict(report.by_file),
        'failures': {
            'aa_normal': [r.record.name for r in report.aa_normal_failures],
            'aa_large': [r.record.name for r in report.aa_large_failures],
            'aaa_normal': [r.record.name for r in report.aaa_normal_failures],
            'aaa_large': [r.record.name for r in report.aaa_large_failures],
        },
        'results': [_result_obj(r) for r in sorted(report.results, key=lambda r: r.record.name)],
        'unchecked': [
            {
                'name': h.name,
                'source': h.source,
                'fg': h.fg,
                'bg': h.bg,
                'fg_is_none': h.fg_is_none,
                'bg_is_none': h.bg_is_none,
            }
            for h in sorted(report.unchecked, key=lambda r: r.name)
        ],
    }
    return json.dumps(obj, indent=2)
