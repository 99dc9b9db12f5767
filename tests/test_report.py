"""Tests for hl_checker.core.report: aggregation, text/JSON output and exit code."""

import json
import os

import pytest
from hl_checker.core.classify import check_all, find_normal_colors
from hl_checker.core.hl_parser import HighlightExtractor
from hl_checker.core.palette import load_color_file
from hl_checker.core.report import build_report, exit_code, format_json, format_text
from hl_checker.core.types import ContrastResult, HighlightRecord, Report

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), 'fixtures')
THEME_DIR = os.path.join(FIXTURES_DIR, 'lua', 'mapledark')
INIT_LUA = os.path.join(THEME_DIR, 'init.lua')
PLUGINS_LUA = os.path.join(THEME_DIR, 'plugins.lua')


def _result(name: str, ratio: float, source: str = 'init.lua') -> ContrastResult:
    record = HighlightRecord(name=name, fg='#111111', bg='#222222', source=source)
    return ContrastResult(record=record, ratio=ratio, resolved_fg='#111111', resolved_bg='#222222')


@pytest.fixture(scope='module')
def fixture_report() -> Report:
    colours = load_color_file(INIT_LUA)
    extracted = HighlightExtractor(colours).extract([INIT_LUA, PLUGINS_LUA])
    normal = find_normal_colors(extracted.records, colours)
    results, unchecked = check_all(extracted.records, normal)
    return build_report(results, unchecked)


class TestBuildReport:
    def test_sorted_by_ratio(self):
        report = build_report([_result('B', 9.0), _result('A', 2.0), _result('C', 5.0)], [])
        assert [r.ratio for r in report.results] == [2.0, 5.0, 9.0]

    def test_result_in_several_buckets(self):
        report = build_report([_result('Low', 2.0)], [])
        assert report.aa_normal_failures == report.aa_large_failures == report.results
        assert report.aaa_normal_failures == report.aaa_large_failures == report.results

    def test_aaa_only_failure(self):
        report = build_report([_result('Mid', 5.0)], [])
        assert report.aa_normal_failures == []
        assert report.aa_large_failures == []
        assert [r.record.name for r in report.aaa_normal_failures] == ['Mid']
        assert report.aaa_large_failures == []

    def test_by_file(self):
        report = build_report([_result('A', 9.0), _result('B', 9.0, 'plugins.lua'), _result('C', 9.0)], [])
        assert report.by_file == {'init.lua': 2, 'plugins.lua': 1}


class TestExitCode:
    def test_clean(self):
        assert exit_code(build_report([_result('A', 12.0)], [])) == 0

    def test_aa_normal_failure(self):
        assert exit_code(build_report([_result('A', 12.0), _result('B', 4.49)], [])) == 1

    def test_large_text_pass_still_fails(self):
        assert exit_code(build_report([_result('A', 3.5)], [])) == 1

    def test_aaa_failures_only(self):
        assert exit_code(build_report([_result('A', 4.5), _result('B', 6.9)], [])) == 0

    def test_unchecked_never_fails(self):
        assert exit_code(build_report([], [HighlightRecord(name='Hidden')])) == 0

    def test_empty(self):
        assert exit_code(build_report([], [])) == 0


class TestFixtureReport:
    def test_counts(self, fixture_report: Report):
        assert fixture_report.total == 13
        assert len(fixture_report.results) == 11
        assert sorted(h.name for h in fixture_report.unchecked) == ['EndOfBuffer', 'ShortHex']

    def test_failure_buckets(self, fixture_report: Report):
        aa_normal = {r.record.name for r in fixture_report.aa_normal_failures}
        assert aa_normal == {'Comment', 'CursorLineNr', 'LineNr', 'TelescopeBorder'}
        assert {r.record.name for r in fixture_report.aa_large_failures} == {'LineNr', 'TelescopeBorder'}
        assert {r.record.name for r in fixture_report.aaa_normal_failures} == aa_normal

    def test_lowest_first(self, fixture_report: Report):
        assert fixture_report.results[0].record.name == 'LineNr'

    def test_by_file(self, fixture_report: Report):
        assert fixture_report.by_file == {'init.lua': 9, 'plugins.lua': 2}

    def test_exit_code(self, fixture_report: Report):
        assert exit_code(fixture_report) == 1

    def test_fallback_resolution(self, fixture_report: Report):
        by_name = {r.record.name: r for r in fixture_report.results}
        assert (by_name['NormalNC'].resolved_fg, by_name['NormalNC'].resolved_bg) == ('#cbd5e1', '#1a1a1b')
        assert by_name['Missing'].resolved_fg == '#cbd5e1'
        assert by_name['GitSignsAdd'].resolved_bg == '#1a1a1b'


class TestFormatText:
    def test_nothing_found(self):
        assert format_text(build_report([], [])) == 'No highlight groups found.'

    def test_section_order(self, fixture_report: Report):
        text = format_text(fixture_report)
        headings = [
            'WCAG COLOR CONTRAST COMPLIANCE REPORT',
            'Total highlight groups found: 13',
            'SUMMARY:',
            'HIGHLIGHTS BY FILE:',
            'FAILURES SUMMARY',
            'FAILURES - WCAG AA (Normal Text, ≥4.5:1)',
            'FAILURES - WCAG AA (Large Text, ≥3.0:1)',
            'FAILURES - WCAG AAA (Normal Text, ≥7.0:1)',
            'FAILURES - WCAG AAA (Large Text, ≥4.5:1)',
            'ALL HIGHLIGHT GROUPS - DETAILED RESULTS',
            'UNCHECKED HIGHLIGHT GROUPS (No colors defined)',
        ]
        positions = [text.index(h) for h in headings]
        assert positions == sorted(positions)

    def test_summary_lines(self, fixture_report: Report):
        text = format_text(fixture_report)
        assert 'Highlight groups checked: 11' in text
        assert 'Highlight groups unchecked (no colors): 2' in text
        assert 'WCAG AA (Normal text, ≥4.5:1): 7/11 pass' in text
        assert 'WCAG AA (Large text, ≥3.0:1):  9/11 pass' in text
        assert '  init.lua: 9 highlight groups' in text
        assert '  plugins.lua: 2 highlight groups' in text

    def test_large_text_soft_pass_status(self):
        text = format_text(build_report([_result('Comment', 4.2)], []))
        aa_section = text.split('FAILURES - WCAG AA (Normal Text')[1].split('FAILURES - WCAG AAA')[0]
        assert 'Status: PASS (Large text)' in aa_section
        assert 'Contrast Ratio: 4.20:1' in aa_section

    def test_aaa_large_text_soft_pass_status(self):
        text = format_text(build_report([_result('Comment', 5.0)], []))
        aaa_section = text.split('FAILURES - WCAG AAA (Normal Text')[1].split('ALL HIGHLIGHT GROUPS')[0]
        assert 'FAILURES - WCAG AA (Normal Text' not in text
        assert 'FAILURES - WCAG AAA (Large Text' not in text
        assert 'Status: PASS (Large text)' in aaa_section

    def test_hard_fail_status(self):
        text = format_text(build_report([_result('LineNr', 1.98)], []))
        assert 'Status: PASS (Large text)' not in text
        assert 'Status: FAIL' in text

    def test_from_normal_annotation(self):
        record = HighlightRecord(name='StatusLine', fg='#787c99', source='init.lua')
        result = ContrastResult(record=record, ratio=4.2, resolved_fg='#787c99', resolved_bg='#1a1a1b')
        text = format_text(build_report([result], []))
        assert 'Colors: fg=#787c99 bg=#1a1a1b (from Normal)' in text
        assert '#787c99 / #1a1a1b (Normal)' in text

    def test_normal_itself_not_annotated(self):
        record = HighlightRecord(name='Normal', fg='#787c99', source='init.lua')
        result = ContrastResult(record=record, ratio=4.2, resolved_fg='#787c99', resolved_bg='#1a1a1b')
        text = format_text(build_report([result], []))
        assert '(from Normal)' not in text

    def test_table_rows_alphabetical_with_icons(self):
        report = build_report([_result('Zed', 8.0), _result('Alpha', 3.5), _result('Mid', 1.5)], [])
        rows = [line for line in format_text(report).splitlines() if line.startswith(('Alpha', 'Mid', 'Zed'))]
        assert [row.split()[0] for row in rows] == ['Alpha', 'Mid', 'Zed']
        assert '3.50:1  ⚠️' in rows[0]
        assert '1.50:1  ❌' in rows[1]
        assert '8.00:1  ✅' in rows[2]

    def test_unchecked_table(self):
        report = build_report([], [HighlightRecord(name='Hidden', fg='#1a1a1b', bg='#1a1a1b', source='init.lua')])
        text = format_text(report)
        assert 'UNCHECKED HIGHLIGHT GROUPS' in text
        assert 'fg=#1a1a1b bg=#1a1a1b' in text

    def test_unchecked_none_display(self):
        report = build_report([], [HighlightRecord(name='Empty', source='init.lua')])
        assert 'fg=none bg=none' in format_text(report)

    def test_no_failure_sections_when_clean(self):
        text = format_text(build_report([_result('A', 12.0)], []))
        assert 'FAILURES' not in text
        assert 'UNCHECKED' not in text


class TestFormatJson:
    def test_structure(self, fixture_report: Report):
        obj = json.loads(format_json(fixture_report))
        assert obj['summary']['total'] == 13
        assert obj['summary']['checked'] == 11
        assert obj['summary']['exit_code'] == 1
        assert obj['by_file'] == {'init.lua': 9, 'plugins.lua': 2}
        assert set(obj['failures']['aa_large']) == {'LineNr', 'TelescopeBorder'}
        names = [r['name'] for r in obj['results']]
        assert names == sorted(names)
        assert [u['name'] for u in obj['unchecked']] == ['EndOfBuffer', 'ShortHex']

    def test_fallback_flags(self, fixture_report: Report):
        obj = json.loads(format_json(fixture_report))
        normal_nc = next(r for r in obj['results'] if r['name'] == 'NormalNC')
        assert normal_nc['fg_from_normal'] is True
        assert normal_nc['bg_from_normal'] is True
