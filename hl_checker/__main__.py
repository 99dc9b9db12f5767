"""hl-check: WCAG contrast linter for editor colour-scheme highlight groups.

Usage: hl-check <command> [options]

Reads a colour table and highlight declarations such as
    hl('Comment', { fg = c.fg_dark, bg = 'none' })
from theme source files, measures every fg/bg pair and prints a compliance
report. Exit status 1 means at least one group fails WCAG AA for normal text.

Settings / .env loading:
  Flags win over HL_CHECK_* environment variables, which win over a .env
  file found by walking up from the current directory (stopping at the
  nearest .git boundary). Use --env-file to name the .env explicitly.
"""

import argparse
import json
import sys

from hl_checker.core.classify import check_all, find_normal_colors
from hl_checker.core.config import Settings, load_settings
from hl_checker.core.contrast import contrast, hex_luminance
from hl_checker.core.hl_parser import HighlightExtractor
from hl_checker.core.palette import ColorTable, is_hex, load_color_file
from hl_checker.core.report import build_report, exit_code, format_json, format_text
from hl_checker.core.types import (
    WCAG_AA_LARGE,
    WCAG_AA_NORMAL,
    WCAG_AAA_LARGE,
    WCAG_AAA_NORMAL,
    HlCheckError,
)

PROG = 'hl-check'

EXIT_OK = 0
EXIT_FAIL = 1
EXIT_ERROR = 2


def _note(message: str) -> None:
    print(f'{PROG}: {message}', file=sys.stderr)


def _add_source_options(p: argparse.ArgumentParser) -> None:
    p.add_argument('-r', '--root', help='Project root (default: .)')
    p.add_argument('-t', '--theme', help='Theme name under <root>/lua/ (default: mapledark)')
    p.add_argument(
        '-c', '--colors', metavar='PATH', help='Colour definition file (default: <root>/lua/<theme>/init.lua)'
    )
    p.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')


def _build_parser() -> argparse.ArgumentParser:
    epilog = (
        'Examples:\n'
        '  hl-check check\n'
        '  hl-check check --root ~/src/mapledark.nvim --json\n'
        '  hl-check check lua/mapledark/init.lua lua/mapledark/plugins.lua -c lua/mapledark/init.lua\n'
        '  hl-check colors\n'
        '  hl-check contrast c.fg c.bg_dark\n'
        '  hl-check contrast "#cbd5e1" "#1a1a1b"\n'
        '  hl-check help check\n'
    )
    parser = argparse.ArgumentParser(
        prog=PROG,
        description='WCAG contrast linter for colour-scheme highlight groups.',
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        default=None,
        help='Path to .env file (default: walk up from cwd to .git boundary)',
    )
    sub = parser.add_subparsers(dest='command', help='Command to run')

    check = sub.add_parser('check', help=_first_line(_cmd_check.__doc__))
    check.add_argument('sources', nargs='*', help='Highlight declaration files (default: init.lua, plugins.lua)')
    _add_source_options(check)
    check.add_argument('--call', help="Declaration function name (default: hl)")
    check.add_argument(
        '--no-default-normal',
        action='store_true',
        help='Do not fall back to built-in Normal colours; such groups become unchecked',
    )
    check.add_argument('-v', '--verbose', action='store_true', help='Report skipped sources on stderr')

    colors = sub.add_parser('colors', help=_first_line(_cmd_colors.__doc__))
    _add_source_options(colors)

    pair = sub.add_parser('contrast', help=_first_line(_cmd_contrast.__doc__))
    pair.add_argument('fg', help="Foreground: '#rrggbb', c.name or name")
    pair.add_argument('bg', help="Background: '#rrggbb', c.name or name")
    _add_source_options(pair)

    help_parser = sub.add_parser('help', help='Print full docs for a command')
    help_parser.add_argument('topic', nargs='?', help='Command name')

    return parser


def _first_line(doc: str | None) -> str:
    return (doc or '').strip().splitlines()[0] if (doc or '').strip() else ''


def _settings(args: argparse.Namespace) -> Settings:
    settings = load_settings(
        root=args.root,
        theme=args.theme,
        colors=args.colors,
        sources=getattr(args, 'sources', None),
        call=getattr(args, 'call', None),
        use_default_normal=not getattr(args, 'no_default_normal', False),
        env_file=args.env_file,
    )
    if settings.env_path:
        _note(f'loaded {settings.env_path}')
    return settings


def _load_colours(settings: Settings) -> ColorTable:
    colours = load_color_file(settings.colors_path)
    if not colours:
        _note(f'no colour table found in {settings.colors_path}')
    return colours


def _cmd_check(args: argparse.Namespace) -> int:
    """Measure every highlight group and print the WCAG compliance report.

    Loads the colour table, extracts hl('Name', {...}) declarations from each
    source, substitutes the Normal group's colours for empty or 'none' slots,
    and classifies each group against WCAG AA/AAA for normal and large text.

    Groups whose fg equals bg are intentionally invisible and are listed as
    unchecked, as are groups whose colours cannot be resolved.

    Exit status: 0 if every checked group passes AA normal (4.5:1), 1 if any
    fails, 2 if the colour definition file cannot be read.
    """
    settings = _settings(args)
    colours = _load_colours(settings)

    extractor = HighlightExtractor(colours, call=settings.call)
    extracted = extractor.extract(settings.sources)
    if args.verbose:
        for path in extracted.skipped:
            _note(f'skipped unreadable source {path}')

    normal = find_normal_colors(extracted.records, colours, use_defaults=settings.use_default_normal)
    results, unchecked = check_all(extracted.records, normal)
    report = build_report(results, unchecked)

    print(format_json(report) if args.json else format_text(report))
    return exit_code(report)


def _cmd_colors(args: argparse.Namespace) -> int:
    """List the colour table as loaded: name, hex value and relative luminance."""
    colours = _load_colours(_settings(args))
    if args.json:
        table = {
            name: {'hex': hex_val, 'luminance': round(hex_luminance(hex_val), 4)} for name, hex_val in colours.items()
        }
        print(json.dumps(table, indent=2))
        return EXIT_OK
    for name, hex_val in colours.items():
        print(f'  {name:<16} {hex_val}  L={hex_luminance(hex_val):.4f}')
    print(f'\n{len(colours)} colours')
    return EXIT_OK


def _cmd_contrast(args: argparse.Namespace) -> int:
    """Compute the contrast ratio of one fg/bg pair.

    Each colour may be a '#rrggbb' literal or a name from the colour table
    (c.name or bare name). The colour file is only read when a name is given.

    Exit status: 0 if the pair passes AA normal, 1 if it fails, 2 if a colour
    cannot be resolved.
    """
    if args.fg.startswith('#') and args.bg.startswith('#'):
        colours = ColorTable()
    else:
        colours = _load_colours(_settings(args))
    fg = colours.resolve(args.fg)
    bg = colours.resolve(args.bg)
    for token, value in ((args.fg, fg), (args.bg, bg)):
        if not is_hex(value):
            _note(f'cannot resolve colour {token!r}')
            return EXIT_ERROR

    ratio = contrast(fg, bg)
    checks = {
        'aa_normal': ratio >= WCAG_AA_NORMAL,
        'aa_large': ratio >= WCAG_AA_LARGE,
        'aaa_normal': ratio >= WCAG_AAA_NORMAL,
        'aaa_large': ratio >= WCAG_AAA_LARGE,
    }
    if args.json:
        print(json.dumps({'fg': fg, 'bg': bg, 'ratio': round(ratio, 2), **checks}, indent=2))
    else:
        print(f'fg={fg} bg={bg}  {ratio:.2f}:1')
        for name, passed in checks.items():
            print(f'  {name:<11} {"PASS" if passed else "FAIL"}')
    return EXIT_OK if checks['aa_normal'] else EXIT_FAIL


_COMMANDS = {
    'check': _cmd_check,
    'colors': _cmd_colors,
    'contrast': _cmd_contrast,
}


def _print_help(topic: str | None) -> int:
    """Print full docs for a command."""
    if topic is None:
        print('Available commands:\n')
        for name, fn in sorted(_COMMANDS.items()):
            print(f'  {name:<10} {_first_line(fn.__doc__)}')
        print(f'\nRun: {PROG} help <command> for full docs.')
        return EXIT_OK

    if topic not in _COMMANDS:
        print(f'Unknown command: {topic}', file=sys.stderr)
        print(f'Available: {", ".join(sorted(_COMMANDS))}', file=sys.stderr)
        return EXIT_FAIL

    print(_COMMANDS[topic].__doc__.strip())
    return EXIT_OK


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(EXIT_FAIL)

    if args.command == 'help':
        sys.exit(_print_help(args.topic))

    try:
        code = _COMMANDS[args.command](args)
    except HlCheckError as exc:
        print(f'{PROG}: error: {exc}', file=sys.stderr)
        sys.exit(EXIT_ERROR)
    sys.exit(code)


if __name__ == '__main__':
    main()
