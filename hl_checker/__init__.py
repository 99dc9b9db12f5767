"""hl-check: WCAG contrast linter for colour-scheme highlight groups."""

__version__ = '0.1.0'
