"""hl_checker.core: colour table, highlight parsing, contrast maths and reports.

The CLI in hl_checker.__main__ wires these together; nothing in this package
imports from it. Third-party use is limited to numpy and Pillow.
"""
