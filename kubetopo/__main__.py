"""Entry point for `python -m kubetopo`.

Usage:
    python -m kubetopo graph resources.json --layout hierarchical
    python -m kubetopo serve
"""

from __future__ import annotations

from kubetopo.cli import cli

cli()
