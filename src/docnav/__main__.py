"""Allow ``python -m docnav``."""

from __future__ import annotations

from docnav.cli import app

if __name__ == "__main__":
    app(prog_name="docnav")
