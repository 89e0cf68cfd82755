# /// script
# requires-python = ">=3.12"
# dependencies = [
#     "homedash",
# ]
#
# [tool.uv.sources]
# homedash = { path = "." }
# ///
"""Standalone launcher for the home automation dashboard."""

from homedash.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
