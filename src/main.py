"""Run script.

Why it exists:
- Lets `python -m main` run the CLI during development.
- Keeps a simple entrypoint next to the packaged `dodobox` script.
"""

from __future__ import annotations

import sys

# UnicodeEncodeError on Windows terminals (cp1252 vs utf-8).
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")
    sys.stderr.reconfigure(encoding="utf-8")

from cli.main import run


def main() -> None:
    run()


if __name__ == "__main__":
    main()
