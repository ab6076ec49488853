"""Module entrypoint for running mdtranslate as ``python -m mdtranslate``."""

from __future__ import annotations

from mdtranslate.cli import main


if __name__ == "__main__":
    main()
