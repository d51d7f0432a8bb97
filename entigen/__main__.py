# File: entigen/__main__.py
"""
Entigen — Module entry point.

Allows running the creator directly via::

    python -m entigen --model model.yaml --output .jhipster
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from entigen.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
