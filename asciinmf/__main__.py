"""Entry point for running asciinmf as a module."""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
