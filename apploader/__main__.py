"""Module entry point for `python -m apploader`."""

from apploader.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
