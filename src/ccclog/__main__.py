"""Allow running ccclog as ``python -m ccclog``."""

from ccclog.cli.main import cli

if __name__ == "__main__":
    cli()
