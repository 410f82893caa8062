"""Entry point for ``python -m roomfolks``."""

from roomfolks.cli.main import app

if __name__ == "__main__":
    app()
