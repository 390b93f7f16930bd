"""Allow ``python -m rustmcp``."""

from rustmcp.cli.commands import app

if __name__ == "__main__":
    app()
