"""Entry point for running gitcmd as a module."""

from gitcmd.cli import app


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
