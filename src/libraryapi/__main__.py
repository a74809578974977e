"""Main entry point for the libraryapi package."""

from libraryapi.cli import app


def main():
    """Run the command-line interface."""
    app()


if __name__ == "__main__":
    main()
