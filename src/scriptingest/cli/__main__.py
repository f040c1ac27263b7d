"""Main entry point for scriptingest CLI when run as a module."""

from scriptingest.cli.main import main

if __name__ == "__main__":  # pragma: no cover
    main()
