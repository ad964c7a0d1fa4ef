"""Module entrypoint for ``python -m navit``."""

from .cli import main


if __name__ == "__main__":
    main()
