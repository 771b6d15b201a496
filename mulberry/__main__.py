"""Module entrypoint for ``python -m mulberry``.

All argument parsing and runtime setup happen in ``mulberry.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
