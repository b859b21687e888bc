"""Executable entrypoint for `python -m envbind`.

Delegates directly to :func:`envbind.cli.main`.
"""

from envbind.cli import main

if __name__ == "__main__":
    main()
