"""
Package entry point.

Allows running the application via:

    python -m yogastudio

This simply forwards execution to yogastudio.cli.main().
"""

from yogastudio.cli import main

if __name__ == "__main__":
    main()
