"""
Package entry point.

Allows running the application via:

    python -m moyenne

This simply forwards execution to moyenne.cli.main().
"""

from moyenne.cli import main

if __name__ == "__main__":
    main()
