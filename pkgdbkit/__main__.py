"""
Entry point for running pkgdbkit CLI as a module.

Usage: python -m pkgdbkit [command] [options]
"""

from pkgdbkit.cli.parser import main

if __name__ == "__main__":
    main()
