"""
Entry point for running pkgdbkit CLI as a module.

Usage: python -m pkgdbkit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
