"""
CLI command implementations for pkgdbkit.
"""
