"""
zlang Command-Line Interface
============================

This package provides the zlang command, a Click-based read-eval-print
loop over files or standard input.
"""

__all__ = ["zlang"]
