"""
devu: developer shortcuts for git.
"""

__version__ = "1.1.0"
