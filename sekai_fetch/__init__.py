"""
sekai-fetch: mirrors Project SEKAI song audio and jacket art to disk.
"""

__version__ = "0.1.0"
