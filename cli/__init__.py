"""
NFT Registry - Command Line Interface package.
"""

from registry import __version__

__all__ = ["__version__"]
