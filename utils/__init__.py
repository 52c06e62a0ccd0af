"""
Shared geometry helpers
"""

from .geometry import coords, dist, extended_fingers

__all__ = [
    'coords',
    'dist',
    'extended_fingers',
]
