"""
K-means - batch Lloyd's clustering of labeled points.
"""

from .config import KMeansConfig
from .runner import KMeansRunner

__all__ = ["KMeansConfig", "KMeansRunner"]
