"""
matchcore Analysis - numeric building blocks.

- stats: StandardScaler and euclidean distance
- clustering: k-means over player feature vectors
- rating: Elo expectation and updates
- fraud: heuristic multi-signal risk scoring
"""

from matchcore.analysis.clustering import KMeans
from matchcore.analysis.fraud import FraudDetector
from matchcore.analysis.rating import EloRating
from matchcore.analysis.stats import StandardScaler, euclidean

__all__ = [
    "EloRating",
    "FraudDetector",
    "KMeans",
    "StandardScaler",
    "euclidean",
]
