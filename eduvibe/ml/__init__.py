# eduvibe/ml/__init__.py
from .recommender import RecommendationScorer

__all__ = ["RecommendationScorer"]
