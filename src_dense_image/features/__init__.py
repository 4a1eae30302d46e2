"""
Feature detector interface.
"""

from .feature_detector import FeatureDetector

__all__ = ['FeatureDetector']
