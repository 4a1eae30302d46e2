"""
Local matcher interface.
"""

from .local_matcher import LocalMatcher, MatcherState

__all__ = ['LocalMatcher', 'MatcherState']
