from .block_matching import BlockMatchingDisparityCalculator

__all__ = ['BlockMatchingDisparityCalculator']
