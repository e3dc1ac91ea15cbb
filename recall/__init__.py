"""
Recall - SM-2 flashcard scheduling with cached study statistics.
"""

__version__ = "1.0.0"
