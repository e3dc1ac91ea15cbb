"""
Card Mastery Module.

Classifies a card's learning stage from its review count and ease factor.

Design:
- MasteryLevel: Enum for the four stages a card moves through
- mastery_level(): Stage for a given review count / ease factor
- mastery_progress(): Progress (0-1) toward the next stage
"""

from __future__ import annotations

from enum import Enum


class MasteryLevel(str, Enum):
    """
    Mastery level of a single card.

    Stages are driven by repetition count first, then ease factor, so a card
    that keeps getting "Again" stays in DEVELOPING no matter how often it is seen.
    """

    LEARNING = "learning"  # never reviewed
    DEVELOPING = "developing"  # < 5 reviews or ease < 2.2
    PROFICIENT = "proficient"  # < 10 reviews or ease < 2.7
    MASTERED = "mastered"

    @classmethod
    def for_card(cls, review_count: int, ease_factor: float) -> MasteryLevel:
        """
        Classify a card.

        Args:
            review_count: Total reviews of the card
            ease_factor: Current SM-2 ease factor

        Returns:
            Corresponding MasteryLevel
        """
        if review_count == 0:
            return cls.LEARNING
        elif review_count < 5 or ease_factor < 2.2:
            return cls.DEVELOPING
        elif review_count < 10 or ease_factor < 2.7:
            return cls.PROFICIENT
        else:
            return cls.MASTERED

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.title()

    @property
    def emoji(self) -> str:
        """Status emoji for CLI display."""
        return {
            MasteryLevel.LEARNING: "○",
            MasteryLevel.DEVELOPING: "◑",
            MasteryLevel.PROFICIENT: "◕",
            MasteryLevel.MASTERED: "●",
        }[self]

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryLevel.LEARNING: "dim",
            MasteryLevel.DEVELOPING: "yellow",
            MasteryLevel.PROFICIENT: "cyan",
            MasteryLevel.MASTERED: "green",
        }[self]


def mastery_progress(review_count: int, ease_factor: float) -> float:
    """
    Progress toward the next mastery level.

    Half the progress comes from review count, half from ease factor.

    Returns:
        Value between 0 and 1 (always 1.0 once mastered)
    """
    level = MasteryLevel.for_card(review_count, ease_factor)

    if level is MasteryLevel.LEARNING:
        progress = review_count / 2.0
    elif level is MasteryLevel.DEVELOPING:
        review_progress = min(review_count / 5.0, 1.0) * 0.5
        ease_progress = min((ease_factor - 2.0) / 0.2, 1.0) * 0.5
        progress = review_progress + ease_progress
    elif level is MasteryLevel.PROFICIENT:
        review_progress = min((review_count - 5) / 5.0, 1.0) * 0.5
        ease_progress = min((ease_factor - 2.2) / 0.5, 1.0) * 0.5
        progress = review_progress + ease_progress
    else:
        progress = 1.0

    return min(max(progress, 0.0), 1.0)


def format_progress_bar(progress: float, width: int = 10) -> str:
    """
    Format a text progress bar.

    Args:
        progress: Fraction 0-1
        width: Character width

    Returns:
        String like "████████░░"
    """
    filled = int(min(max(progress, 0.0), 1.0) * width)
    return "█" * filled + "░" * (width - filled)
