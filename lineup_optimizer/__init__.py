"""Cricket playing XI scoring and selection toolkit."""

from .models import Player, ScoredPlayer, SelectionConstraints, SelectionResult
from .scoring import composite_score, score_player
from .selector import select_lineup

__all__ = [
    "Player",
    "ScoredPlayer",
    "SelectionConstraints",
    "SelectionResult",
    "composite_score",
    "score_player",
    "select_lineup",
]
