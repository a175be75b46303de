"""
Core data models for the Jeopardy board bot.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


DEFAULT_API_BASE_URL = "https://rithm-jeopardy.herokuapp.com/api/"


class RevealState(Enum):
    """What a clue cell currently shows."""
    HIDDEN = "hidden"
    QUESTION = "question"
    ANSWER = "answer"

    @property
    def next_state(self) -> Optional["RevealState"]:
        """The state a click moves to, or None when the state is terminal."""
        return _NEXT_REVEAL_STATE.get(self)


_NEXT_REVEAL_STATE = {
    RevealState.HIDDEN: RevealState.QUESTION,
    RevealState.QUESTION: RevealState.ANSWER,
}


@dataclass
class RawClue:
    """A clue as delivered by the trivia service."""
    question: str
    answer: str


@dataclass
class RawCategory:
    """A category as delivered by the trivia service, before clue sampling."""
    title: str
    clues: List[RawClue] = field(default_factory=list)


@dataclass
class Clue:
    """A single question/answer pair on the board."""
    question: str
    answer: str
    reveal_state: RevealState = RevealState.HIDDEN


@dataclass
class Category:
    """A titled column of clues."""
    title: str
    clues: List[Clue] = field(default_factory=list)


@dataclass
class Board:
    """The ordered categories of one game."""
    categories: List[Category] = field(default_factory=list)

    @property
    def category_count(self) -> int:
        return len(self.categories)

    @property
    def clues_per_category(self) -> int:
        if not self.categories:
            return 0
        return len(self.categories[0].clues)

    def get_clue(self, category_index: int, clue_index: int) -> Clue:
        return self.categories[category_index].clues[clue_index]

    def progress(self) -> Dict[RevealState, int]:
        """Count clues per reveal state."""
        counts = {state: 0 for state in RevealState}
        for category in self.categories:
            for clue in category.clues:
                counts[clue.reveal_state] += 1
        return counts


@dataclass
class CellReveal:
    """Outcome of a click that changed what a cell shows."""
    revealed: RevealState
    text: str


@dataclass
class GameSettings:
    """Configuration settings for building a board."""
    api_base_url: str = DEFAULT_API_BASE_URL
    category_count: int = 6
    clues_per_category: int = 5
    category_pool_size: int = 100
    request_timeout: int = 10

    def to_dict(self) -> Dict[str, Any]:
        return {
            'api_base_url': self.api_base_url,
            'category_count': self.category_count,
            'clues_per_category': self.clues_per_category,
            'category_pool_size': self.category_pool_size,
            'request_timeout': self.request_timeout,
        }
