"""
Board engine core logic for the Jeopardy board bot.
Handles category and clue sampling, board assembly and clue reveal progression.
"""
import logging
import random
from typing import Any, List, Optional, Sequence

from .models import Board, Category, CellReveal, Clue, RawClue, RevealState
from .trivia_client import TriviaClient, TriviaError


logger = logging.getLogger(__name__)


class InsufficientPoolError(TriviaError):
    """Raised when there are fewer candidates than a sample needs."""
    pass


class BoardEngine:
    """Builds boards from the trivia service and moves clues through their reveal states."""

    def select_random_category_ids(self, pool: Sequence[Any], n: int) -> List[Any]:
        """
        Pick n distinct category ids uniformly at random.

        Args:
            pool: Candidate category ids
            n: Number of ids to pick

        Returns:
            List of n distinct ids drawn from pool

        Raises:
            InsufficientPoolError: If pool holds fewer than n distinct ids
        """
        distinct_ids = list(dict.fromkeys(pool))
        if len(distinct_ids) < n:
            raise InsufficientPoolError(
                f"Need {n} categories but the service returned only {len(distinct_ids)}"
            )
        return random.sample(distinct_ids, n)

    def select_random_clues(self, clues: Sequence[RawClue], n: int) -> List[Clue]:
        """
        Pick n distinct clues uniformly at random, all starting hidden.

        Raises:
            InsufficientPoolError: If fewer than n clues are available
        """
        if len(clues) < n:
            raise InsufficientPoolError(f"Need {n} clues but only {len(clues)} are available")
        return [
            Clue(question=raw.question, answer=raw.answer, reveal_state=RevealState.HIDDEN)
            for raw in random.sample(list(clues), n)
        ]

    async def build_board(
        self,
        category_ids: Sequence[Any],
        clues_per_category: int,
        client: TriviaClient
    ) -> Board:
        """
        Fetch every category in order and sample its clues.

        Categories are fetched one at a time. Any failure propagates and no
        board is returned.

        Args:
            category_ids: Ids to fetch, in board order
            clues_per_category: Clues to keep per category
            client: Trivia service client

        Returns:
            Fully populated Board
        """
        categories = []
        for category_id in category_ids:
            raw_category = await client.fetch_category(category_id)
            try:
                clues = self.select_random_clues(raw_category.clues, clues_per_category)
            except InsufficientPoolError as e:
                raise InsufficientPoolError(f"Category '{raw_category.title}': {e}") from e
            categories.append(Category(title=raw_category.title, clues=clues))

        logger.info(f"Built board with {len(categories)} categories x {clues_per_category} clues")
        return Board(categories=categories)

    def advance_clue(self, board: Board, category_index: int, clue_index: int) -> Optional[CellReveal]:
        """
        Move a clue one step along HIDDEN -> QUESTION -> ANSWER.

        Returns:
            CellReveal with the text to show, or None when the answer is already showing
        """
        clue = board.get_clue(category_index, clue_index)
        next_state = clue.reveal_state.next_state
        if next_state is None:
            return None

        clue.reveal_state = next_state
        text = clue.question if next_state is RevealState.QUESTION else clue.answer
        return CellReveal(revealed=next_state, text=text)
