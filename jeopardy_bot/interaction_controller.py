"""
Routes clue cell clicks into the board and back out to the renderer.
"""
import logging
from typing import Callable, Optional

import discord

from .board_engine import BoardEngine
from .board_renderer import BoardRenderer, ClueButton, parse_cell_id
from .models import Board, CellReveal


class ClueInteractionController:
    """
    Turns a click on a clue cell into a reveal step.

    Each cell follows the clue's own reveal state: the first click shows the
    question, the second the answer, later clicks are ignored.
    """

    def __init__(
        self,
        engine: BoardEngine,
        renderer_provider: Callable[[], BoardRenderer],
        board_provider: Callable[[], Optional[Board]]
    ):
        """
        Args:
            engine: Engine applying the reveal transition
            renderer_provider: Returns the renderer of the owning game
            board_provider: Returns the board currently in play, if any
        """
        self.logger = logging.getLogger(__name__)
        self.engine = engine
        self._renderer_provider = renderer_provider
        self._board_provider = board_provider

    def reveal(self, board: Board, custom_id: str) -> Optional[CellReveal]:
        """Apply one click to the cell named by custom_id."""
        category_index, clue_index = parse_cell_id(custom_id)
        result = self.engine.advance_clue(board, category_index, clue_index)
        if result is None:
            self.logger.debug(f"Ignored click on answered cell {category_index}-{clue_index}")
        return result

    async def handle_click(self, interaction: discord.Interaction, button: ClueButton):
        """Discord entry point for clue cell buttons."""
        board = self._board_provider()
        panel_board = getattr(button.view, 'board', None)

        if board is None or panel_board is not board:
            self.logger.debug(f"Ignored click on stale cell {button.custom_id}")
            await interaction.response.defer()
            return

        result = self.reveal(board, button.custom_id)
        if result is None:
            await interaction.response.defer()
            return

        category_index, clue_index = parse_cell_id(button.custom_id)
        panel = self._renderer_provider().update_cell(category_index, clue_index, result.text, result.revealed)
        await interaction.response.edit_message(embed=panel.embed, view=panel)
