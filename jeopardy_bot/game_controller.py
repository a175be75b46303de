"""
Game lifecycle controller for the Jeopardy board bot.
Sets up a fresh board per start trigger and guards against overlapping setups.
"""
import logging
import time
from enum import Enum
from typing import Any, Dict, Optional

import discord

from .board_engine import BoardEngine, InsufficientPoolError
from .board_renderer import BoardRenderer
from .config_manager import ConfigManager
from .interaction_controller import ClueInteractionController
from .models import Board, RevealState
from .trivia_client import DataShapeError, NetworkError, TriviaClient, TriviaError


logger = logging.getLogger(__name__)


class GameState(Enum):
    """Enumeration of game lifecycle states."""
    IDLE = "idle"
    LOADING = "loading"


class GameController:
    """
    Owns one channel's board, renderer and click handling.

    Only one setup may run at a time: a start trigger that arrives while the
    controller is loading is ignored.
    """

    def __init__(
        self,
        channel_id: int,
        channel: discord.abc.Messageable,
        client: TriviaClient,
        config_manager: ConfigManager,
        engine: Optional[BoardEngine] = None,
        renderer: Optional[BoardRenderer] = None
    ):
        self.channel_id = channel_id
        self.client = client
        self.config_manager = config_manager
        self.engine = engine or BoardEngine()
        self.state = GameState.IDLE
        self.board: Optional[Board] = None

        self.interaction_controller = ClueInteractionController(
            self.engine,
            renderer_provider=lambda: self.renderer,
            board_provider=lambda: self.board
        )
        self.renderer = renderer or BoardRenderer(
            channel,
            on_cell_click=self.interaction_controller.handle_click,
            on_start=self.handle_start_interaction
        )

    @property
    def is_loading(self) -> bool:
        return self.state is GameState.LOADING

    def _transition(self, to_state: GameState, reason: str) -> None:
        from_state = self.state
        self.state = to_state
        logger.info(
            f"Game lifecycle: STATE_TRANSITION - Channel {self.channel_id}, "
            f"{from_state.name} -> {to_state.name} ({reason})",
            extra={
                'event_type': 'game_state_transition',
                'channel_id': self.channel_id,
                'from_state': from_state.value,
                'to_state': to_state.value,
                'reason': reason,
                'timestamp': time.time()
            }
        )

    async def start_game(self) -> Dict[str, Any]:
        """
        Deal a new board: fetch, sample, commit, render.

        Returns:
            Dictionary with success status and user-friendly message
        """
        # Check and claim before the first await
        if self.is_loading:
            logger.warning(f"Start ignored for channel {self.channel_id}: game already loading")
            return {
                'success': False,
                'ignored': True,
                'message': "Game setup already in progress",
                'user_message': "⏳ A board is already being set up, hang on."
            }
        self._transition(GameState.LOADING, "start trigger")

        settings = self.config_manager.get_game_settings()
        try:
            await self.renderer.clear()
            self.board = None
            await self.renderer.show_loading()

            pool = await self.client.fetch_category_pool(settings.category_pool_size)
            category_ids = self.engine.select_random_category_ids(pool, settings.category_count)
            board = await self.engine.build_board(category_ids, settings.clues_per_category, self.client)

            await self.renderer.show_board(board)
            self.board = board
            await self.renderer.hide_loading()

            logger.info(f"Started game in channel {self.channel_id} with categories {category_ids}")
            return {
                'success': True,
                'message': f"Board dealt with {board.category_count} categories",
                'user_message': "✅ New board is ready!"
            }

        except TriviaError as e:
            logger.error(f"Game setup failed for channel {self.channel_id}: {e}")
            user_message = self._get_user_friendly_error_message(e)
            try:
                await self.renderer.show_error(user_message)
            except discord.HTTPException as render_error:
                logger.error(f"Failed to show setup error in channel {self.channel_id}: {render_error}")
            return {
                'success': False,
                'error': str(e),
                'message': f"Game setup failed: {e}",
                'user_message': user_message
            }
        except discord.HTTPException as e:
            logger.error(f"Discord error during game setup for channel {self.channel_id}: {e}")
            user_message = "❌ Discord refused to show the board. Please try again."
            self.board = None
            try:
                await self.renderer.clear()
                await self.renderer.show_error(user_message)
            except discord.HTTPException as render_error:
                logger.error(f"Failed to clean up after setup error in channel {self.channel_id}: {render_error}")
            return {
                'success': False,
                'error': str(e),
                'message': f"Discord error during game setup: {e}",
                'user_message': user_message
            }
        finally:
            self._transition(GameState.IDLE, "setup finished")

    def _get_user_friendly_error_message(self, error: TriviaError) -> str:
        if isinstance(error, NetworkError):
            return "❌ Could not reach the trivia service. Please try again in a moment."
        if isinstance(error, DataShapeError):
            return "❌ The trivia service sent a category we could not read. Please try again."
        if isinstance(error, InsufficientPoolError):
            return "❌ The trivia service did not have enough categories or clues for a full board."
        return "❌ Something went wrong while setting up the board."

    async def handle_start_interaction(self, interaction: discord.Interaction):
        """Discord entry point for /start and the start button."""
        if self.is_loading:
            await interaction.response.send_message(
                "⏳ A board is already being set up, hang on.", ephemeral=True
            )
            return

        await interaction.response.send_message("🎲 Shuffling categories...", ephemeral=True)
        result = await self.start_game()

        if not result['success'] and not result.get('ignored'):
            try:
                await interaction.followup.send(result['user_message'], ephemeral=True)
            except discord.HTTPException:
                logger.error("Failed to send setup failure notice")

    def get_status(self) -> Dict[str, Any]:
        """Summarize the lifecycle state and reveal progress."""
        status = {
            'channel_id': self.channel_id,
            'state': self.state.value,
            'has_board': self.board is not None,
        }
        if self.board is not None:
            progress = self.board.progress()
            status.update({
                'categories': [category.title for category in self.board.categories],
                'total_clues': sum(progress.values()),
                'hidden': progress[RevealState.HIDDEN],
                'question_showing': progress[RevealState.QUESTION],
                'answered': progress[RevealState.ANSWER],
            })
        return status
