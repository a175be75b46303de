"""
Discord rendering of the Jeopardy board.

A Discord message holds at most five rows of five buttons, so the board is
split column-wise into panels. Each panel is one message: an embed carrying the
category headers and a view whose buttons are the clue cells.
"""
import logging
import math
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

import discord

from .models import Board, RevealState


logger = logging.getLogger(__name__)

CELL_ID_PREFIX = "jeopardy:cell:"
START_BUTTON_ID = "jeopardy:start"
HIDDEN_GLYPH = "❓"
START_LABEL = "Start a New Game!"
LOADING_LABEL = "Loading..."

MAX_COLUMNS_PER_PANEL = 5
MAX_ROWS_PER_PANEL = 5
BUTTON_LABEL_LIMIT = 80
FIELD_NAME_LIMIT = 256
DESCRIPTION_LIMIT = 4096

BOARD_COLOR = 0x060ce9
LOADING_COLOR = 0xffaa00
ERROR_COLOR = 0xff0000

CellClickHandler = Callable[[discord.Interaction, "ClueButton"], Awaitable[None]]
StartHandler = Callable[[discord.Interaction], Awaitable[None]]


def format_cell_id(category_index: int, clue_index: int) -> str:
    """Build the custom_id carried by a clue cell button."""
    return f"{CELL_ID_PREFIX}{category_index}-{clue_index}"


def parse_cell_id(custom_id: str) -> Tuple[int, int]:
    """
    Recover (category_index, clue_index) from a clue cell custom_id.

    Raises:
        ValueError: If custom_id was not produced by format_cell_id
    """
    if not custom_id or not custom_id.startswith(CELL_ID_PREFIX):
        raise ValueError(f"Not a clue cell id: {custom_id!r}")
    category_part, separator, clue_part = custom_id[len(CELL_ID_PREFIX):].partition('-')
    if not separator:
        raise ValueError(f"Not a clue cell id: {custom_id!r}")
    return int(category_part), int(clue_part)


def split_columns(category_count: int) -> List[List[int]]:
    """Spread category indices as evenly as possible over the fewest panels."""
    if category_count <= 0:
        return []
    panel_count = math.ceil(category_count / MAX_COLUMNS_PER_PANEL)
    base, extra = divmod(category_count, panel_count)

    panels = []
    start = 0
    for panel_index in range(panel_count):
        size = base + (1 if panel_index < extra else 0)
        panels.append(list(range(start, start + size)))
        start += size
    return panels


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 1] + "…"


def shorten_label(text: str) -> str:
    """Fit clue text into a button label."""
    label = " ".join(text.split())
    return _truncate(label, BUTTON_LABEL_LIMIT) if label else "—"


class ClueButton(discord.ui.Button):
    """A single clue cell."""

    def __init__(self, category_index: int, clue_index: int):
        super().__init__(
            style=discord.ButtonStyle.secondary,
            label=HIDDEN_GLYPH,
            custom_id=format_cell_id(category_index, clue_index),
            row=clue_index
        )
        self.category_index = category_index
        self.clue_index = clue_index

    def show(self, text: str, revealed: RevealState) -> None:
        self.label = shorten_label(text)
        if revealed is RevealState.ANSWER:
            self.style = discord.ButtonStyle.success
            self.disabled = True
        else:
            self.style = discord.ButtonStyle.primary

    async def callback(self, interaction: discord.Interaction):
        await self.view.on_cell_click(interaction, self)


class BoardPanel(discord.ui.View):
    """One message worth of board columns."""

    def __init__(self, board: Board, category_indices: List[int], on_cell_click: CellClickHandler):
        super().__init__(timeout=None)
        self.board = board
        self.category_indices = list(category_indices)
        self.on_cell_click = on_cell_click
        self.embed: Optional[discord.Embed] = None
        self.message: Optional[discord.Message] = None
        self._buttons: Dict[Tuple[int, int], ClueButton] = {}

        # Buttons fill each row left to right, so add row by row
        for clue_index in range(board.clues_per_category):
            for category_index in self.category_indices:
                button = ClueButton(category_index, clue_index)
                self._buttons[(category_index, clue_index)] = button
                self.add_item(button)

    def get_button(self, category_index: int, clue_index: int) -> ClueButton:
        return self._buttons[(category_index, clue_index)]


class StartGameView(discord.ui.View):
    """The start / restart control."""

    def __init__(self, on_start: StartHandler):
        super().__init__(timeout=None)
        self.on_start = on_start
        self.start_button = discord.ui.Button(
            style=discord.ButtonStyle.primary,
            label=START_LABEL,
            custom_id=START_BUTTON_ID
        )
        self.start_button.callback = self._start_pressed
        self.add_item(self.start_button)

    def set_loading(self, loading: bool) -> None:
        self.start_button.disabled = loading
        self.start_button.label = LOADING_LABEL if loading else START_LABEL

    async def _start_pressed(self, interaction: discord.Interaction):
        await self.on_start(interaction)


class BoardRenderer:
    """
    Projects a Board into Discord messages for one channel.

    All other components touch Discord only through this class: the control
    message (start button plus loading/error status) and the board panels.
    """

    def __init__(
        self,
        channel: discord.abc.Messageable,
        on_cell_click: CellClickHandler,
        on_start: StartHandler
    ):
        self.channel = channel
        self.on_cell_click = on_cell_click
        self.on_start = on_start
        self.header_embeds: List[discord.Embed] = []
        self.panels: List[BoardPanel] = []
        self._titles: List[str] = []
        self._control_view: Optional[StartGameView] = None
        self._control_message: Optional[discord.Message] = None

    def render_headers(self, board: Board) -> List[discord.Embed]:
        """Build one header embed per panel, a field per category in board order."""
        self._titles = [category.title for category in board.categories]
        column_groups = split_columns(board.category_count)

        embeds = []
        for panel_number, category_indices in enumerate(column_groups, start=1):
            title = "🎯 Jeopardy!"
            if len(column_groups) > 1:
                title += f" ({panel_number}/{len(column_groups)})"
            embed = discord.Embed(title=title, color=BOARD_COLOR)
            for category_index in category_indices:
                embed.add_field(
                    name=_truncate(self._titles[category_index] or "(untitled)", FIELD_NAME_LIMIT),
                    value=f"Column {category_index + 1}",
                    inline=True
                )
            embed.set_footer(text="Click a cell for its question, click again for the answer")
            embeds.append(embed)

        self.header_embeds = embeds
        return embeds

    def render_grid(self, board: Board) -> List[BoardPanel]:
        """Build the clue cell views, every cell showing the hidden glyph."""
        if board.clues_per_category > MAX_ROWS_PER_PANEL:
            raise ValueError(
                f"A panel holds at most {MAX_ROWS_PER_PANEL} clue rows, got {board.clues_per_category}"
            )

        self.panels = [
            BoardPanel(board, category_indices, self.on_cell_click)
            for category_indices in split_columns(board.category_count)
        ]
        for panel, embed in zip(self.panels, self.header_embeds):
            panel.embed = embed
        return self.panels

    def update_cell(self, category_index: int, clue_index: int, text: str, revealed: RevealState) -> BoardPanel:
        """
        Show text in one cell; an answer also disables the cell.

        Returns:
            The panel holding the cell, ready to be re-sent with its embed
        """
        panel = self._panel_for(category_index)
        panel.get_button(category_index, clue_index).show(text, revealed)

        if panel.embed is not None:
            kind = "Question" if revealed is RevealState.QUESTION else "Answer"
            title = self._titles[category_index] if category_index < len(self._titles) else ""
            panel.embed.description = _truncate(f"**{title}** · {kind}\n{text}", DESCRIPTION_LIMIT)
        return panel

    def _panel_for(self, category_index: int) -> BoardPanel:
        for panel in self.panels:
            if category_index in panel.category_indices:
                return panel
        raise KeyError(f"No panel holds category {category_index}")

    async def show_board(self, board: Board) -> None:
        """Render headers and grid and post one message per panel."""
        self.render_headers(board)
        for panel in self.render_grid(board):
            panel.message = await self.channel.send(embed=panel.embed, view=panel)
        logger.debug(f"Posted board in {len(self.panels)} panels")

    async def clear(self) -> None:
        """Delete every panel message and forget the current headers and grid."""
        for panel in self.panels:
            panel.stop()
            if panel.message is None:
                continue
            try:
                await panel.message.delete()
            except discord.NotFound:
                logger.debug("Board panel already deleted")

        self.panels = []
        self.header_embeds = []
        self._titles = []

    async def show_loading(self) -> None:
        embed = discord.Embed(
            title="⏳ Loading...",
            description="Picking categories from the trivia service.",
            color=LOADING_COLOR
        )
        await self._update_control(embed, loading=True)

    async def hide_loading(self) -> None:
        embed = discord.Embed(
            title="🎯 Jeopardy!",
            description="Board is ready. Press the button to deal a fresh one.",
            color=BOARD_COLOR
        )
        await self._update_control(embed, loading=False)

    async def show_error(self, message: str) -> None:
        embed = discord.Embed(
            title="❌ Could not start a game",
            description=message,
            color=ERROR_COLOR
        )
        embed.set_footer(text="Press the button to try again")
        await self._update_control(embed, loading=False)

    async def _update_control(self, embed: discord.Embed, loading: bool) -> None:
        if self._control_view is None:
            self._control_view = StartGameView(self.on_start)
        self._control_view.set_loading(loading)

        if self._control_message is not None:
            try:
                await self._control_message.edit(embed=embed, view=self._control_view)
                return
            except discord.NotFound:
                logger.debug("Control message was deleted, sending a new one")

        self._control_message = await self.channel.send(embed=embed, view=self._control_view)
