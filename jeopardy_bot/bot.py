import asyncio
import logging
import os
from typing import Dict, Optional

import discord
from discord.ext import commands

from .config_manager import ConfigManager
from .game_controller import GameController
from .trivia_client import TriviaClient


logger = logging.getLogger(__name__)


class JeopardyBot(commands.Bot):
    """Discord bot that deals Jeopardy boards"""

    def __init__(self, config=None):
        # Slash commands and button interactions need no privileged intents
        intents = discord.Intents.none()
        intents.guilds = True

        command_prefix = '!'
        if config and 'bot' in config:
            command_prefix = config['bot'].get('command_prefix', '!')

        super().__init__(
            command_prefix=command_prefix,
            intents=intents,
            help_command=None
        )

        self.app_config = config or {}
        self.config_manager = ConfigManager()
        self.trivia_client: Optional[TriviaClient] = None
        self.games: Dict[int, GameController] = {}

    async def setup_hook(self):
        """Called when the bot is starting up"""
        try:
            logger.info("Setting up bot components...")

            if self.app_config:
                self.apply_configuration()

            settings = self.config_manager.get_game_settings()
            self.trivia_client = TriviaClient(settings.api_base_url, settings.request_timeout)

            await self.setup_commands()
            logger.info("Bot setup completed successfully")

        except Exception as e:
            logger.error(f"Error during bot setup: {e}")
            raise

    def apply_configuration(self):
        """Apply the 'game' section of the configuration file."""
        rejected = self.config_manager.apply_config(self.app_config.get('game', {}))
        for message in rejected:
            logger.warning(f"Configuration value rejected: {message}")

        validation = self.config_manager.validate_settings()
        if not validation['valid']:
            logger.warning(f"Configuration issues: {validation['issues']}")
        logger.info("Configuration applied")

    async def setup_commands(self):
        """Register all slash commands"""
        @self.tree.command(name="help", description="Display available commands and their descriptions")
        async def help_command(interaction: discord.Interaction):
            await self.handle_help(interaction)

        @self.tree.command(name="start", description="Deal a new Jeopardy board in this channel")
        async def start_command(interaction: discord.Interaction):
            await self.handle_start(interaction)

        @self.tree.command(name="status", description="Show the board state in this channel")
        async def status_command(interaction: discord.Interaction):
            await self.handle_status(interaction)

        @self.tree.command(name="set_categories", description="Set the number of categories for the next board (1-10)")
        async def set_categories_command(interaction: discord.Interaction, number: int):
            await self.handle_set_categories(interaction, number)

        @self.tree.command(name="set_clues", description="Set the number of clues per category for the next board (1-5)")
        async def set_clues_command(interaction: discord.Interaction, number: int):
            await self.handle_set_clues(interaction, number)

        logger.info("Slash commands registered successfully")

    async def on_ready(self):
        """Called when the bot has successfully connected to Discord"""
        logger.info(f"Bot is ready! Logged in as {self.user}")
        logger.info(f"Bot is in {len(self.guilds)} guilds")

        try:
            synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} slash commands")
        except discord.HTTPException as e:
            logger.error(f"Failed to sync slash commands: {e}")

    async def on_error(self, event, *args, **kwargs):
        """Handle general bot errors"""
        logger.error(f"An error occurred in event {event}", exc_info=True)

    async def close(self):
        if self.trivia_client is not None:
            await self.trivia_client.close()
        await super().close()

    def get_game(self, channel_id: int, channel: discord.abc.Messageable) -> GameController:
        """Return the channel's game controller, creating it on first use."""
        game = self.games.get(channel_id)
        if game is None:
            game = GameController(channel_id, channel, self.trivia_client, self.config_manager)
            self.games[channel_id] = game
            logger.info(f"Created game controller for channel {channel_id}")
        return game

    async def handle_help(self, interaction: discord.Interaction):
        """Handle /help command"""
        try:
            help_embed = discord.Embed(
                title="🎯 Jeopardy Bot Commands",
                description="Deal a board, then click cells to reveal clues",
                color=0x00ff00
            )
            help_embed.add_field(
                name="🎮 Game",
                value=(
                    "`/start` - Deal a new board in this channel\n"
                    "`/status` - Show how much of the board is revealed"
                ),
                inline=False
            )
            help_embed.add_field(
                name="📋 Settings",
                value=(
                    "`/set_categories <number>` - Categories on the next board (1-10)\n"
                    "`/set_clues <number>` - Clues per category on the next board (1-5)"
                ),
                inline=False
            )
            help_embed.add_field(
                name="⚙️ Current Settings",
                value=f"```\n{self.config_manager.get_settings_summary()}\n```",
                inline=False
            )
            help_embed.set_footer(text="First click shows the question, second click the answer")

            await interaction.response.send_message(embed=help_embed)

        except discord.HTTPException as e:
            logger.error(f"Error in help command: {e}")
            await self.send_error_response(interaction, "Could not display help", "❌ Help Error")

    async def handle_start(self, interaction: discord.Interaction):
        """Handle /start command"""
        if interaction.channel is None:
            await self.send_error_response(interaction, "Boards can only be dealt in a channel")
            return

        game = self.get_game(interaction.channel_id, interaction.channel)
        await game.handle_start_interaction(interaction)

    async def handle_status(self, interaction: discord.Interaction):
        """Handle /status command"""
        game = self.games.get(interaction.channel_id)
        if game is None or not game.get_status()['has_board']:
            state = game.state.value if game else "idle"
            await self.send_info_response(
                interaction,
                f"No board in this channel yet (state: {state}). Use `/start` to deal one.",
                "📊 Board Status"
            )
            return

        status = game.get_status()
        embed = discord.Embed(title="📊 Board Status", color=0x6699ff)
        embed.add_field(name="State", value=status['state'], inline=True)
        embed.add_field(
            name="Progress",
            value=(
                f"Hidden: {status['hidden']}/{status['total_clues']}\n"
                f"Question showing: {status['question_showing']}\n"
                f"Answered: {status['answered']}"
            ),
            inline=True
        )
        titles = "\n".join(title or "(untitled)" for title in status['categories'])
        embed.add_field(name="Categories", value=titles[:1024], inline=False)
        await interaction.response.send_message(embed=embed, ephemeral=True)

    async def handle_set_categories(self, interaction: discord.Interaction, number: int):
        """Handle /set_categories command"""
        await self._respond_to_setting(interaction, self.config_manager.set_category_count(number))

    async def handle_set_clues(self, interaction: discord.Interaction, number: int):
        """Handle /set_clues command"""
        await self._respond_to_setting(interaction, self.config_manager.set_clues_per_category(number))

    async def _respond_to_setting(self, interaction: discord.Interaction, result: Dict):
        if not result['success']:
            await self.send_error_response(interaction, result['user_message'], "❌ Invalid Setting")
            return

        embed = discord.Embed(
            title="✅ Settings Updated",
            description=result['user_message'],
            color=0x00ff00
        )
        validation = self.config_manager.validate_settings()
        if not validation['valid']:
            embed.add_field(
                name="⚠️ Check Settings",
                value="\n".join(validation['issues']),
                inline=False
            )
        embed.set_footer(text="Applies to the next board")
        await interaction.response.send_message(embed=embed)

    async def send_error_response(self, interaction: discord.Interaction, message: str, title: str = "❌ Error"):
        """Send formatted error response to user"""
        try:
            embed = discord.Embed(
                title=title,
                description=message,
                color=0xff0000
            )
            embed.set_footer(text="If this error persists, try using /help for available commands")

            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException:
            logger.error("Failed to send error response to user")

    async def send_info_response(self, interaction: discord.Interaction, message: str, title: str = "ℹ️ Information"):
        """Send formatted info response to user"""
        try:
            embed = discord.Embed(
                title=title,
                description=message,
                color=0x6699ff
            )

            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException:
            logger.error("Failed to send info response to user")


async def run_bot(token=None, config=None):
    """Run the bot with proper error handling"""
    if not token:
        token = os.getenv('DISCORD_BOT_TOKEN')

    if not token:
        logger.error("No Discord bot token provided")
        return

    bot = JeopardyBot(config)

    try:
        logger.info("Starting Jeopardy Bot...")
        await bot.start(token)
    except discord.LoginFailure:
        logger.error("Invalid bot token provided")
    except discord.HTTPException as e:
        logger.error(f"HTTP error occurred: {e}")
    finally:
        if not bot.is_closed():
            await bot.close()


if __name__ == "__main__":
    asyncio.run(run_bot())
