"""
Unit tests for the Discord bot shell and its slash command handlers.
"""
import logging
import unittest
from unittest.mock import AsyncMock, Mock, patch

import discord

from jeopardy_bot.bot import JeopardyBot
from jeopardy_bot.game_controller import GameController
from jeopardy_bot.models import RawCategory, RawClue
from tests.test_fixtures import MockDiscordObjects, TestFixtures, async_test


class TestJeopardyBot(unittest.TestCase):
    """Test Discord bot command handling with mocked Discord API."""

    def setUp(self):
        logging.disable(logging.CRITICAL)

    def tearDown(self):
        logging.disable(logging.NOTSET)

    def create_bot(self, config=None) -> JeopardyBot:
        bot = JeopardyBot(config)
        bot.trivia_client = TestFixtures.create_mock_trivia_client()
        return bot

    @async_test
    async def test_configuration_applied(self):
        bot = self.create_bot({
            'bot': {'command_prefix': '?'},
            'game': {'category_count': 4, 'clues_per_category': 3, 'request_timeout': 500}
        })

        bot.apply_configuration()

        settings = bot.config_manager.get_game_settings()
        self.assertEqual(bot.command_prefix, '?')
        self.assertEqual(settings.category_count, 4)
        self.assertEqual(settings.clues_per_category, 3)
        self.assertEqual(settings.request_timeout, 10)

    @async_test
    async def test_get_game_is_per_channel(self):
        bot = self.create_bot()
        channel_a = MockDiscordObjects.create_mock_channel(1)
        channel_b = MockDiscordObjects.create_mock_channel(2)

        game_a = bot.get_game(1, channel_a)

        self.assertIsInstance(game_a, GameController)
        self.assertIs(bot.get_game(1, channel_a), game_a)
        self.assertIsNot(bot.get_game(2, channel_b), game_a)
        self.assertIs(game_a.client, bot.trivia_client)

    @async_test
    async def test_start_command_routes_to_game(self):
        bot = self.create_bot()
        interaction = MockDiscordObjects.create_mock_interaction(channel_id=42)

        with patch.object(GameController, 'handle_start_interaction', new_callable=AsyncMock) as start:
            await bot.handle_start(interaction)

        start.assert_awaited_once_with(interaction)
        self.assertIn(42, bot.games)

    @async_test
    async def test_start_command_deals_board(self):
        bot = self.create_bot()
        interaction = MockDiscordObjects.create_mock_interaction(channel_id=42)

        await bot.handle_start(interaction)

        game = bot.games[42]
        self.assertIsNotNone(game.board)
        self.assertEqual(game.board.category_count, 6)

    @async_test
    async def test_status_without_board(self):
        bot = self.create_bot()
        interaction = MockDiscordObjects.create_mock_interaction()

        await bot.handle_status(interaction)

        interaction.response.send_message.assert_awaited_once()
        embed = interaction.response.send_message.await_args.kwargs['embed']
        self.assertIn("/start", embed.description)

    @async_test
    async def test_status_with_board(self):
        bot = self.create_bot()
        interaction = MockDiscordObjects.create_mock_interaction(channel_id=42)
        await bot.handle_start(interaction)

        status_interaction = MockDiscordObjects.create_mock_interaction(channel_id=42)
        await bot.handle_status(status_interaction)

        embed = status_interaction.response.send_message.await_args.kwargs['embed']
        progress = next(field for field in embed.fields if field.name == "Progress")
        self.assertIn("Hidden: 30/30", progress.value)

    @async_test
    async def test_status_with_untitled_categories(self):
        bot = self.create_bot()
        bot.trivia_client.fetch_category = AsyncMock(
            side_effect=lambda category_id: RawCategory(
                title="",
                clues=[RawClue(question=f"Q{i}", answer=f"A{i}") for i in range(5)]
            )
        )
        interaction = MockDiscordObjects.create_mock_interaction(channel_id=42)
        await bot.handle_start(interaction)

        status_interaction = MockDiscordObjects.create_mock_interaction(channel_id=42)
        await bot.handle_status(status_interaction)

        embed = status_interaction.response.send_message.await_args.kwargs['embed']
        categories = next(field for field in embed.fields if field.name == "Categories")
        self.assertEqual(categories.value.splitlines(), ["(untitled)"] * 6)

    @async_test
    async def test_set_categories_success(self):
        bot = self.create_bot()
        interaction = MockDiscordObjects.create_mock_interaction()

        await bot.handle_set_categories(interaction, 4)

        self.assertEqual(bot.config_manager.get_game_settings().category_count, 4)
        embed = interaction.response.send_message.await_args.kwargs['embed']
        self.assertEqual(embed.title, "✅ Settings Updated")

    @async_test
    async def test_set_clues_rejected(self):
        bot = self.create_bot()
        interaction = MockDiscordObjects.create_mock_interaction()

        await bot.handle_set_clues(interaction, 9)

        self.assertEqual(bot.config_manager.get_game_settings().clues_per_category, 5)
        kwargs = interaction.response.send_message.await_args.kwargs
        self.assertTrue(kwargs['ephemeral'])
        self.assertEqual(kwargs['embed'].title, "❌ Invalid Setting")

    @async_test
    async def test_help_command(self):
        bot = self.create_bot()
        interaction = MockDiscordObjects.create_mock_interaction()

        await bot.handle_help(interaction)

        embed = interaction.response.send_message.await_args.kwargs['embed']
        field_names = [field.name for field in embed.fields]
        self.assertIn("🎮 Game", field_names)
        self.assertIn("⚙️ Current Settings", field_names)

    @async_test
    async def test_error_response_uses_followup_when_responded(self):
        bot = self.create_bot()
        interaction = MockDiscordObjects.create_mock_interaction()
        interaction.response.is_done.return_value = True

        await bot.send_error_response(interaction, "Something broke")

        interaction.followup.send.assert_awaited_once()
        interaction.response.send_message.assert_not_awaited()

    @async_test
    async def test_error_response_swallows_discord_failure(self):
        bot = self.create_bot()
        interaction = MockDiscordObjects.create_mock_interaction()
        interaction.response.send_message.side_effect = discord.HTTPException(Mock(status=500), "boom")

        await bot.send_error_response(interaction, "Something broke")

    @async_test
    async def test_close_closes_trivia_client(self):
        bot = self.create_bot()
        client = bot.trivia_client

        with patch('discord.ext.commands.Bot.close', new_callable=AsyncMock):
            await bot.close()

        client.close.assert_awaited_once()


if __name__ == '__main__':
    unittest.main()
