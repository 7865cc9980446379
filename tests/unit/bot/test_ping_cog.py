"""Tests for PingCog."""

from __future__ import annotations

import pytest

from pantrybot.bot.cogs.ping import PingCog


class TestPingCog:
    @pytest.mark.asyncio
    async def test_ping(self, bot, make_interaction):
        cog = PingCog(bot)
        interaction = make_interaction()

        await cog.ping.callback(cog, interaction)

        interaction.response.send_message.assert_awaited_once_with("Pong!")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("hello", 5),
            ("", 0),
            ("phở bò", 6),
            ("🍜", 1),
        ],
    )
    async def test_length_counts_characters(self, bot, make_interaction, text, expected):
        cog = PingCog(bot)
        interaction = make_interaction()

        await cog.length.callback(cog, interaction, text)

        interaction.response.send_message.assert_awaited_once_with(f"Length of your text {expected}")
