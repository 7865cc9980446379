"""
Optional image step of the add/edit food flows.

The user is offered "Add Image" / "Skip". When they choose to add one, the
bot waits for their next message in the same channel that carries an image
attachment. A non-image attachment gets a re-prompt; timing out or pressing
"Cancel" continues without an image.
"""

from __future__ import annotations

import asyncio
from pathlib import PurePosixPath

import discord
from discord.ext import commands

from pantrybot.bot.wizard import ChoiceView, best_effort
from pantrybot.config.logging import get_logger
from pantrybot.services.catalog import ImageSource
from pantrybot.storage.uploads import IMAGE_EXTENSIONS

logger = get_logger(__name__)


def is_image_attachment(attachment: discord.Attachment) -> bool:
    content_type = attachment.content_type or ""
    if content_type:
        return content_type.startswith("image/")
    return PurePosixPath(attachment.filename).suffix.lower() in IMAGE_EXTENSIONS


class ImagePrompt:
    """
    Collects an optional image attachment from one user.

    Args:
        bot: Bot used to wait for the user's message
        timeout: Seconds the whole step may take
    """

    def __init__(self, bot: commands.Bot, timeout: float = 300):
        self.bot = bot
        self.timeout = timeout

    async def ask(
        self,
        interaction: discord.Interaction,
        question: str = "Would you like to add an image?",
        add_label: str = "Add Image",
        skip_label: str = "Skip",
    ) -> ImageSource | None:
        """
        Ask whether to attach an image, then collect it.

        ``interaction`` must not have been responded to yet (typically a modal
        submission); the question is sent as its ephemeral response.
        """
        choice = ChoiceView(
            interaction.user.id,
            {
                "add": (add_label, discord.ButtonStyle.primary),
                "skip": (skip_label, discord.ButtonStyle.secondary),
            },
            timeout=self.timeout,
        )
        await interaction.response.send_message(question, view=choice, ephemeral=True)
        await choice.wait()

        if choice.choice != "add":
            if choice.interaction is not None:
                await best_effort(
                    choice.interaction.response.edit_message(content="Continuing without an image.", view=None),
                    "Image prompt skip",
                )
            else:
                await best_effort(
                    interaction.edit_original_response(content="No answer, continuing without an image.", view=None),
                    "Image prompt timeout",
                )
            return None

        return await self.collect(choice.interaction)

    async def collect(self, interaction: discord.Interaction) -> ImageSource | None:
        """Wait for an image message from the interacting user in the interaction's channel."""
        user_id = interaction.user.id
        channel_id = interaction.channel_id

        cancel = ChoiceView(user_id, {"cancel": ("Cancel", discord.ButtonStyle.danger)}, timeout=self.timeout)
        await interaction.response.edit_message(
            content="📎 Please upload an image in this channel (PNG, JPG, WEBP or GIF).",
            view=cancel,
        )

        def check(message: discord.Message) -> bool:
            return (
                message.author.id == user_id
                and message.channel.id == channel_id
                and bool(message.attachments)
            )

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        cancelled = asyncio.create_task(cancel.wait())
        try:
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                waiter = asyncio.create_task(self.bot.wait_for("message", check=check, timeout=remaining))
                done, _ = await asyncio.wait({waiter, cancelled}, return_when=asyncio.FIRST_COMPLETED)

                if waiter not in done:
                    waiter.cancel()
                    if cancel.choice == "cancel":
                        await best_effort(
                            cancel.interaction.response.edit_message(
                                content="Image upload canceled, continuing without an image.", view=None
                            ),
                            "Image prompt cancel",
                        )
                        return None
                    break

                try:
                    message = waiter.result()
                except asyncio.TimeoutError:
                    break

                image = next((a for a in message.attachments if is_image_attachment(a)), None)
                if image is None:
                    await best_effort(
                        message.reply("❌ Please upload an image file (PNG, JPG, WEBP or GIF)."),
                        "Image re-prompt",
                    )
                    continue

                logger.debug(f"Received image {image.filename} from user {user_id}")
                await best_effort(
                    interaction.edit_original_response(content=f"🖼️ Received **{image.filename}**.", view=None),
                    "Image received",
                )
                return ImageSource(url=image.url, filename=image.filename)
        finally:
            cancel.stop()
            cancelled.cancel()

        await best_effort(
            interaction.edit_original_response(
                content="⏱️ No image received, continuing without an image.", view=None
            ),
            "Image prompt timeout",
        )
        return None
