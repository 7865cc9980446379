"""
KissCog: /kiss.

    /kiss user:@someone                  text-only virtual kiss
    /kiss user:@someone kissing:<text>   kiss with a random image from the pool
    /kiss addimage:<attachment>          add an image to the pool (admin)
    /kiss remove:all                     empty the pool (admin)
    /kiss remove:list                    pick an image to remove (admin)
    /kiss remove:<file name>             remove one image (admin)

Options are handled in that priority: addimage, remove, kissing, plain text.
"""

from __future__ import annotations

import io
from pathlib import PurePosixPath
from typing import Any

import aiofiles
import discord
from discord import app_commands
from discord.ext import commands

from pantrybot.bot.wizard import (
    WizardView,
    is_admin,
    make_button,
    make_select,
    paginate,
    respond,
    total_pages,
    truncate,
)
from pantrybot.config.logging import get_logger
from pantrybot.errors import UploadError

logger = get_logger(__name__)

KISS_COLOR = discord.Color(0xFF69B4)
IMAGES_PER_PAGE = 5


def _image_file(data: bytes, filename: str) -> discord.File:
    return discord.File(io.BytesIO(data), filename=filename)


class KissRemovalView(WizardView):
    """Paged picker over the guild's kiss images; selecting one deletes it."""

    timeout_message = "❌ Image selection timed out."

    def __init__(self, bot, owner_id: int, guild_id: str, files: list[str]):
        super().__init__(
            owner_id=owner_id,
            sessions=bot.wizards,
            timeout=bot.settings.wizard.kiss_remove_timeout,
            guild_id=guild_id,
        )
        self.store = bot.kiss_images
        self.files = files

    def render(self) -> dict[str, Any]:
        self.clear_items()
        page = paginate(self.files, self.state.page, IMAGES_PER_PAGE)
        self.state.page = page.number

        header = discord.Embed(
            title="📸 Image Previews",
            description="Here are the available images:",
            color=KISS_COLOR,
        )
        listing = discord.Embed(
            title="🗑️ Kiss Image Removal",
            description="Select an image to remove from the list below:",
            color=KISS_COLOR,
        )
        listing.add_field(
            name="Available Images:",
            value="\n".join(f"{page.offset + i}. {name}" for i, name in enumerate(page.items, 1)) or "None",
            inline=False,
        )
        listing.set_footer(text=f"Total Images: {page.total_items} • Page {page.number}/{page.total_pages}")

        if page.items:
            self.add_item(make_select(
                [
                    discord.SelectOption(label=truncate(name, 100), description=truncate(name, 100), value=name)
                    for name in page.items
                ],
                self._on_select,
                placeholder="Select an image to remove",
                row=0,
            ))
        self.add_item(make_button("⏮️", self._on_first, disabled=not page.has_previous, row=1))
        self.add_item(make_button("◀️", self._on_previous, disabled=not page.has_previous, row=1))
        self.add_item(make_button(f"Page {page.number}/{page.total_pages}", disabled=True, row=1))
        self.add_item(make_button("▶️", self._on_next, disabled=not page.has_next, row=1))
        self.add_item(make_button("⏭️", self._on_last, disabled=not page.has_next, row=1))
        return {"embeds": [header, listing]}

    async def page_files(self) -> list[discord.File]:
        page = paginate(self.files, self.state.page, IMAGES_PER_PAGE)
        previews = []
        for name in page.items:
            data = await self.store.read(self.state.guild_id, name)
            if data is not None:
                previews.append(_image_file(data, name))
        return previews

    def timed_out_payload(self) -> dict[str, Any]:
        payload = super().timed_out_payload()
        payload.update(embeds=[], attachments=[])
        return payload

    async def _goto(self, interaction: discord.Interaction, page: int) -> None:
        self.state.page = page
        # render first so the page is clamped before the previews are read
        payload = self.render()
        await interaction.response.edit_message(view=self, attachments=await self.page_files(), **payload)

    async def _on_first(self, interaction: discord.Interaction) -> None:
        await self._goto(interaction, 1)

    async def _on_previous(self, interaction: discord.Interaction) -> None:
        await self._goto(interaction, self.state.page - 1)

    async def _on_next(self, interaction: discord.Interaction) -> None:
        await self._goto(interaction, self.state.page + 1)

    async def _on_last(self, interaction: discord.Interaction) -> None:
        await self._goto(interaction, total_pages(len(self.files), IMAGES_PER_PAGE))

    async def _on_select(self, interaction: discord.Interaction, values: list[str]) -> None:
        name = values[0]
        if not await is_admin(interaction):
            await respond(interaction, "❌ Only administrators can remove kiss images.")
            return

        data = await self.store.read(self.state.guild_id, name)
        if not await self.store.remove(self.state.guild_id, name):
            await respond(interaction, "❌ Failed to remove the image.")
            return

        embed = discord.Embed(
            title="✅ Kiss Image Removed Successfully",
            description=f"Removed: `{name}`",
            color=KISS_COLOR,
            timestamp=discord.utils.utcnow(),
        )
        embed.set_footer(text="This image is no longer available for the kiss command")
        kwargs: dict[str, Any] = {"embed": embed}
        if data is not None:
            embed.set_image(url=f"attachment://{name}")
            kwargs["file"] = _image_file(data, name)
        await respond(interaction, **kwargs)
        await self.finish(None, f"Removed `{name}`.", embeds=[], attachments=[])


class KissCog(commands.Cog):
    """Virtual kisses backed by a per-server image pool."""

    def __init__(self, bot) -> None:
        self.bot = bot

    @property
    def store(self):
        return self.bot.kiss_images

    @app_commands.command(name="kiss", description="Send a virtual kiss to someone.")
    @app_commands.describe(
        user="Tag a user to kiss",
        kissing="Use kissing command with random saved image",
        addimage="Upload an image file",
        remove='Remove a kiss image by filename, "list" to pick one, or "all" to remove all images',
    )
    @app_commands.guild_only()
    async def kiss(
        self,
        interaction: discord.Interaction,
        user: discord.Member | None = None,
        kissing: str | None = None,
        addimage: discord.Attachment | None = None,
        remove: str | None = None,
    ) -> None:
        guild_id = str(interaction.guild_id)

        if addimage is not None:
            await self._add_image(interaction, guild_id, addimage)
            return

        if remove:
            await self._remove(interaction, guild_id, remove.strip())
            return

        if kissing:
            await self._kiss_with_image(interaction, guild_id, kissing, user)
            return

        target = user.mention if user else "everyone"
        await interaction.response.send_message(f"{interaction.user.mention} 💋 Sending a virtual kiss to {target}")

    async def _add_image(self, interaction: discord.Interaction, guild_id: str, attachment: discord.Attachment) -> None:
        if not await is_admin(interaction):
            await interaction.response.send_message("❌ Only administrators can add kiss images.", ephemeral=True)
            return

        await interaction.response.defer(ephemeral=True)
        try:
            filename = await self.store.add_from_url(guild_id, attachment.url, attachment.filename)
        except UploadError as e:
            logger.warning(f"Rejected kiss image {attachment.filename!r} in guild {guild_id}: {e}")
            await interaction.followup.send(
                f"❌ Failed to save the image. {e}", ephemeral=True
            )
            return

        data = await self.store.read(guild_id, filename)
        embed = discord.Embed(
            title="✅ Kiss Image Added Successfully",
            description=f"Filename: `{filename}`",
            color=KISS_COLOR,
            timestamp=discord.utils.utcnow(),
        )
        embed.set_footer(text="This image is now available for the kiss command")
        kwargs: dict[str, Any] = {"embed": embed, "ephemeral": True}
        if data is not None:
            embed.set_image(url=f"attachment://{filename}")
            kwargs["file"] = _image_file(data, filename)
        await interaction.followup.send(**kwargs)

    async def _remove(self, interaction: discord.Interaction, guild_id: str, target: str) -> None:
        if not await is_admin(interaction):
            await interaction.response.send_message("❌ Only administrators can remove kiss images.", ephemeral=True)
            return

        if target.lower() == "all":
            count = await self.store.remove_all(guild_id)
            logger.info(f"Removed {count} kiss images from guild {guild_id}")
            await interaction.response.send_message(f"✅ Successfully removed {count} kiss images.", ephemeral=True)
            return

        files = await self.store.list(guild_id)
        if not files:
            await interaction.response.send_message("❌ No images found to remove.", ephemeral=True)
            return

        if target.lower() != "list":
            if target not in files:
                await interaction.response.send_message(f"❌ Image `{target}` not found.", ephemeral=True)
                return
            removed = await self.store.remove(guild_id, target)
            message = f"✅ Removed `{target}`." if removed else "❌ Failed to remove the image."
            await interaction.response.send_message(message, ephemeral=True)
            return

        view = KissRemovalView(self.bot, interaction.user.id, guild_id, files)
        await view.start(interaction, ephemeral=True, files=await view.page_files())

    async def _kiss_with_image(
        self,
        interaction: discord.Interaction,
        guild_id: str,
        kissing: str,
        user: discord.Member | None,
    ) -> None:
        path = await self.store.random(guild_id)
        if path is None:
            await interaction.response.send_message(
                "❌ No kiss images found. Please ask an administrator to add some images first.",
                ephemeral=True,
            )
            return

        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except OSError as e:
            logger.error(f"Error reading kiss image {path}: {e}")
            await interaction.response.send_message("❌ Error sending the image. Please try again.", ephemeral=True)
            return

        filename = f"kiss{PurePosixPath(path.name).suffix}"
        target = f" {user.mention}" if user else ""
        embed = discord.Embed(
            description=f"{interaction.user.mention} 💋 {kissing}{target}",
            color=KISS_COLOR,
            timestamp=discord.utils.utcnow(),
        )
        embed.set_image(url=f"attachment://{filename}")
        await interaction.response.send_message(embed=embed, file=_image_file(data, filename))
