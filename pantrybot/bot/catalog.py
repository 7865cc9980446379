"""
Category and food management wizards.

Both ``/food option:Category`` and ``/food option:Food`` run the same
``CatalogWizard``; what differs (queries, embeds, modals, the image step,
the parent category picker) lives in a ``CatalogAdapter``.

Flow::

    menu ──List──────────▶ paged list ─────────────Back──▶ menu
         ──Add──▶ [pick category] ─▶ modal ─▶ [image] ─▶ announce ─▶ Add Another / Finish
         ──Edit──▶ paged picker ─▶ modal ─▶ [image] ─▶ announce ─▶ Edit Another / Finish
         ──Delete──▶ paged picker ─▶ confirm ─▶ announce ─▶ Delete Another / Finish
         ──Info──▶ paged picker ─▶ ephemeral detail (foods only)

Add/Edit/Delete are administrator-only and the permission is re-checked on
every privileged step.
"""

from __future__ import annotations

import io
import random
from pathlib import PurePosixPath
from typing import Any

import discord

from pantrybot.bot.image_prompt import ImagePrompt
from pantrybot.bot.wizard import (
    ConfirmView,
    Page,
    SELECT_OPTION_LIMIT,
    WizardStatus,
    WizardView,
    best_effort,
    is_admin,
    make_button,
    make_select,
    paginate,
    report_error,
    respond,
    truncate,
)
from pantrybot.config.logging import get_logger
from pantrybot.db.models import Food, FoodCategory
from pantrybot.errors import NotFoundError, ValidationError
from pantrybot.services.catalog import CatalogResult, ImageSource

logger = get_logger(__name__)

ITEMS_PER_PAGE = 4

FOOD_EMOJIS = [
    "🍕", "🍔", "🍟", "🌭", "🍿", "🥨", "🥯", "🥖", "🥐", "🥪",
    "🥙", "🧆", "🌮", "🌯", "🥗", "🥘", "🫕", "🥫", "🍝", "🍜",
    "🍲", "🍛", "🍣", "🍱", "🥟", "🦪", "🍤", "🍗", "🍖", "🍘",
]

ACTION_LABELS = {
    "list": ("List", "📋"),
    "add": ("Add", "➕"),
    "edit": ("Edit", "✏️"),
    "delete": ("Delete", "🗑️"),
    "info": ("Info", "🔍"),
}
ADMIN_ACTIONS = {"add", "edit", "delete"}
PICK_STEPS = {"edit": "pick_edit", "delete": "pick_delete", "info": "pick_info"}
PAGED_STEPS = {"list", "pick_edit", "pick_delete", "pick_info"}
PAST_TENSE = {"add": "added", "edit": "updated", "delete": "deleted"}


def random_food_emoji(rng: random.Random | None = None) -> str:
    return (rng or random).choice(FOOD_EMOJIS)


async def image_file(uploads, food: Food) -> discord.File | None:
    """The food's stored image as an attachment, if it still exists on disk."""
    if not food.image:
        return None
    try:
        data = await uploads.read_bytes(food.image)
    except ValueError as e:
        logger.warning(f"Refusing to read image of food {food.id}: {e}")
        return None
    if data is None:
        logger.warning(f"Image file for food {food.id} is missing: {food.image}")
        return None
    extension = PurePosixPath(food.image).suffix or ".png"
    return discord.File(io.BytesIO(data), filename=f"food-image{extension}")


def with_image(embed: discord.Embed, file: discord.File | None) -> dict[str, Any]:
    """Message kwargs for an embed, showing ``file`` as its image when present."""
    if file is None:
        return {"embed": embed}
    embed.set_image(url=f"attachment://{file.filename}")
    return {"embed": embed, "file": file}


class EntityModal(discord.ui.Modal):
    """Name + description form shared by every add/edit step."""

    def __init__(
        self,
        *,
        title: str,
        noun: str,
        on_submit,
        name: str | None = None,
        description: str | None = None,
        timeout: float = 300,
    ):
        super().__init__(title=title, timeout=timeout)
        self._on_submit = on_submit
        self.name_input = discord.ui.TextInput(
            label=f"{noun.capitalize()} Name",
            placeholder=f"Enter {noun} name",
            default=name,
            required=True,
            max_length=50,
        )
        self.description_input = discord.ui.TextInput(
            label="Description",
            style=discord.TextStyle.paragraph,
            placeholder=f"Enter {noun} description",
            default=description,
            required=False,
            max_length=200,
        )
        self.add_item(self.name_input)
        self.add_item(self.description_input)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        name = self.name_input.value.strip()
        description = (self.description_input.value or "").strip() or None
        if not name:
            await respond(interaction, "❌ Name cannot be empty.")
            return
        await self._on_submit(interaction, name, description)

    async def on_error(self, interaction: discord.Interaction, error: Exception) -> None:
        await report_error(interaction, error)


# ----------------------------------------------------------------------
# Adapters
# ----------------------------------------------------------------------

class CatalogAdapter:
    """What a ``CatalogWizard`` needs to know about the entity it manages."""

    noun = "item"
    plural = "items"
    page_size = ITEMS_PER_PAGE
    uses_image = False
    needs_parent = False
    actions: tuple[str, ...] = ("list", "add", "edit", "delete")

    def __init__(self, bot):
        self.bot = bot
        self.catalog = bot.catalog

    async def entities(self, guild_id: str) -> list:
        raise NotImplementedError

    async def get(self, guild_id: str, entity_id: str):
        raise NotImplementedError

    async def parents(self, guild_id: str) -> list[FoodCategory]:
        return []

    def list_embed(self, page: Page, *, for_deletion: bool = False) -> discord.Embed:
        raise NotImplementedError

    def option(self, entity) -> discord.SelectOption:
        return discord.SelectOption(
            label=truncate(entity.name, 100),
            description=truncate(entity.description, 50) or "No description",
            value=entity.id,
        )

    async def create(
        self,
        guild_id: str,
        user_id: str,
        name: str,
        description: str | None,
        parent_id: str | None,
        image: ImageSource | None,
    ) -> CatalogResult:
        raise NotImplementedError

    async def update(
        self, guild_id: str, entity, name: str, description: str | None, image: ImageSource | None
    ) -> CatalogResult:
        raise NotImplementedError

    async def remove(self, guild_id: str, entity):
        raise NotImplementedError

    async def announcement(self, action: str, entity) -> dict[str, Any]:
        """Public message kwargs announcing a completed add/edit/delete."""
        raise NotImplementedError

    async def confirm_payload(self, entity) -> dict[str, Any]:
        raise NotImplementedError

    async def detail(self, entity) -> dict[str, Any]:
        raise NotImplementedError


class CategoryAdapter(CatalogAdapter):
    noun = "category"
    plural = "categories"

    async def entities(self, guild_id: str) -> list[FoodCategory]:
        return await self.catalog.categories.list(guild_id)

    async def get(self, guild_id: str, entity_id: str) -> FoodCategory:
        return await self.catalog.categories.get(guild_id, entity_id)

    def list_embed(self, page: Page, *, for_deletion: bool = False) -> discord.Embed:
        embed = discord.Embed(
            title="🗑️ Delete Category" if for_deletion else "🍽️ Food Categories!",
            color=discord.Color.blue(),
            timestamp=discord.utils.utcnow(),
        )
        if not page.total_items:
            embed.description = "No categories found. Add some categories to get started!"
            return embed
        for category in page.items:
            embed.add_field(
                name=f"📁 {category.name}",
                value=f"Description: {category.description or 'No description'}\n"
                      f"Foods: {len(category.foods)}",
                inline=False,
            )
        embed.set_footer(text=f"Page {page.number}/{page.total_pages} • Total Categories: {page.total_items}")
        return embed

    async def create(self, guild_id, user_id, name, description, parent_id, image) -> CatalogResult:
        return CatalogResult(await self.catalog.add_category(guild_id, name, description))

    async def update(self, guild_id, entity, name, description, image) -> CatalogResult:
        return CatalogResult(await self.catalog.edit_category(guild_id, entity.id, name, description))

    async def remove(self, guild_id: str, entity) -> FoodCategory:
        return await self.catalog.delete_category(guild_id, entity.id)

    async def announcement(self, action: str, entity: FoodCategory) -> dict[str, Any]:
        if action == "delete":
            embed = discord.Embed(
                title="🗑️ Category Deleted",
                description=f'Category "{entity.name}" and its {len(entity.foods)} food(s) have been deleted.',
                color=discord.Color.red(),
                timestamp=discord.utils.utcnow(),
            )
            return {"embed": embed}
        embed = discord.Embed(
            title="✅ Category Added" if action == "add" else "✅ Category Updated",
            color=discord.Color.green(),
            timestamp=discord.utils.utcnow(),
        )
        embed.add_field(name="Name", value=entity.name, inline=True)
        embed.add_field(name="Description", value=entity.description or "No description", inline=False)
        return {"embed": embed}

    async def confirm_payload(self, entity: FoodCategory) -> dict[str, Any]:
        embed = discord.Embed(
            title="⚠️ Confirm Category Deletion",
            description=(
                f'Are you sure you want to delete the category "{entity.name}"? '
                f"This action cannot be undone.\n"
                f"All {len(entity.foods)} food(s) in it and their images will be permanently deleted."
            ),
            color=discord.Color.yellow(),
        )
        return {"embed": embed}


class FoodAdapter(CatalogAdapter):
    noun = "food"
    plural = "foods"
    uses_image = True
    needs_parent = True
    actions = ("list", "add", "edit", "delete", "info")

    def __init__(self, bot):
        super().__init__(bot)
        self.uploads = bot.uploads

    async def entities(self, guild_id: str) -> list[Food]:
        return await self.catalog.foods.list(guild_id)

    async def get(self, guild_id: str, entity_id: str) -> Food:
        return await self.catalog.foods.get(guild_id, entity_id)

    async def parents(self, guild_id: str) -> list[FoodCategory]:
        return await self.catalog.categories.list(guild_id)

    def list_embed(self, page: Page, *, for_deletion: bool = False) -> discord.Embed:
        embed = discord.Embed(
            title="🗑️ Delete Food" if for_deletion else "🍽️ Food Menu",
            color=discord.Color.blue(),
            timestamp=discord.utils.utcnow(),
        )
        if not page.total_items:
            embed.description = "No foods found. Add some foods to get started!"
            return embed

        grouped: dict[str, list[Food]] = {}
        for food in page.items:
            category_name = food.category.name if food.category else "Uncategorized"
            grouped.setdefault(category_name, []).append(food)

        for category_name, foods in grouped.items():
            lines = []
            for food in foods:
                line = f"{random_food_emoji()} {food.name}"
                if food.description:
                    suffix = "..." if len(food.description) > 50 else ""
                    line += f"\n   ↳ {food.description[:50]}{suffix}"
                lines.append(line)
            embed.add_field(name=f"📁 {category_name}", value="\n".join(lines), inline=False)

        embed.set_footer(text=f"Page {page.number}/{page.total_pages} • Total Foods: {page.total_items}")
        return embed

    def option(self, entity: Food) -> discord.SelectOption:
        category_name = entity.category.name if entity.category else "None"
        return discord.SelectOption(
            label=truncate(entity.name, 100),
            description=truncate(f"Category: {category_name}", 100),
            value=entity.id,
        )

    async def create(self, guild_id, user_id, name, description, parent_id, image) -> CatalogResult:
        return await self.catalog.add_food(guild_id, parent_id, name, description, user_id, image=image)

    async def update(self, guild_id, entity, name, description, image) -> CatalogResult:
        return await self.catalog.edit_food(guild_id, entity.id, name, description, image=image)

    async def remove(self, guild_id: str, entity) -> Food:
        return await self.catalog.delete_food(guild_id, entity.id)

    def _summary(self, title: str, food: Food, color: discord.Color) -> discord.Embed:
        embed = discord.Embed(title=title, color=color)
        embed.add_field(name="Name", value=food.name, inline=True)
        embed.add_field(name="Category", value=food.category.name if food.category else "None", inline=True)
        if food.description:
            embed.add_field(name="Description", value=food.description, inline=False)
        return embed

    async def announcement(self, action: str, entity: Food) -> dict[str, Any]:
        if action == "delete":
            return {"embed": self._summary("✅ Food Deleted", entity, discord.Color.red())}
        title = "✅ New Food Added" if action == "add" else "✅ Food Updated"
        embed = self._summary(title, entity, discord.Color.green())
        return with_image(embed, await image_file(self.uploads, entity))

    async def confirm_payload(self, entity: Food) -> dict[str, Any]:
        embed = self._summary("⚠️ Confirm Food Deletion", entity, discord.Color.yellow())
        embed.description = (
            "⚠️ Are you sure you want to delete this food? This action cannot be undone.\n"
            "All associated data including images will be permanently deleted."
        )
        return with_image(embed, await image_file(self.uploads, entity))

    async def detail(self, entity: Food) -> dict[str, Any]:
        embed = discord.Embed(title=f"🍽️ {entity.name}", color=discord.Color.blue())
        embed.add_field(name="📁 Category", value=entity.category.name if entity.category else "None", inline=True)
        embed.add_field(
            name="👤 Added By", value=f"<@{entity.user_id}>" if entity.user_id else "Unknown", inline=True
        )
        if entity.description:
            embed.add_field(name="📝 Description", value=entity.description, inline=False)
        return with_image(embed, await image_file(self.uploads, entity))


# ----------------------------------------------------------------------
# Wizard
# ----------------------------------------------------------------------

class CatalogWizard(WizardView):
    """
    Menu-driven CRUD over one kind of catalog entity.

    Args:
        bot: The running ``PantryBot`` (services, settings, wizard registry)
        adapter: Entity-specific behavior
        owner_id: Invoking user
        guild_id: Guild whose catalog is managed
    """

    def __init__(self, bot, adapter: CatalogAdapter, owner_id: int, guild_id: str):
        timeouts = bot.settings.wizard
        super().__init__(
            owner_id=owner_id,
            sessions=bot.wizards,
            timeout=timeouts.menu_timeout,
            guild_id=guild_id,
        )
        self.bot = bot
        self.adapter = adapter
        self.step_timeout = timeouts.step_timeout
        self.confirm_timeout = timeouts.confirm_timeout
        self._entities: list = []
        self._parents: list[FoodCategory] = []

    @property
    def guild_id(self) -> str:
        return str(self.state.guild_id)

    # -- rendering ------------------------------------------------------

    def render(self) -> dict[str, Any]:
        self.clear_items()
        step = self.state.step
        adapter = self.adapter

        if step in PAGED_STEPS:
            page = paginate(self._entities, self.state.page, adapter.page_size)
            self.state.page = page.number
            embed = adapter.list_embed(page, for_deletion=step == "pick_delete")
            if step != "list" and page.items:
                verb = {"pick_edit": "edit", "pick_delete": "delete", "pick_info": "view"}[step]
                self.add_item(make_select(
                    [adapter.option(e) for e in page.items],
                    self._on_pick,
                    placeholder=f"Select a {adapter.noun} to {verb}",
                    row=0,
                ))
            self.add_item(make_button(
                "Previous", self._on_previous, emoji="⬅️", disabled=not page.has_previous, row=1
            ))
            self.add_item(make_button("Next", self._on_next, emoji="➡️", disabled=not page.has_next, row=1))
            self.add_item(make_button("Back", self._on_back, emoji="↩️", row=1))
            return {"content": None, "embed": embed}

        if step == "pick_parent":
            page = paginate(self._parents, self.state.page, SELECT_OPTION_LIMIT)
            self.state.page = page.number
            self.add_item(make_select(
                [
                    discord.SelectOption(
                        label=truncate(c.name, 100),
                        description=truncate(c.description, 50) or "No description",
                        value=c.id,
                    )
                    for c in page.items
                ],
                self._on_pick,
                placeholder=f"Select a category for the {adapter.noun}",
                row=0,
            ))
            if page.total_pages > 1:
                self.add_item(make_button(
                    "Previous", self._on_previous, emoji="⬅️", disabled=not page.has_previous, row=1
                ))
                self.add_item(make_button("Next", self._on_next, emoji="➡️", disabled=not page.has_next, row=1))
            self.add_item(make_button("Back", self._on_back, emoji="↩️", row=1))
            embed = discord.Embed(
                title=f"🍽️ Add New {adapter.noun.capitalize()}",
                description=f"Please select a category for the new {adapter.noun} item.",
                color=discord.Color.blue(),
            )
            if page.total_pages > 1:
                embed.set_footer(text=f"Page {page.number}/{page.total_pages} • Total Categories: {page.total_items}")
            return {"content": None, "embed": embed}

        if step == "after":
            again = self.state.data.get("again", "add")
            self.add_item(make_button(
                f"{ACTION_LABELS[again][0]} Another", self._on_again, style=discord.ButtonStyle.primary
            ))
            self.add_item(make_button("Finish", self._on_finish, style=discord.ButtonStyle.secondary))
            return {
                "content": f"Would you like to {again} another {adapter.noun}?",
                "embed": None,
            }

        options = [
            discord.SelectOption(
                label=f"{ACTION_LABELS[action][0]} {adapter.noun.capitalize()}",
                emoji=ACTION_LABELS[action][1],
                value=action,
            )
            for action in adapter.actions
        ]
        self.add_item(make_select(options, self._on_action, placeholder=f"Select a {adapter.noun} option"))
        self.add_item(make_button("Close", self._on_close, style=discord.ButtonStyle.danger))
        return {"content": f"Please select a {adapter.noun} option:", "embed": None}

    async def _load(self) -> None:
        if self.state.step == "pick_parent":
            self._parents = await self.adapter.parents(self.guild_id)
        else:
            self._entities = await self.adapter.entities(self.guild_id)

    async def _announce(self, interaction: discord.Interaction, action: str, entity) -> None:
        channel = interaction.channel
        if channel is None:
            return
        payload = await self.adapter.announcement(action, entity)
        await best_effort(channel.send(**payload), f"{self.adapter.noun} {action} announcement")

    async def _deny(self, interaction: discord.Interaction) -> None:
        await respond(interaction, f"❌ Only administrators can manage {self.adapter.plural}.")

    # -- navigation -----------------------------------------------------

    async def _on_action(self, interaction: discord.Interaction, values: list[str]) -> None:
        await self._begin(interaction, values[0])

    async def _begin(self, interaction: discord.Interaction, action: str) -> None:
        adapter = self.adapter
        if action in ADMIN_ACTIONS and not await is_admin(interaction):
            await respond(interaction, f"❌ Only administrators can {action} {adapter.plural}.")
            return

        if action == "add":
            if adapter.needs_parent:
                self._parents = await adapter.parents(self.guild_id)
                if not self._parents:
                    await respond(interaction, "❌ No categories found. Please add a category first.")
                    return
                self.state.step = "pick_parent"
                self.state.page = 1
                await self.refresh(interaction)
                return
            self.state.selected_id = None
            await interaction.response.send_modal(self._add_modal())
            return

        await self._load()
        if action != "list" and not self._entities:
            verb = "view" if action == "info" else action
            await respond(interaction, f"❌ There are currently no {adapter.plural} to {verb}.")
            return
        self.state.step = PICK_STEPS.get(action, "list")
        self.state.page = 1
        await self.refresh(interaction)

    async def _on_previous(self, interaction: discord.Interaction) -> None:
        self.state.page -= 1
        await self._load()
        await self.refresh(interaction)

    async def _on_next(self, interaction: discord.Interaction) -> None:
        self.state.page += 1
        await self._load()
        await self.refresh(interaction)

    async def _on_back(self, interaction: discord.Interaction) -> None:
        self.state.step = "menu"
        self.state.selected_id = None
        await self.refresh(interaction)

    async def _on_close(self, interaction: discord.Interaction) -> None:
        await self.finish(interaction, f"{self.adapter.noun.capitalize()} menu closed.", WizardStatus.CANCELLED)

    async def _on_finish(self, interaction: discord.Interaction) -> None:
        await self.finish(interaction, f"{self.adapter.noun.capitalize()} management completed.")

    async def _on_again(self, interaction: discord.Interaction) -> None:
        await self._begin(interaction, self.state.data.get("again", "add"))

    async def _on_pick(self, interaction: discord.Interaction, values: list[str]) -> None:
        entity_id = values[0]
        step = self.state.step

        if step == "pick_parent":
            if not await is_admin(interaction):
                await self._deny(interaction)
                return
            self.state.selected_id = entity_id
            await interaction.response.send_modal(self._add_modal())
            return

        if step in ("pick_edit", "pick_delete") and not await is_admin(interaction):
            await self._deny(interaction)
            return

        try:
            entity = await self.adapter.get(self.guild_id, entity_id)
        except NotFoundError as e:
            await respond(interaction, f"❌ {e}")
            await self._load()
            await self.redraw()
            return

        self.state.selected_id = entity.id
        if step == "pick_edit":
            await interaction.response.send_modal(self._edit_modal(entity))
        elif step == "pick_delete":
            await self._confirm_delete(interaction, entity)
        else:
            await respond(interaction, **await self.adapter.detail(entity))

    # -- modals ---------------------------------------------------------

    def _add_modal(self) -> EntityModal:
        return EntityModal(
            title=f"Add New {self.adapter.noun.capitalize()}",
            noun=self.adapter.noun,
            on_submit=self._submit_add,
            timeout=self.step_timeout,
        )

    def _edit_modal(self, entity) -> EntityModal:
        async def submit(interaction: discord.Interaction, name: str, description: str | None) -> None:
            await self._submit_edit(interaction, entity, name, description)

        return EntityModal(
            title=f"Edit {self.adapter.noun.capitalize()}",
            noun=self.adapter.noun,
            on_submit=submit,
            name=entity.name,
            description=entity.description,
            timeout=self.step_timeout,
        )

    async def _submit_add(self, interaction: discord.Interaction, name: str, description: str | None) -> None:
        if not await is_admin(interaction):
            await self._deny(interaction)
            return

        image = None
        if self.adapter.uses_image:
            image = await ImagePrompt(self.bot, self.step_timeout).ask(
                interaction, f"Would you like to add an image for this {self.adapter.noun}?"
            )
        else:
            await interaction.response.defer()

        try:
            result = await self.adapter.create(
                self.guild_id,
                str(interaction.user.id),
                name,
                description,
                self.state.selected_id,
                image,
            )
        except (ValidationError, NotFoundError) as e:
            await respond(interaction, f"❌ {e}")
            self.state.step = "menu"
            await self.redraw()
            return

        await self._completed(interaction, "add", result)

    async def _submit_edit(
        self, interaction: discord.Interaction, entity, name: str, description: str | None
    ) -> None:
        if not await is_admin(interaction):
            await self._deny(interaction)
            return

        image = None
        if self.adapter.uses_image:
            image = await ImagePrompt(self.bot, self.step_timeout).ask(
                interaction,
                "Would you like to change the image?",
                add_label="Change Image",
                skip_label="Keep Image",
            )
        else:
            await interaction.response.defer()

        try:
            result = await self.adapter.update(self.guild_id, entity, name, description, image)
        except (ValidationError, NotFoundError) as e:
            await respond(interaction, f"❌ {e}")
            await self._load()
            await self.redraw()
            return

        await self._completed(interaction, "edit", result)

    async def _completed(self, interaction: discord.Interaction, action: str, result: CatalogResult) -> None:
        logger.info(
            f"{self.adapter.noun.capitalize()} {result.entity.name!r} {PAST_TENSE[action]} "
            f"by {interaction.user.id} in guild {self.guild_id}"
        )
        await self._announce(interaction, action, result.entity)
        if result.warning:
            await best_effort(respond(interaction, f"⚠️ {result.warning}"), "Upload warning")
        self.state.step = "after"
        self.state.selected_id = None
        self.state.data["again"] = action
        await self.redraw()

    # -- delete ---------------------------------------------------------

    async def _confirm_delete(self, interaction: discord.Interaction, entity) -> None:
        self.state.pending_confirmation = True
        confirm = ConfirmView(self.state.owner_id, timeout=self.confirm_timeout)
        await interaction.response.send_message(
            view=confirm, ephemeral=True, **await self.adapter.confirm_payload(entity)
        )
        await confirm.wait()
        self.state.pending_confirmation = False

        cleared = {"embed": None, "attachments": [], "view": None}
        if confirm.value is None:
            await best_effort(
                interaction.edit_original_response(
                    content="⏱️ Deletion confirmation timed out. Please try again.", **cleared
                ),
                "Confirmation timeout",
            )
            return

        answer = confirm.interaction
        if not confirm.value:
            await best_effort(answer.response.edit_message(content="Deletion canceled.", **cleared), "Cancel")
            return

        if not await is_admin(answer):
            await best_effort(
                answer.response.edit_message(
                    content=f"❌ Only administrators can manage {self.adapter.plural}.", **cleared
                ),
                "Permission denied",
            )
            return

        try:
            removed = await self.adapter.remove(self.guild_id, entity)
        except NotFoundError as e:
            await best_effort(answer.response.edit_message(content=f"❌ {e}", **cleared), "Delete failure")
            await self._load()
            await self.redraw()
            return

        await best_effort(
            answer.response.edit_message(
                content=f"✅ {self.adapter.noun.capitalize()} deleted successfully!", **cleared
            ),
            "Delete result",
        )
        await self._completed(answer, "delete", CatalogResult(removed))
