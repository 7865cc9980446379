"""
Interactive wizard building blocks.

Every multi-step command (category/food CRUD, random picker, bank list,
kiss image removal) is a ``WizardView``: one message whose components are
re-rendered from an explicit ``WizardState`` record as the invoking user
clicks through it. The view:

- only accepts component interactions from the invoking user; anyone else
  gets an ephemeral rejection and the state is left untouched,
- reports callback failures ephemerally without ending the wizard,
- on inactivity timeout replaces its components with a disabled
  "Timed Out" indicator exactly once.

States are registered in ``WizardSessions`` under the message id for as long
as the wizard is active.
"""

from __future__ import annotations

import math
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

import discord

from pantrybot.config.logging import get_logger
from pantrybot.errors import NotFoundError, ValidationError

logger = get_logger(__name__)

T = TypeVar("T")

GENERIC_FAILURE = "❌ Something went wrong while processing your request. Please try again."
NOT_YOURS = "This menu is not for you!"

# Discord error codes meaning the interaction/message is simply gone:
# unknown channel/message/webhook/interaction, invalid webhook token,
# interaction already acknowledged.
EXPIRED_ERROR_CODES = {10003, 10008, 10015, 10062, 50027, 40060}

# Discord caps a select menu at this many options
SELECT_OPTION_LIMIT = 25


# ----------------------------------------------------------------------
# Pagination
# ----------------------------------------------------------------------

def total_pages(item_count: int, page_size: int) -> int:
    """``ceil(item_count / page_size)``; 0 when there are no items."""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return math.ceil(item_count / page_size)


def clamp_page(page: int, pages: int) -> int:
    """Clamp a 1-based page number into ``[1, pages]`` (1 when there are no pages)."""
    return max(1, min(page, pages))


@dataclass
class Page(Generic[T]):
    items: list[T]
    number: int
    total_pages: int
    total_items: int
    page_size: int

    @property
    def has_previous(self) -> bool:
        return self.number > 1

    @property
    def has_next(self) -> bool:
        return self.number < self.total_pages

    @property
    def offset(self) -> int:
        """Number of items on the pages before this one."""
        return (self.number - 1) * self.page_size


def paginate(items: Sequence[T], page: int, page_size: int) -> Page[T]:
    """Slice ``items`` for a (clamped) 1-based page."""
    pages = total_pages(len(items), page_size)
    number = clamp_page(page, pages)
    start = (number - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        number=number,
        total_pages=pages,
        total_items=len(items),
        page_size=page_size,
    )


# ----------------------------------------------------------------------
# State
# ----------------------------------------------------------------------

class WizardStatus(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"


@dataclass
class WizardState:
    """Everything a wizard knows about its progress."""

    owner_id: int
    guild_id: str | None = None
    step: str = "menu"
    page: int = 1
    selected_id: str | None = None
    pending_confirmation: bool = False
    filters: list[str] = field(default_factory=list)
    status: WizardStatus = WizardStatus.ACTIVE
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def active(self) -> bool:
        return self.status is WizardStatus.ACTIVE


class WizardSessions:
    """Active wizard states keyed by the id of the message they live on."""

    def __init__(self) -> None:
        self._states: dict[int, WizardState] = {}

    def open(self, message_id: int, state: WizardState) -> None:
        self._states[message_id] = state
        logger.debug(f"Wizard opened on message {message_id} ({len(self._states)} active)")

    def get(self, message_id: int) -> WizardState | None:
        return self._states.get(message_id)

    def close(self, message_id: int) -> WizardState | None:
        state = self._states.pop(message_id, None)
        if state is not None:
            logger.debug(f"Wizard on message {message_id} closed ({state.status.value})")
        return state

    def __contains__(self, message_id: int) -> bool:
        return message_id in self._states

    def __len__(self) -> int:
        return len(self._states)


# ----------------------------------------------------------------------
# Platform call helpers
# ----------------------------------------------------------------------

def is_expired_error(error: BaseException) -> bool:
    """True when a Discord call failed only because the target no longer accepts it."""
    if isinstance(error, (discord.InteractionResponded, discord.NotFound)):
        return True
    return isinstance(error, discord.HTTPException) and error.code in EXPIRED_ERROR_CODES


async def best_effort(call: Awaitable[Any], what: str = "Discord call") -> bool:
    """
    Await a Discord call whose failure must not break the flow.

    Expired interactions/messages are logged at debug level; other HTTP
    failures are genuine faults and are logged as warnings.

    Returns:
        True if the call succeeded
    """
    try:
        await call
    except (discord.HTTPException, discord.InteractionResponded) as e:
        if is_expired_error(e):
            logger.debug(f"{what} skipped, target expired: {e}")
        else:
            logger.warning(f"{what} failed: {e}")
        return False
    return True


async def respond(interaction: discord.Interaction, content: str | None = None, **kwargs: Any) -> None:
    """Send an ephemeral reply whether or not the interaction was already answered."""
    kwargs.setdefault("ephemeral", True)
    if interaction.response.is_done():
        await interaction.followup.send(content, **kwargs)
    else:
        await interaction.response.send_message(content, **kwargs)


async def report_error(interaction: discord.Interaction, error: Exception) -> None:
    """Tell the user a step failed; user-correctable errors are shown verbatim."""
    if isinstance(error, (ValidationError, NotFoundError)):
        message = f"❌ {error}"
    else:
        logger.error(
            f"Unhandled error in wizard callback for user {interaction.user.id}: {error}",
            exc_info=error,
        )
        message = GENERIC_FAILURE
    await best_effort(respond(interaction, message), "Error report")


async def is_admin(interaction: discord.Interaction) -> bool:
    """Whether the interacting member holds the Administrator permission right now."""
    guild = interaction.guild
    if guild is None:
        return False

    member = interaction.user if isinstance(interaction.user, discord.Member) else None
    if member is None:
        member = guild.get_member(interaction.user.id)
    if member is None:
        try:
            member = await guild.fetch_member(interaction.user.id)
        except discord.HTTPException as e:
            logger.warning(f"Could not fetch member {interaction.user.id}: {e}")
            return False
    return member.guild_permissions.administrator


# ----------------------------------------------------------------------
# Components
# ----------------------------------------------------------------------

Callback = Callable[[discord.Interaction], Awaitable[Any]]


def make_button(
    label: str,
    callback: Callback | None = None,
    *,
    style: discord.ButtonStyle = discord.ButtonStyle.secondary,
    disabled: bool = False,
    emoji: str | None = None,
    row: int | None = None,
) -> discord.ui.Button:
    button = discord.ui.Button(label=label, style=style, disabled=disabled, emoji=emoji, row=row)
    if callback is not None:
        async def _invoke(interaction: discord.Interaction) -> None:
            await callback(interaction)
        button.callback = _invoke
    return button


def make_select(
    options: list[discord.SelectOption],
    callback: Callable[[discord.Interaction, list[str]], Awaitable[Any]],
    *,
    placeholder: str,
    max_values: int = 1,
    row: int | None = None,
) -> discord.ui.Select:
    select = discord.ui.Select(
        placeholder=placeholder,
        options=options,
        min_values=1,
        max_values=max(1, min(max_values, len(options))),
        row=row,
    )

    async def _invoke(interaction: discord.Interaction) -> None:
        await callback(interaction, list(select.values))

    select.callback = _invoke
    return select


def truncate(text: str | None, limit: int) -> str:
    if not text:
        return ""
    return text if len(text) <= limit else f"{text[:limit - 3]}..."


# ----------------------------------------------------------------------
# Views
# ----------------------------------------------------------------------

class WizardView(discord.ui.View):
    """
    Base class for a single-user, state-driven, timeout-bounded wizard.

    Subclasses implement ``render()`` to rebuild components for the current
    state and return the message payload (content/embeds/...).

    Args:
        owner_id: The invoking user; the only one allowed to interact
        sessions: Registry the state is published to while active
        timeout: Inactivity timeout in seconds
        guild_id: Guild the wizard operates on
    """

    timeout_message: str | None = None

    def __init__(
        self,
        *,
        owner_id: int,
        sessions: WizardSessions | None,
        timeout: float,
        guild_id: str | None = None,
    ):
        super().__init__(timeout=timeout)
        self.state = WizardState(owner_id=owner_id, guild_id=guild_id)
        self.sessions = sessions
        self.message: discord.Message | None = None

    # -- lifecycle ------------------------------------------------------

    def render(self) -> dict[str, Any]:
        """Rebuild components for ``self.state``; returns the message payload."""
        return {}

    async def start(self, interaction: discord.Interaction, *, ephemeral: bool = False, **extra: Any) -> None:
        """Send the initial view as the reply to ``interaction`` and register the state."""
        payload = {**self.render(), **extra}
        await interaction.response.send_message(view=self, ephemeral=ephemeral, **payload)
        self.attach(await interaction.original_response())

    def attach(self, message: discord.Message) -> None:
        self.message = message
        if self.sessions is not None:
            self.sessions.open(message.id, self.state)

    async def refresh(self, interaction: discord.Interaction, **extra: Any) -> None:
        """Re-render onto the message the component interaction came from."""
        payload = {**self.render(), **extra}
        await interaction.response.edit_message(view=self, **payload)

    async def redraw(self, **extra: Any) -> None:
        """Re-render onto the wizard message outside of a component response."""
        if self.message is None:
            return
        payload = {**self.render(), **extra}
        await best_effort(self.message.edit(view=self, **payload), "Wizard redraw")

    def _close(self, status: WizardStatus) -> bool:
        if not self.state.active:
            return False
        self.state.status = status
        self.stop()
        if self.sessions is not None and self.message is not None:
            self.sessions.close(self.message.id)
        return True

    async def finish(
        self,
        interaction: discord.Interaction | None = None,
        content: str = "✅ Done.",
        status: WizardStatus = WizardStatus.COMPLETED,
        **extra: Any,
    ) -> None:
        """End the wizard and strip its components."""
        if not self._close(status):
            return
        payload: dict[str, Any] = {"content": content, "view": None, **extra}
        # discord.py rejects embed and embeds together
        if "embeds" not in payload:
            payload["embed"] = None
        if interaction is not None and not interaction.response.is_done():
            await best_effort(interaction.response.edit_message(**payload), "Wizard finish")
        elif self.message is not None:
            await best_effort(self.message.edit(**payload), "Wizard finish")

    # -- discord.py hooks -----------------------------------------------

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if not self.state.active:
            return False
        if interaction.user.id == self.state.owner_id:
            return True
        await best_effort(
            interaction.response.send_message(NOT_YOURS, ephemeral=True),
            "Foreign user rejection",
        )
        return False

    def timed_out_payload(self) -> dict[str, Any]:
        indicator = discord.ui.View(timeout=None)
        indicator.add_item(discord.ui.Button(
            label="Timed Out", style=discord.ButtonStyle.secondary, emoji="⏱️", disabled=True,
        ))
        payload: dict[str, Any] = {"view": indicator}
        if self.timeout_message is not None:
            payload["content"] = self.timeout_message
        return payload

    async def on_timeout(self) -> None:
        if not self._close(WizardStatus.TIMED_OUT):
            return
        logger.debug(f"Wizard {type(self).__name__} for user {self.state.owner_id} timed out")
        if self.message is not None:
            await best_effort(self.message.edit(**self.timed_out_payload()), "Timeout display")

    async def on_error(
        self,
        interaction: discord.Interaction,
        error: Exception,
        item: discord.ui.Item[Any],
    ) -> None:
        await report_error(interaction, error)


class ConfirmView(discord.ui.View):
    """
    Yes/No confirmation for destructive actions.

    After ``await view.wait()``, ``value`` is True/False, or None on timeout;
    ``interaction`` is the button click to respond to.
    """

    def __init__(self, owner_id: int, timeout: float = 30):
        super().__init__(timeout=timeout)
        self.owner_id = owner_id
        self.value: bool | None = None
        self.interaction: discord.Interaction | None = None

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id == self.owner_id:
            return True
        await best_effort(
            interaction.response.send_message(NOT_YOURS, ephemeral=True),
            "Foreign user rejection",
        )
        return False

    @discord.ui.button(label="Yes", style=discord.ButtonStyle.danger)
    async def confirm(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        self.value = True
        self.interaction = interaction
        self.stop()

    @discord.ui.button(label="No", style=discord.ButtonStyle.secondary)
    async def cancel(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        self.value = False
        self.interaction = interaction
        self.stop()

    async def on_error(self, interaction: discord.Interaction, error: Exception, item) -> None:
        await report_error(interaction, error)


class ChoiceView(discord.ui.View):
    """
    A row of buttons where the first click wins.

    ``choices`` maps a key to ``(label, style)``; after ``wait()`` the picked
    key is in ``choice`` (None on timeout) and the click in ``interaction``.
    """

    def __init__(
        self,
        owner_id: int,
        choices: dict[str, tuple[str, discord.ButtonStyle]],
        timeout: float = 300,
    ):
        super().__init__(timeout=timeout)
        self.owner_id = owner_id
        self.choice: str | None = None
        self.interaction: discord.Interaction | None = None
        for key, (label, style) in choices.items():
            self.add_item(make_button(label, self._picker(key), style=style))

    def _picker(self, key: str) -> Callback:
        async def pick(interaction: discord.Interaction) -> None:
            if self.choice is not None:
                return
            self.choice = key
            self.interaction = interaction
            self.stop()
        return pick

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id == self.owner_id:
            return True
        await best_effort(
            interaction.response.send_message(NOT_YOURS, ephemeral=True),
            "Foreign user rejection",
        )
        return False

    async def on_error(self, interaction: discord.Interaction, error: Exception, item) -> None:
        await report_error(interaction, error)
