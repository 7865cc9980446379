"""
BankCog: /bank option:<list_bank|add_account|generate_qr>.

- list_bank: paged (10 per page) list of supported banks with a search modal
- add_account: save one of your bank accounts for this server
- generate_qr: post a VietQR payment image for one of your saved accounts

The bank directory is refreshed on startup and then every
``BANK_REFRESH_HOURS`` hours by a background loop owned by this cog.
"""

from __future__ import annotations

import re
from typing import Any

import discord
from discord import app_commands
from discord.ext import commands, tasks

from pantrybot.bot.wizard import (
    WizardView,
    best_effort,
    make_button,
    make_select,
    paginate,
    report_error,
    respond,
    truncate,
)
from pantrybot.config.logging import get_logger
from pantrybot.db.models import Bank
from pantrybot.errors import ValidationError

logger = get_logger(__name__)

BANKS_PER_PAGE = 10
ACCOUNT_NUMBER_RE = re.compile(r"^\d{6,19}$")


def bank_list_embed(banks: list[dict], page_number: int, query: str | None = None) -> tuple[discord.Embed, Any]:
    page = paginate(banks, page_number, BANKS_PER_PAGE)
    embed = discord.Embed(
        title="List of Banks",
        description=f"Page {page.number} of {page.total_pages}",
        color=discord.Color(0x0099FF),
    )
    if query:
        embed.description += f" • Search: {query}"
    for bank in page.items:
        embed.add_field(
            name=bank.get("shortName") or bank.get("name") or "Unknown",
            value=f"{bank.get('name', '')}\nCode: {bank.get('code', '-')}, BIN: {bank.get('bin', '-')}",
            inline=False,
        )
    embed.set_footer(text="Data fetched from VietQR API")
    return embed, page


def parse_amount(raw: str | None) -> int | None:
    """Parse an optional VND amount such as ``150000`` or ``150.000``."""
    text = re.sub(r"[\s,._]", "", raw or "")
    if not text:
        return None
    if not text.isdigit() or int(text) <= 0:
        raise ValidationError("Amount must be a positive whole number.")
    return int(text)


class SearchModal(discord.ui.Modal, title="Search Bank"):
    query = discord.ui.TextInput(
        label="Enter bank name or short name:",
        placeholder="e.g. Vietcombank or VCB",
        required=True,
        max_length=100,
    )

    def __init__(self, view: "BankListView"):
        super().__init__(timeout=view.timeout)
        self.list_view = view

    async def on_submit(self, interaction: discord.Interaction) -> None:
        await self.list_view.apply_search(interaction, self.query.value)

    async def on_error(self, interaction: discord.Interaction, error: Exception) -> None:
        await report_error(interaction, error)


class BankListView(WizardView):
    """Paged bank directory with Previous/Next/Search."""

    def __init__(self, bot, owner_id: int, banks: list[dict]):
        super().__init__(
            owner_id=owner_id,
            sessions=bot.wizards,
            timeout=bot.settings.wizard.list_timeout,
        )
        self.directory = bot.banks
        self.all_banks = banks
        self.banks = banks
        self.state.step = "list"

    def render(self) -> dict[str, Any]:
        self.clear_items()
        embed, page = bank_list_embed(self.banks, self.state.page, self.state.data.get("query"))
        self.state.page = page.number
        self.add_item(make_button("⬅️ Previous", self._on_previous, disabled=not page.has_previous))
        self.add_item(make_button("➡️ Next", self._on_next, disabled=not page.has_next))
        self.add_item(make_button("🔍 Search", self._on_search, style=discord.ButtonStyle.primary))
        if self.state.data.get("query"):
            self.add_item(make_button("Show All", self._on_reset))
        return {"embed": embed}

    async def _on_previous(self, interaction: discord.Interaction) -> None:
        self.state.page -= 1
        await self.refresh(interaction)

    async def _on_next(self, interaction: discord.Interaction) -> None:
        self.state.page += 1
        await self.refresh(interaction)

    async def _on_search(self, interaction: discord.Interaction) -> None:
        await interaction.response.send_modal(SearchModal(self))

    async def _on_reset(self, interaction: discord.Interaction) -> None:
        self.banks = self.all_banks
        self.state.data.pop("query", None)
        self.state.page = 1
        await self.refresh(interaction)

    async def apply_search(self, interaction: discord.Interaction, query: str) -> None:
        matches = await self.directory.search(query)
        if not matches:
            await respond(interaction, "No banks found matching your search.")
            return
        self.banks = matches
        self.state.data["query"] = query.strip()
        self.state.page = 1
        await self.refresh(interaction)


class AccountModal(discord.ui.Modal, title="Add Bank Account"):
    bank = discord.ui.TextInput(
        label="Bank (short name, code or BIN)",
        placeholder="e.g. VCB, Vietcombank or 970436",
        required=True,
        max_length=50,
    )
    account_number = discord.ui.TextInput(
        label="Account Number",
        placeholder="Digits only",
        required=True,
        min_length=6,
        max_length=19,
    )
    account_name = discord.ui.TextInput(
        label="Account Holder Name",
        placeholder="As printed by your bank (optional)",
        required=False,
        max_length=100,
    )

    def __init__(self, cog: "BankCog", timeout: float):
        super().__init__(timeout=timeout)
        self.cog = cog

    async def on_submit(self, interaction: discord.Interaction) -> None:
        await self.cog.save_account(
            interaction,
            self.bank.value,
            self.account_number.value,
            self.account_name.value or None,
        )

    async def on_error(self, interaction: discord.Interaction, error: Exception) -> None:
        await report_error(interaction, error)


class QrModal(discord.ui.Modal, title="Generate QR Payment"):
    amount = discord.ui.TextInput(
        label="Amount (VND)",
        placeholder="Leave empty to let the payer choose",
        required=False,
        max_length=15,
    )
    memo = discord.ui.TextInput(
        label="Transfer Note",
        placeholder="e.g. Lunch 12/10",
        required=False,
        max_length=50,
    )

    def __init__(self, cog: "BankCog", account: Bank, timeout: float):
        super().__init__(timeout=timeout)
        self.cog = cog
        self.account = account

    async def on_submit(self, interaction: discord.Interaction) -> None:
        await self.cog.post_qr(interaction, self.account, self.amount.value, self.memo.value or None)

    async def on_error(self, interaction: discord.Interaction, error: Exception) -> None:
        await report_error(interaction, error)


class AccountPicker(WizardView):
    """Lets a member choose which saved account to generate a QR for."""

    def __init__(self, cog: "BankCog", owner_id: int, accounts: list[Bank]):
        super().__init__(
            owner_id=owner_id,
            sessions=cog.bot.wizards,
            timeout=cog.bot.settings.wizard.step_timeout,
        )
        self.cog = cog
        self.accounts = {a.id: a for a in accounts}

    def render(self) -> dict[str, Any]:
        self.clear_items()
        self.add_item(make_select(
            [
                discord.SelectOption(
                    label=truncate(f"{a.short_name or a.name} • {a.account_number}", 100),
                    description=truncate(a.account_name or a.name, 100) or None,
                    value=a.id,
                )
                for a in list(self.accounts.values())[:25]
            ],
            self._on_select,
            placeholder="Select an account",
        ))
        return {"content": "Which account should receive the payment?"}

    async def _on_select(self, interaction: discord.Interaction, values: list[str]) -> None:
        account = self.accounts[values[0]]
        self.state.selected_id = account.id
        await interaction.response.send_modal(QrModal(self.cog, account, self.cog.step_timeout))
        await self.finish(None, f"Selected **{account.short_name or account.name}** • {account.account_number}")


class BankCog(commands.Cog):
    """Bank directory and QR payment helpers."""

    def __init__(self, bot) -> None:
        self.bot = bot
        self.step_timeout = bot.settings.wizard.step_timeout

    async def cog_load(self) -> None:
        self.refresh_banks.change_interval(hours=self.bot.settings.banks.refresh_hours)
        self.refresh_banks.start()

    async def cog_unload(self) -> None:
        self.refresh_banks.cancel()

    @tasks.loop(hours=24)
    async def refresh_banks(self) -> None:
        """Runs once at startup, then on the configured interval."""
        await self.bot.banks.refresh()

    @refresh_banks.error
    async def refresh_banks_error(self, error: BaseException) -> None:
        logger.error(f"Bank list refresh loop failed: {error}", exc_info=error)

    @app_commands.command(name="bank", description="Bank command!")
    @app_commands.describe(option="Option to choose")
    @app_commands.choices(option=[
        app_commands.Choice(name="List Bank Supports", value="list_bank"),
        app_commands.Choice(name="Add Account Number", value="add_account"),
        app_commands.Choice(name="Generate QR Payment", value="generate_qr"),
    ])
    @app_commands.guild_only()
    async def bank(self, interaction: discord.Interaction, option: app_commands.Choice[str]) -> None:
        if option.value == "add_account":
            await interaction.response.send_modal(AccountModal(self, self.step_timeout))
            return
        if option.value == "generate_qr":
            await self._generate_qr(interaction)
            return

        banks = await self.bot.banks.load()
        if not banks:
            await interaction.response.send_message("No banks available.", ephemeral=True)
            return
        view = BankListView(self.bot, interaction.user.id, banks)
        await view.start(interaction, ephemeral=True)

    async def save_account(
        self,
        interaction: discord.Interaction,
        bank_key: str,
        account_number: str,
        account_name: str | None,
    ) -> None:
        account_number = re.sub(r"\s", "", account_number)
        if not ACCOUNT_NUMBER_RE.match(account_number):
            await respond(interaction, "❌ Account number must be 6 to 19 digits.")
            return

        bank = await self.bot.banks.find(bank_key)
        if bank is None:
            await respond(
                interaction,
                f"❌ Unknown bank `{bank_key.strip()}`. Use `/bank option:List Bank Supports` to see supported banks.",
            )
            return

        try:
            account = await self.bot.bank_accounts.add(
                str(interaction.guild_id), str(interaction.user.id), bank, account_number, account_name
            )
        except ValidationError as e:
            await respond(interaction, f"❌ {e}")
            return

        embed = discord.Embed(title="✅ Bank Account Saved", color=discord.Color.green())
        embed.add_field(name="Bank", value=account.short_name or account.name, inline=True)
        embed.add_field(name="Account Number", value=account.account_number, inline=True)
        if account.account_name:
            embed.add_field(name="Account Holder", value=account.account_name, inline=False)
        await respond(interaction, embed=embed)

    async def _generate_qr(self, interaction: discord.Interaction) -> None:
        accounts = await self.bot.bank_accounts.list_for_user(
            str(interaction.guild_id), str(interaction.user.id)
        )
        if not accounts:
            await interaction.response.send_message(
                "❌ You have no saved bank accounts. Use `/bank option:Add Account Number` first.",
                ephemeral=True,
            )
            return
        if len(accounts) == 1:
            await interaction.response.send_modal(QrModal(self, accounts[0], self.step_timeout))
            return
        picker = AccountPicker(self, interaction.user.id, accounts)
        await picker.start(interaction, ephemeral=True)

    async def post_qr(
        self,
        interaction: discord.Interaction,
        account: Bank,
        raw_amount: str | None,
        memo: str | None,
    ) -> None:
        if not account.bin:
            await respond(interaction, "❌ This account has no bank BIN; please add it again.")
            return
        try:
            amount = parse_amount(raw_amount)
        except ValidationError as e:
            await respond(interaction, f"❌ {e}")
            return

        url = self.bot.banks.qr_image_url(
            account.bin, account.account_number, amount=amount, memo=memo, account_name=account.account_name
        )
        embed = discord.Embed(title="💳 QR Payment", color=discord.Color(0x0099FF))
        embed.add_field(name="Bank", value=account.short_name or account.name, inline=True)
        embed.add_field(name="Account Number", value=account.account_number, inline=True)
        if account.account_name:
            embed.add_field(name="Account Holder", value=account.account_name, inline=False)
        if amount:
            embed.add_field(name="Amount", value=f"{amount:,} VND", inline=True)
        if memo:
            embed.add_field(name="Transfer Note", value=memo, inline=True)
        embed.set_image(url=url)
        embed.set_footer(text=f"Requested by {interaction.user.display_name}")
        logger.info(f"QR generated for account {account.id} by {interaction.user.id}")
        await best_effort(interaction.response.send_message(embed=embed), "QR payment post")
