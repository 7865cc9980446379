"""
Tests for BankCog: bank list paging/search, saving accounts and QR posts.
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from pantrybot.bot.cogs.bank import (
    AccountModal,
    AccountPicker,
    BankCog,
    BankListView,
    QrModal,
    bank_list_embed,
    parse_amount,
)
from pantrybot.errors import ValidationError
from pantrybot.services import BankDirectory

GUILD = "1"

BANKS = [
    {"id": i, "name": f"Bank number {i}", "code": f"B{i}", "bin": f"970{i:03d}", "shortName": f"Bank{i}"}
    for i in range(1, 24)
] + [{"id": 99, "name": "Ngân hàng TMCP Ngoại Thương Việt Nam", "code": "VCB", "bin": "970436", "shortName": "Vietcombank"}]


@pytest.fixture
def directory(tmp_path):
    cache = tmp_path / "banks.json"
    cache.write_text(json.dumps(BANKS, ensure_ascii=False), encoding="utf-8")
    return BankDirectory("https://api.example/v2/banks", cache, http=MagicMock())


@pytest.fixture
def cog(bot, directory):
    bot.banks = directory
    return BankCog(bot)


def _option(value):
    return MagicMock(value=value)


class TestHelpers:
    def test_parse_amount(self):
        assert parse_amount(None) is None
        assert parse_amount("  ") is None
        assert parse_amount("150000") == 150000
        assert parse_amount("150.000") == 150000
        assert parse_amount("1,500,000") == 1500000

    @pytest.mark.parametrize("raw", ["abc", "0", "-5", "12.5k"])
    def test_parse_amount_rejects(self, raw):
        with pytest.raises(ValidationError):
            parse_amount(raw)

    def test_bank_list_embed_pages(self):
        embed, page = bank_list_embed(BANKS, 3)

        assert embed.title == "List of Banks"
        assert embed.description == "Page 3 of 3"
        assert len(embed.fields) == 4
        assert embed.footer.text == "Data fetched from VietQR API"
        assert not page.has_next


class TestBankList:
    @pytest.mark.asyncio
    async def test_list_opens_paged_view(self, cog, bot, make_interaction):
        interaction = make_interaction()

        await cog.bank.callback(cog, interaction, _option("list_bank"))

        kwargs = interaction.response.send_message.call_args.kwargs
        assert kwargs["ephemeral"] is True
        assert len(kwargs["embed"].fields) == 10
        assert kwargs["embed"].description == "Page 1 of 3"

    @pytest.mark.asyncio
    async def test_empty_directory(self, bot, tmp_path, make_interaction):
        bot.banks = BankDirectory("https://api.example", tmp_path / "missing.json", http=MagicMock())
        cog = BankCog(bot)
        interaction = make_interaction()

        await cog.bank.callback(cog, interaction, _option("list_bank"))

        interaction.response.send_message.assert_awaited_once_with("No banks available.", ephemeral=True)

    @pytest.mark.asyncio
    async def test_paging_buttons(self, bot, directory, make_interaction):
        bot.banks = directory
        view = BankListView(bot, 42, await directory.load())
        view.render()
        previous, following = view.children[0], view.children[1]
        assert previous.disabled and not following.disabled

        click = make_interaction()
        await view._on_next(click)
        await view._on_next(make_interaction())

        assert view.state.page == 3
        assert view.children[1].disabled

    @pytest.mark.asyncio
    async def test_search_and_reset(self, bot, directory, make_interaction):
        bot.banks = directory
        view = BankListView(bot, 42, await directory.load())
        view.state.page = 2
        click = make_interaction()

        await view.apply_search(click, "vietcom")

        embed = click.response.edit_message.call_args.kwargs["embed"]
        assert [f.name for f in embed.fields] == ["Vietcombank"]
        assert embed.description == "Page 1 of 1 • Search: vietcom"
        assert "Show All" in [c.label for c in view.children]

        reset = make_interaction()
        await view._on_reset(reset)
        assert reset.response.edit_message.call_args.kwargs["embed"].description == "Page 1 of 3"

    @pytest.mark.asyncio
    async def test_search_without_matches(self, bot, directory, make_interaction):
        bot.banks = directory
        view = BankListView(bot, 42, await directory.load())
        click = make_interaction()

        await view.apply_search(click, "zzz")

        click.response.send_message.assert_awaited_once_with("No banks found matching your search.", ephemeral=True)
        assert len(view.banks) == len(BANKS)


class TestSaveAccount:
    @pytest.mark.asyncio
    async def test_add_account_opens_modal(self, cog, make_interaction):
        interaction = make_interaction()

        await cog.bank.callback(cog, interaction, _option("add_account"))

        assert isinstance(interaction.response.send_modal.call_args.args[0], AccountModal)

    @pytest.mark.asyncio
    async def test_save_account(self, cog, bot, make_interaction):
        interaction = make_interaction()

        await cog.save_account(interaction, "VCB", "0123 456 789", "nguyen van a")

        embed = interaction.response.send_message.call_args.kwargs["embed"]
        assert embed.title == "✅ Bank Account Saved"
        accounts = await bot.bank_accounts.list_for_user(GUILD, "42")
        assert [(a.short_name, a.bin, a.account_number, a.account_name) for a in accounts] == [
            ("Vietcombank", "970436", "0123456789", "NGUYEN VAN A")
        ]

    @pytest.mark.asyncio
    async def test_invalid_account_number(self, cog, bot, make_interaction):
        interaction = make_interaction()

        await cog.save_account(interaction, "VCB", "12ab", None)

        interaction.response.send_message.assert_awaited_once_with(
            "❌ Account number must be 6 to 19 digits.", ephemeral=True
        )
        assert await bot.bank_accounts.list_for_user(GUILD, "42") == []

    @pytest.mark.asyncio
    async def test_unknown_bank(self, cog, make_interaction):
        interaction = make_interaction()

        await cog.save_account(interaction, "Nowhere Bank", "0123456789", None)

        assert interaction.response.send_message.call_args.args[0].startswith("❌ Unknown bank `Nowhere Bank`")

    @pytest.mark.asyncio
    async def test_duplicate_account(self, cog, make_interaction):
        await cog.save_account(make_interaction(), "VCB", "0123456789", None)
        interaction = make_interaction()

        await cog.save_account(interaction, "vietcombank", "0123456789", None)

        assert "already exists" in interaction.response.send_message.call_args.args[0]


class TestGenerateQr:
    @pytest.mark.asyncio
    async def test_no_accounts(self, cog, make_interaction):
        interaction = make_interaction()

        await cog.bank.callback(cog, interaction, _option("generate_qr"))

        assert "no saved bank accounts" in interaction.response.send_message.call_args.args[0]

    @pytest.mark.asyncio
    async def test_single_account_goes_straight_to_modal(self, cog, make_interaction):
        await cog.save_account(make_interaction(), "VCB", "0123456789", None)
        interaction = make_interaction()

        await cog.bank.callback(cog, interaction, _option("generate_qr"))

        modal = interaction.response.send_modal.call_args.args[0]
        assert isinstance(modal, QrModal)
        assert modal.account.account_number == "0123456789"

    @pytest.mark.asyncio
    async def test_several_accounts_show_picker(self, cog, make_interaction):
        await cog.save_account(make_interaction(), "VCB", "0123456789", None)
        await cog.save_account(make_interaction(), "B1", "9876543210", None)
        interaction = make_interaction()

        await cog.bank.callback(cog, interaction, _option("generate_qr"))

        kwargs = interaction.response.send_message.call_args.kwargs
        assert isinstance(kwargs["view"], AccountPicker)
        assert kwargs["ephemeral"] is True
        assert len(kwargs["view"].children[0].options) == 2

    @pytest.mark.asyncio
    async def test_post_qr(self, cog, bot, make_interaction):
        await cog.save_account(make_interaction(), "VCB", "0123456789", "Nguyen Van A")
        account = (await bot.bank_accounts.list_for_user(GUILD, "42"))[0]
        interaction = make_interaction()

        await cog.post_qr(interaction, account, "150.000", "Lunch")

        embed = interaction.response.send_message.call_args.kwargs["embed"]
        assert embed.title == "💳 QR Payment"
        assert embed.image.url.startswith("https://img.vietqr.io/image/970436-0123456789-compact2.png?")
        assert "amount=150000" in embed.image.url
        assert "150,000 VND" in [f.value for f in embed.fields]

    @pytest.mark.asyncio
    async def test_post_qr_with_bad_amount(self, cog, bot, make_interaction):
        await cog.save_account(make_interaction(), "VCB", "0123456789", None)
        account = (await bot.bank_accounts.list_for_user(GUILD, "42"))[0]
        interaction = make_interaction()

        await cog.post_qr(interaction, account, "lots", None)

        interaction.response.send_message.assert_awaited_once_with(
            "❌ Amount must be a positive whole number.", ephemeral=True
        )
