"""
Tests for BankDirectory.

The VietQR API is replaced by a fake aiohttp session.
"""

from __future__ import annotations

import json
import logging

import aiohttp
import pytest

from pantrybot.services import BankDirectory

BANKS = [
    {"id": 17, "name": "Ngân hàng TMCP Ngoại Thương Việt Nam", "code": "VCB", "bin": "970436", "shortName": "Vietcombank"},
    {"id": 4, "name": "Ngân hàng TMCP Đầu tư và Phát triển Việt Nam", "code": "BIDV", "bin": "970418", "shortName": "BIDV"},
    {"id": 21, "name": "Ngân hàng TMCP Quân đội", "code": "MB", "bin": "970422", "shortName": "MBBank"},
]


class _FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise aiohttp.ClientResponseError(None, (), status=self.status)

    async def json(self, content_type=None):
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class _FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.closed = False

    def get(self, url):
        if self.error is not None:
            raise self.error
        return self.response

    async def close(self):
        self.closed = True


def _directory(tmp_path, http) -> BankDirectory:
    return BankDirectory("https://api.example/v2/banks", tmp_path / "data" / "banks.json", http=http)


class TestRefresh:
    @pytest.mark.asyncio
    async def test_success_writes_cache(self, tmp_path):
        directory = _directory(tmp_path, _FakeSession(_FakeResponse({"code": "00", "desc": "ok", "data": BANKS})))

        assert await directory.refresh() is True

        cached = json.loads((tmp_path / "data" / "banks.json").read_text(encoding="utf-8"))
        assert [b["shortName"] for b in cached] == ["Vietcombank", "BIDV", "MBBank"]

    @pytest.mark.asyncio
    async def test_api_error_code_keeps_previous_cache(self, tmp_path, caplog):
        cache = tmp_path / "data" / "banks.json"
        cache.parent.mkdir(parents=True)
        cache.write_text(json.dumps(BANKS[:1]))
        directory = _directory(tmp_path, _FakeSession(_FakeResponse({"code": "99", "desc": "maintenance"})))

        with caplog.at_level(logging.ERROR, logger="pantrybot"):
            assert await directory.refresh() is False

        assert "maintenance" in caplog.text
        assert len(await directory.load()) == 1

    @pytest.mark.asyncio
    async def test_network_error_returns_false(self, tmp_path):
        directory = _directory(tmp_path, _FakeSession(error=aiohttp.ClientConnectionError("down")))

        assert await directory.refresh() is False
        assert await directory.load() == []

    @pytest.mark.asyncio
    async def test_shared_session_is_not_closed(self, tmp_path):
        http = _FakeSession(_FakeResponse({"code": "00", "data": []}))
        async with _directory(tmp_path, http):
            pass
        assert http.closed is False


class TestLookup:
    @pytest.fixture
    def directory(self, tmp_path):
        cache = tmp_path / "data" / "banks.json"
        cache.parent.mkdir(parents=True)
        cache.write_text(json.dumps(BANKS, ensure_ascii=False), encoding="utf-8")
        return _directory(tmp_path, _FakeSession())

    @pytest.mark.asyncio
    async def test_corrupt_cache_loads_empty(self, tmp_path):
        cache = tmp_path / "data" / "banks.json"
        cache.parent.mkdir(parents=True)
        cache.write_text("{not json")

        assert await _directory(tmp_path, _FakeSession()).load() == []

    @pytest.mark.asyncio
    async def test_search_matches_name_or_short_name(self, directory):
        assert [b["code"] for b in await directory.search("bidv")] == ["BIDV"]
        assert [b["code"] for b in await directory.search("quân đội")] == ["MB"]
        assert len(await directory.search("  ")) == 3
        assert await directory.search("nothing like this") == []

    @pytest.mark.asyncio
    async def test_find_by_short_name_code_or_bin(self, directory):
        assert (await directory.find("vietcombank"))["bin"] == "970436"
        assert (await directory.find("VCB"))["bin"] == "970436"
        assert (await directory.find("970422"))["code"] == "MB"
        assert await directory.find("Vietcom") is None


class TestQrImageUrl:
    def test_plain_url(self, tmp_path):
        directory = _directory(tmp_path, _FakeSession())
        assert directory.qr_image_url("970436", "0123456789") == (
            "https://img.vietqr.io/image/970436-0123456789-compact2.png"
        )

    def test_with_amount_memo_and_name(self, tmp_path):
        directory = _directory(tmp_path, _FakeSession())

        url = directory.qr_image_url("970436", "0123456789", amount=150000, memo="Lunch 12/10", account_name="NGUYEN VAN A")

        assert url.startswith("https://img.vietqr.io/image/970436-0123456789-compact2.png?")
        assert "amount=150000" in url
        assert "addInfo=Lunch%2012%2F10" in url
        assert "accountName=NGUYEN%20VAN%20A" in url
