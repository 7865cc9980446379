"""
Bank directory backed by the VietQR public API.

The bank list is fetched on startup and then on a fixed interval, and cached
to ``<data_dir>/banks.json`` so the bot keeps working from the last good copy
when the API is unavailable.
"""

import json
import os
from pathlib import Path
from urllib.parse import quote, urlencode

import aiofiles
import aiofiles.os
import aiohttp

from pantrybot.config.logging import get_logger

logger = get_logger(__name__)

_REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=30)


class BankDirectory:
    """
    Cached list of supported banks.

    Entries are the raw API objects (``id``, ``name``, ``code``, ``bin``,
    ``shortName``, ``logo``, ...).

    Args:
        api_url: Endpoint returning ``{"code": "00", "data": [...]}``
        cache_file: JSON cache location
        qr_image_base: Base URL of the QR image service
        qr_template: QR image template name
        http: Optional shared aiohttp session
    """

    def __init__(
        self,
        api_url: str,
        cache_file: Path | str,
        qr_image_base: str = "https://img.vietqr.io/image",
        qr_template: str = "compact2",
        http: aiohttp.ClientSession | None = None,
    ):
        self.api_url = api_url
        self.cache_file = Path(cache_file)
        self.qr_image_base = qr_image_base.rstrip("/")
        self.qr_template = qr_template
        self._http = http
        self._owns_http = http is None
        self._banks: list[dict] | None = None

    async def shutdown(self) -> None:
        if self._owns_http and self._http is not None:
            await self._http.close()
            self._http = None

    async def __aenter__(self) -> "BankDirectory":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.shutdown()
        return False

    async def refresh(self) -> bool:
        """
        Fetch the bank list and rewrite the cache file.

        Failures are logged and leave the previous cache in place.

        Returns:
            True if the cache was updated
        """
        logger.info("Fetching bank list from API...")
        if self._http is None:
            self._http = aiohttp.ClientSession(timeout=_REQUEST_TIMEOUT)

        try:
            async with self._http.get(self.api_url) as response:
                response.raise_for_status()
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError, ValueError) as e:
            logger.error(f"Error fetching bank list: {e}")
            return False

        if not isinstance(payload, dict) or payload.get("code") != "00":
            desc = payload.get("desc") if isinstance(payload, dict) else payload
            logger.error(f"Failed to fetch bank list: {desc}")
            return False

        banks = payload.get("data") or []
        try:
            await self._write_cache(banks)
        except OSError as e:
            logger.error(f"Error saving bank list to {self.cache_file}: {e}")
            return False

        self._banks = banks
        logger.info(f"Bank list saved successfully to {self.cache_file} ({len(banks)} banks)")
        return True

    async def _write_cache(self, banks: list[dict]) -> None:
        self.cache_file.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.cache_file.with_suffix(f".{os.getpid()}.tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(banks, indent=2, ensure_ascii=False))
        await aiofiles.os.replace(tmp_path, self.cache_file)

    async def load(self) -> list[dict]:
        """The cached bank list; empty when no cache exists or it is unreadable."""
        if self._banks is not None:
            return self._banks
        try:
            async with aiofiles.open(self.cache_file, "r", encoding="utf-8") as f:
                banks = json.loads(await f.read())
        except FileNotFoundError:
            logger.warning(f"Bank list cache not found at {self.cache_file}")
            return []
        except (OSError, ValueError) as e:
            logger.error(f"Error reading bank list from {self.cache_file}: {e}")
            return []
        self._banks = banks if isinstance(banks, list) else []
        return self._banks

    async def search(self, query: str) -> list[dict]:
        """Banks whose name or short name contains ``query`` (case-insensitive)."""
        needle = query.strip().lower()
        banks = await self.load()
        if not needle:
            return list(banks)
        return [
            bank for bank in banks
            if needle in (bank.get("name") or "").lower()
            or needle in (bank.get("shortName") or "").lower()
        ]

    async def find(self, key: str) -> dict | None:
        """Exact match on short name, code or BIN (case-insensitive)."""
        wanted = key.strip().lower()
        if not wanted:
            return None
        for bank in await self.load():
            candidates = (bank.get("shortName"), bank.get("code"), bank.get("bin"))
            if any(str(c).lower() == wanted for c in candidates if c):
                return bank
        return None

    def qr_image_url(
        self,
        bank_bin: str,
        account_number: str,
        amount: int | None = None,
        memo: str | None = None,
        account_name: str | None = None,
    ) -> str:
        """Quick-link URL of a VietQR payment image."""
        path = f"{quote(str(bank_bin))}-{quote(account_number)}-{quote(self.qr_template)}.png"
        params = {}
        if amount:
            params["amount"] = str(amount)
        if memo:
            params["addInfo"] = memo
        if account_name:
            params["accountName"] = account_name
        url = f"{self.qr_image_base}/{path}"
        return f"{url}?{urlencode(params, quote_via=quote)}" if params else url
