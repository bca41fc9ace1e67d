from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from typing import Dict, Mapping, Optional, Protocol

from transfer_ocr.validations.patterns import MAPPING_ACCOUNT_RX

logger = logging.getLogger("transfer_ocr.persistence.mappings")


class AccountMappingStore(Protocol):
    def lookup(self, name: str) -> Optional[str]: ...


def _key(name: str) -> str:
    return " ".join((name or "").split()).upper()


class InMemoryAccountMappings:
    """Dict-backed name -> masked account store.

    Entries whose account is not shaped ``*{8,}`` + 3-4 digits are dropped on
    load, so ``lookup`` only ever returns masked accounts.
    """

    def __init__(self, entries: Optional[Mapping[str, str]] = None) -> None:
        self._entries: Dict[str, str] = {}
        for name, account in (entries or {}).items():
            key, account = _key(name), str(account or "").strip()
            if key and MAPPING_ACCOUNT_RX.match(account):
                self._entries[key] = account
            else:
                logger.warning("mapping_dropped_on_load", extra={"mapping_name": key, "account": account})
        self._lock = threading.Lock()

    def lookup(self, name: str) -> Optional[str]:
        return self._entries.get(_key(name))

    def all(self) -> Dict[str, str]:
        return dict(self._entries)

    def save(self, name: str, account: str) -> bool:
        """Auto-save rule for a receiver/account pair confirmed by the user.

        Skips empty values, accounts not shaped ``*{8,}`` + 3-4 digits, and
        entries identical to what is already stored. Returns True on write.
        Memory is only updated once the entry has been persisted.
        """
        key = _key(name)
        account = (account or "").strip()
        if not key or not account:
            return False
        if not MAPPING_ACCOUNT_RX.match(account):
            logger.info("mapping_skip_shape", extra={"mapping_name": key, "account": account})
            return False
        with self._lock:
            if self._entries.get(key) == account:
                return False
            entries = {**self._entries, key: account}
            self._persist(entries)
            self._entries = entries
        logger.info("mapping_saved", extra={"mapping_name": key, "account": account})
        return True

    def _persist(self, entries: Dict[str, str]) -> None:
        pass


class JsonAccountMappings(InMemoryAccountMappings):
    """Mappings kept in a JSON object file ({"NAME": "***********2531"}).

    Writes go through a temporary file and ``os.replace`` so a crash never
    leaves a truncated file behind.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        entries: Dict[str, str] = {}
        if os.path.exists(path):
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError(f"mapping file {path} must hold a JSON object")
            entries = data
        super().__init__(entries)

    def _persist(self, entries: Dict[str, str]) -> None:
        folder = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(folder, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=folder, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(entries, f, ensure_ascii=False, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except OSError:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
