from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import db.crud as crud
from db.database import KeyValueStore, SqliteStore
from db.models import Quotation


@dataclass
class GlobalState:
    """
    Centralized application state shared by screens.

    Fields:
      - store: key-value store every screen reads and writes through
      - is_admin: mirror of the persisted admin flag
      - last_quotation: quotation produced by the most recent checkout
    """

    store: KeyValueStore = field(default_factory=SqliteStore)
    is_admin: bool = False
    last_quotation: Optional[Quotation] = None

    async def load(self) -> None:
        """Seed the store if needed and restore the admin flag."""
        await crud.init_store(self.store)
        self.is_admin = await crud.is_authenticated(self.store)

    async def login(self, username: str, password: str) -> bool:
        self.is_admin = await crud.login(self.store, username, password)
        return self.is_admin

    async def logout(self) -> None:
        await crud.logout(self.store)
        self.is_admin = False
