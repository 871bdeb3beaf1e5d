"""Binary game coordinator messages for item management."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import List


@dataclass
class SetItemPosition:
    asset_id: int
    position: int

    def serialize(self) -> bytes:
        return struct.pack("<QQ", self.asset_id, self.position)


@dataclass
class Craft:
    """Craft request; a recipe of -2 acts as a wildcard."""

    recipe: int
    items: List[int] = field(default_factory=list)

    def serialize(self) -> bytes:
        header = struct.pack("<hh", self.recipe, len(self.items))
        return header + struct.pack(f"<{len(self.items)}Q", *self.items)


@dataclass
class DeleteItem:
    item_id: int

    def serialize(self) -> bytes:
        return struct.pack("<Q", self.item_id)


@dataclass
class NameItem:
    tool: int
    target: int
    name: str

    def serialize(self) -> bytes:
        return struct.pack("<QQ", self.tool, self.target) + self.name.encode("utf-8")