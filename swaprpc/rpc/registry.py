"""
Method name table for registered command types.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import DuplicateMethodError, RegistryFrozenError, UnregisteredCommandError

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RegistryEntry:
    method: str
    command_type: type
    named: bool


class CommandRegistry:
    """Maps command classes to their JSON-RPC method and parameter convention.

    Entries are added during startup and the registry is then frozen.  A
    frozen registry is never mutated, so lookups from many threads need no
    locking.
    """

    def __init__(self) -> None:
        self._by_method: dict[str, RegistryEntry] = {}
        self._by_type: dict[type, RegistryEntry] = {}
        self._frozen = False

    def register(self, method: str, command_type: type, named: bool = False) -> None:
        if self._frozen:
            raise RegistryFrozenError(f"cannot register {method!r} after the registry is frozen")
        if method in self._by_method:
            raise DuplicateMethodError(method)
        if command_type in self._by_type:
            raise DuplicateMethodError(self._by_type[command_type].method)
        entry = RegistryEntry(method=method, command_type=command_type, named=named)
        self._by_method[method] = entry
        self._by_type[command_type] = entry
        log.debug("Registered %s (%s parameters)", method, "named" if named else "positional")

    def freeze(self) -> CommandRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, command: object) -> tuple[str, bool]:
        entry = self._by_type.get(type(command))
        if entry is None:
            raise UnregisteredCommandError(command)
        return entry.method, entry.named

    def handles(self, command_type: type) -> bool:
        return command_type in self._by_type

    def methods(self) -> list[str]:
        return sorted(self._by_method)

    def __contains__(self, method: object) -> bool:
        return method in self._by_method

    def __len__(self) -> int:
        return len(self._by_method)
