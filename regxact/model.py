"""In-memory model of components, registers, bitfields and enumerations."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, Optional


class AccessType(enum.Enum):
    """Access permissions of a register bitfield."""

    READ_ONLY = "read-only"
    WRITE_ONLY = "write-only"
    READ_WRITE = "read-write"
    READ_WRITE_ONCE = "read-writeOnce"
    WRITE_ONCE = "writeOnce"
    RESERVED = "reserved"


def _find(items, name):
    return next((item for item in items if item.name == name), None)


def _replace_or_append(items, item):
    for position, existing in enumerate(items):
        if existing.name == item.name:
            items[position] = item
            return
    items.append(item)


@dataclass(eq=False)
class Enumeration:
    """A named value a bitfield may hold."""

    name: str
    value: int = 0
    description: str = ""


@dataclass(eq=False)
class RegisterBitmap:
    """A bitfield spanning bits ``stop`` (low) through ``start`` (high)."""

    name: str
    description: str = ""
    start: int = 0
    stop: int = 0
    type: AccessType = AccessType.READ_WRITE
    reset_value: Optional[int] = None
    reserved: bool = False
    constant_value: bool = False
    enumerations: list[Enumeration] = field(default_factory=list)

    @property
    def has_reset_value(self) -> bool:
        return self.reset_value is not None

    def mask(self) -> int:
        """Mask of the field's bits in register position."""
        bits = self.start - self.stop + 1
        if bits <= 0:
            return 0
        return ((1 << bits) - 1) << self.stop

    def set_reset_value(self, value: int) -> None:
        self.reset_value = value

    def add_enumeration(self, enumeration: Enumeration) -> None:
        """Add or replace an enumeration; enumerations stay ordered by value."""
        _replace_or_append(self.enumerations, enumeration)
        self.enumerations.sort(key=lambda item: item.value)

    def enumeration(self, name: str) -> Optional[Enumeration]:
        return _find(self.enumerations, name)


@dataclass(eq=False)
class Register:
    """A register holding bitfields ordered by their lowest bit."""

    name: str
    description: str = ""
    width: int = 0
    address: int = 0
    dimensions: int = 0
    type_id: str = ""
    type_id_copy: str = ""
    bitmaps: list[RegisterBitmap] = field(default_factory=list)

    def add_bitmap(self, bitmap: RegisterBitmap) -> None:
        _replace_or_append(self.bitmaps, bitmap)
        self.bitmaps.sort(key=lambda item: item.stop)

    def bitmap(self, name: str) -> Optional[RegisterBitmap]:
        return _find(self.bitmaps, name)

    def clear(self) -> None:
        """Remove all bitfields."""
        self.bitmaps.clear()

    def is_type_id_copy(self) -> bool:
        """True when this register reuses the type of another register."""
        return bool(self.type_id_copy) and self.type_id_copy != self.name


@dataclass(eq=False)
class Component:
    """An address block of registers ordered by address."""

    name: str
    description: str = ""
    base: int = 0
    module_name: str = ""
    range: int = 0
    address_unit_bits: int = 8
    type_id: str = ""
    type_id_copy: str = ""
    registers: list[Register] = field(default_factory=list)

    def add_register(self, register: Register) -> None:
        _replace_or_append(self.registers, register)
        self.registers.sort(key=lambda item: item.address)

    def register(self, name: str) -> Optional[Register]:
        return _find(self.registers, name)

    def register_at(self, address: int) -> Optional[Register]:
        return next((reg for reg in self.registers if reg.address == address), None)

    def register_with_type_id(self, type_id: str) -> Optional[Register]:
        return next((reg for reg in self.registers if reg.type_id == type_id), None)

    def is_type_id_copy(self) -> bool:
        """True when this component reuses the registers of another component."""
        return bool(self.type_id_copy) and self.type_id_copy != self.name


class Components:
    """All components read so far, in the order they were added."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._items: list[Component] = []

    def add(self, component: Component) -> None:
        _replace_or_append(self._items, component)

    def get(self, name: str) -> Optional[Component]:
        return _find(self._items, name)

    def with_type_id(self, type_id: str) -> Optional[Component]:
        return next((comp for comp in self._items if comp.type_id == type_id), None)

    def __iter__(self) -> Iterator[Component]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)