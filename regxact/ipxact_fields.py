"""Parsing of IP-XACT register fields and their enumerated values."""

from __future__ import annotations

import logging
from typing import Iterator, Optional
from xml.etree.ElementTree import Element

from regxact.model import AccessType, Enumeration, Register, RegisterBitmap
from regxact.number import Number

log = logging.getLogger(__name__)


class ReaderError(Exception):
    """Raised when an input document holds invalid register data."""


def access_type(text: str) -> AccessType:
    """Map an ``ipxact:access`` value to an access type; unknown values are reserved."""
    try:
        return AccessType(text)
    except ValueError:
        return AccessType.RESERVED


def local_name(tag) -> str:
    """Return a tag name without its namespace URI or prefix."""
    if not isinstance(tag, str):
        return ""
    if tag.startswith("{"):
        tag = tag.partition("}")[2]
    return tag.rpartition(":")[2]


def _children(elem: Element, name: str) -> Iterator[Element]:
    return (child for child in elem if local_name(child.tag) == name)


def _child(elem: Element, name: str) -> Optional[Element]:
    return next(_children(elem, name), None)


def _text(elem: Element) -> str:
    return elem.text or ""


def _number(elem: Element, what: str) -> int:
    try:
        return Number.parse(_text(elem)).value
    except ValueError:
        raise ReaderError(f"ipxact:{what} with invalid text: {_text(elem)!r}") from None


def parse_enumeration(elem: Element, bitmap: RegisterBitmap) -> Enumeration:
    """Add or update the enumerated value described by ``elem`` on ``bitmap``.

    A value that is not a valid number leaves the enumeration's value unchanged.
    """
    name = ""
    value: Optional[int] = None
    for current in elem:
        tag = local_name(current.tag)
        if tag == "name":
            name = _text(current)
        elif tag == "value":
            try:
                value = Number.parse(_text(current)).value
            except ValueError:
                value = None

    enumeration = bitmap.enumeration(name)
    if enumeration is None:
        enumeration = Enumeration(name)
    if value is not None:
        enumeration.value = value
    bitmap.add_enumeration(enumeration)
    return enumeration


def parse_enumerations(elem: Element, bitmap: RegisterBitmap) -> list[Enumeration]:
    """Parse every ``enumeratedValue`` child of ``elem`` into ``bitmap``."""
    return [parse_enumeration(current, bitmap) for current in _children(elem, "enumeratedValue")]


def parse_field(elem: Element, register: Register, update: bool) -> Optional[RegisterBitmap]:
    """Parse an ``ipxact:field`` element into ``register``.

    When ``update`` is true, only existing fields are touched: an unknown field is
    dropped (None is returned) and bit positions and access types are kept.
    Raises ReaderError on invalid numbers or a reset value wider than the field.
    """
    field_name = ""
    for current in _children(elem, "name"):
        field_name = _text(current)

    bitmap = register.bitmap(field_name)
    if bitmap is None:
        if update:
            log.warning("Bitfield %s not found, dropping.", field_name)
            return None
        bitmap = RegisterBitmap(field_name)
        register.add_bitmap(bitmap)

    stop = 0
    width = 0
    access = ""
    reset_value: Optional[int] = None

    for current in elem:
        tag = local_name(current.tag)
        if tag == "description":
            bitmap.description = _text(current)
        elif tag == "resets":
            reset = _child(current, "reset")
            value_elem = _child(reset, "value") if reset is not None else None
            if value_elem is not None:
                reset_value = _number(value_elem, "reset value")
        elif tag == "bitOffset":
            stop = _number(current, "bitOffset")
        elif tag == "bitWidth":
            width = _number(current, "bitWidth")
        elif tag == "access":
            access = _text(current)
        elif tag == "vendorExtensions":
            reserved = _child(current, "reserved")
            if reserved is not None:
                bitmap.reserved = _text(reserved) == "true"
            constant = _child(current, "constantValue")
            if constant is not None:
                bitmap.constant_value = _text(constant) == "true"
        elif tag == "enumeratedValues":
            parse_enumerations(current, bitmap)

    if not update:
        bitmap.start = stop + width - 1
        bitmap.stop = stop
        if field_name.startswith("reserved"):
            bitmap.type = AccessType.RESERVED
        else:
            bitmap.type = access_type(access)
        register.add_bitmap(bitmap)

    if reset_value is not None:
        if reset_value != reset_value & (bitmap.mask() >> bitmap.stop):
            raise ReaderError(f"Reset value does not fit in field {field_name!r}")
        bitmap.set_reset_value(reset_value)

    return bitmap