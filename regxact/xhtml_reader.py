"""Reader for XHTML register reference documents."""

from __future__ import annotations

import logging
import os
import re
from typing import Iterator, Optional, Union
from xml.etree import ElementTree
from xml.etree.ElementTree import Element

from regxact.ipxact_fields import ReaderError, local_name
from regxact.model import (
    AccessType,
    Component,
    Components,
    Enumeration,
    Register,
    RegisterBitmap,
)

log = logging.getLogger(__name__)

_SKIPPED_SECTIONS = frozenset({"MEM", "DIRENTRY", "NVM", "PORT"})
_RANGE_SEPARATOR = "\u2014"
_PAGE_MASK = 0xFFFFF000
_PAGED_PREFIXES = {
    0xFFFFF000: "PAGED REGISTER",
    0xFFFF0000: "OTHER0 PAGED REGISTER",
    0xFFFF1000: "OTHER1 PAGED REGISTER",
}
_UINT64_MASK = (1 << 64) - 1

_DECIMAL_PREFIX = re.compile(r"\s*([+-]?\d+)")
_HEX_PREFIX = re.compile(r"\s*([+-]?)(?:0[xX](?=[0-9a-fA-F]))?([0-9a-fA-F]+)")


class _MalformedRegister(ReaderError):
    """A register block that does not have the expected layout."""


def _atoi(text: str) -> int:
    """Parse the leading decimal integer of ``text``; 0 when there is none."""
    match = _DECIMAL_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def _leading_hex(text: str) -> int:
    """Parse the leading hexadecimal integer of ``text``; 0 when there is none."""
    match = _HEX_PREFIX.match(text)
    if not match:
        return 0
    value = int(match.group(2), 16)
    if match.group(1) == "-":
        value = -value
    return value & _UINT64_MASK


def _children(elem: Element, name: str) -> Iterator[Element]:
    return (child for child in elem if local_name(child.tag) == name)


def _first_child(elem: Element, name: str) -> Optional[Element]:
    return next(_children(elem, name), None)


def _first_child_of_class(elem: Element, name: str, css_class: str) -> Optional[Element]:
    """Return the first ``name`` child if it carries the given class."""
    child = _first_child(elem, name)
    if child is not None and child.get("class") == css_class:
        return child
    return None


def _next_sibling(parent: Element, elem: Element, name: str) -> Optional[Element]:
    seen = False
    for child in parent:
        if seen and local_name(child.tag) == name:
            return child
        if child is elem:
            seen = True
    return None


def _text(elem: Optional[Element]) -> str:
    if elem is None:
        return ""
    return "".join(elem.itertext())


class XHTMLReader:
    """Reads register sections of an XHTML reference into :class:`Components`.

    Each ``section`` with an ``id`` becomes a component; its ``div`` children
    describe registers, bitfield tables and enumerated values.
    """

    def __init__(self, path: Union[str, os.PathLike, None], components: Components) -> None:
        self.path = path
        self.components = components
        self._errors: list[str] = []

    def read(self) -> Components:
        """Read and parse the file at ``path``."""
        if self.path is None:
            raise ReaderError("no input file given")
        with open(self.path, encoding="utf-8") as handle:
            xml = "".join(line.rstrip("\r\n") for line in handle)
        return self.read_string(xml)

    def read_string(self, xml: str) -> Components:
        """Parse an XHTML document held in a string.

        Every section is processed; malformed registers are reported together
        in one ReaderError once the whole document has been read.
        """
        try:
            root = ElementTree.fromstring(xml)
        except ElementTree.ParseError as exc:
            raise ReaderError(f"invalid XML document: {exc}") from None
        self._errors = []
        self._parse_element(root)
        if self._errors:
            raise ReaderError("; ".join(self._errors))
        return self.components

    def _parse_element(self, elem: Element) -> None:
        log.debug("Parsing block %s : %s", local_name(elem.tag), elem.get("class", ""))
        for child in elem:
            if local_name(child.tag) == "section":
                section_id = child.get("id", "")
                if section_id:
                    self._add_component(child, section_id)
                # Sections without an id hold tables of contents.
            else:
                self._parse_element(child)

    def _add_component(self, elem: Element, section_id: str) -> None:
        if section_id in _SKIPPED_SECTIONS:
            return
        width = 32
        address_unit_bits = 8
        if section_id == "REG":
            section_id = "DEVICE"
        if section_id == "MII":
            address_unit_bits = 16
            width = 16

        description = _text(_first_child(elem, "h1"))
        log.info("Component: %s : %s", section_id, description)

        component = self.components.get(section_id)
        if component is None:
            component = Component(section_id)
            self.components.add(component)
        component.description = description
        component.address_unit_bits = address_unit_bits

        for current in _children(elem, "div"):
            try:
                self._add_register(current, component, width)
            except _MalformedRegister as exc:
                self._errors.append(f"{section_id}: {exc}")

    def _register_name(self, info: Element, component: Component) -> str:
        name = ""
        for span in _children(info, "span"):
            if span.get("class", "") != "res-attrs":
                continue
            for attribute in _children(span, "span"):
                if attribute.get("class", "") != "res-symbol":
                    continue
                name = _text(attribute).strip()
                if name.startswith("REG_"):
                    name = name[len("REG_"):]
                prefix = component.name + "__"
                if name.startswith(prefix):
                    name = name[len(prefix):]
        return name

    def _add_register(self, elem: Element, component: Component, width: int) -> None:
        is_mii = component.name == "MII"
        register_id = elem.get("id", "")
        _, separator, address_text = register_id.partition("-")
        if not separator:
            raise _MalformedRegister(f"invalid register id {register_id!r}")
        address = _leading_hex(address_text)

        info = _first_child(elem, "h2")
        if info is None:
            raise _MalformedRegister(f"register {register_id!r} has no heading")
        long_name = _text(_first_child(info, "a"))
        name = self._register_name(info, component)

        body = _first_child_of_class(elem, "div", "res-body")
        if body is None:
            raise _MalformedRegister(f"register {register_id!r} has no body")
        notes = _first_child_of_class(body, "div", "res-notes")
        if notes is None:
            raise _MalformedRegister(f"register {register_id!r} has no notes")
        paragraph = _first_child(notes, "p")
        notes_text = _text(paragraph if paragraph is not None else notes)

        log.info("ID: %s at %d, name %s (%s): %s", register_id, address, name, long_name, notes_text)

        if is_mii:
            if long_name == "Miscellaneous Control":
                # The document lists this register at the wrong address.
                address |= _PAGE_MASK
            if long_name.startswith("["):
                log.info("UNION... SKIPPING")
                return
            paged = _PAGED_PREFIXES.get(address & _PAGE_MASK)
            if paged is not None:
                log.info("%s: SKIPPING", paged)
                return

        if not name:
            if not long_name:
                raise ReaderError(f"Unknown name for register {register_id!r}")
            name = long_name

        register = component.register(name)
        if register is None:
            register = Register(name)
        register.description = notes_text
        register.width = width
        register.address = address
        component.add_register(register)

        bits = _first_child_of_class(body, "table", "bits")
        if bits is not None:
            log.info("Register %s has bitfield.", name)
            self._add_bitmap(bits, register)

    def _add_bitmap(self, elem: Element, register: Register) -> None:
        for row in _children(elem, "tr"):
            position = _first_child(row, "td")
            if position is None:
                continue
            body = _next_sibling(row, position, "td")
            if body is None:
                continue
            name_elem = _first_child_of_class(body, "div", "bitname")
            if name_elem is None:
                raise _MalformedRegister(f"Unable to locate bit name in {register.name!r}")

            position_text = _text(position)
            stop_text, separator, start_text = position_text.partition(_RANGE_SEPARATOR)
            if separator:
                start = _atoi(start_text)
                stop = _atoi(stop_text)
            else:
                start = stop = _atoi(position_text)

            bit_name = _text(name_elem) or f"unknown_{start}_{stop}"
            log.info("%s : %s", position_text, bit_name)

            bitmap = register.bitmap(bit_name)
            if bitmap is None:
                bitmap = RegisterBitmap(bit_name)
            bitmap.type = AccessType.READ_WRITE
            bitmap.start = start
            bitmap.stop = stop
            register.add_bitmap(bitmap)

            enums = _first_child(body, "table")
            if enums is not None:
                self._add_enumerations(enums, bitmap)

    def _add_enumerations(self, elem: Element, bitmap: RegisterBitmap) -> bool:
        for row in _children(elem, "tr"):
            value_elem = _first_child(row, "td")
            if value_elem is None:
                continue
            name_cell = _next_sibling(row, value_elem, "td")
            if name_cell is None:
                return False
            name_elem = _first_child(name_cell, "div")
            if name_elem is None:
                return False
            value_text = _text(value_elem)
            name = _text(name_elem)
            log.info("%s : %s", value_text, name)

            enumeration = bitmap.enumeration(name)
            if enumeration is None:
                enumeration = Enumeration(name)
            enumeration.value = _atoi(value_text)
            bitmap.add_enumeration(enumeration)
        return True