"""Reader for IP-XACT register descriptions."""

from __future__ import annotations

import logging
import os
from typing import Iterator, Optional, Union
from xml.etree import ElementTree
from xml.etree.ElementTree import Element

from regxact.ipxact_fields import ReaderError, local_name, parse_field
from regxact.model import Component, Components, Register
from regxact.number import Number

log = logging.getLogger(__name__)


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


def _next_sibling(parent: Element, elem: Element, name: str) -> Optional[Element]:
    """Return the first sibling after ``elem`` with the given local name."""
    seen = False
    for child in parent:
        if seen and local_name(child.tag) == name:
            return child
        if child is elem:
            seen = True
    return None


class IPXACTReader:
    """Reads IP-XACT address blocks into a :class:`Components` collection.

    Components and registers already present are updated rather than replaced.
    With ``merge_addr`` set, registers are matched by address instead of name.
    """

    def __init__(
        self,
        path: Union[str, os.PathLike, None],
        components: Components,
        merge_addr: bool = False,
    ) -> None:
        self.path = path
        self.components = components
        self.merge_addr = merge_addr

    def read(self) -> Components:
        """Read and parse the file at ``path``."""
        if self.path is None:
            raise ReaderError("no input file given")
        with open(self.path, encoding="utf-8") as handle:
            xml = "".join(line.rstrip("\r\n") for line in handle)
        return self.read_string(xml)

    def read_string(self, xml: str) -> Components:
        """Parse an IP-XACT document held in a string."""
        try:
            root = ElementTree.fromstring(xml)
        except ElementTree.ParseError as exc:
            raise ReaderError(f"invalid XML document: {exc}") from None
        self._parse_element(root)
        return self.components

    def _parse_element(self, elem: Element) -> None:
        for child in elem:
            tag = local_name(child.tag)
            if tag == "addressBlock":
                self._parse_component(child, elem)
            elif tag == "addressUnitBits":
                continue
            else:
                self._parse_element(child)

    def _parse_component(self, elem: Element, parent: Element) -> None:
        address_unit_bits = 8
        addressable = _next_sibling(parent, elem, "addressUnitBits")
        if addressable is not None:
            address_unit_bits = _number(addressable, "addressUnitBits")

        name = ""
        for current in _children(elem, "name"):
            name = _text(current)

        component = self.components.get(name)
        update = component is not None
        if component is None:
            component = Component(name)
            self.components.add(component)
        component.address_unit_bits = address_unit_bits

        copied_registers = False
        for current in elem:
            tag = local_name(current.tag)
            if tag == "vendorExtensions":
                module_name = _child(current, "hdlModuleName")
                if module_name is not None:
                    component.module_name = _text(module_name)
            elif tag == "description":
                component.description = _text(current)
            elif tag == "range":
                component.range = _number(current, "range")
            elif tag == "baseAddress":
                component.base = _number(current, "baseAddress")
            elif tag == "typeIdentifier":
                type_id = _text(current)
                source = self.components.with_type_id(type_id)
                if source is not None:
                    for register in list(source.registers):
                        component.add_register(register)
                        copied_registers = True
                    component.type_id = type_id
                    component.type_id_copy = source.name
                else:
                    component.type_id = type_id
                    component.type_id_copy = component.name
            elif tag == "register":
                if copied_registers:
                    raise ReaderError(
                        "Unable to redefine registers for already defined component types."
                    )
                self._parse_register(current, component, update)

    def _parse_register(self, elem: Element, component: Component, update: bool) -> None:
        name = ""
        address_text: Optional[str] = None
        type_name: Optional[str] = None
        dimensions: Optional[int] = None
        has_fields = False

        for current in elem:
            tag = local_name(current.tag)
            if tag == "name":
                name = _text(current)
                log.info("Parsing registers for %s", name)
            elif tag == "addressOffset":
                address_text = _text(current)
            elif tag == "typeIdentifier":
                type_name = _text(current)
            elif tag == "dim":
                try:
                    dimensions = Number.parse(_text(current)).value
                except ValueError:
                    dimensions = 0
            elif tag == "field":
                has_fields = True

        address: Optional[int] = None
        if address_text is not None:
            try:
                address = Number.parse(address_text).value
            except ValueError:
                address = None

        register: Optional[Register] = None
        if self.merge_addr and address_text is not None:
            register = component.register_at(address if address is not None else 0)
            if register is not None:
                register.name = name
                register.clear()
                if has_fields:
                    update = False
        else:
            register = component.register(name)

        if register is None:
            register = Register(name)
            component.add_register(register)
            if update:
                log.warning("Register %s not found.", name)
            update = False

        has_type_source = False
        if type_name is not None:
            source = component.register_with_type_id(type_name)
            if source is not None:
                register.type_id = type_name
                register.type_id_copy = source.name
                register.width = source.width
                register.dimensions = source.dimensions
                has_type_source = True
            else:
                register.type_id = type_name
                register.type_id_copy = register.name

        if dimensions is not None:
            register.dimensions = dimensions

        for current in elem:
            tag = local_name(current.tag)
            if tag == "description":
                if update:
                    log.info("Replacing %s description with %s", name, _text(current))
                register.description = _text(current)
            elif tag == "size":
                try:
                    width = Number.parse(_text(current)).value
                except ValueError:
                    width = 0
                if not width:
                    raise ReaderError(f"ipxact:size with invalid text: {_text(current)!r}")
                if update:
                    log.info("Replacing %s width with %d", name, width)
                register.width = width
            elif tag == "field":
                if has_type_source:
                    raise ReaderError("ipxact:field not allowed with a typeIdentifier.")
                parse_field(current, register, update)

        if address_text is not None:
            if address is None:
                raise ReaderError(f"invalid register address: {address_text!r}")
            if update:
                log.info("Replacing %s addr with 0x%x", name, address)
            register.address = address
            component.add_register(register)