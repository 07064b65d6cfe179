import xml.etree.ElementTree as ET

import pytest

from regxact.ipxact_fields import (
    ReaderError,
    access_type,
    local_name,
    parse_enumeration,
    parse_enumerations,
    parse_field,
)
from regxact.model import AccessType, Register, RegisterBitmap

NS = "urn:example:ipxact"


def _xml(body: str) -> ET.Element:
    return ET.fromstring(f'<ipxact:wrap xmlns:ipxact="{NS}">{body}</ipxact:wrap>')[0]


def _field(name, offset, width, extra=""):
    return _xml(
        f"<ipxact:field><ipxact:name>{name}</ipxact:name>"
        f"<ipxact:bitOffset>{offset}</ipxact:bitOffset>"
        f"<ipxact:bitWidth>{width}</ipxact:bitWidth>{extra}</ipxact:field>"
    )


@pytest.mark.parametrize(
    "text,expected",
    [
        ("read-only", AccessType.READ_ONLY),
        ("write-only", AccessType.WRITE_ONLY),
        ("read-write", AccessType.READ_WRITE),
        ("writeOnce", AccessType.WRITE_ONCE),
        ("read-writeOnce", AccessType.READ_WRITE_ONCE),
        ("", AccessType.RESERVED),
        ("bogus", AccessType.RESERVED),
    ],
)
def test_access_type(text, expected):
    assert access_type(text) is expected


@pytest.mark.parametrize(
    "tag,expected",
    [(f"{{{NS}}}field", "field"), ("ipxact:field", "field"), ("reserved", "reserved")],
)
def test_local_name(tag, expected):
    assert local_name(tag) == expected


def test_local_name_of_non_string_tag_is_empty():
    assert local_name(ET.Comment) == ""


def test_parse_field_sets_positions_and_access():
    reg = Register("CTRL")
    elem = _field("enable", 4, 3, "<ipxact:access>read-only</ipxact:access>"
                  "<ipxact:description>Enable bits</ipxact:description>")
    bitmap = parse_field(elem, reg, False)
    assert reg.bitmap("enable") is bitmap
    assert bitmap.stop == 4
    assert bitmap.start == 4 + 3 - 1
    assert bitmap.type is AccessType.READ_ONLY
    assert bitmap.description == "Enable bits"
    assert bitmap.has_reset_value is False


def test_reserved_prefix_forces_reserved_type():
    reg = Register("CTRL")
    bitmap = parse_field(
        _field("reserved_7_1", 1, 7, "<ipxact:access>read-write</ipxact:access>"), reg, False
    )
    assert bitmap.type is AccessType.RESERVED


def test_fields_are_ordered_by_offset():
    reg = Register("CTRL")
    parse_field(_field("high", 8, 8), reg, False)
    parse_field(_field("low", 0, 8), reg, False)
    assert [b.name for b in reg.bitmaps] == ["low", "high"]


def test_reset_value_that_fits_is_stored():
    reg = Register("CTRL")
    extra = "<ipxact:resets><ipxact:reset><ipxact:value>0x3</ipxact:value></ipxact:reset></ipxact:resets>"
    bitmap = parse_field(_field("mode", 2, 2, extra), reg, False)
    assert bitmap.reset_value == 3


def test_reset_value_too_wide_raises():
    reg = Register("CTRL")
    extra = "<ipxact:resets><ipxact:reset><ipxact:value>4</ipxact:value></ipxact:reset></ipxact:resets>"
    with pytest.raises(ReaderError):
        parse_field(_field("mode", 2, 2, extra), reg, False)


def test_invalid_bit_offset_raises():
    reg = Register("CTRL")
    with pytest.raises(ReaderError):
        parse_field(_field("mode", "abc", 2), reg, False)


def test_invalid_bit_width_raises():
    reg = Register("CTRL")
    with pytest.raises(ReaderError):
        parse_field(_field("mode", 0, "zz"), reg, False)


def test_update_drops_unknown_field():
    reg = Register("CTRL")
    assert parse_field(_field("missing", 0, 1), reg, True) is None
    assert reg.bitmaps == []


def test_update_keeps_positions_but_updates_description():
    reg = Register("CTRL")
    parse_field(_field("mode", 2, 2), reg, False)
    elem = _field("mode", 10, 5, "<ipxact:description>new</ipxact:description>")
    bitmap = parse_field(elem, reg, True)
    assert bitmap is reg.bitmap("mode")
    assert (bitmap.start, bitmap.stop) == (3, 2)
    assert bitmap.description == "new"


def test_vendor_extensions_flags():
    reg = Register("CTRL")
    extra = ("<ipxact:vendorExtensions><reserved>true</reserved>"
             "<constantValue>false</constantValue></ipxact:vendorExtensions>")
    bitmap = parse_field(_field("flag", 0, 1, extra), reg, False)
    assert bitmap.reserved is True
    assert bitmap.constant_value is False


def test_field_enumerations_are_parsed_and_sorted():
    reg = Register("CTRL")
    extra = (
        "<ipxact:enumeratedValues>"
        "<ipxact:enumeratedValue><ipxact:name>FAST</ipxact:name><ipxact:value>2</ipxact:value></ipxact:enumeratedValue>"
        "<ipxact:enumeratedValue><ipxact:name>SLOW</ipxact:name><ipxact:value>1</ipxact:value></ipxact:enumeratedValue>"
        "</ipxact:enumeratedValues>"
    )
    bitmap = parse_field(_field("speed", 0, 2, extra), reg, False)
    assert [e.name for e in bitmap.enumerations] == ["SLOW", "FAST"]
    assert bitmap.enumeration("FAST").value == 2


def test_parse_enumeration_updates_existing_value():
    bitmap = RegisterBitmap("speed")
    first = parse_enumeration(
        _xml("<ipxact:enumeratedValue><ipxact:name>ON</ipxact:name>"
             "<ipxact:value>1</ipxact:value></ipxact:enumeratedValue>"), bitmap)
    second = parse_enumeration(
        _xml("<ipxact:enumeratedValue><ipxact:name>ON</ipxact:name>"
             "<ipxact:value>0x5</ipxact:value></ipxact:enumeratedValue>"), bitmap)
    assert first is second
    assert len(bitmap.enumerations) == 1
    assert bitmap.enumeration("ON").value == 5


def test_parse_enumeration_invalid_value_keeps_default():
    bitmap = RegisterBitmap("speed")
    enumeration = parse_enumeration(
        _xml("<ipxact:enumeratedValue><ipxact:name>X</ipxact:name>"
             "<ipxact:value>nope</ipxact:value></ipxact:enumeratedValue>"), bitmap)
    assert enumeration.value == 0
    assert bitmap.enumeration("X") is enumeration


def test_parse_enumerations_ignores_other_children():
    bitmap = RegisterBitmap("speed")
    elem = _xml(
        "<ipxact:enumeratedValues><ipxact:name>ignored</ipxact:name>"
        "<ipxact:enumeratedValue><ipxact:name>A</ipxact:name><ipxact:value>0</ipxact:value></ipxact:enumeratedValue>"
        "</ipxact:enumeratedValues>"
    )
    result = parse_enumerations(elem, bitmap)
    assert [e.name for e in result] == ["A"]
    assert [e.name for e in bitmap.enumerations] == ["A"]