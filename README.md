# regxact

`regxact` reads hardware register descriptions into a small Python model of
components, registers, bitfields and enumerated values. It has no
dependencies beyond the standard library.

## Input formats

- **IP-XACT** (`.xml`), read by `regxact.ipxact_reader.IPXACTReader`:
  `addressBlock` elements become components, `register` elements become
  registers, `field` elements become bitfields and `enumeratedValue`
  elements become enumerations. Tags are matched by their local name, so
  the namespace prefix does not matter. A `typeIdentifier` lets a block or
  register reuse the registers or the width and dimensions of an earlier one
  with the same identifier.
- **Register documentation XHTML** (`.xhtml`), read by
  `regxact.xhtml_reader.XHTMLReader`: each `section` with an `id` becomes a
  component (sections `MEM`, `DIRENTRY`, `NVM` and `PORT` are skipped, and
  `REG` is named `DEVICE`). Each `div` in a section describes a register,
  with its bit table (`table class="bits"`) and enumerated values read from
  the page structure.

## Installing

```
pip install .
```

## Using it

`regxact.readers.open_reader` picks a reader from the file's extension and
reads into a shared `Components` collection:

```python
from regxact.model import Components
from regxact.readers import open_reader

components = Components()
reader = open_reader("device.xml", components, merge_addr=False)
reader.read()

for component in components:
    print(component.name, hex(component.base))
    for register in component.registers:
        print("  ", register.name, hex(register.address), register.width)
        for bitmap in register.bitmaps:
            print("    ", bitmap.name, bitmap.start, bitmap.stop, bitmap.type.value)
```

Readers can also parse a document held in a string:

```python
from regxact.ipxact_reader import IPXACTReader

reader = IPXACTReader(None, components)
reader.read_string(xml_text)
```

Reading into a `Components` collection that already holds a component of the
same name updates that component rather than replacing it. With
`merge_addr=True`, an IP-XACT register whose address matches a register
already in the component is merged into it: the existing register is renamed
and its bitfields are cleared before the new fields are read.

### The model

`regxact.model` holds `Components`, `Component`, `Register`,
`RegisterBitmap`, `Enumeration` and the `AccessType` enum. Registers are kept
ordered by address, bitfields by their lowest bit (`stop`), and enumerations
by value. `RegisterBitmap.mask()` gives the field's bit mask in register
position.

### Numbers

Numbers in the input may be written in decimal, in C-style hexadecimal
(`0x1F`), or as Verilog-style sized or based literals (`8'hFF`, `'b1010`);
see `regxact.number.Number.parse`, which raises `ValueError` for anything
else.

### Errors

Reading raises `regxact.ipxact_fields.ReaderError` for invalid XML, values
that cannot be parsed, a reset value wider than its field, or a register or
field that redefines a reused type. The XHTML reader reads the whole document
and then reports all malformed registers in one `ReaderError`.
`open_reader` raises `ReaderError` for an extension other than `.xml` or
`.xhtml`. Progress messages go to the standard `logging` module.

## What it does not do

`regxact` only reads register descriptions into the model. It does not write
anything out: there are no generators for C headers, assembly definitions,
simulator code, LaTeX or IP-XACT, and there is no command-line tool.

## Running the tests

```
pip install .[test]
pytest
```