"""Selection of an input reader from a file name's extension."""

from __future__ import annotations

import logging
import os
from typing import Union

from regxact.ipxact_fields import ReaderError
from regxact.ipxact_reader import IPXACTReader
from regxact.model import Components
from regxact.xhtml_reader import XHTMLReader

log = logging.getLogger(__name__)

Reader = Union[IPXACTReader, XHTMLReader]


def _extension(path: str) -> str:
    """Return the last non-empty dot-separated part of ``path``."""
    parts = [part for part in path.split(".") if part]
    return parts[-1] if parts else ""


def open_reader(
    path: Union[str, os.PathLike],
    components: Components,
    merge_addr: bool = False,
) -> Reader:
    """Create the reader matching the extension of ``path``.

    ``.xml`` files are read as IP-XACT, ``.xhtml`` files as XHTML register
    references. ``merge_addr`` makes the IP-XACT reader match registers by
    address. Raises ReaderError for any other extension.
    """
    text = os.fspath(path)
    extension = _extension(text)
    log.debug("Checking extension %r", extension)

    if extension == "xml":
        reader: Reader = IPXACTReader(text, components, merge_addr=merge_addr)
    elif extension == "xhtml":
        reader = XHTMLReader(text, components)
    else:
        raise ReaderError(f"no reader for file {text!r}")

    log.debug("Reader: %s(%s)", type(reader).__name__, text)
    return reader