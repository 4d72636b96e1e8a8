"""Parser for the IEEE MA-L text dump (``oui.txt``).

Layout after a four line header, one block per assignment::

    00-22-72   (hex)		American Micro-Fuel Device Corp.
    002272     (base 16)		American Micro-Fuel Device Corp.
    				2181 Buchanan Loop
    				Ferndale  WA  98248
    				US
    <blank line>

Only the ``(base 16)`` line is read for the prefix and organization; the
``(hex)`` line is checked for agreement. Address lines carry four
characters of indentation.
"""

from __future__ import annotations

import io
import re
from typing import IO, TYPE_CHECKING

from macvendor.errors import FormatError
from macvendor.models.registry import VendorRecord

if TYPE_CHECKING:
    from collections.abc import Iterator

HEADER_LINES = 4
ORGANIZATION_COLUMN = 22
ADDRESS_INDENT = 4

_COMPACT_PREFIX = re.compile(r"^[0-9A-Fa-f]{6}$")


def parse_registry(stream: IO[bytes] | IO[str]) -> Iterator[VendorRecord]:
    """Yield one ``VendorRecord`` per block in ``stream``.

    The generator is lazy and single-use. A malformed block raises
    ``FormatError``; records already yielded must be discarded by the caller.
    """
    owned = not isinstance(stream, io.TextIOBase)
    reader = (
        io.TextIOWrapper(stream, encoding="utf-8", errors="replace")  # type: ignore[arg-type]
        if owned
        else stream
    )
    try:
        yield from _parse_lines(enumerate((line.rstrip("\r\n") for line in reader), start=1))
    finally:
        if owned:
            # Hand the binary stream back to its owner instead of closing it.
            reader.detach()  # type: ignore[union-attr]


def _parse_lines(lines: Iterator[tuple[int, str]]) -> Iterator[VendorRecord]:
    for _ in range(HEADER_LINES):
        if next(lines, None) is None:
            return

    for number, hyphenated in lines:
        if not hyphenated.strip():
            continue

        compact_line = next(lines, None)
        if compact_line is None:
            raise FormatError(f"Line {number}: block is missing its base 16 line")
        compact_number, compact = compact_line

        prefix_hex = compact[:6]
        if not _COMPACT_PREFIX.match(prefix_hex):
            raise FormatError(f"Line {compact_number}: malformed prefix {prefix_hex!r}")
        if hyphenated[:8].replace("-", "").upper() != prefix_hex.upper():
            raise FormatError(
                f"Line {number}: hex line {hyphenated[:8]!r} does not match {prefix_hex!r}"
            )

        organization = compact[ORGANIZATION_COLUMN:].strip()

        address: list[str] = []
        for _, line in lines:
            if not line.strip():
                break
            address.append(line[ADDRESS_INDENT:].rstrip())

        yield VendorRecord(
            prefix_bits=int(prefix_hex, 16) << 24,
            organization=organization,
            address="\n".join(address),
        )
