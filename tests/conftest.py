"""Shared fixtures: registry text builders, event recording, settings."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pytest

from macvendor.config import Settings
from macvendor.events import EventCode, EventLevel

if TYPE_CHECKING:
    from pathlib import Path

SOURCE_URL = "https://registry.example.com/oui.txt"

HEADER = (
    "OUI/MA-L" + " " * 52 + "Organization\n"
    + "company_id" + " " * 50 + "Organization\n"
    + " " * 60 + "Address\n"
    + "\n"
)

Block = tuple[str, str, Sequence[str]]

SAMPLE_BLOCKS: list[Block] = [
    (
        "002272",
        "American Micro-Fuel Device Corp.",
        ["2181 Buchanan Loop", "Ferndale  WA  98248", "US"],
    ),
    (
        "64D1A3",
        "Sitecom Europe BV",
        ["Linatebaan 101", "Rotterdam  Zuid Holland  3045 AH", "NL"],
    ),
    ("F80DAC", "HP Inc.", ["10300 Energy Dr", "Spring  TX  77389", "US"]),
]


def render_block(prefix_hex: str, organization: str, address: Sequence[str]) -> str:
    hyphenated = "-".join(prefix_hex[i : i + 2] for i in (0, 2, 4))
    lines = [
        f"{hyphenated}   (hex)\t\t{organization}",
        f"{prefix_hex}     (base 16)\t\t{organization}",
    ]
    lines += [f"\t\t\t\t{line}" for line in address]
    return "\n".join(lines) + "\n\n"


def render_registry(blocks: Sequence[Block]) -> str:
    return HEADER + "".join(render_block(*block) for block in blocks)


@dataclass
class RecordingSink:
    """EventSink that keeps every event for assertions."""

    events: list[tuple[EventLevel, int, str, BaseException | None]] = field(default_factory=list)

    def emit(
        self,
        level: EventLevel,
        code: int,
        message: str,
        cause: BaseException | None = None,
    ) -> None:
        self.events.append((level, int(code), message, cause))

    def codes(self) -> list[int]:
        return [code for _, code, _, _ in self.events]

    def has(self, code: EventCode) -> bool:
        return int(code) in self.codes()


@pytest.fixture()
def make_registry() -> Callable[[Sequence[Block]], str]:
    return render_registry


@pytest.fixture()
def registry_text() -> str:
    return render_registry(SAMPLE_BLOCKS)


@pytest.fixture()
def registry_bytes(registry_text: str) -> bytes:
    return registry_text.encode("utf-8")


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture()
def lock_dir(tmp_path: Path) -> Path:
    path = tmp_path / "locks"
    path.mkdir()
    return path


@pytest.fixture()
def settings(cache_dir: Path) -> Settings:
    """Settings for a database that never refreshes on its own."""
    return Settings(
        auto_refresh=False,
        cache_directory=str(cache_dir),
        source_url=SOURCE_URL,
    )
