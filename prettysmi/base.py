"""Shared building blocks: the device record, command runner and extractors.

Everything here is tolerant by construction: a failing subprocess yields
empty text and a failing parse yields the caller's default, so the
collector can degrade field by field instead of aborting.
"""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from typing import Callable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ---- unit conversion ----

MIB = 1024**2
GIB = 1024**3

NUMBER_RE = re.compile(r"[0-9]+(?:\.[0-9]*)?|\.[0-9]+")


def bytes_to_gib(num_bytes: int) -> float:
    return num_bytes / GIB


def bytes_to_mib(num_bytes: int) -> int:
    return num_bytes // MIB


def format_size(num_bytes: int) -> str:
    """MiB below 1024 MiB, otherwise GiB with one decimal."""
    mib = bytes_to_mib(num_bytes)
    if mib < 1024:
        return f"{mib}MiB"
    return f"{bytes_to_gib(num_bytes):.1f}GiB"


def ratio(used: float, capacity: float) -> float:
    """used / capacity, or 0.0 when the capacity is unknown."""
    if capacity > 0:
        return used / capacity
    return 0.0


# ---- device record ----

@dataclass
class DeviceSnapshot:
    """One GPU's telemetry for a single run."""
    id: int
    name: str = ""
    architecture_version: str = ""
    temperature_celsius: float = 0.0
    power_watts: float = 0.0
    power_cap_watts: float = 0.0
    utilization_percent: float = 0.0
    vram_total_bytes: int = 0
    vram_used_bytes: int = 0

    @property
    def power_ratio(self) -> float:
        return ratio(self.power_watts, self.power_cap_watts)

    @property
    def vram_ratio(self) -> float:
        return ratio(self.vram_used_bytes, self.vram_total_bytes)

    @property
    def utilization_ratio(self) -> float:
        return self.utilization_percent / 100


# ---- command runner ----

def run_cmd(program: str, args: Sequence[str] = ()) -> str:
    """Run `program args...` and return its stdout, or "" on any failure."""
    try:
        result = subprocess.run(
            [program, *args],
            capture_output=True,
            check=True,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("%s %s failed: %s", program, " ".join(args), exc)
        return ""
    return result.stdout.decode("utf-8", errors="replace")


# ---- extractors ----

def parse_or(parse: Callable[[str], T], raw, default: T) -> T:
    """Apply `parse` to `raw`, falling back to `default` if it rejects the input."""
    try:
        return parse(raw)
    except (TypeError, ValueError):
        return default


def extract_number(text: str) -> float:
    """Leading numeric run of noisy text ("45.0C", "120W") as a float."""
    match = NUMBER_RE.search(text)
    if match is None:
        return 0.0
    return parse_or(float, match.group(0), 0.0)


def search_group(pattern: re.Pattern[str], text: str, default: str = "N/A") -> str:
    """First capture group of `pattern` in `text`, or `default`."""
    match = pattern.search(text)
    if match is None:
        return default
    return match.group(1)
