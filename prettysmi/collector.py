"""Telemetry collector — merges several rocm-smi outputs into DeviceSnapshots.

The concise table (`rocm-smi` with no arguments) decides which devices
exist. Every registered enrichment step then fills in more fields, joining
on the record's position in that list rather than on its reported id.
If a concise line is skipped, later steps can attach data to the wrong
record; that coupling mirrors how rocm-smi numbers cards and is kept as is.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Callable, Optional, Sequence

from prettysmi import REGISTRY, register
from prettysmi.base import DeviceSnapshot, extract_number, parse_or, run_cmd, search_group

logger = logging.getLogger(__name__)

# ---- config ----
SMI = "rocm-smi"
ROCM_VERSION_FILE = "/opt/rocm/.info/version"

CONCISE_MIN_TOKENS = 15
HW_MIN_TOKENS = 10

VRAM_TOTAL_KEY = "VRAM Total Memory (B)"
VRAM_USED_KEY = "VRAM Total Used Memory (B)"

DRIVER_RE = re.compile(r"Driver version:\s*(\S+)")
CARD_SERIES_RE = re.compile(r"GPU\[([0-9]+)\]\s*:\s*Card Series:[ \t]*(.*)")

U64_MAX = 2**64 - 1

Runner = Callable[[str, Sequence[str]], str]


def _is_ascii_digits(token: str) -> bool:
    return token.isascii() and token.isdigit()


def _index(token: str) -> Optional[int]:
    """Non-negative integer written in ASCII digits only, else None."""
    if not _is_ascii_digits(token):
        return None
    return int(token)


def _device_lines(text: str) -> list[list[str]]:
    """Whitespace-split tokens of every line that starts with a digit."""
    rows = []
    for line in text.splitlines():
        line = line.strip()
        if _is_ascii_digits(line[:1]):
            rows.append(line.split())
    return rows


def parse_concise(text: str) -> list[DeviceSnapshot]:
    """Build one record per well-formed row of the concise table, in order."""
    devices = []
    for parts in _device_lines(text):
        if len(parts) < CONCISE_MIN_TOKENS:
            logger.debug("skipping short concise row: %s", " ".join(parts))
            continue
        device_id = _index(parts[0])
        if device_id is None:
            continue
        devices.append(DeviceSnapshot(
            id=device_id,
            temperature_celsius=extract_number(parts[4]),
            power_watts=extract_number(parts[5]),
            power_cap_watts=extract_number(parts[13]),
            utilization_percent=extract_number(parts[15]) if len(parts) > 15 else 0.0,
        ))
    return devices


def _byte_count(value) -> int:
    """Byte counts arrive as JSON numbers or numeric strings."""
    if isinstance(value, str):
        value = parse_or(int, value, 0) if _is_ascii_digits(value) else 0
    elif isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value if 0 <= value <= U64_MAX else 0


@register("--showmeminfo", "vram", "--json")
def apply_meminfo(devices: list[DeviceSnapshot], output: str) -> None:
    cards = parse_or(json.loads, output, None)
    if not isinstance(cards, dict):
        logger.debug("meminfo output is not a JSON object")
        return
    for i, device in enumerate(devices):
        card = cards.get(f"card{i}")
        if not isinstance(card, dict):
            continue
        if VRAM_TOTAL_KEY in card:
            device.vram_total_bytes = _byte_count(card[VRAM_TOTAL_KEY])
        if VRAM_USED_KEY in card:
            device.vram_used_bytes = _byte_count(card[VRAM_USED_KEY])


@register("--showproductname")
def apply_product_names(devices: list[DeviceSnapshot], output: str) -> None:
    for match in CARD_SERIES_RE.finditer(output):
        i = int(match.group(1))
        if i < len(devices):
            devices[i].name = match.group(2).strip()
        else:
            logger.debug("product name for GPU[%d] has no matching device", i)


@register("--showhw")
def apply_hardware(devices: list[DeviceSnapshot], output: str) -> None:
    for parts in _device_lines(output):
        if len(parts) < HW_MIN_TOKENS:
            continue
        i = _index(parts[0])
        if i is None:
            continue
        if i < len(devices):
            devices[i].architecture_version = parts[4]
        else:
            logger.debug("hardware row %d has no matching device", i)


class TelemetryCollector:
    """Runs rocm-smi once per sub-command and assembles the device list.

    Lifecycle:
        1. collect() enumerates devices from the concise table
        2. each REGISTRY step enriches the list in place
        3. driver_version() / platform_version() feed the report header
    """

    def __init__(self, program: str = SMI, runner: Runner = run_cmd,
                 version_file: str = ROCM_VERSION_FILE):
        self.program = program
        self.version_file = version_file
        self._runner = runner

    def _run(self, *args: str) -> str:
        return self._runner(self.program, list(args))

    def collect(self) -> list[DeviceSnapshot]:
        devices = parse_concise(self._run())
        for step in REGISTRY.values():
            output = self._run(*step.args)
            if not output.strip():
                logger.debug("no output for %s step", step.name)
                continue
            step.apply(devices, output)
        return devices

    def driver_version(self) -> str:
        return search_group(DRIVER_RE, self._run("--showdriver"))

    def platform_version(self) -> str:
        """ROCm release from the version file, e.g. "6.2.4" from "6.2.4-120"."""
        try:
            with open(self.version_file, encoding="utf-8", errors="replace") as f:
                content = f.read()
        except OSError as exc:
            logger.debug("cannot read %s: %s", self.version_file, exc)
            return "N/A"
        version = content.strip().split("-", 1)[0]
        if _is_ascii_digits(version[:1]):
            return version
        return "N/A"
