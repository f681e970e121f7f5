"""Report renderer and CLI entry point.

Composes the bordered box (title, info line, column header, one row per
device) and the summary line below it. Every boxed line is padded to
INNER_WIDTH visible columns, so colored fragments must be measured with
visible_length, never len().
"""

from __future__ import annotations

import logging
from argparse import ArgumentParser
from dataclasses import replace
from datetime import datetime

from prettysmi.base import DeviceSnapshot, bytes_to_gib, format_size, ratio
from prettysmi.collector import TelemetryCollector
from prettysmi.fmt import (
    BOLD, CYAN, DIM, RATIO, TEMPERATURE, WHITE, Style,
    pad_left, pad_right, severity_color, visible_length,
)

# ---- config ----
TITLE = "pretty-rocm-smi"
INNER_WIDTH = 79
TIMESTAMP_FORMAT = "%a %b %d %H:%M:%S %Y"
FALLBACK_NAME = "AMD GPU"
COLUMNS = "GPU   Temp    Power Usage         VRAM Usage           GPU%"

BORDER = CYAN
HEADER = Style(color=WHITE.color, bold=True)
TITLE_STYLE = Style(color=CYAN.color, bold=True)


def _rule(left: str, fill: str, right: str) -> str:
    return BORDER(left + fill * INNER_WIDTH + right)


def _boxed(inner: str) -> str:
    return BORDER("║") + pad_right(inner, INNER_WIDTH) + BORDER("║")


def render_title(timestamp: datetime) -> str:
    left = " " + TITLE_STYLE(TITLE)
    right = DIM(timestamp.strftime(TIMESTAMP_FORMAT)) + " "
    return _boxed(left + pad_left(right, INNER_WIDTH - visible_length(left)))


def render_info(devices: list[DeviceSnapshot], driver: str, platform: str) -> str:
    name = devices[0].name if devices else FALLBACK_NAME
    arch = devices[0].architecture_version if devices else ""
    info = (
        f" {BOLD(name)} {DIM(f'({arch})')} "
        f"{DIM('Driver:')} {BOLD(driver)}  {DIM('ROCm:')} {BOLD(platform)}"
    )
    return _boxed(info)


def render_row(device: DeviceSnapshot) -> str:
    temp = severity_color(device.temperature_celsius, TEMPERATURE)
    temp_s = temp(f"{device.temperature_celsius:.0f}°C")

    power = severity_color(device.power_ratio, RATIO)
    power_s = power(f"{device.power_watts:.0f}W") + " " + DIM(f"/ {device.power_cap_watts:.0f}W")

    vram = severity_color(device.vram_ratio, RATIO)
    total_gib = bytes_to_gib(device.vram_total_bytes)
    vram_s = vram(format_size(device.vram_used_bytes)) + " " + DIM(f"/ {total_gib:.0f}GiB")

    util = severity_color(device.utilization_ratio, RATIO)
    if device.utilization_percent >= 90:
        util = replace(util, bold=True)
    util_s = util(f"{device.utilization_percent:.0f}%")

    row = (
        f" {pad_left(HEADER(f'{device.id:>3}'), 3)}"
        f"   {pad_left(temp_s, 5)}"
        f"   {pad_right(power_s, 19)}"
        f"   {pad_right(vram_s, 19)}"
        f"   {pad_left(util_s, 4)}"
    )
    return _boxed(row)


def render_summary(devices: list[DeviceSnapshot]) -> str:
    used_vram = sum(d.vram_used_bytes for d in devices)
    total_vram = sum(d.vram_total_bytes for d in devices)
    total_power = sum(d.power_watts for d in devices)
    total_cap = sum(d.power_cap_watts for d in devices)
    avg_temp = sum(d.temperature_celsius for d in devices) / len(devices) if devices else 0.0

    power = severity_color(ratio(total_power, total_cap), RATIO)
    temp = severity_color(avg_temp, TEMPERATURE)
    sep = DIM("│")
    return (
        f" {DIM('Total:')} {BOLD(str(len(devices)))} GPUs  {sep}"
        f"  VRAM: {bytes_to_gib(used_vram):.1f}/{bytes_to_gib(total_vram):.0f} GiB  {sep}"
        f"  Power: {power(f'{total_power:.0f}W')}{DIM(f'/{total_cap:.0f}W')}  {sep}"
        f"  Avg Temp: {temp(f'{avg_temp:.0f}°C')}"
    )


def render(devices: list[DeviceSnapshot], driver: str, platform: str,
           timestamp: datetime) -> list[str]:
    """All report lines, top border to summary, without trailing newlines."""
    lines = [
        _rule("╔", "═", "╗"),
        render_title(timestamp),
        render_info(devices, driver, platform),
        _rule("╠", "═", "╣"),
        _boxed(" " + HEADER(COLUMNS)),
        _rule("╟", "─", "╢"),
    ]
    lines.extend(render_row(d) for d in devices)
    lines.append(_rule("╚", "═", "╝"))
    lines.append(render_summary(devices))
    return lines


def main(argv: list[str] | None = None) -> None:
    parser = ArgumentParser(
        prog=TITLE,
        description="Print a color-coded summary table of rocm-smi GPU telemetry.",
    )
    parser.parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
    )

    collector = TelemetryCollector()
    devices = collector.collect()
    lines = render(devices, collector.driver_version(), collector.platform_version(),
                   datetime.now())
    print("\n".join(lines))
    print()


if __name__ == "__main__":
    main()
