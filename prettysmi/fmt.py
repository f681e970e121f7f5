"""Display formatting: ANSI-aware widths, padding and severity colors."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

import plotext as plt

ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def visible_length(text: str) -> int:
    return len(ANSI_RE.sub("", text))


def pad_right(text: str, width: int) -> str:
    gap = width - visible_length(text)
    return text + " " * gap if gap > 0 else text


def pad_left(text: str, width: int) -> str:
    gap = width - visible_length(text)
    return " " * gap + text if gap > 0 else text


# ---- styles ----

@dataclass(frozen=True)
class Style:
    """A 256-color palette index plus optional bold, painted via plotext."""
    color: Optional[int] = None
    bold: bool = False

    def __call__(self, text: str) -> str:
        kwargs = {}
        if self.color is not None:
            kwargs["color"] = self.color
        if self.bold:
            kwargs["style"] = "bold"
        if not kwargs:
            return text
        return plt.colorize(text, **kwargs)


BOLD = Style(bold=True)
DIM = Style(color=244)
RED = Style(color=9)
GREEN = Style(color=10)
YELLOW = Style(color=11)
CYAN = Style(color=14)
WHITE = Style(color=15)


# ---- severity ----

class Severity(Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    NOMINAL = "nominal"
    LOW = "low"         # "cool" for temperatures, "idle" for ratios


@dataclass(frozen=True)
class Thresholds:
    """Lower bounds of the critical, warning and nominal bands.

    The critical and warning bounds are inclusive. The nominal bound is
    inclusive unless `strict_nominal` is set, so a ratio of exactly 0.0
    stays in the LOW band.
    """
    critical: float
    warning: float
    nominal: float
    palette: Mapping[Severity, Style]
    strict_nominal: bool = False


TEMPERATURE = Thresholds(
    critical=90.0,
    warning=75.0,
    nominal=50.0,
    palette={
        Severity.CRITICAL: RED,
        Severity.WARNING: YELLOW,
        Severity.NOMINAL: WHITE,
        Severity.LOW: GREEN,
    },
)

RATIO = Thresholds(
    critical=0.9,
    warning=0.7,
    nominal=0.0,
    strict_nominal=True,
    palette={
        Severity.CRITICAL: RED,
        Severity.WARNING: YELLOW,
        Severity.NOMINAL: GREEN,
        Severity.LOW: DIM,
    },
)


def severity(value: float, thresholds: Thresholds) -> Severity:
    if value >= thresholds.critical:
        return Severity.CRITICAL
    if value >= thresholds.warning:
        return Severity.WARNING
    if value > thresholds.nominal or (not thresholds.strict_nominal and value == thresholds.nominal):
        return Severity.NOMINAL
    return Severity.LOW


def severity_color(value: float, thresholds: Thresholds) -> Style:
    return thresholds.palette[severity(value, thresholds)]
