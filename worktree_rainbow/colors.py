"""
Branch color generation.

Colors are drawn from a medium saturation, medium lightness band so that
either pure black or pure white text is always clearly legible on them.
"""

import math
import random
from dataclasses import dataclass

from worktree_rainbow.base import Color, Customizations

BLACK: Color = "#000000"
WHITE: Color = "#ffffff"

INACTIVE_DARKEN = 0.3
# Tuned against the generated band, not the 0.5 mid-luminance split.
LUMINANCE_THRESHOLD = 0.179


def _round(value: float) -> int:
    # Half up, the same way browsers and editors round channel values.
    return math.floor(value + 0.5)


def hex_to_rgb(color: Color) -> tuple[int, int, int]:
    if len(color) != 7 or not color.startswith("#"):
        raise ValueError(f"Not a #rrggbb color: {color!r}")
    try:
        return int(color[1:3], 16), int(color[3:5], 16), int(color[5:7], 16)
    except ValueError:
        raise ValueError(f"Not a #rrggbb color: {color!r}") from None


def rgb_to_hex(r: int, g: int, b: int) -> Color:
    return f"#{r:02x}{g:02x}{b:02x}"


def hsl_to_hex(h: float, s: float, l: float) -> Color:
    """Convert hue in degrees, saturation and lightness in percent."""
    s /= 100
    l /= 100
    a = s * min(l, 1 - l)

    def channel(n: int) -> int:
        k = (n + h / 30) % 12
        value = l - a * max(min(k - 3, 9 - k, 1), -1)
        return _round(255 * value)

    return rgb_to_hex(channel(0), channel(8), channel(4))


def generate(rng: random.Random | None = None) -> Color:
    rng = rng or random.Random()
    h = rng.randrange(360)
    s = 60 + rng.randrange(20)
    l = 40 + rng.randrange(10)
    return hsl_to_hex(h, s, l)


def darken(color: Color, amount: float) -> Color:
    r, g, b = hex_to_rgb(color)
    factor = 1 - amount
    return rgb_to_hex(_round(r * factor), _round(g * factor), _round(b * factor))


def _linearize(c: float) -> float:
    if c <= 0.03928:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4


def relative_luminance(color: Color) -> float:
    r, g, b = (_linearize(c / 255) for c in hex_to_rgb(color))
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ink(color: Color) -> Color:
    """Return black or white, whichever reads better on the given background."""
    return BLACK if relative_luminance(color) > LUMINANCE_THRESHOLD else WHITE


@dataclass(frozen=True)
class Palette:
    background: Color
    foreground: Color
    inactive_background: Color
    inactive_foreground: Color

    @classmethod
    def from_color(cls, color: Color) -> "Palette":
        inactive = darken(color, INACTIVE_DARKEN)
        return cls(
            background=color,
            foreground=contrast_ink(color),
            inactive_background=inactive,
            inactive_foreground=contrast_ink(inactive),
        )

    def customizations(self) -> Customizations:
        return {
            "titleBar.activeBackground": self.background,
            "titleBar.activeForeground": self.foreground,
            "titleBar.inactiveBackground": self.inactive_background,
            "titleBar.inactiveForeground": self.inactive_foreground,
            "statusBar.background": self.background,
            "statusBar.foreground": self.foreground,
        }
