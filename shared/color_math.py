"""
Color conversion and classification for RGB sensor readings.

All functions are total over numeric triples: values outside [0, 255] are
clamped and fractional values are rounded, nothing here raises for a number.
"""
import math
from dataclasses import dataclass
from typing import Dict, Iterable, Sequence, Tuple

from shared.models import HSL, LAB, ProcessedColor, RGB

# Reference white for CIE-LAB, D65 / 2 degree observer
D65_WHITE = (0.95047, 1.0, 1.08883)

# Declaration order breaks distance ties in nearest_name
PALETTE: Dict[str, str] = {
    "red": "#ff0000",
    "green": "#008000",
    "blue": "#0000ff",
    "yellow": "#ffff00",
    "magenta": "#ff00ff",
    "cyan": "#00ffff",
    "white": "#ffffff",
    "black": "#000000",
    "gray": "#808080",
    "orange": "#ffa500",
    "pink": "#ffc0cb",
    "brown": "#a52a2a",
}

ALL_OUTPUTS = frozenset({"hsl", "lab", "name"})


@dataclass(frozen=True)
class Calibration:
    """Per-channel multiplicative gains applied before clamping."""
    red: float = 1.0
    green: float = 1.0
    blue: float = 1.0


DEFAULT_CALIBRATION = Calibration()


def round_half_away(value: float) -> int:
    """Rounds to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def clamp_channel(value: float) -> int:
    if math.isnan(value):
        return 0
    return round_half_away(min(255.0, max(0.0, value)))


def _clamped(triple: Sequence[float]) -> RGB:
    return (clamp_channel(triple[0]), clamp_channel(triple[1]), clamp_channel(triple[2]))


def normalize(triple: Sequence[float], calibration: Calibration = DEFAULT_CALIBRATION) -> RGB:
    """
    Applies calibration gains, then clamps to [0, 255] and rounds.

    Args:
        triple: (red, green, blue) reading.
        calibration: per-channel gains, 1.0 leaves a channel untouched.

    Returns:
        Integer (red, green, blue), each channel in [0, 255].
    """
    red, green, blue = triple
    return (
        clamp_channel(red * calibration.red),
        clamp_channel(green * calibration.green),
        clamp_channel(blue * calibration.blue),
    )


def to_hex(triple: Sequence[float]) -> str:
    return "#{:02x}{:02x}{:02x}".format(*_clamped(triple))


def hex_to_rgb(value: str) -> RGB:
    value = value.lstrip("#")
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


def to_hsl(triple: Sequence[float]) -> HSL:
    """
    Standard RGB -> HSL.

    Returns:
        HSL with h in [0, 360) degrees, s and l in [0, 100] percent,
        each rounded to the nearest integer.
    """
    r, g, b = (c / 255.0 for c in _clamped(triple))
    high = max(r, g, b)
    low = min(r, g, b)
    lightness = (high + low) / 2

    if high == low:
        hue = 0.0
        saturation = 0.0
    else:
        delta = high - low
        if lightness > 0.5:
            saturation = delta / (2.0 - high - low)
        else:
            saturation = delta / (high + low)

        if high == r:
            hue = (g - b) / delta + (6.0 if g < b else 0.0)
        elif high == g:
            hue = (b - r) / delta + 2.0
        else:
            hue = (r - g) / delta + 4.0
        hue *= 60.0

    # 359.6 rounds up to 360, which is the same angle as 0
    h = round_half_away(hue) % 360
    return HSL(h=h, s=round_half_away(saturation * 100), l=round_half_away(lightness * 100))


def _srgb_to_linear(channel: float) -> float:
    if channel <= 0.04045:
        return channel / 12.92
    return ((channel + 0.055) / 1.055) ** 2.4


def _lab_f(t: float) -> float:
    delta = 6.0 / 29.0
    if t > delta ** 3:
        return t ** (1.0 / 3.0)
    return t / (3 * delta ** 2) + 4.0 / 29.0


def to_xyz(triple: Sequence[float]) -> Tuple[float, float, float]:
    """sRGB -> CIE XYZ (D65), Y of white is 1.0."""
    r, g, b = (_srgb_to_linear(c / 255.0) for c in _clamped(triple))
    x = 0.4124564 * r + 0.3575761 * g + 0.1804375 * b
    y = 0.2126729 * r + 0.7151522 * g + 0.0721750 * b
    z = 0.0193339 * r + 0.1191920 * g + 0.9503041 * b
    return x, y, z


def to_lab(triple: Sequence[float]) -> LAB:
    """
    sRGB -> CIE-LAB through linear light and XYZ with the D65 reference white.

    Returns:
        LAB with l in [0, 100] and a, b roughly in [-128, 127], rounded.
    """
    x, y, z = to_xyz(triple)
    xn, yn, zn = D65_WHITE
    fx, fy, fz = _lab_f(x / xn), _lab_f(y / yn), _lab_f(z / zn)

    lightness = min(100.0, max(0.0, 116.0 * fy - 16.0))
    return LAB(
        l=round_half_away(lightness),
        a=round_half_away(500.0 * (fx - fy)),
        b=round_half_away(200.0 * (fy - fz)),
    )


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance in raw RGB space. Not perceptual."""
    return math.sqrt(sum((a[i] - b[i]) ** 2 for i in range(3)))


def nearest_name(triple: Sequence[float], palette: Dict[str, str] = PALETTE) -> str:
    """
    Name of the closest palette entry, first declared wins on a tie.

    Raises:
        ValueError: the palette is empty.
    """
    if not palette:
        raise ValueError("Palette must contain at least one color")
    target = _clamped(triple)
    best_name = None
    best_distance = math.inf
    for name, reference in palette.items():
        d = distance(target, hex_to_rgb(reference))
        if d < best_distance:
            best_name = name
            best_distance = d
    return best_name


def describe(
    triple: Sequence[float],
    calibration: Calibration = DEFAULT_CALIBRATION,
    include: Iterable[str] = ALL_OUTPUTS,
    palette: Dict[str, str] = PALETTE,
) -> ProcessedColor:
    """
    Builds the display descriptor for an (already smoothed) triple.

    Args:
        triple: averaged (red, green, blue).
        calibration: gains passed to normalize().
        include: any of "hsl", "lab", "name". Hex is always present.
        palette: reference colors for the nearest name.
    """
    include = set(include)
    unknown = include - ALL_OUTPUTS
    if unknown:
        raise ValueError(f"Unknown color outputs: {', '.join(sorted(unknown))}")

    rgb = normalize(triple, calibration)
    return ProcessedColor(
        rgb_averaged=rgb,
        hex=to_hex(rgb),
        hsl=to_hsl(rgb) if "hsl" in include else None,
        lab=to_lab(rgb) if "lab" in include else None,
        nearest_name=nearest_name(rgb, palette) if "name" in include else None,
    )
