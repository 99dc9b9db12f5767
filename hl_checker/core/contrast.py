"""WCAG 2.x relative luminance and contrast ratio.

    luminance = 0.2126 R + 0.7152 G + 0.0722 B

where each channel is scaled to [0, 1] and linearised: v / 12.92 at or below
0.03928, ((v + 0.055) / 1.055) ** 2.4 above it.

    ratio = (lighter + 0.05) / (darker + 0.05)

The ratio is in [1, 21] and does not depend on argument order.
"""

import numpy as np

from hl_checker.core.palette import hex_to_rgb

LINEAR_THRESHOLD = 0.03928
RED_WEIGHT = 0.2126
GREEN_WEIGHT = 0.7152
BLUE_WEIGHT = 0.0722


def linearise(channels: np.ndarray) -> np.ndarray:
    """Apply the sRGB transfer curve to 0-255 channel values."""
    v = np.asarray(channels, dtype=np.float64) / 255.0
    return np.where(v <= LINEAR_THRESHOLD, v / 12.92, ((v + 0.055) / 1.055) ** 2.4)


def luminance(r: int, g: int, b: int) -> float:
    r_lin, g_lin, b_lin = linearise(np.array([r, g, b])).tolist()
    # summed left to right in plain floats
    return RED_WEIGHT * r_lin + GREEN_WEIGHT * g_lin + BLUE_WEIGHT * b_lin


def hex_luminance(hex_colour: str) -> float:
    return luminance(*hex_to_rgb(hex_colour))


def contrast_ratio(lum1: float, lum2: float) -> float:
    lighter = max(lum1, lum2)
    darker = min(lum1, lum2)
    return (lighter + 0.05) / (darker + 0.05)


def contrast(colour1: str, colour2: str) -> float:
    """Contrast ratio between two '#rrggbb' colours. Raises ValueError on malformed hex."""
    return contrast_ratio(hex_luminance(colour1), hex_luminance(colour2))
