"""Colour conversion between sRGB and CIE 1931 xy chromaticity.

Hue lights take colour as an xy chromaticity point; users think in RGB or
HSV. xy carries no luminance, so converting back to RGB recovers the hue
and saturation of a colour but not its brightness.

Values to check against: https://viereck.ch/hue-xy-rgb/
"""

import colorsys
import math

# sRGB (D65) -> CIE XYZ
RGB_TO_XYZ = (
    (0.4124, 0.3576, 0.1805),
    (0.2126, 0.7152, 0.0722),
    (0.0193, 0.1192, 0.9505),
)

# CIE XYZ -> linear sRGB (D65)
XYZ_TO_RGB = (
    (3.2406, -1.5372, -0.4986),
    (-0.9689, 1.8758, 0.0415),
    (0.0557, -0.2040, 1.0570),
)


def gamma_expand(channel: float) -> float:
    """sRGB companded value (0-1) to linear light."""
    if channel > 0.04045:
        return ((channel + 0.055) / (1.0 + 0.055)) ** 2.4
    return channel / 12.92


def gamma_compress(linear: float) -> float:
    """Linear light to sRGB companded value.

    Negative input stays negative (mirrored curve) so out-of-gamut colours
    are reported rather than hidden.
    """
    if abs(linear) <= 0.0031308:
        return 12.92 * linear
    return math.copysign((1.0 + 0.055) * abs(linear) ** (1.0 / 2.4) - 0.055, linear)


def rgb_to_xy(r: float, g: float, b: float) -> tuple[float, float]:
    """Convert 8-bit sRGB to xy chromaticity.

    Raises:
        ValueError: For black, which has no chromaticity
    """
    red, green, blue = (gamma_expand(c / 255.0) for c in (r, g, b))

    X, Y, Z = (row[0] * red + row[1] * green + row[2] * blue for row in RGB_TO_XYZ)

    total = X + Y + Z
    if total <= 0:
        raise ValueError("Black has no chromaticity; turn the light off instead")

    return (X / total, Y / total)


def xy_to_linear_rgb(x: float, y: float) -> tuple[float, float, float]:
    """xy at luminance Y=1 to linear sRGB, unclamped."""
    if y <= 0:
        raise ValueError(f"y must be positive, got {y}")

    Y = 1.0
    X = (Y / y) * x
    Z = (Y / y) * (1.0 - x - y)

    return tuple(row[0] * X + row[1] * Y + row[2] * Z for row in XYZ_TO_RGB)


def xy_to_rgb(x: float, y: float) -> tuple[float, float, float]:
    """Convert xy chromaticity to sRGB on a 0-255 scale.

    The result is not clamped: colours outside the sRGB gamut produce
    negative channels or channels above 255. Use clamp_rgb() or
    xy_to_display_rgb() before showing them.
    """
    return tuple(gamma_compress(c) * 255.0 for c in xy_to_linear_rgb(x, y))


def xy_to_display_rgb(x: float, y: float) -> tuple[int, int, int]:
    """Convert xy to the brightest displayable 8-bit sRGB colour.

    Linear channels are scaled so the largest one is 1, then clipped at 0.
    A full-brightness colour (one channel at 255) survives a round trip
    through rgb_to_xy() to within one unit per channel.
    """
    linear = [max(c, 0.0) for c in xy_to_linear_rgb(x, y)]
    peak = max(linear)
    if peak > 0:
        linear = [c / peak for c in linear]
    return clamp_rgb(tuple(gamma_compress(c) * 255.0 for c in linear))


def clamp_rgb(rgb) -> tuple[int, int, int]:
    """Round and clip each channel into 0-255."""
    return tuple(int(min(max(round(c), 0), 255)) for c in rgb)


def clamp_xy(x: float, y: float) -> tuple[float, float]:
    """Clip a point into the unit triangle (x, y >= 0, x + y <= 1)."""
    x = min(max(x, 0.0), 1.0)
    y = min(max(y, 0.0), 1.0)
    total = x + y
    if total > 1.0:
        x, y = x / total, y / total
    return (x, y)


def _cross(o, a, b) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def point_in_triangle(point, a, b, c) -> bool:
    d1 = _cross(a, b, point)
    d2 = _cross(b, c, point)
    d3 = _cross(c, a, point)
    has_neg = d1 < 0 or d2 < 0 or d3 < 0
    has_pos = d1 > 0 or d2 > 0 or d3 > 0
    return not (has_neg and has_pos)


def closest_point_on_segment(a, b, point) -> tuple[float, float]:
    ab = (b[0] - a[0], b[1] - a[1])
    length_sq = ab[0] ** 2 + ab[1] ** 2
    if length_sq == 0:
        return (a[0], a[1])
    t = ((point[0] - a[0]) * ab[0] + (point[1] - a[1]) * ab[1]) / length_sq
    t = min(max(t, 0.0), 1.0)
    return (a[0] + t * ab[0], a[1] + t * ab[1])


def clamp_to_gamut(x: float, y: float, gamut) -> tuple[float, float]:
    """Move a point onto the nearest edge of a light's gamut if it lies outside.

    Args:
        x, y: Chromaticity point
        gamut: Gamut with red/green/blue XyPosition corners, or None

    Returns:
        The point itself if reachable, otherwise the closest reachable point
    """
    x, y = clamp_xy(x, y)
    if gamut is None:
        return (x, y)

    corners = [gamut.red.as_tuple(), gamut.green.as_tuple(), gamut.blue.as_tuple()]
    if point_in_triangle((x, y), *corners):
        return (x, y)

    candidates = [
        closest_point_on_segment(corners[0], corners[1], (x, y)),
        closest_point_on_segment(corners[1], corners[2], (x, y)),
        closest_point_on_segment(corners[2], corners[0], (x, y)),
    ]
    return min(candidates, key=lambda p: math.dist(p, (x, y)))


def parse_hex(value: str) -> tuple[int, int, int]:
    """Parse '#rrggbb', 'rrggbb' or '#rgb' into an RGB triple."""
    text = value.strip().lstrip('#')
    if len(text) == 3:
        text = ''.join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ValueError(f"Invalid hex colour: {value!r}")
    try:
        return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))
    except ValueError:
        raise ValueError(f"Invalid hex colour: {value!r}") from None


def to_hex(rgb) -> str:
    r, g, b = clamp_rgb(rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def rgb_to_hsv(r: float, g: float, b: float) -> tuple[float, float, float]:
    """8-bit RGB to (hue degrees 0-360, saturation 0-1, value 0-1)."""
    h, s, v = colorsys.rgb_to_hsv(r / 255.0, g / 255.0, b / 255.0)
    return (h * 360.0, s, v)


def hsv_to_rgb(h: float, s: float, v: float) -> tuple[int, int, int]:
    """(hue degrees, saturation 0-1, value 0-1) to 8-bit RGB."""
    r, g, b = colorsys.hsv_to_rgb((h % 360.0) / 360.0, s, v)
    return clamp_rgb((r * 255.0, g * 255.0, b * 255.0))
