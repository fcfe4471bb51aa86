"""
Rendering Engine
=================
Double-buffered terminal output and a half-block pixel canvas.

The canvas is the paintable surface the scene renderer draws on. Every
terminal cell shows two vertically stacked pixels with the upper half block
character: foreground is the upper pixel, background the lower one.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple
import math

from blessed import Terminal

from .components import RGB


def hex_to_rgb(value: str) -> RGB:
    value = value.lstrip('#')
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def blend(base: RGB, over: RGB, alpha: float) -> RGB:
    """Alpha-composite `over` on top of `base`."""
    if alpha >= 1.0:
        return over
    if alpha <= 0.0:
        return base
    return (
        int(round(base[0] + (over[0] - base[0]) * alpha)),
        int(round(base[1] + (over[1] - base[1]) * alpha)),
        int(round(base[2] + (over[2] - base[2]) * alpha)),
    )


def lerp_color(a: RGB, b: RGB, t: float) -> RGB:
    return blend(a, b, max(0.0, min(1.0, t)))


# Slate palette
SLATE_950 = hex_to_rgb('#020617')
SLATE_900 = hex_to_rgb('#0f172a')
SLATE_800 = hex_to_rgb('#1e293b')
SLATE_700 = hex_to_rgb('#334155')
SLATE_400 = hex_to_rgb('#94a3b8')

# Accents
BLUE_700 = hex_to_rgb('#1d4ed8')
BLUE_600 = hex_to_rgb('#2563eb')
BLUE_500 = hex_to_rgb('#3b82f6')
BLUE_400 = hex_to_rgb('#60a5fa')
EMERALD_500 = hex_to_rgb('#10b981')
AMBER_500 = hex_to_rgb('#f59e0b')
AMBER_400 = hex_to_rgb('#fbbf24')
VIOLET_500 = hex_to_rgb('#8b5cf6')
PINK_500 = hex_to_rgb('#ec4899')
CYAN_500 = hex_to_rgb('#06b6d4')
CYAN_400 = hex_to_rgb('#22d3ee')
YELLOW_400 = hex_to_rgb('#facc15')
RED_500 = hex_to_rgb('#ef4444')

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)

HALF_BLOCK = '▀'


@dataclass
class Cell:
    """A single cell in the render buffer."""
    char: str = ' '
    fg_color: Optional[RGB] = None
    bg_color: Optional[RGB] = None  # None = terminal default

    def matches(self, other: 'Cell') -> bool:
        """Check if two cells are visually identical."""
        return (
            self.char == other.char and
            self.fg_color == other.fg_color and
            self.bg_color == other.bg_color
        )

    def reset(self):
        """Reset to empty state."""
        self.char = ' '
        self.fg_color = None
        self.bg_color = None


class DoubleBuffer:
    """
    Double-buffered terminal renderer.

    Writes to a back buffer, then swaps to front buffer,
    only updating cells that changed. No screen clears needed.
    """

    def __init__(self, term: Terminal, width: Optional[int] = None,
                 height: Optional[int] = None):
        self.term = term
        self.width = term.width if width is None else width
        self.height = term.height if height is None else height
        self.front: List[List[Cell]] = []
        self.back: List[List[Cell]] = []
        self._init_buffers()
        self._normal = term.normal  # Cache reset sequence
        self._fg_cache: Dict[RGB, str] = {}
        self._bg_cache: Dict[RGB, str] = {}

    def _init_buffers(self):
        """Initialize both buffers with empty cells."""
        self.front = [
            [Cell() for _ in range(self.width)]
            for _ in range(self.height)
        ]
        self.back = [
            [Cell() for _ in range(self.width)]
            for _ in range(self.height)
        ]

    def resize(self, width: int, height: int):
        """Handle terminal resize."""
        self.width = width
        self.height = height
        self._init_buffers()

    def clear_back(self):
        """Clear the back buffer by resetting cells in-place."""
        for row in self.back:
            for cell in row:
                cell.reset()

    def put(self, x: int, y: int, char: str, fg_color: Optional[RGB] = None,
            bg_color: Optional[RGB] = None):
        """Put a character in the back buffer. A None background keeps the current one."""
        if 0 <= x < self.width and 0 <= y < self.height:
            cell = self.back[y][x]
            cell.char = char
            cell.fg_color = fg_color
            if bg_color is not None:
                cell.bg_color = bg_color

    def put_string(self, x: int, y: int, text: str, fg_color: Optional[RGB] = None,
                   bg_color: Optional[RGB] = None):
        """Put a string in the back buffer."""
        for i, char in enumerate(text):
            self.put(x + i, y, char, fg_color, bg_color)

    def _fg(self, color: RGB) -> str:
        seq = self._fg_cache.get(color)
        if seq is None:
            seq = self._fg_cache[color] = self.term.color_rgb(*color)
        return seq

    def _bg(self, color: RGB) -> str:
        seq = self._bg_cache.get(color)
        if seq is None:
            seq = self._bg_cache[color] = self.term.on_color_rgb(*color)
        return seq

    def present(self) -> str:
        """Swap buffers and generate output for changed cells only."""
        output_parts = []
        normal = self._normal

        for y in range(self.height):
            for x in range(self.width):
                back_cell = self.back[y][x]
                front_cell = self.front[y][x]

                if not back_cell.matches(front_cell):
                    output_parts.append(self.term.move_xy(x, y))
                    # Reset colors to prevent bleed
                    output_parts.append(normal)
                    if back_cell.bg_color is not None:
                        output_parts.append(self._bg(back_cell.bg_color))
                    if back_cell.fg_color is not None:
                        output_parts.append(self._fg(back_cell.fg_color))
                    output_parts.append(back_cell.char if back_cell.char else ' ')

        # Swap: back becomes the new front, old front becomes next back
        self.front, self.back = self.back, self.front

        return ''.join(output_parts)


class PixelCanvas:
    """
    RGB pixel grid with the drawing primitives the scene renderer needs.

    Shapes are rasterized by sampling pixel centers; every primitive accepts
    an opacity that is composited onto what is already there.
    """

    def __init__(self, width: int, height: int, fill: RGB = BLACK):
        self.width = 0
        self.height = 0
        self.pixels: List[List[RGB]] = []
        self.resize(width, height, fill)

    def resize(self, width: int, height: int, fill: RGB = BLACK):
        self.width = max(0, int(width))
        self.height = max(0, int(height))
        self.pixels = [[fill] * self.width for _ in range(self.height)]

    def get_pixel(self, px: int, py: int) -> RGB:
        return self.pixels[py][px]

    def blend_pixel(self, px: int, py: int, color: RGB, alpha: float = 1.0):
        if 0 <= px < self.width and 0 <= py < self.height:
            row = self.pixels[py]
            row[px] = blend(row[px], color, alpha)

    # -------------------------------------------------------------------------
    # Primitives
    # -------------------------------------------------------------------------

    def fill_gradient(self, top: RGB, bottom: RGB):
        """Vertical linear gradient over the whole canvas."""
        span = max(1, self.height - 1)
        for py in range(self.height):
            color = lerp_color(top, bottom, py / span)
            self.pixels[py] = [color] * self.width

    def fill_rect(self, x: float, y: float, w: float, h: float,
                  color: RGB, alpha: float = 1.0):
        x0, x1 = self._span(x, x + w, self.width)
        y0, y1 = self._span(y, y + h, self.height)
        for py in range(y0, y1):
            for px in range(x0, x1):
                self.blend_pixel(px, py, color, alpha)

    def round_rect(self, x: float, y: float, w: float, h: float, radius: float,
                   color: RGB, alpha: float = 1.0):
        radius = max(0.0, min(radius, w / 2, h / 2))
        x0, x1 = self._span(x, x + w, self.width)
        y0, y1 = self._span(y, y + h, self.height)
        for py in range(y0, y1):
            sy = py + 0.5
            ny = min(max(sy, y + radius), y + h - radius)
            for px in range(x0, x1):
                sx = px + 0.5
                nx = min(max(sx, x + radius), x + w - radius)
                if (sx - nx) ** 2 + (sy - ny) ** 2 <= radius * radius:
                    self.blend_pixel(px, py, color, alpha)

    def fill_polygon(self, points: Sequence[Tuple[float, float]],
                     color: RGB, alpha: float = 1.0):
        """Even-odd scanline fill."""
        points = list(points)
        if len(points) < 3:
            return
        ys = [p[1] for p in points]
        y0, y1 = self._span(min(ys), max(ys), self.height)
        edges = list(zip(points, points[1:] + points[:1]))
        for py in range(y0, y1):
            sy = py + 0.5
            crossings = []
            for (ax, ay), (bx, by) in edges:
                if (ay <= sy < by) or (by <= sy < ay):
                    crossings.append(ax + (sy - ay) * (bx - ax) / (by - ay))
            crossings.sort()
            for left, right in zip(crossings[::2], crossings[1::2]):
                x0, x1 = self._span(left, right, self.width)
                for px in range(x0, x1):
                    self.blend_pixel(px, py, color, alpha)

    def stroke_polygon(self, points: Sequence[Tuple[float, float]],
                       color: RGB, alpha: float = 1.0):
        """Closed one-pixel outline."""
        count = len(points)
        for i in range(count):
            ax, ay = points[i]
            bx, by = points[(i + 1) % count]
            self._line(int(math.floor(ax)), int(math.floor(ay)),
                       int(math.floor(bx)), int(math.floor(by)), color, alpha)

    def fill_ellipse(self, cx: float, cy: float, rx: float, ry: float,
                     color: RGB, alpha: float = 1.0):
        if rx <= 0 or ry <= 0:
            return
        if rx < 1 and ry < 1:
            self.blend_pixel(int(math.floor(cx)), int(math.floor(cy)), color, alpha)
            return
        x0, x1 = self._span(cx - rx, cx + rx, self.width)
        y0, y1 = self._span(cy - ry, cy + ry, self.height)
        for py in range(y0, y1):
            dy = (py + 0.5 - cy) / ry
            for px in range(x0, x1):
                dx = (px + 0.5 - cx) / rx
                if dx * dx + dy * dy <= 1.0:
                    self.blend_pixel(px, py, color, alpha)

    def fill_circle(self, cx: float, cy: float, radius: float,
                    color: RGB, alpha: float = 1.0):
        self.fill_ellipse(cx, cy, radius, radius, color, alpha)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _span(start: float, end: float, limit: int) -> Tuple[int, int]:
        """Pixel index range whose centers fall in [start, end), clipped."""
        first = max(0, int(math.ceil(start - 0.5)))
        last = min(limit, int(math.ceil(end - 0.5)))
        return first, max(first, last)

    def _line(self, x0: int, y0: int, x1: int, y1: int, color: RGB, alpha: float):
        """Bresenham line."""
        dx = abs(x1 - x0)
        dy = -abs(y1 - y0)
        sx = 1 if x0 < x1 else -1
        sy = 1 if y0 < y1 else -1
        err = dx + dy
        while True:
            self.blend_pixel(x0, y0, color, alpha)
            if x0 == x1 and y0 == y1:
                break
            e2 = 2 * err
            if e2 >= dy:
                err += dy
                x0 += sx
            if e2 <= dx:
                err += dx
                y0 += sy

    def blit_to_buffer(self, buffer: DoubleBuffer, offset_x: int = 0, offset_y: int = 0):
        """Write the canvas into the buffer, two pixels per cell."""
        for cy in range(self.height // 2):
            top_row = self.pixels[cy * 2]
            bottom_row = self.pixels[cy * 2 + 1]
            for cx in range(self.width):
                buffer.put(cx + offset_x, cy + offset_y, HALF_BLOCK,
                           top_row[cx], bottom_row[cx])


@dataclass
class TerminalScreen:
    """
    Terminal output for one frame: the pixel canvas plus a text overlay.

    The scene is painted on `canvas`, then `compose()` copies it into the
    back buffer so HUD text can be written over it before `present()`.
    """
    term: Terminal
    buffer: DoubleBuffer = field(init=False)
    canvas: PixelCanvas = field(init=False)

    def __post_init__(self):
        self.buffer = DoubleBuffer(self.term)
        self.canvas = PixelCanvas(self.buffer.width, self.buffer.height * 2)

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

    def resize(self, width: int, height: int):
        """Handle terminal resize."""
        self.buffer.resize(width, height)
        self.canvas.resize(width, height * 2)

    def compose(self):
        self.buffer.clear_back()
        self.canvas.blit_to_buffer(self.buffer)

    def put_string(self, x: int, y: int, text: str, fg_color: RGB = WHITE,
                   bg_color: Optional[RGB] = None):
        self.buffer.put_string(x, y, text, fg_color, bg_color)

    def put_centered(self, y: int, text: str, fg_color: RGB = WHITE,
                     bg_color: Optional[RGB] = None):
        self.put_string(self.width // 2 - len(text) // 2, y, text, fg_color, bg_color)

    def present(self) -> str:
        return self.buffer.present()
