"""
Framebuffer for CHIP-8 Emulator
===============================

The CHIP-8 display is a 64x32 monochrome grid. Programs never write pixels
directly: sprites are XOR-ed onto the screen, so drawing over a lit pixel
turns it off. That on-to-off transition is how programs detect collisions.

Storage is one byte per pixel in row-major order:

    index = y * width + x

The framebuffer also keeps a dirty flag. It is raised by every toggle and
clear, and lowered only when the renderer calls take_dirty(). A new
framebuffer starts dirty so the first poll paints the blank screen.

Copyright (c) 2026 chip8-vm Contributors
"""

from typing import List

from ..errors import PixelRangeError

# Display geometry
DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32


class Framebuffer:
    """
    Monochrome bit grid with XOR-toggle writes and a dirty flag.

    Coordinates are never wrapped here. Sprite drawing wraps them before
    calling toggle(); anything out of range is a caller bug and raises
    PixelRangeError.

    Example:
        >>> fb = Framebuffer()
        >>> fb.toggle(3, 4)
        False
        >>> fb.get_pixel(3, 4)
        True
        >>> fb.toggle(3, 4)   # lit pixel turned off: collision
        True
    """

    def __init__(self, width: int = DISPLAY_WIDTH, height: int = DISPLAY_HEIGHT):
        """
        Initialize a blank framebuffer.

        Args:
            width: Number of columns
            height: Number of rows
        """
        self._width = width
        self._height = height
        self._pixels = bytearray(width * height)
        self._dirty = True

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def width(self) -> int:
        """Number of columns."""
        return self._width

    @property
    def height(self) -> int:
        """Number of rows."""
        return self._height

    @property
    def is_dirty(self) -> bool:
        """Peek at the dirty flag without clearing it."""
        return self._dirty

    # =========================================================================
    # Pixel Operations
    # =========================================================================

    def toggle(self, x: int, y: int) -> bool:
        """
        Flip the pixel at column `x`, row `y`.

        Returns:
            True if the pixel was on before the call, i.e. this toggle
            turned a lit pixel off

        Raises:
            PixelRangeError: If (x, y) is outside the display
        """
        index = self._index(x, y)
        was_on = self._pixels[index] != 0
        self._pixels[index] ^= 1
        self._dirty = True
        return was_on

    def get_pixel(self, x: int, y: int) -> bool:
        """Return True if the pixel at (x, y) is lit."""
        return self._pixels[self._index(x, y)] != 0

    def clear(self) -> None:
        """Turn every pixel off and mark the display dirty."""
        self._pixels = bytearray(self._width * self._height)
        self._dirty = True

    def take_dirty(self) -> bool:
        """
        Return the dirty flag and reset it.

        This is an at-most-once "needs redraw" signal: two calls with no
        drawing in between return True then False.
        """
        dirty = self._dirty
        self._dirty = False
        return dirty

    def lit_count(self) -> int:
        """Number of pixels currently lit."""
        return sum(self._pixels)

    def _index(self, x: int, y: int) -> int:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise PixelRangeError(x, y, self._width, self._height)
        return y * self._width + x

    # =========================================================================
    # Text Rendering
    # =========================================================================

    def get_text_grid(self, on: str = "#", off: str = ".") -> List[str]:
        """
        Render the display as one string per row.

        Args:
            on: Character for lit pixels
            off: Character for unlit pixels

        Returns:
            List of `height` strings, each `width` characters long
        """
        rows = []
        for y in range(self._height):
            start = y * self._width
            row = self._pixels[start:start + self._width]
            rows.append("".join(on if p else off for p in row))
        return rows

    def get_text(self, on: str = "#", off: str = ".") -> str:
        """Render the display as a single newline-separated string."""
        return "\n".join(self.get_text_grid(on, off))

    # =========================================================================
    # Image Rendering
    # =========================================================================

    def render_image(self, scale: int = 8) -> bytes:
        """
        Render the display as a PNG image (requires Pillow).

        Args:
            scale: Size of one CHIP-8 pixel in image pixels (default 8)

        Returns:
            PNG image bytes, `width * scale` by `height * scale`

        Raises:
            ValueError: If scale is less than 1
        """
        from PIL import Image
        import io

        if scale < 1:
            raise ValueError(f"scale must be at least 1, got {scale}")

        # One byte per pixel already; map 0/1 to dark/light gray
        img = Image.frombytes(
            "L",
            (self._width, self._height),
            bytes(232 if p else 24 for p in self._pixels),
        )
        if scale > 1:
            img = img.resize(
                (self._width * scale, self._height * scale),
                Image.NEAREST,
            )

        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()

    def __repr__(self) -> str:
        return f"Framebuffer({self._width}x{self._height}, lit={self.lit_count()})"
