"""Monochrome framebuffer for the CHIP-8 emulator."""

from .constants import SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH


class Display:
    """64x32 boolean pixel grid, True = lit."""

    def __init__(self, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT):
        self.width = width
        self.height = height
        self._pixels: list[bool] = [False] * (width * height)

    def clear(self) -> None:
        self._pixels = [False] * (self.width * self.height)

    def get_pixel(self, x: int, y: int) -> bool:
        return self._pixels[(y % self.height) * self.width + (x % self.width)]

    def draw_sprite(self, x: int, y: int, rows: bytes) -> bool:
        """XOR-blit an 8-pixel-wide sprite at (x, y), wrapping at the edges.

        Returns:
            True if any lit pixel was turned off (collision)
        """
        collision = False
        x0 = x % self.width
        y0 = y % self.height
        for dy, row in enumerate(rows):
            py = (y0 + dy) % self.height
            for dx in range(SPRITE_WIDTH):
                if not row & (0x80 >> dx):
                    continue
                idx = py * self.width + (x0 + dx) % self.width
                if self._pixels[idx]:
                    collision = True
                self._pixels[idx] = not self._pixels[idx]
        return collision

    def rows(self) -> tuple[tuple[bool, ...], ...]:
        """Read-only copy of the grid, one tuple per row."""
        w = self.width
        return tuple(
            tuple(self._pixels[y * w:(y + 1) * w]) for y in range(self.height)
        )

    def to_text(self, on: str = "#", off: str = ".") -> list[str]:
        """Render the grid as one string per row."""
        return ["".join(on if p else off for p in row) for row in self.rows()]

    def lit_count(self) -> int:
        return sum(self._pixels)
