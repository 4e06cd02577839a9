"""The game's bitmap font: glyph decoding and text layout."""

from __future__ import annotations

from dataclasses import dataclass, field

GLYPH_WIDTH = 8
GLYPH_HEIGHT = 12
PLANES = 4
GLYPH_BYTES = GLYPH_HEIGHT * PLANES  # 48 bytes of planar data per glyph

# Order of the glyphs in the font file.
GLYPH_ORDER = "0123456789!?.$_ABCDEFGHIJKLMNOPQRSTUVWXYZ"

_SPACE_COLOUR = 0x01


class InvalidUtf8Error(ValueError):
    """Raised when text handed to the font is not valid UTF-8."""


@dataclass(frozen=True)
class Glyph:
    """An 8x12 character image of 4-bit palette indices, row by row."""

    pixels: bytes
    width: int = GLYPH_WIDTH
    height: int = GLYPH_HEIGHT

    def pixel(self, x: int, y: int) -> int:
        """Palette index at column `x`, row `y`."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside the glyph")
        return self.pixels[y * self.width + x]


@dataclass(frozen=True)
class GlyphPlacement:
    """A glyph drawn at a screen position."""

    x: int
    y: int
    glyph: Glyph


def decode_glyph(fontdata: bytes, index: int) -> Glyph:
    """Decode glyph number `index` from the planar font data."""
    start = index * GLYPH_BYTES
    if index < 0 or start + GLYPH_BYTES > len(fontdata):
        raise ValueError(f"font data holds no glyph {index}")
    pixels = bytearray()
    for row in range(start, start + GLYPH_HEIGHT):
        planes = [fontdata[row + plane * GLYPH_HEIGHT] for plane in range(PLANES)]
        for bit in range(7, -1, -1):
            pixels.append(
                sum(((value >> bit) & 0x01) << plane for plane, value in enumerate(planes))
            )
    return Glyph(bytes(pixels))


def _space_glyph() -> Glyph:
    return Glyph(bytes([_SPACE_COLOUR]) * (GLYPH_WIDTH * GLYPH_HEIGHT))


@dataclass
class Font:
    """Glyphs keyed by the byte that selects them."""

    glyphs: dict[int, Glyph] = field(default_factory=dict)
    undefined: Glyph = field(default_factory=_space_glyph)

    @classmethod
    def from_data(cls, fontdata: bytes) -> Font:
        """Build the font from uncompressed font file data."""
        glyphs: dict[int, Glyph] = {}
        for index, char in enumerate(GLYPH_ORDER):
            glyphs[ord(char)] = decode_glyph(fontdata, index)
        for upper in "ABCDEFGHIJKLMNOPQRSTUVWXYZ":
            glyphs[ord(upper.lower())] = glyphs[ord(upper)]
        glyphs[ord(" ")] = _space_glyph()
        return cls(glyphs=glyphs, undefined=glyphs[ord("?")])

    def glyph_for(self, char: str) -> Glyph:
        """Glyph shown for one character; unknown characters show as '?'."""
        if len(char) != 1:
            raise ValueError("expected a single character")
        code = ord(char)
        if code < 0x80:
            return self.glyphs.get(code, self.undefined)
        return self.undefined

    def layout(self, text: str | bytes, x: int, y: int) -> list[GlyphPlacement]:
        """Place the glyphs of `text` left to right starting at (x, y).

        Each character advances 8 pixels. Multibyte characters show as the
        undefined glyph; a stray continuation byte, or a multibyte character
        that ends the text, raises InvalidUtf8Error.
        """
        data = text.encode("utf-8") if isinstance(text, str) else bytes(text)
        data = data.split(b"\0", 1)[0]
        placements: list[GlyphPlacement] = []
        end = len(data)
        i = 0
        while i < end:
            byte = data[i]
            if byte & 0xC0 == 0x80:
                raise InvalidUtf8Error(f"continuation byte 0x{byte:02X} at {i}")
            glyph = self.glyphs.get(byte)
            if glyph is None:
                glyph = self.undefined
                if byte > 0xBF:
                    j = i
                    while True:
                        if j == end - 1:
                            raise InvalidUtf8Error(f"truncated character at {i}")
                        j += 1
                        if data[j] & 0xC0 != 0x80:
                            break
                    i = j - 1
            placements.append(GlyphPlacement(x, y, glyph))
            x += GLYPH_WIDTH
            i += 1
        return placements


def intro_text_lines(year: int) -> list[list[tuple[str, int, int]]]:
    """The two intro screens as (text, x, y) lines."""
    still_playing = f"YOU ARE STILL PLAYING MOKTAR IN {year} !!"
    screens = []
    for credit in (
        " PROGRAMMED IN 1991 ON AT .286 12MHZ.",
        "REPROGRAMMED IN 2011 ON X86_64 2.40 GHZ.",
    ):
        screens.append(
            [
                ("     YEAAA . . .", 0, 5 * GLYPH_HEIGHT),
                (still_playing, 0, 6 * GLYPH_HEIGHT),
                (credit, 0, 12 * GLYPH_HEIGHT),
                ("   . . . ENJOY MOKTAR ADVENTURE !!", 0, 13 * GLYPH_HEIGHT),
            ]
        )
    return screens