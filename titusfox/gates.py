"""Secret gates, level completion and the screen-closing/opening transitions."""

from __future__ import annotations

from dataclasses import dataclass

from titusfox.level import Gate, GameState, Level

FIRST_OBJET = 30
CAGE_LEVEL_ID = 9

SCREEN_PIXEL_WIDTH = 320
SCREEN_PIXEL_HEIGHT = 192
STEP_COUNT = 10
TILE_SIZE = 16


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle in screen pixels."""

    x: int
    y: int
    w: int
    h: int

    @property
    def area(self) -> int:
        return max(self.w, 0) * max(self.h, 0)


def _matching_gate(level: Level) -> Gate | None:
    tile_x = level.player.sprite.x >> 4
    tile_y = level.player.sprite.y >> 4
    return next(
        (
            gate
            for gate in level.gates
            if gate.exists and gate.entrance_x == tile_x and gate.entrance_y == tile_y
        ),
        None,
    )


def check_gates(level: Level, state: GameState) -> Gate | None:
    """Move the player through a gate if kneeling on its entrance.

    Returns the gate that was used, or None.
    """
    if state.cross_flag == 0 or state.newlevel_flag:
        return None
    gate = _matching_gate(level)
    if gate is None:
        return None
    sprite = level.player.sprite
    sprite.speed_x = 0
    sprite.speed_y = 0
    sprite.x = gate.exit_x << 4
    sprite.y = gate.exit_y << 4
    state.bitmap_x = gate.screen_x
    state.bitmap_y = gate.screen_y
    state.noscroll_flag = gate.noscroll
    return gate


def _on_finish(position: int, finish: int) -> bool:
    aligned = position & 0xFFF0
    return aligned == finish or aligned - 16 == finish


def check_finish(level: Level, state: GameState) -> bool:
    """Mark the level as finished if the player stands at its exit."""
    if state.boss_alive:
        return False
    if level.levelid == CAGE_LEVEL_ID and level.player.sprite2.number not in (
        FIRST_OBJET + 26,
        FIRST_OBJET + 27,
    ):
        return False
    sprite = level.player.sprite
    if not _on_finish(sprite.x, level.finish_x):
        return False
    if not _on_finish(sprite.y, level.finish_y):
        return False
    state.newlevel_flag = True
    return True


def crossing_gate(level: Level, state: GameState) -> tuple[bool, Gate | None]:
    """Check level completion, then gates; report both outcomes."""
    finished = check_finish(level, state)
    gate = check_gates(level, state)
    return finished, gate


def _check_step(step: int) -> None:
    if not 0 <= step < STEP_COUNT:
        raise ValueError(f"step must be between 0 and {STEP_COUNT - 1}, got {step}")


def close_screen_rects(step: int) -> list[Rect]:
    """Black rectangles (top, left, bottom, right) filled at one closing step."""
    _check_step(step)
    inc_x = SCREEN_PIXEL_WIDTH // (STEP_COUNT * 2)
    inc_y = SCREEN_PIXEL_HEIGHT // (STEP_COUNT * 2)
    dx = step * inc_x
    dy = step * inc_y
    return [
        Rect(0, 0, SCREEN_PIXEL_WIDTH, dy),
        Rect(0, 0, dx, SCREEN_PIXEL_HEIGHT),
        Rect(0, SCREEN_PIXEL_HEIGHT - dy, SCREEN_PIXEL_WIDTH, dy),
        Rect(SCREEN_PIXEL_WIDTH - dx, 0, dx, SCREEN_PIXEL_HEIGHT),
    ]


def open_screen_rects(step: int) -> list[Rect]:
    """Tile rectangles (upper, right, bottom, left) revealed at one opening step."""
    _check_step(step)
    bx = SCREEN_PIXEL_WIDTH // (STEP_COUNT * 2)
    by = SCREEN_PIXEL_HEIGHT // (STEP_COUNT * 2)
    i = 2 * (step + 1)
    j = STEP_COUNT - 1 - step
    return [
        Rect(j * bx, j * by, i * bx - bx, by),
        Rect(j * bx + i * bx - bx, j * by, bx, i * by),
        Rect(j * bx + bx, (j + 1) * by + i * by - by, i * bx - bx, by),
        Rect(j * bx, j * by + by, bx, i * by),
    ]


def tile_blits(
    dest_x: int,
    dest_y: int,
    width: int,
    height: int,
    bitmap_xm: int,
    bitmap_ym: int,
    columns: int = 20,
    lines: int = 12,
) -> list[tuple[Rect, Rect]]:
    """Source/destination pairs that copy a screen area from the wrapped tile screen.

    The tile screen is split in four parts at (bitmap_xm, bitmap_ym); each part
    of the requested area is taken from where it lies in the tile screen.
    """
    sep_x = bitmap_xm * TILE_SIZE
    sep_y = bitmap_ym * TILE_SIZE
    sep_xi = (columns - bitmap_xm) * TILE_SIZE
    sep_yi = (lines - bitmap_ym) * TILE_SIZE
    right = dest_x + width
    bottom = dest_y + height
    blits: list[tuple[Rect, Rect]] = []

    def add(sx: int, sy: int, sw: int, sh: int, dx: int, dy: int) -> None:
        blits.append((Rect(sx, sy, sw, sh), Rect(dx, dy, sw, sh)))

    if dest_x < sep_xi and dest_y < sep_yi:  # upper left
        sw = sep_xi - dest_x if right > sep_xi else width
        sh = sep_yi - dest_y if bottom > sep_yi else height
        add(sep_x + dest_x, sep_y + dest_y, sw, sh, dest_x, dest_y)

    if dest_y < sep_yi and right > sep_xi:  # upper right
        sx, sw, dx = dest_x - sep_xi, width, dest_x
        if dest_x < sep_xi:
            sx, sw, dx = 0, width - (sep_xi - dest_x), sep_xi
        sh = sep_yi - dest_y if bottom > sep_yi else height
        add(sx, sep_y + dest_y, sw, sh, dx, dest_y)

    if dest_x < sep_xi and bottom > sep_yi:  # lower left
        sw = sep_xi - dest_x if right > sep_xi else width
        sy, sh, dy = dest_y - sep_yi, height, dest_y
        if dest_y < sep_yi:
            sy, sh, dy = 0, height - (sep_yi - dest_y), sep_yi
        add(sep_x + dest_x, sy, sw, sh, dest_x, dy)

    if right > sep_xi and bottom > sep_yi:  # lower right
        sx, sw, dx = dest_x - sep_xi, width, dest_x
        if dest_x < sep_xi:
            sx, sw, dx = 0, width - (sep_xi - dest_x), sep_xi
        sy, sh, dy = dest_y - sep_yi, height, dest_y
        if dest_y < sep_yi:
            sy, sh, dy = 0, height - (sep_yi - dest_y), sep_yi
        add(sx, sy, sw, sh, dx, dy)

    return blits