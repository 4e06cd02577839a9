"""Level file decoding and the tile queries the engine relies on."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Sequence

MAP_WIDTH = 256
TRAILER_SIZE = 35828
TILE_COUNT = 256
TILE_BYTES = 128

# Offsets into the trailer that follows the tile map.
_HORIZ_FLAGS = 32768
_FLOOR_FLAGS = _HORIZ_FLAGS + 256
_CEIL_FLAGS = _HORIZ_FLAGS + 512
_OBJECTS = 33536
_ALTITUDE_ZERO = 33776
_PLAYER_X = 33778
_PLAYER_Y = 33780
_ENEMIES = 33782
_BONUSES = 35082
_XLIMIT = 35482
_GATES = 35484
_ELEVATORS = 35624
_FINISH_X = 35824
_FINISH_Y = 35826

OBJECT_COUNT = 40
OBJECT_RECORD = 6
ENEMY_COUNT = 50
ENEMY_RECORD = 26
BONUS_COUNT = 100
BONUS_RECORD = 4
GATE_COUNT = 20
GATE_RECORD = 7
ELEVATOR_COUNT = 10
ELEVATOR_RECORD = 20
TRASH_COUNT = 4

_UNUSED = 0xFFFF
_ANIMATION_FLAG = 0x80


class HorizFlag(enum.IntEnum):
    """Horizontal (wall) flags of a tile."""

    NOWALL = 0
    WALL = 1
    DEADLY = 3
    PADLOCK = 5


class FloorFlag(enum.IntEnum):
    """Floor flags of a tile."""

    NOFLOOR = 0
    FLOOR = 1


class CeilFlag(enum.IntEnum):
    """Ceiling flags of a tile."""

    NOCEILING = 0
    CEILING = 1


class LevelFormatError(ValueError):
    """Raised when level data is malformed."""


def load_uint16(high: int, low: int) -> int:
    """Combine two bytes into an unsigned 16-bit value."""
    return ((high * 256) & 0xFF00) + (low & 0xFF)


def load_int16(high: int, low: int) -> int:
    """Combine two bytes into a signed 16-bit value."""
    value = (((high & 0xFF) << 8) + (low & 0xFF)) & 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def _u16(data: bytes, offset: int) -> int:
    return load_uint16(data[offset + 1], data[offset])


def _i16(data: bytes, offset: int) -> int:
    return load_int16(data[offset + 1], data[offset])


@dataclass
class SpriteData:
    """Geometry of one sprite image."""

    width: int = 0
    height: int = 0
    collwidth: int = 0
    collheight: int = 0
    refwidth: int = 0
    refheight: int = 0


@dataclass
class Sprite:
    """A positioned, animated sprite."""

    x: int = 0
    y: int = 0
    speed_x: int = 0
    speed_y: int = 0
    number: int = 0
    spritedata: SpriteData | None = None
    enabled: bool = False
    visible: bool = False
    invisible: bool = False
    flipped: bool = False
    flash: bool = False
    killing: bool = False
    droptobottom: bool = False
    animation: Sequence[int] = ()
    frame: int = 0

    def set_image(self, number: int, spritedata: Sequence[SpriteData], clear_flags: bool = False) -> None:
        """Show sprite image `number`, optionally resetting the display flags."""
        if number < 0:
            raise IndexError(f"invalid sprite number {number}")
        self.spritedata = spritedata[number]
        self.number = number
        self.enabled = True
        if clear_flags:
            self.flipped = False
            self.flash = False
            self.visible = False
            self.invisible = False
            self.droptobottom = False
            self.killing = False


@dataclass
class Enemy:
    """An enemy with its initial parameters and run-time state."""

    sprite: Sprite = field(default_factory=Sprite)
    initsprite: int = _UNUSED
    init_enabled: bool = False
    init_x: int = 0
    init_y: int = 0
    init_speed_x: int = 0
    init_speed_y: int = 0
    type: int = 0
    power: int = 0
    walkspeed_x: int = 0
    center_x: int = 0
    range_x: int = 0
    range_y: int = 0
    delay: int = 0
    direction: int = 0
    dying: int = 0
    phase: int = 0
    counter: int = 0
    trigger: bool = False
    visible: bool = False
    carry_sprite: int = -1
    dead_sprite: int = -1
    boss: bool = False


@dataclass
class GameObject:
    """A movable object such as a box or a ball."""

    sprite: Sprite = field(default_factory=Sprite)
    initsprite: int = _UNUSED
    init_enabled: bool = False
    init_x: int = 0
    init_y: int = 0
    mass: int = 0
    objectdata: Any = None


@dataclass
class Bonus:
    """A bonus tile and the tile that replaces it once taken."""

    x: int = 0
    y: int = 0
    exists: bool = False
    bonustile: int = 0
    replacetile: int = 0


@dataclass
class Gate:
    """A secret entrance leading to another part of the level."""

    entrance_x: int = 0
    entrance_y: int = 0
    screen_x: int = 0
    screen_y: int = 0
    exit_x: int = 0
    exit_y: int = 0
    noscroll: bool = False
    exists: bool = False


@dataclass
class Elevator:
    """A moving platform."""

    sprite: Sprite = field(default_factory=Sprite)
    initsprite: int = _UNUSED
    init_enabled: bool = False
    enabled: bool = False
    init_x: int = 0
    init_y: int = 0
    init_speed_x: int = 0
    init_speed_y: int = 0
    range: int = 0
    init_direction: int = 0


@dataclass
class Tile:
    """One of the 256 tiles of a level."""

    pixels: bytes = b""
    current: int = 0
    horizflag: int = 0
    floorflag: int = 0
    ceilflag: int = 0
    animated: bool = False
    animation: tuple[int, int, int] = (0, 0, 0)


@dataclass
class Player:
    """The player's sprites and start parameters."""

    sprite: Sprite = field(default_factory=Sprite)
    sprite2: Sprite = field(default_factory=Sprite)
    sprite3: Sprite = field(default_factory=Sprite)
    init_x: int = 0
    init_y: int = 0
    inithp: int = 16
    cage_x: int = 0
    cage_y: int = 0


@dataclass
class GameState:
    """Engine-wide counters and flags shared by the game loop."""

    bitmap_x: int = 0
    bitmap_y: int = 0
    bitmap_xm: int = 0
    bitmap_ym: int = 0
    screen_width: int = 20
    screen_height: int = 12
    image_counter: int = 0
    seechoc_flag: int = 0
    gravity_flag: int = 0
    furtif_flag: int = 0
    kick_flag: int = 0
    godmode: bool = False
    drop_flag: int = 0
    carry_flag: int = 0
    grandbrule_flag: int = 0
    choc_flag: int = 0
    last_order: int = 0
    invulnerable_flag: int = 0
    taupe_flag: int = 0
    bignmi_power: int = 0
    boss_alive: bool = False
    cross_flag: int = 0
    newlevel_flag: bool = False
    noscroll_flag: bool = False
    xlimit: int = 0
    altitude_zero: int = 0
    permut_flag: bool = False
    energy: int = 0


@dataclass
class Level:
    """A decoded level."""

    height: int = 0
    width: int = MAP_WIDTH
    tilemap: list[bytearray] = field(default_factory=list)
    tiles: list[Tile] = field(default_factory=list)
    player: Player = field(default_factory=Player)
    finish_x: int = 0
    finish_y: int = 0
    objects: list[GameObject] = field(default_factory=list)
    enemies: list[Enemy] = field(default_factory=list)
    bonuses: list[Bonus] = field(default_factory=list)
    gates: list[Gate] = field(default_factory=list)
    elevators: list[Elevator] = field(default_factory=list)
    trash: list[Sprite] = field(default_factory=list)
    spritedata: Sequence[SpriteData] = ()
    objectdata: Sequence[Any] = ()
    xlimit: int = 0
    altitude_zero: int = 0
    permut_flag: bool = False
    levelnumber: int = 0
    levelid: int = 0
    lives: int = 2
    extrabonus: int = 0

    def _tile_at(self, tile_y: int, tile_x: int) -> Tile:
        return self.tiles[self.tilemap[tile_y][tile_x]]

    def horizflag(self, tile_y: int, tile_x: int) -> int:
        """Wall flag at a tile position; outside the map sideways is a wall."""
        if not 0 <= tile_x < self.width:
            return HorizFlag.WALL
        if not 0 <= tile_y < self.height:
            return HorizFlag.NOWALL
        return self._tile_at(tile_y, tile_x).horizflag

    def floorflag(self, tile_y: int, tile_x: int) -> int:
        """Floor flag at a tile position; outside the map sideways is floor."""
        if not 0 <= tile_x < self.width:
            return FloorFlag.FLOOR
        if not 0 <= tile_y < self.height:
            return FloorFlag.NOFLOOR
        return self._tile_at(tile_y, tile_x).floorflag

    def ceilflag(self, tile_y: int, tile_x: int) -> int:
        """Ceiling flag at a tile position; outside the map there is none."""
        if not (0 <= tile_y < self.height and 0 <= tile_x < self.width):
            return CeilFlag.NOCEILING
        return self._tile_at(tile_y, tile_x).ceilflag

    def update_sprite(self, sprite: Sprite, number: int, clear_flags: bool = False) -> None:
        """Give `sprite` the image `number` from this level's sprite set."""
        sprite.set_image(number, self.spritedata, clear_flags)


def _load_tiles(data: bytes, base: int) -> tuple[list[Tile], bool]:
    tiles = []
    permut = False
    flagged = TILE_COUNT  # last tile carrying the animation flag
    for i in range(TILE_COUNT):
        ceil_raw = data[base + _CEIL_FLAGS + i]
        tile = Tile(
            pixels=bytes(data[base + i * TILE_BYTES: base + (i + 1) * TILE_BYTES]),
            current=i,
            horizflag=data[base + _HORIZ_FLAGS + i],
            floorflag=data[base + _FLOOR_FLAGS + i],
            ceilflag=ceil_raw & 0x7F,
            animated=True,
        )
        if flagged == i - 1:
            tile.animation = (i, i + 1, i - 1)
            permut = True
        elif flagged == i - 2:
            tile.animation = (i, i - 2, i - 1)
            permut = True
        elif ceil_raw & _ANIMATION_FLAG:
            tile.animation = (i, i + 1, i + 2)
            flagged = i
            permut = True
        else:
            tile.animation = (i, i, i)
            tile.animated = False
        tiles.append(tile)
    return tiles, permut


def _load_objects(data: bytes, base: int) -> list[GameObject]:
    objects = []
    for i in range(OBJECT_COUNT):
        off = base + _OBJECTS + i * OBJECT_RECORD
        obj = GameObject(initsprite=_u16(data, off))
        obj.init_enabled = obj.initsprite != _UNUSED
        if obj.init_enabled:
            obj.init_x = _i16(data, off + 2)
            obj.init_y = _i16(data, off + 4)
        objects.append(obj)
    return objects


def _load_enemy(data: bytes, off: int) -> Enemy:
    enemy = Enemy(initsprite=_u16(data, off + 4))
    enemy.init_enabled = enemy.initsprite != _UNUSED
    if not enemy.init_enabled:
        enemy.sprite.enabled = False
        return enemy
    enemy.init_x = _i16(data, off)
    enemy.init_y = _i16(data, off + 2)
    enemy.type = _u16(data, off + 6) & 0x1FFF
    enemy.init_speed_x = _i16(data, off + 8)
    enemy.power = _i16(data, off + 12)
    kind = enemy.type
    if kind in (0, 1):
        enemy.center_x = _i16(data, off + 15)
        enemy.range_x = _u16(data, off + 17)
    elif kind == 2:
        enemy.delay = data[off + 16]
        raw = _u16(data, off + 17)
        enemy.direction = (raw >> 14) & 0x0003
        enemy.range_x = raw & 0x3FFF
    elif kind in (3, 4, 5, 6):
        enemy.center_x = _i16(data, off + 15)
        enemy.range_x = _u16(data, off + 17)
        enemy.range_y = data[off + 19]
    elif kind in (7, 9, 10, 11):
        enemy.walkspeed_x = data[off + 19]
        enemy.range_x = _u16(data, off + 23)
    elif kind in (8, 14):
        enemy.walkspeed_x = data[off + 19]
    elif kind == 12:
        enemy.range_y = _u16(data, off + 15)
        enemy.delay = data[off + 19]
    elif kind == 13:
        enemy.delay = data[off + 20]
        enemy.range_x = _u16(data, off + 23)
    elif kind == 17:
        enemy.range_x = _u16(data, off + 15)
        enemy.delay = _u16(data, off + 17)
        enemy.range_y = _u16(data, off + 21)
    elif kind == 18:
        enemy.range_x = _u16(data, off + 15)
        enemy.range_y = _u16(data, off + 17)
        enemy.init_speed_y = data[off + 19]
    return enemy


def _load_bonuses(data: bytes, base: int, tilemap: list[bytearray]) -> list[Bonus]:
    bonuses = []
    for i in range(BONUS_COUNT):
        off = base + _BONUSES + i * BONUS_RECORD
        bonus = Bonus(x=data[off + 2], y=data[off + 3])
        bonus.exists = bonus.x != 0xFF and bonus.y != 0xFF
        if bonus.exists:
            bonus.bonustile = data[off]
            bonus.replacetile = data[off + 1]
            if bonus.y >= len(tilemap):
                raise LevelFormatError(f"bonus {i} lies outside the tile map")
            tilemap[bonus.y][bonus.x] = data[off]
        bonuses.append(bonus)
    return bonuses


def _load_gates(data: bytes, base: int) -> list[Gate]:
    gates = []
    for i in range(GATE_COUNT):
        off = base + _GATES + i * GATE_RECORD
        gate = Gate(entrance_y=data[off + 1])
        gate.exists = gate.entrance_y != 0xFF
        if gate.exists:
            gate.entrance_x = data[off]
            gate.screen_x = data[off + 2]
            gate.screen_y = data[off + 3]
            gate.exit_x = data[off + 4]
            gate.exit_y = data[off + 5]
            gate.noscroll = data[off + 6] != 0
        gates.append(gate)
    return gates


def _load_elevators(data: bytes, base: int) -> list[Elevator]:
    elevators = []
    for i in range(ELEVATOR_COUNT):
        off = base + _ELEVATORS + i * ELEVATOR_RECORD
        elevator = Elevator(
            initsprite=_u16(data, off + 4),
            init_x=_i16(data, off + 12),
            init_y=_i16(data, off + 14),
        )
        speed = data[off + 7]
        elevator.init_enabled = (
            elevator.initsprite != _UNUSED
            and speed < 8
            and elevator.init_x >= -16
            and elevator.init_y >= 0
        )
        elevator.enabled = elevator.init_enabled
        if elevator.enabled:
            elevator.range = _u16(data, off + 10)
            elevator.init_direction = data[off + 16]
            if elevator.init_direction in (0, 3):  # up or left
                speed = -speed
            if elevator.init_direction in (0, 2):  # up or down
                elevator.init_speed_y = speed
            else:
                elevator.init_speed_x = speed
        elevators.append(elevator)
    return elevators


def load_level(
    data: bytes,
    spritedata: Sequence[SpriteData] | None = None,
    objectdata: Sequence[Any] | None = None,
) -> Level:
    """Decode an uncompressed level file."""
    if len(data) < TRAILER_SIZE:
        raise LevelFormatError(f"level data too short: {len(data)} bytes")
    height = (len(data) - TRAILER_SIZE) >> 8
    base = height * MAP_WIDTH
    tilemap = [bytearray(data[row * MAP_WIDTH:(row + 1) * MAP_WIDTH]) for row in range(height)]
    tiles, permut = _load_tiles(data, base)

    level = Level(
        height=height,
        tilemap=tilemap,
        tiles=tiles,
        spritedata=tuple(spritedata or ()),
        objectdata=tuple(objectdata or ()),
        permut_flag=permut,
        finish_x=_i16(data, base + _FINISH_X),
        finish_y=_i16(data, base + _FINISH_Y),
        altitude_zero=_i16(data, base + _ALTITUDE_ZERO) & 0xFF,
        xlimit=_i16(data, base + _XLIMIT),
    )
    level.player.init_x = _i16(data, base + _PLAYER_X)
    level.player.init_y = _i16(data, base + _PLAYER_Y)
    level.objects = _load_objects(data, base)
    level.enemies = [
        _load_enemy(data, base + _ENEMIES + i * ENEMY_RECORD) for i in range(ENEMY_COUNT)
    ]
    level.bonuses = _load_bonuses(data, base, tilemap)
    level.gates = _load_gates(data, base)
    level.elevators = _load_elevators(data, base)
    level.trash = [Sprite() for _ in range(TRASH_COUNT)]
    return level