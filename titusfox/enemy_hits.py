"""Per-frame handling of enemies on the screen: animation and collisions."""

from __future__ import annotations

from titusfox.enemies import FIRST_NMI, gal_form, kick_ash, nmi_vs_drop, see_choc
from titusfox.level import Enemy, GameObject, GameState, Level

PERISCOPE_SPRITE = 178
WALK_AND_SHOOT = 11
FIREBALL_SPRITES = range(FIRST_NMI + 53, FIRST_NMI + 56)
IRON_BALL_SPRITE = 73
MIN_FALLING_MASS = 10
BOSS_INVULNERABILITY = 10
SCREEN_MARGIN = 32

# Enemy types that hurt the player on contact.
_HARMFUL_TYPES = frozenset(range(15)) | {18}


def enemy_touches_player(level: Level, state: GameState, enemy: Enemy) -> bool:
    """Handle contact between an enemy and the player.

    Returns True if the enemy touched the player.
    """
    if enemy.type not in _HARMFUL_TYPES:
        return False
    sprite = enemy.sprite
    if not nmi_vs_drop(sprite, level.player.sprite):
        return False
    if enemy.type != WALK_AND_SHOOT and sprite.number != PERISCOPE_SPRITE:
        sprite.speed_x = -sprite.speed_x
    if sprite.number in FIREBALL_SPRITES:
        state.grandbrule_flag = 1
    if enemy.power != 0:
        kick_ash(level, state, sprite, enemy.power)
    return True


def _off_screen(enemy: Enemy, state: GameState) -> bool:
    sprite = enemy.sprite
    left = state.bitmap_x << 4
    top = state.bitmap_y << 4
    return (
        sprite.x + SCREEN_MARGIN < left
        or sprite.x - SCREEN_MARGIN > left + state.screen_width * 16
        or sprite.y < top
        or sprite.y - SCREEN_MARGIN > top + state.screen_height * 16
    )


def _harms_enemies(obj: GameObject) -> bool:
    sprite = obj.sprite
    if sprite.spritedata is None:
        return False
    if sprite.speed_x == 0 and (sprite.speed_y == 0 or obj.mass < MIN_FALLING_MASS):
        return False
    return not getattr(obj.objectdata, "no_damage", False)


def _struck_by_object(level: Level, state: GameState, enemy: Enemy) -> GameObject | None:
    if state.gravity_flag == 0:
        return None
    return next(
        (
            obj
            for obj in level.objects
            if _harms_enemies(obj) and nmi_vs_drop(enemy.sprite, obj.sprite)
        ),
        None,
    )


def _struck_by_throw(level: Level, state: GameState, enemy: Enemy) -> bool:
    thrown = level.player.sprite2
    if state.drop_flag == 0 or state.carry_flag != 0 or not thrown.enabled:
        return False
    if thrown.spritedata is None or not nmi_vs_drop(enemy.sprite, thrown):
        return False
    state.invulnerable_flag = 0
    thrown.enabled = False
    see_choc(level, state)
    return True


def _take_hit(state: GameState, enemy: Enemy) -> None:
    state.drop_flag = 0
    if enemy.boss:
        if state.invulnerable_flag != 0:
            return
        state.invulnerable_flag = BOSS_INVULNERABILITY
        enemy.sprite.flash = True
        state.bignmi_power = (state.bignmi_power - 1) & 0xFF
        if state.bignmi_power != 0:
            return
        state.boss_alive = False
    enemy.dying |= 0x02


def set_enemies(level: Level, state: GameState) -> list[Enemy]:
    """Animate the enemies on the screen and resolve their collisions.

    Returns the enemies struck by an object or a throw this frame.
    """
    struck: list[Enemy] = []
    for enemy in level.enemies:
        if not enemy.sprite.enabled:
            continue
        enemy.visible = False
        if _off_screen(enemy, state):
            if enemy.dying & 0x03:
                enemy.sprite.enabled = False
            continue
        enemy.visible = True
        gal_form(level, enemy)
        if enemy.dying & 0x03:
            continue
        if state.kick_flag == 0 and not state.godmode:
            if enemy.sprite.invisible:
                continue
            enemy_touches_player(level, state, enemy)

        obj = _struck_by_object(level, state, enemy)
        if obj is not None:
            if obj.sprite.number != IRON_BALL_SPRITE:
                obj.sprite.speed_x = -obj.sprite.speed_x
        elif not _struck_by_throw(level, state, enemy):
            continue
        struck.append(enemy)
        _take_hit(state, enemy)
    return struck