"""Enemy helpers: animation stepping, sprite roles, collisions and thrown objects."""

from __future__ import annotations

from dataclasses import dataclass

from titusfox.gates import FIRST_OBJET
from titusfox.level import Enemy, GameState, Level, Sprite

FIRST_NMI = 101
MAX_SPEED_DEAD = 20
DEAD_PHASE = 0xFF
INVISIBLE_FRAME = 0x55AA
TRIGGER_BIT = 0x2000
BULLET_SPEED = 16 * 11
KICK_DURATION = 24
KICK_SPEED_Y = -8 * 16
TRASH_POWER = 70
SEECHOC_DURATION = 5
HIT_SPRITE = FIRST_OBJET + 15

# (first, last, carried sprite) for enemies that can carry the player's object.
_CARRY_RANGES = (
    (101, 105, 105),  # walking man
    (126, 130, 130),  # fly
    (149, 153, 149),  # skeleton
    (157, 158, 158),  # worm
    (159, 167, 167),  # guy with sword
    (185, 191, 186),  # zombie
    (197, 203, 203),  # woman with pot
)

# (first, last, dead sprite) for enemies that leave a corpse image.
_DEAD_RANGES = (
    (172, 184, 184),  # periscope
    (192, 196, 196),  # camel
    (210, 213, 213),  # old man with TV
    (214, 220, 220),  # snake in pot
    (221, 226, 226),  # man throwing knives
    (242, 247, 247),  # carnivorous plant in pot
)

_BOSS_RANGES = (
    (248, 251),  # man throwing rocks
    (252, 256),  # big baby
    (257, 261),  # big woman
    (263, 267),  # big man
    (284, 288),  # mummy
    (329, 332),  # ax man
)


@dataclass(frozen=True)
class SpriteRoles:
    """What an enemy sprite number implies about the enemy."""

    carry_sprite: int = -1
    dead_sprite: int = -1
    boss: bool = False


def _lookup(ranges: tuple[tuple[int, int, int], ...], number: int) -> int:
    return next((value for first, last, value in ranges if first <= number <= last), -1)


def classify_enemy_sprite(number: int) -> SpriteRoles:
    """Carry sprite, dead sprite and boss status for an enemy sprite number."""
    return SpriteRoles(
        carry_sprite=_lookup(_CARRY_RANGES, number),
        dead_sprite=_lookup(_DEAD_RANGES, number),
        boss=any(first <= number <= last for first, last in _BOSS_RANGES),
    )


def update_enemy_sprite(level: Level, enemy: Enemy, number: int, clear_flags: bool = False) -> None:
    """Show image `number` on the enemy and update the roles it implies."""
    level.update_sprite(enemy.sprite, number, clear_flags)
    roles = classify_enemy_sprite(number)
    enemy.carry_sprite = roles.carry_sprite
    enemy.dead_sprite = roles.dead_sprite
    enemy.boss = roles.boss


def up_animation(sprite: Sprite) -> None:
    """Advance the animation to the sequence after the next end marker."""
    frame = sprite.frame + 1
    while sprite.animation[frame] >= 0:
        frame += 1
    sprite.frame = frame + 1


def down_animation(sprite: Sprite) -> None:
    """Step the animation back past the previous end marker."""
    frame = sprite.frame - 1
    while sprite.animation[frame] >= 0:
        frame -= 1
    sprite.frame = frame - 1


def _int8(value: int) -> int:
    value &= 0xFF
    return value - 0x100 if value & 0x80 else value


def put_bullet(level: Level, enemy: Enemy, bullet: Sprite) -> None:
    """Launch `bullet` from the enemy towards the player."""
    anim = enemy.sprite.animation
    frame = enemy.sprite.frame
    bullet.x = enemy.sprite.x
    bullet.y = enemy.sprite.y - _int8(anim[frame - 1])
    level.update_sprite(bullet, (anim[frame - 2] & 0x1FFF) + FIRST_OBJET, True)
    if enemy.sprite.x < level.player.sprite.x:
        bullet.speed_x = BULLET_SPEED
        bullet.flipped = True
    else:
        bullet.speed_x = -BULLET_SPEED
        bullet.flipped = False
    bullet.speed_y = 0
    bullet.x += bullet.speed_x >> 4


def gal_form(level: Level, enemy: Enemy) -> None:
    """Show the enemy's current animation frame and step to the next one."""
    sprite = enemy.sprite
    sprite.invisible = False
    if enemy.dying & 0x03:
        sprite.visible = False
        enemy.visible = True
        return
    enemy.trigger = False
    anim = sprite.animation
    image = sprite.frame
    while anim[image] < 0:
        image += anim[image] >> 1  # jump back to the start of the sequence
    if anim[image] == INVISIBLE_FRAME:
        sprite.invisible = True
        return
    enemy.trigger = bool(anim[image] & TRIGGER_BIT)
    update_enemy_sprite(level, enemy, (anim[image] & 0x00FF) + FIRST_NMI, True)
    sprite.flipped = sprite.speed_x < 0
    image += 1
    if anim[image] < 0:
        image += anim[image] >> 1
    sprite.frame = image
    enemy.visible = True


def dead1(level: Level, state: GameState, enemy: Enemy) -> None:
    """Move a dying enemy: fall off the screen, or show its corpse image."""
    sprite = enemy.sprite
    if enemy.dying & 0x01 or enemy.dead_sprite == -1:
        if not enemy.dying & 0x01:
            enemy.dying |= 0x01
            sprite.speed_y = -10
            enemy.phase = 0
        if enemy.phase != DEAD_PHASE:
            sprite.y += sprite.speed_y
            if state.seechoc_flag != 0:
                level.player.sprite2.y += sprite.speed_y
            if sprite.speed_y < MAX_SPEED_DEAD:
                sprite.speed_y += 1
    else:
        enemy.dying |= 0x01
        update_enemy_sprite(level, enemy, enemy.dead_sprite, False)
        sprite.flash = False
        sprite.visible = False
        sprite.speed_y = 0
        enemy.phase = DEAD_PHASE


def kick_ash(level: Level, state: GameState, enemysprite: Sprite, power: int) -> None:
    """Hurt the player and knock them away from `enemysprite`."""
    player = level.player.sprite
    state.energy = max(state.energy - 2, 0)
    state.kick_flag = KICK_DURATION
    state.choc_flag = 0
    state.last_order = 0
    player.speed_x = power
    if player.x <= enemysprite.x:
        player.speed_x = -player.speed_x
    player.speed_y = KICK_SPEED_Y


def see_choc(level: Level, state: GameState) -> None:
    """Show the hit effect where a thrown object struck an enemy."""
    sprite2 = level.player.sprite2
    level.update_sprite(sprite2, HIT_SPRITE, True)
    sprite2.speed_x = 0
    sprite2.speed_y = 0
    state.seechoc_flag = SEECHOC_DURATION


def nmi_vs_drop(enemysprite: Sprite, sprite: Sprite) -> bool:
    """True if `sprite` collides with `enemysprite`."""
    if abs(sprite.x - enemysprite.x) >= 64:
        return False
    if abs(sprite.y - enemysprite.y) >= 70:
        return False
    enemy_data = enemysprite.spritedata
    other_data = sprite.spritedata
    if enemy_data is None or other_data is None:
        raise ValueError("both sprites need sprite data for a collision test")
    if sprite.y < enemysprite.y:
        if sprite.y <= enemysprite.y - enemy_data.collheight + 3:
            return False
    elif enemysprite.y <= sprite.y - other_data.collheight + 3:
        return False
    enemy_left = enemysprite.x - enemy_data.refwidth
    object_left = sprite.x - other_data.refwidth
    if enemy_left >= object_left:
        if object_left + (other_data.collwidth >> 1) <= enemy_left:
            return False
    elif enemy_left + (enemy_data.collwidth >> 1) <= object_left:
        return False
    return True


def find_trash(level: Level) -> Sprite | None:
    """The first unused slot for an enemy-thrown object, or None."""
    return next((trash for trash in level.trash if not trash.enabled), None)


def move_trash(level: Level, state: GameState) -> None:
    """Move objects thrown by enemies and let them hit the player."""
    player = level.player.sprite
    for trash in level.trash:
        if not trash.enabled:
            continue
        if trash.speed_x != 0:
            trash.x += trash.speed_x >> 4
            column = (trash.x >> 4) - state.bitmap_x
            if column < 0 or column > state.screen_width:
                trash.enabled = False
                continue
            if column != 0:
                trash.y += trash.speed_y >> 4
                row = (trash.y >> 4) - state.bitmap_y
                if row < 0 or row > state.screen_height * 16:
                    trash.enabled = False
                    continue
        if not state.godmode and nmi_vs_drop(trash, player):
            trash.x -= trash.speed_x
            kick_ash(level, state, trash, TRASH_POWER)
            trash.enabled = False