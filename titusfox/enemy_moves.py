"""Per-frame movement of the enemies, one behaviour for each enemy type."""

from __future__ import annotations

from typing import Callable

from titusfox.enemies import dead1, down_animation, find_trash, gal_form, put_bullet, up_animation
from titusfox.level import Enemy, FloorFlag, GameState, HorizFlag, Level, Sprite

MAX_FALL_SPEED = 16
SHOOT_PHASE = 30
DROP_GRAVITY = 4

_BLOCKING = frozenset({HorizFlag.WALL, HorizFlag.DEADLY, HorizFlag.PADLOCK})


def _int16(value: int) -> int:
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def _sub_to_zero(value: int) -> int:
    return max(value - 1, 0)


def _face_player(enemy: Enemy, player: Sprite) -> None:
    """Walk towards the player: positive speed moves left."""
    if enemy.sprite.x > player.x:
        enemy.sprite.speed_x = enemy.walkspeed_x
    else:
        enemy.sprite.speed_x = -enemy.walkspeed_x


def _turn_home(enemy: Enemy) -> None:
    """Point the walking direction towards the spawn point."""
    sprite = enemy.sprite
    sprite.speed_x = abs(sprite.speed_x)
    if enemy.init_x > sprite.x:
        sprite.speed_x = -sprite.speed_x


def _patrol(enemy: Enemy) -> None:
    """Move without clipping, turning at range_x from center_x."""
    sprite = enemy.sprite
    sprite.x -= sprite.speed_x
    if abs(sprite.x - enemy.center_x) > enemy.range_x:
        if sprite.x >= enemy.center_x:
            sprite.speed_x = abs(sprite.speed_x)
        else:
            sprite.speed_x = -abs(sprite.speed_x)


def _blocked(level: Level, sprite: Sprite, look_ahead: bool = True) -> bool:
    offset = (-1 if sprite.speed_x > 0 else 1) if look_ahead else 0
    return level.horizflag((sprite.y >> 4) - 1, (sprite.x >> 4) + offset) in _BLOCKING


def _advance(sprite: Sprite) -> None:
    sprite.x -= sprite.speed_x
    if sprite.x < 0:
        sprite.speed_x = -sprite.speed_x
        sprite.x -= sprite.speed_x


def _no_floor(level: Level, sprite: Sprite) -> bool:
    return level.floorflag(sprite.y >> 4, sprite.x >> 4) == FloorFlag.NOFLOOR


def _gravity_step(level: Level, enemy: Enemy) -> bool:
    """Fall if unsupported, otherwise walk one step. True while falling."""
    sprite = enemy.sprite
    if _no_floor(level, sprite):
        if sprite.speed_y < MAX_FALL_SPEED:
            sprite.speed_y += 1
        sprite.y += sprite.speed_y
        return True
    if sprite.speed_y != 0:
        _face_player(enemy, level.player.sprite)
    sprite.speed_y = 0
    sprite.y &= ~0xF
    if _blocked(level, sprite):
        sprite.speed_x = -sprite.speed_x
    _advance(sprite)
    return False


def _spawn_visible(enemy: Enemy, state: GameState, rows: int, columns: int) -> bool:
    dy = (enemy.init_y >> 4) - state.bitmap_y
    dx = (enemy.init_x >> 4) - state.bitmap_x
    return 0 <= dy < rows and 0 <= dx < columns


def _reset_to_spawn(enemy: Enemy) -> None:
    enemy.sprite.y = enemy.init_y
    enemy.sprite.x = enemy.init_x


def _noclip_walk(level: Level, state: GameState, enemy: Enemy) -> None:
    if enemy.dying:
        dead1(level, state, enemy)
        return
    _patrol(enemy)


def _shoot(level: Level, state: GameState, enemy: Enemy) -> None:
    if enemy.dying:
        dead1(level, state, enemy)
        return
    if not enemy.visible:
        return
    sprite = enemy.sprite
    player = level.player.sprite
    if enemy.direction == 0:
        sprite.speed_x = -1 if sprite.x < player.x else 0
    elif enemy.direction == 2:
        sprite.speed_x = -1
    else:
        sprite.speed_x = 0
    if enemy.phase == 0:
        enemy.counter = _sub_to_zero(enemy.counter)
        if enemy.counter != 0:
            return
        if abs(player.y - sprite.y) > 24:
            return
        if enemy.range_x < abs(player.x - sprite.x):
            return
        if enemy.direction == 2 and sprite.x > player.x:
            return
        if enemy.direction not in (0, 2) and player.x > sprite.x:
            return
        enemy.phase = SHOOT_PHASE
        up_animation(sprite)
        return
    enemy.phase -= 1
    if not enemy.trigger:
        return
    sprite.frame += 2
    bullet = find_trash(level)
    if bullet is not None:
        put_bullet(level, enemy, bullet)
        enemy.counter = enemy.delay
    enemy.phase = 0


def _jump_to_player(level: Level, state: GameState, enemy: Enemy) -> None:
    if enemy.dying:
        dead1(level, state, enemy)
        return
    sprite = enemy.sprite
    player = level.player.sprite
    if enemy.phase == 0:
        _patrol(enemy)
        if not enemy.visible:
            return
        if sprite.y < player.y or sprite.y >= player.y + 256:
            return
        if enemy.range_y < sprite.y - player.y:
            return
        if sprite.x > player.x:
            if sprite.flipped:
                return
        elif not sprite.flipped:
            return
        if abs(sprite.x - player.x) >= 48:
            return
        if abs(player.x - enemy.center_x) > enemy.range_x:
            return
        enemy.phase = 1
        speed = 0
        height = 0
        while True:
            speed += 1
            height += speed
            if sprite.y - player.y <= height:
                break
        sprite.speed_y = -speed
        enemy.delay = sprite.y  # launch height
        up_animation(sprite)
    elif enemy.phase == 1:
        if not enemy.visible:
            return
        sprite.x -= sprite.speed_x << 2
        sprite.y += sprite.speed_y
        if sprite.speed_y + 1 < 0:
            sprite.speed_y += 1
            if sprite.y > enemy.delay - enemy.range_y:
                return
        up_animation(sprite)
        enemy.phase = 2
        sprite.speed_y = 0
        if sprite.x <= enemy.center_x:
            sprite.speed_x = abs(sprite.speed_x)
        else:
            sprite.speed_x = -abs(sprite.speed_x)
    elif enemy.phase == 2:
        if not enemy.visible:
            return
        sprite.x -= sprite.speed_x
        sprite.y += sprite.speed_y
        sprite.speed_y += 1
        if sprite.y < enemy.delay:
            return
        sprite.y = enemy.delay
        sprite.x -= sprite.speed_x
        enemy.phase = 0
        down_animation(sprite)
        down_animation(sprite)


def _fly_to_player(level: Level, state: GameState, enemy: Enemy) -> None:
    if enemy.dying:
        dead1(level, state, enemy)
        return
    _patrol(enemy)
    if not enemy.visible:
        return
    sprite = enemy.sprite
    player = level.player.sprite
    if enemy.phase == 0:
        if abs(sprite.y - player.y) > enemy.range_y:
            return
        if abs(sprite.x - player.x) > 40:
            return
        enemy.delay = sprite.y  # starting height
        sprite.speed_y = 2 if sprite.y < player.y else -2
        enemy.phase = 1
        up_animation(sprite)
    elif enemy.phase == 1:
        sprite.y += sprite.speed_y
        if abs(sprite.y - enemy.delay) < enemy.range_y:
            return
        sprite.speed_y = -sprite.speed_y
        up_animation(sprite)
        enemy.phase = 2
    elif enemy.phase == 2:
        sprite.y += sprite.speed_y
        if sprite.y != enemy.delay:
            return
        down_animation(sprite)
        down_animation(sprite)
        enemy.phase = 0


def _too_far(enemy: Enemy, player: Sprite) -> bool:
    sprite = enemy.sprite
    return abs(player.x - sprite.x) > 320 * 2 or abs(player.y - sprite.y) >= 200 * 2


def _hit_when_near(level: Level, state: GameState, enemy: Enemy) -> None:
    if enemy.dying:
        dead1(level, state, enemy)
        return
    sprite = enemy.sprite
    player = level.player.sprite
    if enemy.phase == 0:
        if sprite.y > player.y:
            return
        if enemy.range_x < abs(sprite.x - player.x):
            return
        if abs(sprite.y - player.y) > 200:
            return
        enemy.phase = 1
        up_animation(sprite)
        _face_player(enemy, player)
    elif enemy.phase == 1:
        if _gravity_step(level, enemy):
            return
        if _too_far(enemy, player):
            enemy.phase = 2
            return
        width = sprite.spritedata.width if sprite.spritedata is not None else 0
        if abs(player.x - sprite.x) > width + 6:
            return
        if abs(player.y - sprite.y) > 8:
            return
        enemy.phase = 3
        up_animation(sprite)
    elif enemy.phase == 2:
        if _spawn_visible(enemy, state, 14, 21):
            return
        _reset_to_spawn(enemy)
        enemy.phase = 0
        down_animation(sprite)
    elif enemy.phase == 3:
        if enemy.trigger:
            enemy.phase = 1
            return
        if _gravity_step(level, enemy):
            return
        if _too_far(enemy, player):
            enemy.phase = 2


def _walk_off_screen(level: Level, state: GameState, enemy: Enemy) -> None:
    if enemy.type == 14:
        enemy.dying = 0
    elif enemy.dying:
        dead1(level, state, enemy)
        return
    sprite = enemy.sprite
    player = level.player.sprite
    if enemy.phase == 0:
        if abs(sprite.x - player.x) > 340 or abs(sprite.y - player.y) >= 230:
            enemy.phase = 1
            up_animation(sprite)
            _face_player(enemy, player)
    elif enemy.phase == 1:
        if _gravity_step(level, enemy):
            return
        if abs(player.x - sprite.x) < 320 * 2:
            return
        enemy.phase = 2
    elif enemy.phase == 2:
        if _spawn_visible(enemy, state, 12, 19):
            return
        _reset_to_spawn(enemy)
        enemy.phase = 0
        down_animation(sprite)


def _pop_down(level: Level, enemy: Enemy) -> None:
    player = level.player.sprite
    if not enemy.visible:
        up_animation(enemy.sprite)
        enemy.sprite.frame -= 1
        gal_form(level, enemy)
        _face_player(enemy, player)
        enemy.phase = 1
    elif enemy.trigger:
        _face_player(enemy, player)
        enemy.phase = 1


def _walk_home_step(level: Level, enemy: Enemy) -> None:
    sprite = enemy.sprite
    if _no_floor(level, sprite):
        _turn_home(enemy)
    sprite.y &= ~0xF
    if _blocked(level, sprite):
        sprite.speed_x = -sprite.speed_x
    _advance(sprite)


def _pop_up(level: Level, state: GameState, enemy: Enemy) -> None:
    if enemy.dying:
        dead1(level, state, enemy)
        return
    sprite = enemy.sprite
    player = level.player.sprite
    if enemy.phase == 0:
        if enemy.range_x < abs(player.x - sprite.x):
            return
        if abs(player.y - sprite.y) > 60:
            return
        enemy.phase = 1
        up_animation(sprite)
        _face_player(enemy, player)
    elif enemy.phase == 1:
        state.taupe_flag = (state.taupe_flag + 1) & 0xFF
        if state.taupe_flag & 0x04 == 0 and state.image_counter & 0x01FF == 0:
            up_animation(sprite)
        if state.image_counter & 0x007F == 0:
            enemy.phase = 3
            up_animation(sprite)
            _pop_down(level, enemy)
            return
        _walk_home_step(level, enemy)
        if abs(player.x - sprite.x) < 320 * 4:
            return
        enemy.phase = 2
    elif enemy.phase == 2:
        if _spawn_visible(enemy, state, 13, 25):
            return
        _reset_to_spawn(enemy)
        enemy.phase = 0
        down_animation(sprite)
    elif enemy.phase == 3:
        _pop_down(level, enemy)


def _alert_wait(level: Level, state: GameState, enemy: Enemy) -> None:
    sprite = enemy.sprite
    player = level.player.sprite
    if state.furtif_flag != 0:
        return
    if enemy.range_x < abs(player.x - sprite.x):
        down_animation(sprite)
        enemy.phase = 0
        return
    if enemy.range_x - 50 >= abs(player.x - sprite.x) and abs(player.y - sprite.y) <= 60:
        enemy.phase = 2
        up_animation(sprite)


def _alert(level: Level, state: GameState, enemy: Enemy) -> None:
    if enemy.dying:
        dead1(level, state, enemy)
        return
    sprite = enemy.sprite
    player = level.player.sprite
    if enemy.phase == 0:
        if state.furtif_flag != 0:
            return
        if enemy.range_x < abs(player.x - sprite.x):
            return
        if abs(player.y - sprite.y) > 26:
            return
        enemy.phase = 1
        up_animation(sprite)
        _face_player(enemy, player)
        _alert_wait(level, state, enemy)
    elif enemy.phase == 1:
        _alert_wait(level, state, enemy)
    elif enemy.phase == 2:
        if _no_floor(level, sprite):
            _turn_home(enemy)
        sprite.y &= ~0xF
        if _blocked(level, sprite):
            _turn_home(enemy)
        _advance(sprite)
        if abs(player.x - sprite.x) >= 320 * 2:
            enemy.phase = 3
    elif enemy.phase == 3:
        if _spawn_visible(enemy, state, 14, 21):
            return
        _reset_to_spawn(enemy)
        down_animation(sprite)
        down_animation(sprite)
        enemy.phase = 0


def _walk_and_shoot(level: Level, state: GameState, enemy: Enemy) -> None:
    if enemy.dying:
        dead1(level, state, enemy)
        return
    sprite = enemy.sprite
    player = level.player.sprite
    if enemy.phase == 0:
        if enemy.range_x < abs(player.x - sprite.x):
            return
        if abs(player.y - sprite.y) > 26:
            return
        enemy.phase = 1
        up_animation(sprite)
        _face_player(enemy, player)
    elif enemy.phase == 1:
        if _no_floor(level, sprite):
            _turn_home(enemy)
        sprite.y &= ~0xF
        if _blocked(level, sprite, look_ahead=False):
            sprite.speed_x = -sprite.speed_x
        _advance(sprite)
        if abs(player.x - sprite.x) >= 320 * 2:
            enemy.phase = 2
        enemy.counter = _sub_to_zero(enemy.counter)
        if enemy.counter != 0:
            return
        if abs(player.x - sprite.x) > 64:
            return
        if abs(player.y - sprite.y) > 20:
            return
        _face_player(enemy, player)
        enemy.phase = 3
        up_animation(sprite)
        enemy.counter = 20
    elif enemy.phase == 2:
        if not _spawn_visible(enemy, state, 14, 21):
            _reset_to_spawn(enemy)
            down_animation(sprite)
            enemy.phase = 0
    elif enemy.phase == 3:
        if not enemy.trigger:
            return
        bullet = find_trash(level)
        if bullet is not None:
            sprite.frame += 2
            put_bullet(level, enemy, bullet)
        down_animation(sprite)
        enemy.phase = 1


def _fireball(level: Level, state: GameState, enemy: Enemy) -> None:
    enemy.dying = 0
    sprite = enemy.sprite
    if enemy.phase == 0:
        up_animation(sprite)
        sprite.speed_y = enemy.range_y
        enemy.init_y = sprite.y
        enemy.phase = 1
    elif enemy.phase == 1:
        sprite.y -= sprite.speed_y
        sprite.speed_y -= 1
        if sprite.speed_y == 0:
            enemy.phase = 2
    elif enemy.phase == 2:
        sprite.y += sprite.speed_y
        sprite.speed_y += 1
        if sprite.y >= enemy.init_y:
            sprite.y = enemy.init_y
            enemy.counter = enemy.delay
            enemy.phase = 3
            down_animation(sprite)
    elif enemy.phase == 3:
        enemy.counter -= 1
        if enemy.counter == 0:
            enemy.phase = 0


def _bounce(level: Level, state: GameState, enemy: Enemy) -> None:
    if enemy.dying:
        dead1(level, state, enemy)
        return
    sprite = enemy.sprite
    player = level.player.sprite
    if enemy.phase == 0:
        if player.x >= sprite.x:
            sprite.speed_x = -abs(sprite.speed_x)
        else:
            sprite.speed_x = abs(sprite.speed_x)
        if abs(player.x - sprite.x) <= enemy.range_x and abs(player.y - sprite.y) <= 40:
            up_animation(sprite)
            enemy.phase = 1
            sprite.speed_y = 10
    elif enemy.phase == 1:
        sprite.x -= sprite.speed_x
        sprite.y -= sprite.speed_y
        sprite.speed_y -= 1
        if sprite.speed_y == 0:
            up_animation(sprite)
            enemy.phase = 2
    elif enemy.phase == 2:
        sprite.x -= sprite.speed_x
        sprite.y += sprite.speed_y
        sprite.speed_y += 1
        if sprite.speed_y > 10:
            enemy.phase = 3
            up_animation(sprite)
            enemy.counter = enemy.delay
    elif enemy.phase == 3:
        enemy.counter -= 1
        if enemy.counter == 0:
            for _ in range(3):
                down_animation(sprite)
            enemy.phase = 0


def _still_immortal(level: Level, state: GameState, enemy: Enemy) -> None:
    enemy.dying = 0


def _still(level: Level, state: GameState, enemy: Enemy) -> None:
    if enemy.dying:
        dead1(level, state, enemy)


def _drop(level: Level, state: GameState, enemy: Enemy) -> None:
    enemy.dying = 0
    sprite = enemy.sprite
    player = level.player.sprite
    if enemy.counter + 1 < enemy.delay:
        enemy.counter += 1
        return
    if enemy.range_x < abs(sprite.x - player.x):
        enemy.counter = 0
        return
    if enemy.range_y < player.y - sprite.y:
        return
    free = next((obj for obj in level.objects[1:] if not obj.sprite.enabled), None)
    if free is None:
        enemy.counter = 0
        return
    up_animation(sprite)
    level.update_sprite(free.sprite, sprite.animation[sprite.frame] & 0x1FFF, True)
    free.sprite.flipped = True
    free.sprite.x = sprite.x
    free.sprite.y = sprite.y
    free.sprite.droptobottom = True
    free.sprite.killing = True
    free.sprite.speed_y = 0
    state.gravity_flag = DROP_GRAVITY
    down_animation(sprite)
    enemy.counter = 0


def _step_towards(sprite: Sprite, target_x: int, target_y: int) -> None:
    if target_x != sprite.x:
        sprite.speed_x = abs(sprite.speed_x)
        if target_x > sprite.x:
            sprite.speed_x = -sprite.speed_x
        sprite.x -= sprite.speed_x
    if target_y != sprite.y:
        if target_y > sprite.y:
            sprite.y += sprite.speed_y
        else:
            sprite.y -= sprite.speed_y


def _guard(level: Level, state: GameState, enemy: Enemy) -> None:
    if enemy.dying:
        dead1(level, state, enemy)
        return
    player = level.player.sprite
    outside = (
        player.x < _int16(enemy.init_x - enemy.range_x)
        or player.x > _int16(enemy.init_x + enemy.range_x)
        or player.y < _int16(enemy.init_y - enemy.range_y)
        or player.y > _int16(enemy.init_y + enemy.range_y)
    )
    if outside:
        _step_towards(enemy.sprite, enemy.init_x, enemy.init_y)
    else:
        _step_towards(enemy.sprite, player.x, player.y)


_Behaviour = Callable[[Level, GameState, Enemy], None]

_BEHAVIOURS: dict[int, _Behaviour] = {
    0: _noclip_walk,
    1: _noclip_walk,
    2: _shoot,
    3: _jump_to_player,
    4: _jump_to_player,
    5: _fly_to_player,
    6: _fly_to_player,
    7: _hit_when_near,
    8: _walk_off_screen,
    9: _pop_up,
    10: _alert,
    11: _walk_and_shoot,
    12: _fireball,
    13: _bounce,
    14: _walk_off_screen,
    15: _still_immortal,
    16: _still,
    17: _drop,
    18: _guard,
}


def move_enemies(level: Level, state: GameState) -> None:
    """Move every active enemy one frame according to its type."""
    for enemy in level.enemies:
        if not enemy.sprite.enabled:
            continue
        behaviour = _BEHAVIOURS.get(enemy.type)
        if behaviour is not None:
            behaviour(level, state, enemy)