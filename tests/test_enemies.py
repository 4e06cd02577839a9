import pytest

from titusfox.enemies import (
    DEAD_PHASE,
    FIRST_NMI,
    HIT_SPRITE,
    KICK_DURATION,
    KICK_SPEED_Y,
    SpriteRoles,
    classify_enemy_sprite,
    dead1,
    down_animation,
    find_trash,
    gal_form,
    kick_ash,
    move_trash,
    nmi_vs_drop,
    put_bullet,
    see_choc,
    up_animation,
    update_enemy_sprite,
)
from titusfox.gates import FIRST_OBJET
from titusfox.level import Enemy, GameState, Level, Sprite, SpriteData


def _data():
    return SpriteData(width=32, height=32, collwidth=32, collheight=20, refwidth=8)


def _level():
    level = Level(spritedata=tuple(_data() for _ in range(400)))
    level.trash = [Sprite() for _ in range(4)]
    level.player.sprite.spritedata = _data()
    return level


def _sprite(x=0, y=0, **kwargs):
    return Sprite(x=x, y=y, spritedata=_data(), enabled=True, **kwargs)


def test_up_animation_moves_past_next_marker():
    anim = (1, 2, -4, 5, 6, -4)
    sprite = Sprite(animation=anim, frame=0)
    up_animation(sprite)
    assert sprite.frame == anim.index(-4) + 1
    assert anim[sprite.frame] == 5


def test_down_animation_moves_before_previous_marker():
    anim = (1, 2, -4, 5, 6, -4)
    sprite = Sprite(animation=anim, frame=4)
    down_animation(sprite)
    assert sprite.frame == anim.index(-4) - 1


def test_classify_walking_man_carries():
    assert classify_enemy_sprite(101) == SpriteRoles(carry_sprite=105, dead_sprite=-1, boss=False)


def test_classify_periscope_has_dead_sprite():
    assert classify_enemy_sprite(178).dead_sprite == 184


def test_classify_boss():
    assert classify_enemy_sprite(330).boss is True
    assert classify_enemy_sprite(262).boss is False


def test_classify_unknown_is_default():
    assert classify_enemy_sprite(50) == SpriteRoles()


def test_update_enemy_sprite_sets_roles():
    level = _level()
    enemy = Enemy()
    update_enemy_sprite(level, enemy, 214, True)
    assert enemy.sprite.number == 214
    assert enemy.dead_sprite == 220
    assert enemy.carry_sprite == -1
    assert enemy.boss is False


def test_nmi_vs_drop_same_place_collides():
    assert nmi_vs_drop(_sprite(100, 100), _sprite(100, 100)) is True


def test_nmi_vs_drop_far_apart():
    assert nmi_vs_drop(_sprite(100, 100), _sprite(164, 100)) is False
    assert nmi_vs_drop(_sprite(100, 100), _sprite(100, 170)) is False


def test_nmi_vs_drop_needs_sprite_data():
    with pytest.raises(ValueError):
        nmi_vs_drop(Sprite(x=0, y=0), Sprite(x=0, y=0))


def test_find_trash_returns_first_free():
    level = _level()
    level.trash[0].enabled = True
    assert find_trash(level) is level.trash[1]


def test_find_trash_none_when_full():
    level = _level()
    for trash in level.trash:
        trash.enabled = True
    assert find_trash(level) is None


def test_put_bullet_towards_player_on_right():
    level = _level()
    level.player.sprite.x = 500
    enemy = Enemy(sprite=_sprite(100, 200, animation=(3, 0xFC, 0x10), frame=2))
    bullet = Sprite()
    put_bullet(level, enemy, bullet)
    assert bullet.number == 3 + FIRST_OBJET
    assert bullet.speed_x > 0
    assert bullet.flipped is True
    assert bullet.y == 200 + 4
    assert bullet.x == 100 + (bullet.speed_x >> 4)
    assert bullet.speed_y == 0


def test_put_bullet_towards_player_on_left():
    level = _level()
    level.player.sprite.x = 10
    enemy = Enemy(sprite=_sprite(100, 200, animation=(3, 0x05, 0x10), frame=2))
    bullet = Sprite()
    put_bullet(level, enemy, bullet)
    assert bullet.speed_x < 0
    assert bullet.flipped is False
    assert bullet.y == 200 - 5


def test_gal_form_shows_frame_and_wraps():
    level = _level()
    anim = (5 | 0x2000, 7, -4)
    enemy = Enemy(sprite=_sprite(animation=anim, frame=1))
    gal_form(level, enemy)
    assert enemy.sprite.number == 7 + FIRST_NMI
    assert enemy.sprite.frame == 0
    assert enemy.trigger is False
    assert enemy.visible is True
    gal_form(level, enemy)
    assert enemy.sprite.number == 5 + FIRST_NMI
    assert enemy.trigger is True
    assert enemy.sprite.frame == 1


def test_gal_form_jumps_back_from_marker():
    level = _level()
    enemy = Enemy(sprite=_sprite(animation=(2, 3, -4), frame=2))
    gal_form(level, enemy)
    assert enemy.sprite.number == 2 + FIRST_NMI
    assert enemy.sprite.frame == 1


def test_gal_form_invisible_frame():
    level = _level()
    enemy = Enemy(sprite=_sprite(animation=(0x55AA, -2), frame=0))
    gal_form(level, enemy)
    assert enemy.sprite.invisible is True
    assert enemy.sprite.frame == 0


def test_gal_form_dying_enemy_is_hidden():
    level = _level()
    enemy = Enemy(sprite=_sprite(animation=(1, -2), frame=0, visible=True), dying=2)
    gal_form(level, enemy)
    assert enemy.sprite.visible is False
    assert enemy.visible is True


def test_dead1_without_corpse_flies_up():
    level = _level()
    state = GameState()
    enemy = Enemy(sprite=_sprite(100, 300), dying=2, dead_sprite=-1)
    dead1(level, state, enemy)
    assert enemy.dying & 0x01
    assert enemy.phase == 0
    assert enemy.sprite.y == 300 - 10
    assert enemy.sprite.speed_y == -10 + 1


def test_dead1_moves_hit_effect_with_seechoc():
    level = _level()
    state = GameState(seechoc_flag=5)
    level.player.sprite2.y = 50
    enemy = Enemy(sprite=_sprite(100, 300), dying=2, dead_sprite=-1)
    dead1(level, state, enemy)
    assert level.player.sprite2.y == 50 - 10


def test_dead1_with_corpse_stops():
    level = _level()
    state = GameState()
    enemy = Enemy(sprite=_sprite(100, 300), dying=2, dead_sprite=184)
    dead1(level, state, enemy)
    assert enemy.sprite.number == 184
    assert enemy.phase == DEAD_PHASE
    assert enemy.sprite.speed_y == 0
    dead1(level, state, enemy)
    assert enemy.sprite.y == 300


def test_kick_ash_pushes_player_away():
    level = _level()
    state = GameState(energy=10, choc_flag=3, last_order=7)
    level.player.sprite.x = 50
    kick_ash(level, state, _sprite(100, 0), 70)
    assert level.player.sprite.speed_x == -70
    assert level.player.sprite.speed_y == KICK_SPEED_Y
    assert state.kick_flag == KICK_DURATION
    assert state.energy == 10 - 2
    assert state.choc_flag == 0
    assert state.last_order == 0


def test_kick_ash_player_on_right():
    level = _level()
    state = GameState(energy=1)
    level.player.sprite.x = 200
    kick_ash(level, state, _sprite(100, 0), 70)
    assert level.player.sprite.speed_x == 70
    assert state.energy == 0


def test_see_choc():
    level = _level()
    state = GameState()
    level.player.sprite2.speed_x = 9
    see_choc(level, state)
    assert level.player.sprite2.number == HIT_SPRITE
    assert level.player.sprite2.speed_x == 0
    assert state.seechoc_flag == 5


def test_move_trash_leaves_screen():
    level = _level()
    state = GameState()
    level.player.sprite.x = 0
    level.player.sprite.y = 0
    trash = level.trash[0]
    trash.enabled = True
    trash.spritedata = _data()
    trash.x = 400
    trash.speed_x = 16
    move_trash(level, state)
    assert trash.enabled is False
    assert state.kick_flag == 0


def test_move_trash_hits_player():
    level = _level()
    state = GameState(energy=5)
    level.player.sprite.x = 100
    level.player.sprite.y = 100
    trash = level.trash[0]
    trash.enabled = True
    trash.spritedata = _data()
    trash.x = 100
    trash.y = 100
    move_trash(level, state)
    assert trash.enabled is False
    assert state.kick_flag == KICK_DURATION
    assert level.player.sprite.speed_x == -70


def test_move_trash_godmode_no_hit():
    level = _level()
    state = GameState(godmode=True)
    level.player.sprite.x = 100
    level.player.sprite.y = 100
    trash = level.trash[0]
    trash.enabled = True
    trash.spritedata = _data()
    trash.x = 100
    trash.y = 100
    move_trash(level, state)
    assert trash.enabled is True
    assert state.kick_flag == 0