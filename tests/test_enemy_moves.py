import pytest

from titusfox.enemies import BULLET_SPEED, up_animation
from titusfox.enemy_moves import DROP_GRAVITY, MAX_FALL_SPEED, SHOOT_PHASE, move_enemies
from titusfox.gates import FIRST_OBJET
from titusfox.level import (
    Enemy,
    FloorFlag,
    GameObject,
    GameState,
    HorizFlag,
    Level,
    Sprite,
    SpriteData,
    Tile,
)

FLOOR_TILE = 1
WALL_TILE = 2
ANIM = (0, -2, 1, -2, 2, -2, 3, -2)


def make_level(height=4):
    tiles = [Tile(current=i) for i in range(256)]
    tiles[FLOOR_TILE] = Tile(current=FLOOR_TILE, floorflag=FloorFlag.FLOOR)
    tiles[WALL_TILE] = Tile(current=WALL_TILE, horizflag=HorizFlag.WALL)
    spritedata = [
        SpriteData(width=16, height=16, collwidth=16, collheight=16, refwidth=8, refheight=16)
        for _ in range(400)
    ]
    return Level(
        height=height,
        tilemap=[bytearray(256) for _ in range(height)],
        tiles=tiles,
        spritedata=spritedata,
        trash=[Sprite() for _ in range(4)],
    )


def make_enemy(kind, x=100, y=100, speed_x=0, speed_y=0, animation=ANIM, **fields):
    enemy = Enemy(type=kind, **fields)
    enemy.sprite = Sprite(
        x=x, y=y, speed_x=speed_x, speed_y=speed_y, enabled=True, animation=animation
    )
    return enemy


def place_player(level, x, y):
    level.player.sprite.x = x
    level.player.sprite.y = y


def test_noclip_walk_moves_against_speed():
    level = make_level()
    enemy = make_enemy(0, x=100, speed_x=2, center_x=100, range_x=10)
    level.enemies = [enemy]
    move_enemies(level, GameState())
    assert enemy.sprite.x == 100 - 2


def test_noclip_walk_stays_near_center():
    level = make_level()
    enemy = make_enemy(1, x=100, speed_x=3, center_x=100, range_x=10)
    level.enemies = [enemy]
    state = GameState()
    seen = set()
    for _ in range(60):
        move_enemies(level, state)
        assert abs(enemy.sprite.x - enemy.center_x) <= enemy.range_x + 3
        seen.add(enemy.sprite.speed_x > 0)
    assert seen == {True, False}


def test_disabled_enemy_is_untouched():
    level = make_level()
    enemy = make_enemy(0, x=100, speed_x=2, center_x=100, range_x=10)
    enemy.sprite.enabled = False
    level.enemies = [enemy]
    move_enemies(level, GameState())
    assert enemy.sprite.x == 100


def test_dying_enemy_falls_away():
    level = make_level()
    enemy = make_enemy(0, y=100, dying=2, dead_sprite=-1)
    level.enemies = [enemy]
    move_enemies(level, GameState())
    assert enemy.dying & 0x01
    assert enemy.sprite.y == 100 - 10


def test_unknown_type_does_nothing():
    level = make_level()
    enemy = make_enemy(19, x=50, y=60, speed_x=4)
    level.enemies = [enemy]
    move_enemies(level, GameState())
    assert (enemy.sprite.x, enemy.sprite.y, enemy.phase) == (50, 60, 0)


def test_immortal_still_enemy_revives():
    level = make_level()
    enemy = make_enemy(15, dying=2)
    level.enemies = [enemy]
    move_enemies(level, GameState())
    assert enemy.dying == 0


def test_fireball_cycle_returns_to_start():
    level = make_level()
    enemy = make_enemy(12, y=200, range_y=3, delay=2)
    level.enemies = [enemy]
    state = GameState()
    for _ in range(50):
        move_enemies(level, state)
        assert enemy.sprite.y <= 200
        if enemy.phase == 3:
            break
    assert enemy.phase == 3
    assert enemy.sprite.y == 200
    assert enemy.sprite.frame == 0
    move_enemies(level, state)
    move_enemies(level, state)
    assert enemy.phase == 0


def test_shooter_aims_then_fires():
    level = make_level()
    anim = (0, -2, 5, 3, -2)
    enemy = make_enemy(2, x=100, y=100, animation=anim, range_x=200, delay=7, visible=True)
    level.enemies = [enemy]
    place_player(level, 150, 100)
    state = GameState()
    move_enemies(level, state)
    assert enemy.phase == SHOOT_PHASE
    enemy.trigger = True
    move_enemies(level, state)
    bullet = level.trash[0]
    assert bullet.enabled
    assert bullet.number == 5 + FIRST_OBJET
    assert bullet.speed_x == BULLET_SPEED
    assert bullet.y == 100 - 3
    assert enemy.phase == 0
    assert enemy.counter == enemy.delay


def test_shooter_off_screen_waits():
    level = make_level()
    enemy = make_enemy(2, range_x=200, visible=False)
    level.enemies = [enemy]
    place_player(level, 150, 100)
    move_enemies(level, GameState())
    assert enemy.phase == 0


def test_fish_jump_speed_reaches_player():
    level = make_level()
    enemy = make_enemy(3, x=100, y=200, center_x=100, range_x=50, range_y=100, visible=True)
    level.enemies = [enemy]
    place_player(level, 90, 180)
    move_enemies(level, GameState())
    assert enemy.phase == 1
    assert enemy.delay == 200
    speed = -enemy.sprite.speed_y
    assert speed > 0
    height = 200 - 180
    assert speed * (speed + 1) // 2 >= height
    assert (speed - 1) * speed // 2 < height


def test_fly_dives_towards_player_below():
    level = make_level()
    enemy = make_enemy(5, x=100, y=100, center_x=100, range_x=50, range_y=40, visible=True)
    level.enemies = [enemy]
    place_player(level, 110, 120)
    move_enemies(level, GameState())
    assert enemy.phase == 1
    assert enemy.sprite.speed_y > 0
    assert enemy.delay == 100


def test_gravity_walker_fall_speed_is_capped():
    level = make_level()
    enemy = make_enemy(7, x=100, y=0, phase=1, walkspeed_x=2)
    level.enemies = [enemy]
    place_player(level, 100, 10)
    state = GameState()
    for _ in range(30):
        move_enemies(level, state)
    assert enemy.sprite.speed_y == MAX_FALL_SPEED


def test_off_screen_walker_turns_at_wall():
    level = make_level()
    level.tilemap[2][3] = FLOOR_TILE
    level.tilemap[1][2] = WALL_TILE
    enemy = make_enemy(8, x=48, y=32, speed_x=2, phase=1, walkspeed_x=2)
    level.enemies = [enemy]
    place_player(level, 0, 32)
    move_enemies(level, GameState())
    assert enemy.sprite.speed_x == -2
    assert enemy.sprite.x == 48 + 2
    assert enemy.phase == 1


def test_off_screen_walker_wakes_when_player_far():
    level = make_level()
    enemy = make_enemy(8, x=1000, y=100, walkspeed_x=3)
    level.enemies = [enemy]
    place_player(level, 100, 100)
    move_enemies(level, GameState())
    assert enemy.phase == 1
    assert enemy.sprite.speed_x == enemy.walkspeed_x


def test_off_screen_walker_resets_to_far_spawn():
    level = make_level()
    enemy = make_enemy(14, x=300, y=50, phase=2, init_x=16 * 100, init_y=32, dying=1)
    enemy.sprite.frame = 2
    level.enemies = [enemy]
    move_enemies(level, GameState())
    assert (enemy.sprite.x, enemy.sprite.y) == (enemy.init_x, enemy.init_y)
    assert enemy.phase == 0
    assert enemy.sprite.frame == 0
    assert enemy.dying == 0


def test_alert_enemy_falls_through_to_run():
    level = make_level()
    enemy = make_enemy(10, x=100, y=100, range_x=100, walkspeed_x=2)
    level.enemies = [enemy]
    place_player(level, 110, 100)
    move_enemies(level, GameState())
    reference = Sprite(animation=ANIM)
    up_animation(reference)
    up_animation(reference)
    assert enemy.phase == 2
    assert enemy.sprite.frame == reference.frame


def test_alert_enemy_ignores_stealthy_player():
    level = make_level()
    enemy = make_enemy(10, x=100, y=100, range_x=100, walkspeed_x=2)
    level.enemies = [enemy]
    place_player(level, 110, 100)
    move_enemies(level, GameState(furtif_flag=1))
    assert enemy.phase == 0


def test_bounce_starts_jump_near_player():
    level = make_level()
    enemy = make_enemy(13, x=100, y=100, speed_x=2, range_x=50)
    level.enemies = [enemy]
    place_player(level, 120, 100)
    move_enemies(level, GameState())
    assert enemy.phase == 1
    assert enemy.sprite.speed_y == 10
    assert enemy.sprite.speed_x == -2


def test_drop_releases_free_object():
    level = make_level()
    anim = (0, -2, 7, -2)
    enemy = make_enemy(17, x=80, y=40, animation=anim, range_x=100, range_y=200)
    level.enemies = [enemy]
    level.objects = [GameObject(), GameObject(), GameObject()]
    place_player(level, 90, 100)
    state = GameState()
    move_enemies(level, state)
    dropped = level.objects[1].sprite
    assert not level.objects[0].sprite.enabled
    assert dropped.enabled and dropped.killing and dropped.droptobottom
    assert dropped.number == 7
    assert (dropped.x, dropped.y) == (80, 40)
    assert state.gravity_flag == DROP_GRAVITY
    assert enemy.sprite.frame == 0


def test_drop_without_free_object_resets_counter():
    level = make_level()
    enemy = make_enemy(17, range_x=100, range_y=200, counter=5)
    level.enemies = [enemy]
    busy = GameObject()
    busy.sprite.enabled = True
    level.objects = [GameObject(), busy]
    place_player(level, 100, 120)
    state = GameState()
    move_enemies(level, state)
    assert enemy.counter == 0
    assert state.gravity_flag == 0


@pytest.mark.parametrize(
    "player_pos, start, closer_to",
    [
        ((120, 110), (100, 100), (120, 110)),
        ((1000, 1000), (120, 110), (100, 100)),
    ],
)
def test_guard_moves_towards_target(player_pos, start, closer_to):
    level = make_level()
    enemy = make_enemy(
        18, x=start[0], y=start[1], speed_x=3, speed_y=2,
        init_x=100, init_y=100, range_x=50, range_y=50,
    )
    level.enemies = [enemy]
    place_player(level, *player_pos)
    move_enemies(level, GameState())
    before = abs(start[0] - closer_to[0]) + abs(start[1] - closer_to[1])
    after = abs(enemy.sprite.x - closer_to[0]) + abs(enemy.sprite.y - closer_to[1])
    assert after < before