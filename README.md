# titusfox

The game logic of a side-scrolling platformer, written as a plain Python
library with no dependencies outside the standard library. You supply
decompressed level and font data and the player's input events. The library
works out what happens in the game. Drawing it is up to you.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

### `titusfox.level`

- `load_level(data, spritedata=None, objectdata=None)` decodes a
  decompressed level file into a `Level`. The `Level` holds the tile map, 256
  `Tile`s, 40 `GameObject`s, 50 `Enemy` records, 100 `Bonus`es, 20 `Gate`s,
  10 `Elevator`s and 4 trash sprites for objects that enemies throw.
- If the data is shorter than the level trailer, or a bonus lies outside the
  tile map, `load_level` raises `LevelFormatError`.
- `load_uint16(high, low)` and `load_int16(high, low)` combine two bytes into
  a 16-bit value.
- `Level.horizflag`, `Level.floorflag` and `Level.ceilflag` return the tile
  flags at a tile position, using the values of `HorizFlag`, `FloorFlag` and
  `CeilFlag`. Positions off the map sideways count as wall and as floor.
  Positions above or below the map count as no wall and no floor. Any
  position outside the map counts as no ceiling.
- `Level.update_sprite` and `Sprite.set_image` give a sprite a new image
  from the level's `SpriteData` list.
- `GameState` holds the engine-wide counters and flags that the other
  modules read and change.

### `titusfox.keyboard`

- `wait_for_button(events)` reads `KeyEvent` values and returns the first
  Return, Enter or Space key it sees.
- It raises `QuitRequested` on a quit event, on Escape, or when the events
  run out.

### `titusfox.fonts`

- `decode_glyph(fontdata, index)` turns 48 bytes of planar font data into an
  8×12 `Glyph` of palette indices.
- `Font.from_data(fontdata)` builds the font: digits, `! ? . $ _`, and A–Z.
  Lower-case letters use the capital glyphs, and a space is a solid block of
  colour 1.
- `Font.glyph_for(char)` returns the glyph for one character. Unknown
  characters show as `?`.
- `Font.layout(text, x, y)` returns `GlyphPlacement`s that advance 8 pixels
  per character. A multibyte character is drawn as `?`. It raises
  `InvalidUtf8Error` on a stray continuation byte or on a multibyte character
  cut off at the end of the text.
- `intro_text_lines(year)` gives the two intro screens as `(text, x, y)`
  lines.

### `titusfox.gates`

- `check_gates(level, state)` checks whether the player is kneeling
  (`state.cross_flag`) on a gate entrance. If so, it moves the player to the
  gate's exit, sets the screen position, and returns the `Gate` it used.
- `check_finish(level, state)` sets `state.newlevel_flag` when the player
  reaches the exit. It does nothing while a boss is alive. On the cage level,
  the player must also be carrying the cage.
- `crossing_gate(level, state)` runs both checks and returns
  `(finished, gate)`.
- `close_screen_rects(step)` and `open_screen_rects(step)` give the `Rect`s
  for each of the 10 steps of the closing and opening screen transitions.
- `tile_blits(...)` maps an area of the screen to source/destination
  rectangle pairs on the wrapped tile screen.

### `titusfox.menu`

- `PasswordEntry` collects a four-character hexadecimal level code.
  Lower-case a–f are taken as capitals.
- `enter_password(chars, levelcodes)` reads a code from key events. It
  returns the level number, counted from 1, or `None` if the code is wrong.
- `find_level(code, levelcodes)` looks up a code directly.
- `menu_selection(events)` follows Up and Down presses and returns a
  `MenuChoice` when a confirm key is pressed.
- `fade_alpha(elapsed_ms, fade_time=1000)` gives the opacity, from 0 to 255,
  at a point in a fade.

### `titusfox.enemies`

Helpers shared by the enemy code:

- animation stepping with `up_animation`, `down_animation` and `gal_form`;
- `classify_enemy_sprite` and `update_enemy_sprite`, which set the carry
  sprite, dead sprite and boss status;
- the collision test `nmi_vs_drop`;
- enemy shots with `find_trash`, `put_bullet` and `move_trash`;
- the dying fall with `dead1`;
- `kick_ash`, which knocks the player back and takes 2 from
  `state.energy`;
- `see_choc`, which shows the hit effect.

### `titusfox.enemy_moves`

- `move_enemies(level, state)` moves every enabled enemy one frame, following
  the behaviour of its type (0–18).

### `titusfox.enemy_hits`

- `set_enemies(level, state)` marks which enemies are on screen and animates
  them.
- It handles contact with the player through `enemy_touches_player`.
- It applies hits from moving objects and from the player's throw, including
  boss energy and invulnerability.
- It returns the enemies struck this frame.

## Example

```python
from titusfox.level import GameState, SpriteData, load_level
from titusfox.enemy_moves import move_enemies
from titusfox.enemy_hits import set_enemies

with open("level1.bin", "rb") as f:  # a decompressed level file
    data = f.read()

spritedata = [SpriteData(width=16, height=16, collwidth=16, collheight=16)] * 400
level = load_level(data, spritedata)
state = GameState()

move_enemies(level, state)
struck = set_enemies(level, state)
```

## What the package does not do

- It does not draw anything, play sound or open a window. The font, gates
  and menu modules give you glyphs, rectangles and choices to render
  yourself.
- It does not decompress game files. `load_level` and `Font.from_data`
  expect data that has already been decompressed.
- It has no command to start a game and no game loop. Player movement,
  object gravity, elevators, scrolling and tile animation are not part of
  the package.