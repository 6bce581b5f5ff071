# dinothawr

Building blocks for an ice-sliding puzzle game, in which a dinosaur pushes
frozen blocks across slippery floors until every block rests on a goal
tile. The package is a library: it has no command of its own.

## Modules

### `dinothawr.conversion`

- `mix_volume(out, samples, volume)` adds `samples * volume` into the start
  of `out` in place; it raises `ValueError` if `samples` is longer than `out`.
- `float_to_s16(samples)` scales by 32768, truncates toward zero and clamps
  to the signed 16-bit range.
- `s16_to_float(samples, gain=1.0)` converts back, applying `gain`.

### `dinothawr.strings`

- `strlcpy(source, size)` and `strlcat(dest, source, size)` return a
  `BoundedCopy(text, length)`: the text that fits in a buffer of `size`
  characters and the length that was wanted, so truncation shows as
  `length > len(text)`.
- `strcasecmp(a, b)` compares ignoring ASCII case and returns the
  difference of the first differing characters, or zero.
- `isblank(char)` is true for a space or a tab.
- `strtok(text, delimiters)` is a generator of the non-empty tokens.

### `dinothawr.cpu`

- `CpuFeature` is an `IntFlag` of SIMD extensions.
- `features()` reads `/proc/cpuinfo`; `features_from_cpuinfo(text)` does the
  same from text, understanding both ARM `Features` lines and x86 `flags`
  lines. `check_arm_cpu_feature(feature, cpuinfo_path)` tests one ARM feature.
- `feature_string(flags)` names the features in a fixed order.
- `parse_cpulist(text)` turns a sysfs list such as `"0-3,8"` into a set of
  CPU indices (only those below 32); `read_cpulist(path)` reads one from a
  file, giving an empty set if it cannot.
- `core_amount()` returns the online core count, never less than one.
- `time_usec()` and `perf_counter()` are monotonic timers in microseconds
  and nanoseconds.

### `dinothawr.mixer`

- `Stream` is the base class of interleaved stereo float sources, with
  `volume` and `loop` attributes; `SineStream` is an endless tone and
  `PCMStream` plays back a buffer, looping if asked.
- `load_wave(path)` reads uncompressed 16-bit 44.1 kHz mono or stereo WAV
  files into interleaved stereo floats, raising `WaveError` otherwise.
- `Mixer` mixes its live streams (`add_stream`, `clear`) into float
  (`render`) or 16-bit (`render_s16`) frames, dropping streams that have
  ended. `with mixer:` holds its reentrant lock.
- `BGManager` keeps one background `Track` playing: the first track first,
  then a random one other than the last. Tracks are decoded in a thread pool
  by a decoder function, `load_wave` by default; `close()` stops the pool.

### `dinothawr.font`

- `Font.from_file(path)` reads an XML description
  (`<font><glyphs startascii width height glyphwidth glyphheight source/></font>`)
  and cuts the glyph sheet it names, loaded with Pillow, into `Glyph`s of
  ARGB pixels. Loading failures raise `FontError`; bad geometry raises
  `ValueError`.
- `Font.render_msg` draws text line by line onto any object with a
  `blit(glyph, x, y)` method, aligned by `Alignment.LEFT`, `RIGHT` or
  `CENTERED`. `set_color` recolours every visible pixel.
- `FontCluster` holds groups of coloured, offset layers selected with
  `set_id`, used to draw outlined text; `glyph_size` gives the largest
  glyph of the selected group.

### `dinothawr.game`

- `Input` enumerates the buttons; `EdgeDetector.set` reports rising edges.
- `input_to_offset`, `input_to_string` and `string_to_input` map between
  directions, tile steps and sprite names.
- `win_animation_state(frame)` and `animation_index(frame, sliding)` give
  the sprite shown at a given frame.
- `CameraManager` centres a small map, or follows a rectangle (anything with
  `x`, `y`, `w`, `h`) and clamps to the map edges, by calling `camera_set`
  on a target with `width` and `height`.

### `dinothawr.progress`

- `Level` and `Chapter` hold completion and best push counts; a chapter is
  `cleared()` once `minimum_clear` of its levels are complete.
- `SaveManager` stores best push counts in a 512-byte buffer (`data`), one
  line of comma-terminated numbers per chapter, NUL padded; `serialize`
  raises `ValueError` if they do not fit.
- `Progress.load_chapters(path)` reads `<game><chapter name minimum_clear><map source name/>`
  descriptions (raising `GameDataError` on failure), and offers
  `total_levels`, `total_cleared_levels`, `all_cleared`,
  `find_next_unsolved_level` and `initial_selection`.
- `MenuNavigator.move(direction)` moves the level-select cursor and returns a
  `MenuMove` with the per-frame camera slide, or `locked=True` when the
  current chapter is not yet cleared.

## What the package does not do

It does not load tile maps or sprites, move the player or blocks, detect
collisions, or draw frames: there is no framebuffer, no level preview and no
game loop tying the pieces together. It does not decode Ogg Vorbis audio;
background music uses whatever decoder `BGManager` is given. There is no
command to start a game.

## Installing

    pip install .

To run the tests:

    pip install .[test]
    pytest

## Example

```python
from dinothawr.mixer import Mixer, SineStream

mixer = Mixer()
mixer.add_stream(SineStream(440.0, 44100.0))
samples = mixer.render_s16(512)   # 512 interleaved stereo frames
```

```python
from dinothawr.conversion import float_to_s16, s16_to_float

pcm = float_to_s16([0.0, 0.5, -1.0, 2.0])     # [0, 16384, -32768, 32767]
back = s16_to_float(pcm, 1.0)
```