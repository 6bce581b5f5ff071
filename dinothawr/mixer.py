"""Audio streams, a software mixer and background music rotation."""

from __future__ import annotations

import abc
import array
import logging
import math
import random
import sys
import threading
from collections import deque
from collections.abc import Callable, Sequence
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass

from dinothawr.conversion import float_to_s16, mix_volume

logger = logging.getLogger(__name__)

CHANNELS = 2
SAMPLE_RATE = 44100
_HEADER_SIZE = 44
_S16_SCALE = 0x8000


class WaveError(Exception):
    """Raised when a WAV file cannot be read or is not in a supported format."""


class Stream(abc.ABC):
    """A source of interleaved stereo float samples."""

    def __init__(self) -> None:
        self.volume = 1.0
        self.loop = False

    @abc.abstractmethod
    def render(self, frames: int) -> list[float]:
        """Return up to ``frames`` stereo frames as interleaved samples."""

    @abc.abstractmethod
    def valid(self) -> bool:
        """Tell whether the stream still has audio to give."""

    def rewind(self) -> None:
        """Restart the stream from its beginning, where that makes sense."""


class SineStream(Stream):
    """An endless sine tone, the same on both channels."""

    def __init__(self, freq: float, sample_rate: float) -> None:
        super().__init__()
        self._omega = 2.0 * math.pi * freq / sample_rate
        self._index = 0.0

    def render(self, frames: int) -> list[float]:
        samples: list[float] = []
        for _ in range(frames):
            value = math.sin(self._index)
            samples.extend((value, value))
            self._index += self._omega
        return samples

    def valid(self) -> bool:
        return True


class PCMStream(Stream):
    """Plays back a buffer of interleaved stereo samples."""

    def __init__(self, data: Sequence[float]) -> None:
        super().__init__()
        self._data = data
        self._ptr = 0

    def render(self, frames: int) -> list[float]:
        wanted = frames * CHANNELS
        chunk = list(self._data[self._ptr:self._ptr + wanted])
        if len(chunk) < wanted and self.loop:
            extra = list(self._data[:wanted - len(chunk)])
            chunk.extend(extra)
            self._ptr = len(extra)
        else:
            self._ptr += len(chunk)
        return chunk

    def valid(self) -> bool:
        return self._ptr < len(self._data)

    def rewind(self) -> None:
        self._ptr = 0


def _le16(header: bytes, offset: int) -> int:
    return int.from_bytes(header[offset:offset + 2], "little")


def _le32(header: bytes, offset: int) -> int:
    return int.from_bytes(header[offset:offset + 4], "little")


def load_wave(path: str) -> list[float]:
    """Load an uncompressed 16-bit 44.1 kHz WAV file as interleaved stereo floats.

    Mono files are duplicated onto both channels.
    """
    try:
        with open(path, "rb") as handle:
            header = handle.read(_HEADER_SIZE)
            if len(header) < _HEADER_SIZE:
                raise WaveError("Failed to open wave.")

            if header[0:4] != b"RIFF" or header[8:12] != b"WAVE" or header[12:16] != b"fmt ":
                raise WaveError("Invalid WAV file.")
            if _le16(header, 20) != 1:
                raise WaveError("WAV file not uncompressed.")

            channels = _le16(header, 22)
            sample_rate = _le32(header, 24)
            bits = _le16(header, 34)

            if channels < 1 or channels > 2:
                raise WaveError("Invalid number of channels.")
            if sample_rate != SAMPLE_RATE:
                raise WaveError("Invalid sample rate.")
            if bits != 16:
                raise WaveError("Invalid bit depth.")

            wave_size = _le32(header, 4) + 8 - _HEADER_SIZE
            if wave_size < 0:
                raise WaveError("Failed to open wave.")
            payload = handle.read(wave_size)
            if len(payload) < wave_size:
                raise WaveError("Failed to open wave.")
    except OSError as exc:
        raise WaveError("Failed to open wave.") from exc

    samples = array.array("h")
    samples.frombytes(payload[: (wave_size // 2) * 2])
    if sys.byteorder == "big":
        samples.byteswap()

    values = [value / _S16_SCALE for value in samples]
    if channels == 1:
        return [value for value in values for _ in range(CHANNELS)]
    return values


class Mixer:
    """Mixes any number of streams into one stereo output.

    The mixer is also a (reentrant) lock: ``with mixer:`` holds it.
    """

    channels = CHANNELS

    def __init__(self) -> None:
        self._streams: list[Stream] = []
        self._lock = threading.RLock()
        self.master_volume = 1.0
        self.enabled = False

    def __enter__(self) -> Mixer:
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._lock.release()

    @property
    def streams(self) -> tuple[Stream, ...]:
        with self._lock:
            return tuple(self._streams)

    def add_stream(self, stream: Stream) -> None:
        with self._lock:
            self._streams.append(stream)

    def clear(self) -> None:
        with self._lock:
            self._streams.clear()

    def _purge_dead_streams(self) -> None:
        self._streams = [stream for stream in self._streams if stream.valid()]

    def render(self, frames: int) -> list[float]:
        """Mix ``frames`` stereo frames from every live stream."""
        size = frames * CHANNELS
        with self._lock:
            self._purge_dead_streams()
            out = [0.0] * size
            for stream in self._streams:
                samples = stream.render(frames)[:size]
                mix_volume(out, samples, self.master_volume * stream.volume)
            return out

    def render_s16(self, frames: int) -> list[int]:
        """Mix ``frames`` stereo frames as signed 16-bit samples."""
        with self._lock:
            return float_to_s16(self.render(frames))


@dataclass(frozen=True)
class Track:
    """A background music file and the gain it is played at."""

    path: str
    gain: float = 1.0


class _Loader:
    """Decodes audio files in the background and hands out finished buffers."""

    def __init__(self, decoder: Callable[[str], list[float]], executor: Executor) -> None:
        self._decoder = decoder
        self._executor = executor
        self._inflight: list[Future[list[float]]] = []
        self._finished: deque[list[float]] = deque()

    def __len__(self) -> int:
        return len(self._inflight)

    def request(self, path: str) -> None:
        self._inflight.append(self._executor.submit(self._decoder, path))

    def flush(self) -> list[float] | None:
        done = [future for future in self._inflight if future.done()]
        self._inflight = [future for future in self._inflight if not future.done()]
        try:
            for future in done:
                self._finished.append(future.result())
        except Exception as exc:  # noqa: BLE001 - a failed track must not stop the game
            logger.warning("Background music decoding failed: %s", exc)
            return None
        if self._finished:
            return self._finished.popleft()
        return None


class BGManager:
    """Keeps one background track playing, picking the next one at random."""

    def __init__(
        self,
        decoder: Callable[[str], list[float]] = load_wave,
        executor: Executor | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._executor = executor if executor is not None else ThreadPoolExecutor()
        self._loader = _Loader(decoder, self._executor)
        self._rng = rng if rng is not None else random.Random()
        self.tracks: list[Track] = []
        self.current: PCMStream | None = None
        self._first = True
        self._last = 0

    def init(self, tracks: Sequence[Track]) -> None:
        """Set the playlist; the first track is always played first."""
        self.tracks = list(tracks)
        self._rng.seed()
        self._first = True
        self._last = 0

    def step(self, mixer: Mixer) -> None:
        """Start the next track on ``mixer`` once the current one has ended."""
        with mixer:
            if self.current is not None and self.current.valid():
                return
            if not self.tracks:
                return

            if not len(self._loader):
                if self._first:
                    index = 0
                else:
                    index = self._rng.randrange(len(self.tracks))
                    if index == self._last:
                        index = (index + 1) % len(self.tracks)
                self._loader.request(self.tracks[index].path)
                self._last = index
                self._first = False

            data = self._loader.flush()
            if data is None:
                self.current = None
                return

            self.current = PCMStream(data)
            self.current.volume = self.tracks[self._last].gain
            mixer.add_stream(self.current)

    def close(self) -> None:
        """Stop the background decoder."""
        self._executor.shutdown(wait=False)