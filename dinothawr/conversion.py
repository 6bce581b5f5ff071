"""Sample conversion and mixing helpers for interleaved audio buffers."""

from __future__ import annotations

from collections.abc import Iterable, MutableSequence, Sequence

_S16_SCALE = 0x8000
_S16_MAX = 0x7FFF
_S16_MIN = -0x8000


def mix_volume(out: MutableSequence[float], samples: Sequence[float], volume: float) -> None:
    """Add ``samples`` scaled by ``volume`` into the start of ``out``, in place.

    Only the first ``len(samples)`` entries of ``out`` are touched.
    """
    if len(samples) > len(out):
        raise ValueError(
            f"cannot mix {len(samples)} samples into a buffer of {len(out)}"
        )
    for index, sample in enumerate(samples):
        out[index] += sample * volume


def float_to_s16(samples: Iterable[float]) -> list[int]:
    """Convert floating point samples to signed 16-bit integers.

    Values are scaled by 32768, truncated toward zero and clamped to the
    signed 16-bit range.
    """
    converted = []
    for sample in samples:
        value = int(sample * _S16_SCALE)
        converted.append(max(_S16_MIN, min(_S16_MAX, value)))
    return converted


def s16_to_float(samples: Iterable[int], gain: float = 1.0) -> list[float]:
    """Convert signed 16-bit samples to floating point, applying ``gain``."""
    factor = gain / _S16_SCALE
    return [sample * factor for sample in samples]