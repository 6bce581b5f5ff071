"""CPU feature detection, core counting and monotonic timers."""

from __future__ import annotations

import enum
import os
import re
import time
from collections.abc import Iterable

_DIGITS = re.compile(r"[0-9]+")
_MASK_BITS = 32
_ARM_PREFIX = "Features\t: "
_CPUINFO = "/proc/cpuinfo"


class CpuFeature(enum.IntFlag):
    """SIMD and instruction-set extensions a processor may provide."""

    SSE = 1 << 0
    SSE2 = 1 << 1
    VMX = 1 << 2
    VMX128 = 1 << 3
    AVX = 1 << 4
    NEON = 1 << 5
    SSE3 = 1 << 6
    SSSE3 = 1 << 7
    MMX = 1 << 8
    MMXEXT = 1 << 9
    SSE4 = 1 << 10
    SSE42 = 1 << 11
    AVX2 = 1 << 12
    VFPU = 1 << 13
    PS = 1 << 14
    AES = 1 << 15
    VFPV3 = 1 << 16
    VFPV4 = 1 << 17
    POPCNT = 1 << 18
    MOVBE = 1 << 19
    CMOV = 1 << 20
    ASIMD = 1 << 21


_FEATURE_NAMES: tuple[tuple[CpuFeature, str], ...] = (
    (CpuFeature.MMX, "MMX"),
    (CpuFeature.MMXEXT, "MMXEXT"),
    (CpuFeature.SSE, "SSE"),
    (CpuFeature.SSE2, "SSE2"),
    (CpuFeature.SSE3, "SSE3"),
    (CpuFeature.SSSE3, "SSSE3"),
    (CpuFeature.SSE4, "SSE4"),
    (CpuFeature.SSE42, "SSE4.2"),
    (CpuFeature.AES, "AES"),
    (CpuFeature.AVX, "AVX"),
    (CpuFeature.AVX2, "AVX2"),
    (CpuFeature.NEON, "NEON"),
    (CpuFeature.VFPV3, "VFPv3"),
    (CpuFeature.VFPV4, "VFPv4"),
    (CpuFeature.VMX, "VMX"),
    (CpuFeature.VMX128, "VMX128"),
    (CpuFeature.VFPU, "VFPU"),
    (CpuFeature.PS, "PS"),
    (CpuFeature.ASIMD, "ASIMD"),
)

_ARM_FEATURES: tuple[tuple[str, CpuFeature], ...] = (
    ("neon", CpuFeature.NEON),
    ("vfpv3", CpuFeature.VFPV3),
    ("vfpv4", CpuFeature.VFPV4),
    ("asimd", CpuFeature.ASIMD),
)

_X86_FEATURES: tuple[tuple[str, CpuFeature], ...] = (
    ("cmov", CpuFeature.CMOV),
    ("mmx", CpuFeature.MMX),
    # SSE also implies MMXEXT.
    ("sse", CpuFeature.SSE | CpuFeature.MMXEXT),
    ("sse2", CpuFeature.SSE2),
    ("pni", CpuFeature.SSE3),
    ("ssse3", CpuFeature.SSSE3),
    ("sse4_1", CpuFeature.SSE4),
    ("sse4_2", CpuFeature.SSE42),
    ("popcnt", CpuFeature.POPCNT),
    ("aes", CpuFeature.AES),
    ("avx", CpuFeature.AVX),
    ("avx2", CpuFeature.AVX2),
    ("mmxext", CpuFeature.MMXEXT),
)


def parse_cpulist(text: str) -> frozenset[int]:
    """Parse a sysfs CPU list such as ``"0-3,8"`` into a set of CPU indices.

    Items are single numbers or inclusive ranges. Parsing stops at the
    first malformed item or at a newline at the start of an item; only
    CPUs below 32 are kept.
    """
    cpus: set[int] = set()
    pos = 0
    while pos < len(text) and text[pos] != "\n":
        comma = text.find(",", pos)
        end = len(text) if comma < 0 else comma
        item = text[pos:end]

        first = _DIGITS.match(item)
        if first is None:
            break
        start = stop = int(first.group())

        rest = item[first.end():]
        if rest.startswith("-"):
            second = _DIGITS.match(rest, 1)
            if second is None:
                break
            stop = int(second.group())

        cpus.update(range(start, min(stop, _MASK_BITS - 1) + 1))
        pos = end + 1
    return frozenset(cpus)


def read_cpulist(path: str | os.PathLike[str]) -> frozenset[int]:
    """Read and parse a CPU list file; an unreadable file gives an empty set."""
    try:
        with open(path, encoding="ascii", errors="replace") as handle:
            text = handle.read()
    except OSError:
        return frozenset()
    return parse_cpulist(text)


def core_amount() -> int:
    """Return the number of online CPU cores, never less than one."""
    count: int | None = None
    if hasattr(os, "sysconf"):
        try:
            count = os.sysconf("SC_NPROCESSORS_ONLN")
        except (ValueError, OSError):
            count = None
    if count is None:
        count = os.cpu_count()
    if not count or count <= 0:
        return 1
    return count


def time_usec() -> int:
    """Return a monotonic time in microseconds, rounded to nearest."""
    return (time.monotonic_ns() + 500) // 1000


def perf_counter() -> int:
    """Return a monotonic performance counter in nanoseconds."""
    return time.monotonic_ns()


def _arm_feature_field(lines: Iterable[str]) -> str | None:
    for line in lines:
        if line.startswith(_ARM_PREFIX):
            return line[len(_ARM_PREFIX):]
    return None


def check_arm_cpu_feature(feature: str, cpuinfo_path: str | os.PathLike[str] = _CPUINFO) -> bool:
    """Tell whether the first ``Features`` line of a cpuinfo file mentions ``feature``."""
    try:
        with open(cpuinfo_path, encoding="ascii", errors="replace") as handle:
            field = _arm_feature_field(handle)
    except OSError:
        return False
    return field is not None and feature in field


def _x86_field(lines: list[str], key: str) -> str | None:
    for line in lines:
        name, sep, value = line.partition(":")
        if sep and name.strip() == key:
            return value.strip()
    return None


def features_from_cpuinfo(text: str) -> CpuFeature:
    """Work out the CPU features described by the contents of a cpuinfo file."""
    lines = text.splitlines()
    flags = CpuFeature(0)

    arm_field = _arm_feature_field(lines)
    if arm_field is not None:
        for name, feature in _ARM_FEATURES:
            if name in arm_field:
                flags |= feature
        return flags

    x86_field = _x86_field(lines, "flags")
    if x86_field is None:
        return flags
    present = set(x86_field.split())
    for name, feature in _X86_FEATURES:
        if name in present:
            flags |= feature
    if "movbe" in present and _x86_field(lines, "vendor_id") == "GenuineIntel":
        flags |= CpuFeature.MOVBE
    return flags


def features() -> CpuFeature:
    """Return the features of the running CPU, or none if they cannot be read."""
    try:
        with open(_CPUINFO, encoding="ascii", errors="replace") as handle:
            text = handle.read()
    except OSError:
        return CpuFeature(0)
    return features_from_cpuinfo(text)


def feature_string(flags: CpuFeature) -> str:
    """Return the names of the features in ``flags``, space separated, in a fixed order."""
    return " ".join(name for feature, name in _FEATURE_NAMES if flags & feature)