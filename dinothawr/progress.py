"""Level progress, save data and level-select navigation."""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ElementTree
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import NamedTuple

from dinothawr.game import Input

logger = logging.getLogger(__name__)

SAVE_GAME_SIZE = 512
PREVIEW_BASE_X = 80
PREVIEW_BASE_Y = 50
PREVIEW_DELTA_X = 8 * 24
PREVIEW_DELTA_Y = 8 * 24
SLIDE_STEP = 8
SLIDE_FRAMES = 24


class GameDataError(Exception):
    """Raised when a game description cannot be loaded."""


@dataclass
class Level:
    """One level of a chapter and the player's record on it."""

    path: str
    name: str = ""
    completion: bool = False
    best_pushes: int = 0
    position: tuple[int, int] = (0, 0)

    def set_best_pushes(self, pushes: int) -> None:
        """Keep ``pushes`` if no record exists yet or it beats the record."""
        if not self.best_pushes or pushes < self.best_pushes:
            self.best_pushes = pushes


@dataclass
class Chapter:
    """A named group of levels, unlocking the next one after enough clears."""

    levels: list[Level] = field(default_factory=list)
    name: str = ""
    minimum_clear: int = 0

    def __len__(self) -> int:
        return len(self.levels)

    def __iter__(self) -> Iterator[Level]:
        return iter(self.levels)

    def _level(self, index: int) -> Level:
        if not 0 <= index < len(self.levels):
            raise IndexError(f"level {index} is not in chapter {self.name!r}")
        return self.levels[index]

    def cleared_count(self) -> int:
        """Return how many levels of the chapter are completed."""
        return sum(1 for level in self.levels if level.completion)

    def cleared(self) -> bool:
        """Tell whether enough levels are completed to unlock the next chapter."""
        return self.cleared_count() >= self.minimum_clear

    def set_completion(self, level: int, state: bool) -> None:
        self._level(level).completion = bool(state)

    def get_completion(self, level: int) -> bool:
        return self._level(level).completion


def _to_int(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0


class SaveManager:
    """Stores the best push counts of every level in a fixed-size buffer.

    Each chapter is one line of comma-terminated push counts; the rest of
    the buffer is filled with NUL bytes. A push count of zero means the
    level has not been completed.
    """

    def __init__(self, chapters: list[Chapter], size: int = SAVE_GAME_SIZE) -> None:
        self.chapters = chapters
        self.data = bytearray(size)

    @property
    def size(self) -> int:
        return len(self.data)

    def serialize(self) -> None:
        """Write the current records into the save buffer."""
        text = "".join(
            "".join(f"{level.best_pushes}," for level in chapter.levels) + "\n"
            for chapter in self.chapters
        )
        encoded = text.encode("ascii")
        if len(encoded) > len(self.data):
            raise ValueError(
                f"save data needs {len(encoded)} bytes but only {len(self.data)} are available"
            )
        self.data[:] = encoded + bytes(len(self.data) - len(encoded))

    def unserialize(self) -> None:
        """Restore records and completion from the save buffer, if it holds any."""
        text = bytes(self.data).decode("ascii", errors="replace").rstrip("\0")
        if not text:
            return

        logger.info("Save file:\n%s", text)

        lines = [line for line in text.split("\n") if line]
        for chapter, line in zip(self.chapters, lines):
            counts = [item for item in line.split(",") if item]
            for level, item in zip(chapter.levels, counts):
                pushes = _to_int(item)
                level.set_best_pushes(pushes)
                level.completion = bool(pushes)


def _attr_int(node: ElementTree.Element, name: str) -> int:
    return _to_int(node.get(name, ""))


def _chapter_from_xml(node: ElementTree.Element, base: str, index: int) -> Chapter:
    levels = [
        Level(path=os.path.join(base, map_node.get("source", "")), name=map_node.get("name", ""))
        for map_node in node.findall("map")
    ]
    for column, level in enumerate(levels):
        level.position = (
            PREVIEW_BASE_X + column * PREVIEW_DELTA_X,
            PREVIEW_BASE_Y + PREVIEW_DELTA_Y * index,
        )
    return Chapter(levels, node.get("name", ""), _attr_int(node, "minimum_clear"))


class Progress:
    """All chapters of a game together with their save data."""

    def __init__(self, chapters: Iterable[Chapter], save_size: int = SAVE_GAME_SIZE) -> None:
        self.chapters: list[Chapter] = list(chapters)
        self.save = SaveManager(self.chapters, save_size)

    @classmethod
    def load_chapters(cls, path: str | os.PathLike[str]) -> Progress:
        """Read the chapters and levels listed in a game description file.

        Chapters without levels are left out.
        """
        path = os.fspath(path)
        try:
            root = ElementTree.parse(path).getroot()
        except (OSError, ElementTree.ParseError) as exc:
            raise GameDataError(f"Failed to load game: {path}.") from exc

        base = os.path.dirname(path) or "."
        chapters: list[Chapter] = []
        if root.tag == "game":
            for node in root.findall("chapter"):
                chapter = _chapter_from_xml(node, base, len(chapters))
                if len(chapter):
                    chapters.append(chapter)
        return cls(chapters)

    def total_levels(self) -> int:
        return sum(len(chapter) for chapter in self.chapters)

    def total_cleared_levels(self) -> int:
        return sum(chapter.cleared_count() for chapter in self.chapters)

    def all_cleared(self) -> bool:
        """Tell whether every level of every chapter is completed."""
        return all(chapter.cleared_count() == len(chapter) for chapter in self.chapters)

    def find_next_unsolved_level(self, chapter: int, level: int) -> tuple[int, int] | None:
        """Return the first uncompleted level from the given one onwards.

        The search does not go past a chapter that is not yet cleared, and
        gives nothing when started on the very last level.
        """
        if not self.chapters:
            return None
        if chapter == len(self.chapters) - 1 and level == len(self.chapters[-1]) - 1:
            return None

        chap, lvl = chapter, level
        while chap < len(self.chapters):
            current = self.chapters[chap]
            if not current.get_completion(lvl):
                return chap, lvl
            lvl += 1
            if lvl >= len(current):
                if not current.cleared():
                    break
                chap += 1
                lvl = 0
        return None

    def initial_selection(self) -> tuple[int, int]:
        """Load the save data and return the level the menu opens on."""
        self.save.unserialize()
        found = self.find_next_unsolved_level(0, 0)
        return found if found is not None else (0, 0)


class MenuMove(NamedTuple):
    """Outcome of a menu input: the per-frame camera slide, or a locked chapter."""

    slide: tuple[int, int] | None
    locked: bool = False


class MenuNavigator:
    """Tracks the selected level on the level-select screen."""

    def __init__(self, progress: Progress, chapter: int = 0, level: int = 0) -> None:
        self.progress = progress
        self.chapter = chapter
        self.level = level

    @property
    def selection(self) -> tuple[int, int]:
        return self.chapter, self.level

    @property
    def selected_level(self) -> Level:
        return self.progress.chapters[self.chapter].levels[self.level]

    @property
    def camera(self) -> tuple[int, int]:
        """Camera position that shows the selected level."""
        return PREVIEW_DELTA_X * self.level, PREVIEW_DELTA_Y * self.chapter

    def move(self, direction: Input) -> MenuMove:
        """Apply a direction press and report how the view should slide."""
        chapters = self.progress.chapters
        current = chapters[self.chapter]
        levels_in_chapter = len(current)

        if direction == Input.LEFT:
            if self.level > 0:
                self.level -= 1
                return MenuMove((-SLIDE_STEP, 0))
            if self.chapter > 0:
                previous = len(chapters[self.chapter - 1])
                self.chapter -= 1
                self.level = previous - 1
                return MenuMove(((previous - 1) * SLIDE_STEP, -SLIDE_STEP))
            return MenuMove(None)

        if direction == Input.RIGHT:
            if self.level < levels_in_chapter - 1:
                self.level += 1
                return MenuMove((SLIDE_STEP, 0))
            if self.chapter < len(chapters) - 1:
                if not current.cleared():
                    return MenuMove(None, locked=True)
                self.chapter += 1
                self.level = 0
                return MenuMove(((levels_in_chapter - 1) * -SLIDE_STEP, SLIDE_STEP))
            return MenuMove(None)

        if direction == Input.UP:
            if self.chapter > 0:
                new_level = min(len(chapters[self.chapter - 1]) - 1, self.level)
                self.chapter -= 1
                slide = ((new_level - self.level) * SLIDE_STEP, -SLIDE_STEP)
                self.level = new_level
                return MenuMove(slide)
            return MenuMove(None)

        if direction == Input.DOWN:
            if self.chapter < len(chapters) - 1:
                if not current.cleared():
                    return MenuMove(None, locked=True)
                new_level = min(len(chapters[self.chapter + 1]) - 1, self.level)
                self.chapter += 1
                slide = ((new_level - self.level) * SLIDE_STEP, SLIDE_STEP)
                self.level = new_level
                return MenuMove(slide)
            return MenuMove(None)

        return MenuMove(None)