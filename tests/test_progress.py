import pytest

from dinothawr.game import Input
from dinothawr.progress import (
    PREVIEW_BASE_X,
    PREVIEW_BASE_Y,
    PREVIEW_DELTA_Y,
    SAVE_GAME_SIZE,
    Chapter,
    GameDataError,
    Level,
    MenuNavigator,
    Progress,
    SaveManager,
)


def make_chapter(count, minimum_clear=0, name="c"):
    return Chapter([Level(path=f"{name}{i}.tmx") for i in range(count)], name, minimum_clear)


def make_progress(*sizes, minimum_clear=0):
    return Progress(make_chapter(n, minimum_clear, f"ch{i}-") for i, n in enumerate(sizes))


def test_best_pushes_keeps_lowest():
    level = Level("a.tmx")
    level.set_best_pushes(10)
    assert level.best_pushes == 10
    level.set_best_pushes(15)
    assert level.best_pushes == 10
    level.set_best_pushes(7)
    assert level.best_pushes == 7


def test_chapter_cleared_count_and_minimum():
    chapter = make_chapter(3, minimum_clear=2)
    assert chapter.cleared_count() == 0
    assert not chapter.cleared()
    chapter.set_completion(0, True)
    chapter.set_completion(2, True)
    assert chapter.cleared_count() == 2
    assert chapter.cleared()
    assert chapter.get_completion(2)
    assert not chapter.get_completion(1)


def test_chapter_completion_out_of_range():
    chapter = make_chapter(2)
    with pytest.raises(IndexError):
        chapter.get_completion(2)
    with pytest.raises(IndexError):
        chapter.set_completion(-1, True)


def test_serialize_format():
    chapters = [make_chapter(2), make_chapter(1)]
    chapters[0].levels[0].best_pushes = 12
    save = SaveManager(chapters)
    save.serialize()
    assert save.size == SAVE_GAME_SIZE
    assert bytes(save.data).rstrip(b"\0") == b"12,0,\n0,\n"


def test_save_round_trip():
    chapters = [make_chapter(2), make_chapter(2)]
    chapters[0].levels[1].set_best_pushes(5)
    chapters[1].levels[0].set_best_pushes(9)
    source = SaveManager(chapters)
    source.serialize()

    fresh = [make_chapter(2), make_chapter(2)]
    target = SaveManager(fresh)
    target.data[:] = source.data
    target.unserialize()
    assert [[lvl.best_pushes for lvl in c] for c in fresh] == [
        [lvl.best_pushes for lvl in c] for c in chapters
    ]
    assert [[lvl.completion for lvl in c] for c in fresh] == [[False, True], [True, False]]


def test_unserialize_empty_buffer_changes_nothing():
    chapters = [make_chapter(2)]
    chapters[0].levels[0].completion = True
    save = SaveManager(chapters)
    save.unserialize()
    assert chapters[0].levels[0].completion is True
    assert chapters[0].levels[1].best_pushes == 0


def test_unserialize_ignores_extra_entries():
    chapters = [make_chapter(1)]
    save = SaveManager(chapters)
    save.data[:9] = b"4,6,\n3,\n\0"
    save.unserialize()
    assert chapters[0].levels[0].best_pushes == 4
    assert len(chapters) == 1


def test_serialize_overflow_raises():
    save = SaveManager([make_chapter(5)], size=4)
    with pytest.raises(ValueError):
        save.serialize()


def test_load_chapters(tmp_path):
    game = tmp_path / "game.xml"
    game.write_text(
        '<game>'
        '<chapter name="Intro" minimum_clear="1">'
        '<map source="a.tmx" name="First"/><map source="b.tmx" name="Second"/>'
        '</chapter>'
        '<chapter name="Empty"/>'
        '<chapter name="Next"><map source="c.tmx" name="Third"/></chapter>'
        '</game>'
    )
    progress = Progress.load_chapters(game)
    assert [c.name for c in progress.chapters] == ["Intro", "Next"]
    assert progress.chapters[0].minimum_clear == 1
    first = progress.chapters[0].levels[0]
    assert first.name == "First"
    assert first.path == str(tmp_path / "a.tmx")
    assert first.position == (PREVIEW_BASE_X, PREVIEW_BASE_Y)
    third = progress.chapters[1].levels[0]
    assert third.position[1] - first.position[1] == PREVIEW_DELTA_Y
    assert progress.total_levels() == 3


def test_load_chapters_missing_file(tmp_path):
    with pytest.raises(GameDataError):
        Progress.load_chapters(tmp_path / "missing.xml")


def test_totals_and_all_cleared():
    progress = make_progress(2, 1)
    assert progress.total_cleared_levels() == 0
    assert not progress.all_cleared()
    for chapter in progress.chapters:
        for index in range(len(chapter)):
            chapter.set_completion(index, True)
    assert progress.total_cleared_levels() == progress.total_levels()
    assert progress.all_cleared()


def test_find_next_unsolved_level():
    progress = make_progress(2, 2)
    progress.chapters[0].set_completion(0, True)
    assert progress.find_next_unsolved_level(0, 0) == (0, 1)
    progress.chapters[0].set_completion(1, True)
    assert progress.find_next_unsolved_level(0, 0) == (1, 0)


def test_find_next_unsolved_stops_at_last_level():
    progress = make_progress(2, 2)
    assert progress.find_next_unsolved_level(1, 1) is None


def test_find_next_unsolved_stops_at_locked_chapter():
    progress = make_progress(1, 2, minimum_clear=2)
    progress.chapters[0].set_completion(0, True)
    assert progress.find_next_unsolved_level(0, 0) is None


def test_initial_selection_reads_save():
    progress = make_progress(2, 2)
    progress.save.data[:10] = b"3,4,\n0,0,\n"
    assert progress.initial_selection() == (1, 0)
    assert progress.chapters[0].levels[1].best_pushes == 4


def test_menu_left_right_within_chapter():
    nav = MenuNavigator(make_progress(3), 0, 1)
    assert nav.move(Input.RIGHT).slide == (8, 0)
    assert nav.selection == (0, 2)
    assert nav.move(Input.LEFT).slide == (-8, 0)
    assert nav.selection == (0, 1)


def test_menu_right_into_locked_chapter():
    progress = make_progress(2, 2, minimum_clear=1)
    nav = MenuNavigator(progress, 0, 1)
    move = nav.move(Input.RIGHT)
    assert move.locked
    assert move.slide is None
    assert nav.selection == (0, 1)


def test_menu_chapter_change_round_trip():
    progress = make_progress(3, 2)
    nav = MenuNavigator(progress, 0, 2)
    forward = nav.move(Input.RIGHT)
    assert nav.selection == (1, 0)
    back = nav.move(Input.LEFT)
    assert nav.selection == (0, 2)
    assert forward.slide[0] == -back.slide[0]
    assert forward.slide[1] == -back.slide[1]


def test_menu_up_down_clamps_level():
    progress = make_progress(3, 1)
    nav = MenuNavigator(progress, 0, 2)
    move = nav.move(Input.DOWN)
    assert nav.selection == (1, 0)
    assert move.slide[1] == 8
    up = nav.move(Input.UP)
    assert nav.selection == (0, 0)
    assert up.slide == (0, -8)


def test_menu_edges_do_nothing():
    nav = MenuNavigator(make_progress(2), 0, 0)
    assert nav.move(Input.LEFT).slide is None
    assert nav.move(Input.UP).slide is None
    assert nav.move(Input.PUSH).slide is None
    assert nav.selection == (0, 0)
    assert nav.camera == (0, 0)