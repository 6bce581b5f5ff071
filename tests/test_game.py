from dataclasses import dataclass, field

import pytest

from dinothawr.game import (
    FB_HEIGHT,
    FB_WIDTH,
    CameraManager,
    EdgeDetector,
    Input,
    animation_index,
    input_to_offset,
    input_to_string,
    string_to_input,
    win_animation_state,
)


@dataclass
class Box:
    x: int
    y: int
    w: int = 16
    h: int = 16


@dataclass
class Target:
    width: int = FB_WIDTH
    height: int = FB_HEIGHT
    camera: list = field(default_factory=list)

    def camera_set(self, pos):
        self.camera.append(pos)


def test_edge_detector_reports_only_rising_edges():
    edge = EdgeDetector(False)
    assert [edge.set(s) for s in (True, True, False, True)] == [True, False, False, True]


def test_edge_detector_initially_on_suppresses_first_press():
    edge = EdgeDetector(True)
    assert edge.set(True) is False


@pytest.mark.parametrize("direction", [Input.UP, Input.DOWN, Input.LEFT, Input.RIGHT])
def test_direction_name_round_trip(direction):
    assert string_to_input(input_to_string(direction)) is direction


@pytest.mark.parametrize("direction", [Input.UP, Input.DOWN, Input.LEFT, Input.RIGHT])
def test_direction_offsets_are_unit_steps(direction):
    dx, dy = input_to_offset(direction)
    assert abs(dx) + abs(dy) == 1


def test_opposite_directions_cancel():
    up, down = input_to_offset(Input.UP), input_to_offset(Input.DOWN)
    left, right = input_to_offset(Input.LEFT), input_to_offset(Input.RIGHT)
    assert (up[0] + down[0], up[1] + down[1]) == (0, 0)
    assert (left[0] + right[0], left[1] + right[1]) == (0, 0)


def test_non_directions():
    assert input_to_offset(Input.PUSH) == (0, 0)
    assert input_to_string(Input.MENU) == ""
    assert string_to_input("sideways") is Input.NONE
    assert string_to_input("right") is Input.RIGHT


def test_win_animation_phases():
    assert win_animation_state(1) == "frozen"
    assert win_animation_state(24) == "defrost1"
    assert win_animation_state(48) == "defrost2"
    assert win_animation_state(72) == "down"
    assert win_animation_state(120) == "cheer"


def test_win_animation_alternates_after_defrost():
    states = {win_animation_state(frame) for frame in range(72, 300)}
    assert states == {"down", "cheer"}


def test_animation_index_ranges():
    walking = {animation_index(frame, False) for frame in range(200)}
    sliding = {animation_index(frame, True) for frame in range(200)}
    assert walking == {1, 2, 3, 4}
    assert sliding == {5, 6}
    assert animation_index(0, False) == 1


def test_camera_centres_small_map():
    target = Target()
    CameraManager(target, Box(0, 0), (160, 100)).update()
    (x, y), = target.camera
    assert -2 * x == FB_WIDTH - 160
    assert -2 * y == FB_HEIGHT - 100


def test_camera_clamps_at_origin():
    target = Target()
    CameraManager(target, Box(0, 0), (1000, 1000)).update()
    assert target.camera == [(0, 0)]


def test_camera_clamps_at_far_edge():
    target = Target()
    CameraManager(target, Box(980, 980), (1000, 1000)).update()
    (x, y), = target.camera
    assert (x + FB_WIDTH, y + FB_HEIGHT) == (1000, 1000)


def test_camera_follows_rect_in_middle():
    target = Target()
    box = Box(500, 500)
    camera = CameraManager(target, box, (1000, 1000))
    camera.update()
    box.x += 32
    camera.update()
    (x0, y0), (x1, y1) = target.camera
    assert x0 + FB_WIDTH // 2 == box.x - 32 + box.w // 2
    assert x1 - x0 == 32
    assert y1 == y0