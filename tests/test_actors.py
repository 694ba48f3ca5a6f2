import random

import pytest

from pac_actors import GHOST_START, PLAYER_START, Ghost, Player, add_bounded
from pac_maze import BISCUIT, DOWN, EMPTY, LEFT, NONE, PILL, RIGHT, UP, Grid, on_grid


def place(mover, x, y, d, due=None):
    mover.x, mover.y = x, y
    mover.dir = d
    mover.due = d if due is None else due


def make_ghost(grid, seed=1, accuracy=0.8):
    ghost = Ghost((255, 0, 0), random.Random(seed), chase_accuracy=accuracy)
    ghost.reset(grid)
    return ghost


class TestPlayer:
    def test_starts_moving_left(self):
        player = Player(3)
        assert (player.x, player.y) == PLAYER_START
        assert player.dir == LEFT
        assert player.lives == 3
        assert player.score == 0

    def test_perpendicular_turn_rejected_into_wall(self, grid):
        player = Player()
        player.set_intent(UP)
        player.step(grid)
        assert player.dir == LEFT
        assert (player.x, player.y) == (88, 120)
        assert player.due == UP

    def test_perpendicular_turn_waits_for_grid_point(self, grid):
        player = Player()
        place(player, 62, 120, LEFT, due=UP)
        player.step(grid)
        assert (player.x, player.y) == (60, 120)
        assert player.dir == LEFT
        player.step(grid)
        assert (player.x, player.y) == (60, 118)
        assert player.dir == UP

    def test_same_axis_reversal_mid_cell(self, grid):
        player = Player()
        place(player, 88, 120, LEFT, due=RIGHT)
        assert not on_grid(player.x, player.y)
        player.step(grid)
        assert player.dir == RIGHT
        assert (player.x, player.y) == (90, 120)

    def test_blocked_by_wall_stops_in_place(self, grid):
        player = Player()
        place(player, 40, 120, LEFT)
        moved = player.step(grid)
        assert player.dir == NONE
        assert moved["new"] == moved["old"] == (40, 120)

    def test_intent_into_wall_from_rest_is_ignored(self, grid):
        player = Player()
        place(player, 40, 120, NONE, due=LEFT)
        moved = player.step(grid)
        assert moved["new"] == (40, 120)
        assert player.dir == NONE

    def test_eats_biscuit_half_way_into_cell(self, grid):
        player = Player()
        first = player.step(grid)
        assert first["consumed"] is None
        second = player.step(grid)
        assert second["consumed"] == BISCUIT
        assert (player.x, player.y) == (86, 120)
        assert grid.cell_kind((8, 12)) == EMPTY
        assert player.score == 10
        assert player.eaten == 1

    def test_eats_pill_for_fifty(self, grid):
        player = Player()
        place(player, 10, 12, DOWN)
        moved = player.step(grid)
        assert moved["consumed"] == PILL
        assert player.score == 50
        assert grid.cell_kind((1, 2)) == EMPTY

    def test_tunnel_wraparound_round_trip(self, grid):
        player = Player()
        place(player, 0, 100, LEFT)
        positions = []
        for _ in range(6):
            player.step(grid)
            positions.append(player.x)
        assert positions == [-2, -4, -6, -8, -10, 190]

        player.set_intent(RIGHT)
        for _ in range(6):
            player.step(grid)
        assert (player.x, player.y) == (0, 100)
        assert player.dir == RIGHT

    def test_wraps_right_edge_to_left(self, grid):
        player = Player()
        place(player, 188, 100, RIGHT)
        player.step(grid)
        assert (player.x, player.y) == (-10, 100)

    def test_bonus_life_once_per_crossing(self):
        player = Player(3)
        player.score = 9990
        player.add_score(10)
        assert player.lives == 4
        player.add_score(50)
        assert player.lives == 4
        player.score = 19980
        player.add_score(50)
        assert player.lives == 5

    def test_score_never_decreases_on_life_loss(self):
        player = Player(2)
        player.add_score(120)
        player.lose_life()
        player.lose_life()
        player.lose_life()
        assert player.lives == 0
        assert player.score == 120

    def test_level_completes_on_last_collectible_only(self):
        grid = Grid(["#####", "#. .#", "#####"])
        player = Player()
        place(player, 20, 10, LEFT)
        results = [player.step(grid) for _ in range(6)]
        assert [r["consumed"] for r in results].count(BISCUIT) == 1
        assert not any(r["level_completed"] for r in results)
        assert player.dir == NONE

        player.set_intent(RIGHT)
        results = [player.step(grid) for _ in range(7)]
        assert results[-1]["consumed"] == BISCUIT
        assert results[-1]["level_completed"]
        assert player.eaten == grid.total == 2

    def test_new_level_resets_counter_and_position(self):
        player = Player()
        player.eaten = 100
        player.score = 500
        player.x = 10
        player.new_level()
        assert player.eaten == 0
        assert player.score == 500
        assert (player.x, player.y) == PLAYER_START


class TestGhost:
    def test_add_bounded_snaps_to_grid_lines(self):
        assert add_bounded(18, 4) == 20
        assert add_bounded(12, -4) == 10
        assert add_bounded(20, 4) == 24
        assert add_bounded(16, 4) == 20

    def test_reset_faces_open_corridor(self, grid):
        for seed in range(10):
            ghost = make_ghost(grid, seed)
            assert (ghost.x, ghost.y) == GHOST_START
            assert ghost.dir in (LEFT, RIGHT)
            assert ghost.due in (UP, DOWN)
            assert ghost.vulnerable_since is None
            assert ghost.returning_since is None

    def test_speed_by_status(self, grid):
        ghost = make_ghost(grid)
        assert ghost.speed() == 2
        ghost.make_vulnerable(0)
        assert ghost.speed() == 1
        ghost.mark_eaten(5)
        assert ghost.speed() == 4
        assert ghost.is_returning()
        assert not ghost.is_vulnerable()
        assert not ghost.is_dangerous()

    def test_make_vulnerable_reverses(self, grid):
        ghost = make_ghost(grid)
        ghost.dir = LEFT
        ghost.make_vulnerable(12)
        assert ghost.dir == RIGHT
        assert ghost.vulnerable_since == 12

    def test_flags_never_both_set(self, grid):
        ghost = make_ghost(grid)
        ghost.mark_eaten(3)
        ghost.make_vulnerable(4)
        assert ghost.is_vulnerable()
        assert not ghost.is_returning()

    def test_vulnerable_expiry(self, grid):
        ghost = make_ghost(grid)
        ghost.make_vulnerable(10)
        ghost.expire(10 + 8 * 27 - 1)
        assert ghost.is_vulnerable()
        ghost.expire(10 + 8 * 27)
        assert not ghost.is_vulnerable()

    def test_returning_expiry(self, grid):
        ghost = make_ghost(grid)
        ghost.mark_eaten(0)
        ghost.expire(80)
        assert ghost.is_returning()
        ghost.expire(81)
        assert ghost.is_dangerous()

    def test_status_warns_before_expiry(self, grid):
        ghost = make_ghost(grid)
        ghost.make_vulnerable(0)
        assert ghost.status(5 * 27) == "vulnerable"
        assert ghost.status(5 * 27 + 1) == "flashing"
        ghost.mark_eaten(200)
        assert ghost.status(201) == "returning"

    def test_greedy_choice_moves_toward_target(self, grid):
        ghost = make_ghost(grid, accuracy=1.0)
        ghost.dir = LEFT
        assert ghost.smart_direction((90, 200)) == DOWN
        assert ghost.smart_direction((90, 0)) == UP
        ghost.dir = UP
        assert ghost.smart_direction((0, 80)) == LEFT

    def test_frightened_choice_is_perpendicular(self, grid):
        ghost = make_ghost(grid, seed=3, accuracy=1.0)
        ghost.dir = LEFT
        ghost.make_vulnerable(0)
        choices = {ghost.smart_direction((90, 200)) for _ in range(40)}
        assert choices == {UP, DOWN}

    def test_seeded_choices_are_reproducible(self, grid):
        a = make_ghost(grid, seed=42)
        b = make_ghost(grid, seed=42)
        target = (90, 120)
        for _ in range(200):
            assert a.step(grid, target) == b.step(grid, target)

    def test_never_stalls_in_corner(self, grid):
        ghost = make_ghost(grid, accuracy=1.0)
        place(ghost, 10, 10, LEFT)
        moved = ghost.step(grid, (10, -100))
        assert moved["new"] != moved["old"]
        assert ghost.dir == DOWN

    def test_keeps_moving_for_many_ticks(self, grid):
        ghost = make_ghost(grid, seed=9)
        for _ in range(2000):
            moved = ghost.step(grid, (90, 120))
            assert moved["new"] != moved["old"]
            x, y = moved["new"]
            assert -10 <= x <= 190
            assert 0 <= y < 220

    def test_turns_only_on_grid(self, grid):
        ghost = make_ghost(grid, seed=5)
        for _ in range(500):
            before = ghost.dir
            was_on_grid = ghost.on_grid()
            ghost.step(grid, (90, 120))
            if ghost.dir != before and before[0] * ghost.dir[0] + before[1] * ghost.dir[1] == 0:
                assert was_on_grid


@pytest.mark.parametrize("status, speed", [("vulnerable", 1), ("normal", 2), ("returning", 4)])
def test_ghost_tunnel_wraparound(grid, status, speed):
    ghost = make_ghost(grid)
    if status == "vulnerable":
        ghost.make_vulnerable(0)
    elif status == "returning":
        ghost.mark_eaten(0)
    assert ghost.speed() == speed

    place(ghost, 0, 100, LEFT)
    xs = []
    for _ in range(20):
        ghost.step(grid, (90, 120))
        xs.append(ghost.x)
        assert ghost.y == 100
        assert ghost.dir == LEFT
        assert -10 <= ghost.x <= 190
        if ghost.x == 190:
            break
    assert xs[-2:] == [-10, 190]

    place(ghost, 190, 100, RIGHT)
    xs = []
    for _ in range(20):
        ghost.step(grid, (90, 120))
        xs.append(ghost.x)
        assert ghost.y == 100
        assert ghost.dir == RIGHT
        if ghost.x == 0:
            break
    assert xs[0] == -10
    assert (ghost.x, ghost.y) == (0, 100)
