from pac_maze import (
    BISCUIT,
    CELL,
    DIRECTIONS,
    EMPTY,
    LEFT,
    NONE,
    PILL,
    RIGHT,
    TUNNEL_Y,
    WIDTH,
    next_cell,
    on_grid,
    opposite,
    perpendicular,
    same_axis,
)


PLAYER_START = (90, 120)
GHOST_START = (90, 80)
GHOST_COLORS = [(0, 255, 222), (255, 0, 0), (255, 184, 222), (255, 184, 71)]
POINTS = {BISCUIT: 10, PILL: 50}
MAX_RETRIES = 3


def add_bounded(v, delta):
    # Never step past the next grid line.
    rem = v % CELL
    result = rem + delta
    if rem != 0 and result > CELL:
        return v + (CELL - rem)
    if rem > 0 and result < 0:
        return v - rem
    return v + delta


def is_mid_square(v):
    return 3 < v % CELL < 7


class Mover:
    def __init__(self, x, y):
        self.x = x
        self.y = y
        self.dir = NONE
        self.due = NONE

    def speed(self):
        return 2

    def new_coord(self, d, x, y):
        s = self.speed()
        return x + d[0] * s, y + d[1] * s

    def on_grid(self):
        return on_grid(self.x, self.y)

    def floor_exits(self, grid):
        return [d for d in DIRECTIONS if grid.is_floor(next_cell(self.new_coord(d, self.x, self.y), d))]

    def wrap(self, pos):
        x, y = pos
        if y == TUNNEL_Y:
            if self.dir == RIGHT and x >= WIDTH:
                return -CELL, y
            if self.dir == LEFT and x < -CELL:
                return WIDTH, y
        return pos

    def plan(self, grid):
        """Candidate position for this tick and whether a wall blocks it.

        Commits the pending direction when the turn is allowed: reversals on
        the same axis always, axis changes only on a grid point facing floor.
        """
        grid_point = self.on_grid()
        npos = None
        if self.due != self.dir:
            npos = self.new_coord(self.due, self.x, self.y)
            if same_axis(self.due, self.dir) or (grid_point and grid.is_floor(next_cell(npos, self.due))):
                self.dir = self.due
            else:
                npos = None
        if npos is None:
            npos = self.new_coord(self.dir, self.x, self.y)
        npos = self.wrap(npos)
        blocked = grid_point and grid.is_wall(next_cell(npos, self.dir))
        return npos, blocked


class Player(Mover):
    def __init__(self, lives=3, extra_life_every=10000):
        super().__init__(*PLAYER_START)
        self.start_lives = lives
        self.extra_life_every = extra_life_every
        self.score = 0
        self.lives = lives
        self.eaten = 0
        self.reset()

    def set_intent(self, d):
        self.due = d

    def reset(self):
        self.score = 0
        self.lives = self.start_lives
        self.new_level()

    def new_level(self):
        self.eaten = 0
        self.reset_position()

    def reset_position(self):
        self.x, self.y = PLAYER_START
        self.dir = LEFT
        self.due = LEFT

    def lose_life(self):
        self.lives = max(0, self.lives - 1)

    def add_score(self, points):
        before = self.score
        self.score += points
        every = self.extra_life_every
        if every and self.score // every > before // every:
            self.lives += self.score // every - before // every

    def step(self, grid):
        old = (self.x, self.y)
        npos, blocked = self.plan(grid)
        if blocked:
            self.dir = NONE
        if self.dir == NONE:
            return {"old": old, "new": old, "consumed": None, "level_completed": False}

        self.x, self.y = npos
        consumed = self.consume(grid)
        return {
            "old": old,
            "new": (self.x, self.y),
            "consumed": consumed,
            "level_completed": consumed is not None and self.eaten == grid.total,
        }

    def consume(self, grid):
        if not (is_mid_square(self.x) or is_mid_square(self.y)):
            return None
        ahead = next_cell((self.x, self.y), self.dir)
        kind = grid.cell_kind(ahead)
        if kind not in POINTS:
            return None
        grid.set_cell_kind(ahead, EMPTY)
        self.add_score(POINTS[kind])
        self.eaten += 1
        return kind


class Ghost(Mover):
    def __init__(self, color, rng, chase_accuracy=0.8, vulnerable_ticks=216, warning_ticks=135, returning_ticks=81):
        super().__init__(*GHOST_START)
        self.color = color
        self.rng = rng
        self.chase_accuracy = chase_accuracy
        self.vulnerable_ticks = vulnerable_ticks
        self.warning_ticks = warning_ticks
        self.returning_ticks = returning_ticks
        self.vulnerable_since = None
        self.returning_since = None

    def is_vulnerable(self):
        return self.vulnerable_since is not None

    def is_returning(self):
        return self.returning_since is not None

    def is_dangerous(self):
        return not self.is_vulnerable() and not self.is_returning()

    def speed(self):
        if self.is_vulnerable():
            return 1
        if self.is_returning():
            return 4
        return 2

    def new_coord(self, d, x, y):
        s = self.speed()
        return add_bounded(x, d[0] * s), add_bounded(y, d[1] * s)

    def reset(self, grid):
        self.vulnerable_since = None
        self.returning_since = None
        self.x, self.y = GHOST_START
        exits = self.floor_exits(grid)
        preferred = [d for d in perpendicular(self.dir) if d in exits]
        self.dir = self.rng.choice(preferred or exits or perpendicular(self.dir))
        self.due = self.rng.choice(perpendicular(self.dir))

    def make_vulnerable(self, tick):
        self.dir = opposite(self.dir)
        self.vulnerable_since = tick
        self.returning_since = None

    def mark_eaten(self, tick):
        self.vulnerable_since = None
        self.returning_since = tick

    def expire(self, tick):
        if self.is_vulnerable() and tick - self.vulnerable_since >= self.vulnerable_ticks:
            self.vulnerable_since = None
        if self.is_returning() and tick - self.returning_since >= self.returning_ticks:
            self.returning_since = None

    def status(self, tick):
        if self.is_vulnerable():
            if tick - self.vulnerable_since > self.warning_ticks:
                return "flashing"
            return "vulnerable"
        if self.is_returning():
            return "returning"
        return "normal"

    def smart_direction(self, target):
        moves = perpendicular(self.dir)
        if not self.is_dangerous():
            return self.rng.choice(moves)

        tx, ty = target

        def distance(d):
            x, y = self.new_coord(d, self.x, self.y)
            return (x - tx) ** 2 + (y - ty) ** 2

        if self.rng.random() < self.chase_accuracy:
            return moves[0] if distance(moves[0]) < distance(moves[1]) else moves[1]
        return self.rng.choice(moves)

    def escape(self, grid):
        exits = self.floor_exits(grid)
        if not exits:
            return self.x, self.y
        forward = [d for d in exits if d != opposite(self.dir)]
        self.dir = self.rng.choice(forward or exits)
        self.due = self.dir
        return self.wrap(self.new_coord(self.dir, self.x, self.y))

    def step(self, grid, target):
        old = (self.x, self.y)
        grid_point = self.on_grid()
        for _ in range(MAX_RETRIES + 1):
            npos, blocked = self.plan(grid)
            if not blocked:
                break
            self.due = self.smart_direction(target)
        else:
            npos = self.escape(grid)

        self.x, self.y = npos
        if grid_point:
            self.due = self.smart_direction(target)
        return {"old": old, "new": (self.x, self.y)}
