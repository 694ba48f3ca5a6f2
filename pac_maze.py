WALL = "#"
BISCUIT = "."
PILL = "o"
EMPTY = " "
# Pen blocks: neither wall nor floor.
TUNNEL = "-"

CELL = 10

MAZE = (
    "###################",
    "#........#........#",
    "#o##.###.#.###.##o#",
    "#.##.###.#.###.##.#",
    "#.................#",
    "#.##.#.#####.#.##.#",
    "#....#...#...#....#",
    "####.###.#.###.####",
    "   #.#.......#.#   ",
    "####.#.##-##.#.####",
    "    ...#---#...    ",
    "####.#.#####.#.####",
    "   #.#... ...#.#   ",
    "####.#.#####.#.####",
    "#........#........#",
    "#.##.###.#.###.##.#",
    "#o.#...........#.o#",
    "##.#.#.#####.#.#.##",
    "#....#...#...#....#",
    "#.######.#.######.#",
    "#.................#",
    "###################",
)

GRID_W, GRID_H = len(MAZE[0]), len(MAZE)
WIDTH, HEIGHT = GRID_W * CELL, GRID_H * CELL
TUNNEL_Y = 10 * CELL

TOTAL_COLLECTIBLES = sum(row.count(BISCUIT) + row.count(PILL) for row in MAZE)

NONE = (0, 0)
UP = (0, -1)
DOWN = (0, 1)
LEFT = (-1, 0)
RIGHT = (1, 0)
DIRECTIONS = [UP, DOWN, LEFT, RIGHT]
DIR_NAMES = {NONE: "none", UP: "up", DOWN: "down", LEFT: "left", RIGHT: "right"}


def opposite(d):
    return (-d[0], -d[1])


def same_axis(a, b):
    return (a[0] != 0 and b[0] != 0) or (a[1] != 0 and b[1] != 0)


def perpendicular(d):
    """The two directions crossing the axis of d (horizontal when d is vertical or NONE)."""
    if d[0] != 0:
        return [UP, DOWN]
    return [LEFT, RIGHT]


def on_whole_square(v):
    return v % CELL == 0


def on_grid(x, y):
    return on_whole_square(x) and on_whole_square(y)


def next_square(v, d):
    rem = v % CELL
    if rem == 0:
        return v
    if d in (RIGHT, DOWN):
        return v + (CELL - rem)
    return v - rem


def to_cell(v):
    return v // CELL


def next_cell(pos, d):
    x, y = pos
    return to_cell(next_square(x, d)), to_cell(next_square(y, d))


class Grid:
    def __init__(self, template=MAZE):
        self.template = tuple(template)
        self.width = len(self.template[0])
        self.height = len(self.template)
        self.total = sum(row.count(BISCUIT) + row.count(PILL) for row in self.template)
        self.reset()

    def reset(self):
        self.cells = [list(row) for row in self.template]

    def in_bounds(self, cell):
        x, y = cell
        return 0 <= x < self.width and 0 <= y < self.height

    def cell_kind(self, cell):
        if not self.in_bounds(cell):
            return None
        x, y = cell
        return self.cells[y][x]

    def set_cell_kind(self, cell, kind):
        if not self.in_bounds(cell):
            return
        x, y = cell
        self.cells[y][x] = kind

    def is_wall(self, cell):
        return self.cell_kind(cell) == WALL

    def is_floor(self, cell):
        return self.cell_kind(cell) in (EMPTY, BISCUIT, PILL)

    def count(self, *kinds):
        return sum(1 for row in self.cells for ch in row if ch in kinds)

    def rows(self):
        return ["".join(row) for row in self.cells]
