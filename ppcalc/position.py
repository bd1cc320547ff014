from collections import namedtuple
import math


class Position(namedtuple('Position', 'x y')):
    """A position on the osu! screen.

    Parameters
    ----------
    x : int or float
        The x coordinate in the range.
    y : int or float
        The y coordinate in the range.

    Notes
    -----
    The visible region of the osu! standard playfield is [0, 512] by [0, 384].
    Positions may fall outside of this range for slider curve control points.
    """
    x_max = 512
    y_max = 384

    def __eq__(self, other):
        return self.x == other.x and self.y == other.y

    def __hash__(self):
        return hash((self.x, self.y))

    def scale(self, factor):
        """Scale both coordinates by ``factor``.
        """
        return Position(self.x * factor, self.y * factor)

    def toward(self, target, amount):
        """Move ``amount`` pixels along the straight line to ``target``.

        Parameters
        ----------
        target : Position
            The position to move toward.
        amount : float
            How far to move. This may not exceed the distance to ``target``.

        Returns
        -------
        moved : Position
            The new position.
        """
        length = distance(self, target)
        if not length:
            return self

        return Position(
            self.x + (target.x - self.x) / length * amount,
            self.y + (target.y - self.y) / length * amount,
        )


def distance(start, end):
    return math.hypot(start.x - end.x, start.y - end.y)
