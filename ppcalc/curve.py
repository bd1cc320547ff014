from abc import ABCMeta, abstractmethod
import math

import numpy as np
from scipy.special import comb

from .position import Position
from .utils import lazyval


class Curve(metaclass=ABCMeta):
    """A slider path.

    Parameters
    ----------
    points : list[Position]
        The control points, starting with the slider head.
    req_length : float
        The pixel length of the slider. The path is truncated or extended
        along its final segment to be exactly this long.
    """
    _kind_dispatch = {}

    # samples taken per bezier or catmull segment
    _resolution = 50

    def __init__(self, points, req_length):
        self.points = points
        self.req_length = req_length

    @classmethod
    def from_kind_and_points(cls, kind, points, req_length):
        try:
            subcls = cls._kind_dispatch[kind]
        except KeyError:
            raise ValueError(f'unknown curve type: {kind!r}')

        return subcls(points, req_length)

    def __init_subclass__(cls):
        for kind in cls.kinds:
            cls._kind_dispatch[kind] = cls

    @abstractmethod
    def _path(self):
        """The curve approximated as a polyline.

        Returns
        -------
        path : np.ndarray
            An ``(n, 2)`` array of positions.
        """
        raise NotImplementedError('_path')

    @lazyval
    def _polyline(self):
        path = self._path()
        if len(path) == 1:
            path = np.vstack([path, path])

        segment_lengths = np.hypot(*np.diff(path, axis=0).T)
        cumulative = np.concatenate([[0.0], np.cumsum(segment_lengths)])
        return path, cumulative

    @property
    def length(self):
        """The length of the approximated path before truncation.
        """
        return self._polyline[1][-1]

    def __call__(self, t):
        """Compute the position of the curve at progress ``t``.

        Parameters
        ----------
        t : float
            The progress along the distance of the curve in the range [0, 1]

        Returns
        -------
        position : Position
            The position of the curve.
        """
        path, cumulative = self._polyline
        target = t * self.req_length

        # the last segment is extended when the path is too short
        ix = np.searchsorted(cumulative, target, side='right') - 1
        ix = int(min(max(ix, 0), len(path) - 2))

        start = path[ix]
        end = path[ix + 1]
        segment_length = cumulative[ix + 1] - cumulative[ix]
        if segment_length == 0:
            return Position(*start)

        fraction = (target - cumulative[ix]) / segment_length
        x, y = start + (end - start) * fraction
        return Position(x, y)


def _bezier(points, num):
    coordinates = np.asarray(points, dtype=np.float64)
    n = len(coordinates) - 1
    if n == 0:
        return coordinates

    ts = np.linspace(0, 1, num=num)[:, np.newaxis]
    ixs = np.arange(n + 1)
    weights = comb(n, ixs) * (1 - ts) ** (n - ixs) * ts ** ixs
    return weights @ coordinates


class Bezier(Curve):
    kinds = 'B'

    def _path(self):
        return np.vstack([
            _bezier(subpoints, self._resolution)
            for subpoints in split_at_dupes(self.points)
        ])


class Linear(Curve):
    kinds = 'L'

    def _path(self):
        return np.asarray(self.points, dtype=np.float64)


class Perfect(Curve):
    kinds = 'P'

    def __new__(cls, points, req_length):
        if len(points) != 3:
            # osu! uses the bezier curve if there are not exactly 3 points
            return Bezier(points, req_length)

        try:
            center = get_center(*points)
        except ValueError:
            # we cannot use a perfect curve function for collinear points;
            # osu! also falls back to a bezier here
            return Bezier(points, req_length)

        self = super().__new__(cls)
        self._center = center
        return self

    @lazyval
    def _angle(self):
        coordinates = np.array(self.points, dtype=np.float64) - self._center

        # angles of the first and last points to center
        start_angle, end_angle = np.arctan2(
            coordinates[::2, 1],
            coordinates[::2, 0],
        )

        # normalize so that the angle is positive
        if end_angle < start_angle:
            end_angle += 2 * math.pi

        angle = end_angle - start_angle

        # switch angle direction if necessary
        a_to_c = coordinates[2] - coordinates[0]
        ortho_a_to_c = np.array((a_to_c[1], -a_to_c[0]))
        if np.dot(ortho_a_to_c, coordinates[1] - coordinates[0]) < 0:
            angle = -(2 * math.pi - angle)

        return angle

    @lazyval
    def _radius(self):
        return math.hypot(
            self.points[0].x - self._center.x,
            self.points[0].y - self._center.y,
        )

    def _path(self):
        return np.array([
            rotate(self.points[0], self._center, self._angle * t)
            for t in np.linspace(0, 1, num=self._resolution)
        ])

    def __call__(self, t):
        # follow the circle exactly instead of the polyline
        arc_length = abs(self._angle) * self._radius
        if not arc_length:
            return Position(*self.points[0])

        return rotate(
            self.points[0],
            self._center,
            self._angle * t * self.req_length / arc_length,
        )


class Catmull(Curve):
    kinds = 'C'

    def _path(self):
        points = np.asarray(self.points, dtype=np.float64)
        if len(points) < 2:
            return points

        ts = np.linspace(0, 1, num=self._resolution)[:, np.newaxis]
        segments = []
        for i in range(len(points) - 1):
            v1 = points[i - 1] if i > 0 else points[i]
            v2 = points[i]
            v3 = points[i + 1]
            v4 = points[i + 2] if i + 2 < len(points) else 2 * v3 - v2

            segments.append(0.5 * (
                2 * v2 +
                (-v1 + v3) * ts +
                (2 * v1 - 5 * v2 + 4 * v3 - v4) * ts ** 2 +
                (-v1 + 3 * v2 - 3 * v3 + v4) * ts ** 3
            ))

        return np.vstack(segments)


def get_center(a, b, c):
    """Returns the Position of the center of the circle described by the 3
    points

    Parameters
    ----------
    a, b, c : Position
        The three positions.

    Returns
    -------
    center : Position
        The center of the three points.

    Raises
    ------
    ValueError
        Raised when the points are collinear or coincide.
    """
    a, b, c = np.array([a, b, c], dtype=np.float64)

    a_squared = np.sum(np.square(b - c))
    b_squared = np.sum(np.square(a - c))
    c_squared = np.sum(np.square(a - b))

    if np.isclose([a_squared, b_squared, c_squared], 0).any():
        raise ValueError('points coincide')

    s = a_squared * (b_squared + c_squared - a_squared)
    t = b_squared * (a_squared + c_squared - b_squared)
    u = c_squared * (a_squared + b_squared - c_squared)

    sum_ = s + t + u

    if np.isclose(sum_, 0):
        raise ValueError('points are collinear')

    return Position(*(s * a + t * b + u * c) / sum_)


def rotate(position, center, radians):
    """Returns a Position rotated r radians around centre c from p

    Parameters
    ----------
    position : Position
        The position to rotate.
    center : Position
        The point to rotate about.
    radians : float
        The number of radians to rotate ``position`` by.
    """
    p_x, p_y = position
    c_x, c_y = center

    x_dist = p_x - c_x
    y_dist = p_y - c_y

    return Position(
        (x_dist * math.cos(radians) - y_dist * math.sin(radians)) + c_x,
        (x_dist * math.sin(radians) + y_dist * math.cos(radians)) + c_y,
    )


def split_at_dupes(inp):
    """Split bezier control points into segments at repeated points.
    """
    out = []
    oldi = 0
    for i in range(1, len(inp)):
        if inp[i] == inp[i - 1]:
            out.append(inp[oldi:i])
            oldi = i
    out.append(inp[oldi:])
    return out
