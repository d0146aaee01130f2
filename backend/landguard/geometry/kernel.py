"""Core geometry kernel using Shapely.

Rings are stored in WGS84 degrees. Areas are measured after projecting onto a
local equirectangular plane centred on the ring, which is accurate to well
under a percent for parcel-sized polygons. Lengths use the haversine formula.

None of these functions raise on degenerate input: an empty or collapsed ring
yields 0, False or None so that fraud checks can run on adversarial input.
"""

import math
from typing import Optional

from shapely.geometry import Point, Polygon

from landguard.geometry.types import Coordinate, Ring

EARTH_RADIUS_M = 6378137.0
DEFAULT_TOLERANCE_DEG = 1e-7


class GeometryKernel:
    """Planar predicates and measurements over parcel rings."""

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE_DEG):
        self.tolerance = tolerance

    def area(self, ring: Ring) -> float:
        """Enclosed area in square metres, independent of winding direction."""
        polygon = self._to_shapely(ring, self._origin(ring))
        if polygon is None:
            return 0.0
        return float(polygon.area)

    def perimeter(self, ring: Ring) -> float:
        """Great-circle length of the boundary, closing segment included."""
        coords = ring.closed().coordinates
        total = 0.0
        for start, end in zip(coords, coords[1:]):
            total += self.haversine_distance(start, end)
        return total

    def centroid(self, ring: Ring) -> Coordinate:
        """Area centroid as (lng, lat); vertex mean for degenerate rings."""
        vertices = ring.vertices
        if not vertices:
            return (0.0, 0.0)

        if len(vertices) >= 3:
            polygon = Polygon(ring.closed().coordinates)
            if not polygon.is_valid:
                polygon = polygon.buffer(0)
            if polygon.area > 0:
                center = polygon.centroid
                return (center.x, center.y)

        n = len(vertices)
        return (
            sum(p[0] for p in vertices) / n,
            sum(p[1] for p in vertices) / n,
        )

    def is_convex(self, ring: Ring) -> bool:
        """True when every turn along the ring bends the same way."""
        vertices = self._distinct_vertices(ring)
        n = len(vertices)
        if n < 3:
            return False

        sign = 0
        for i in range(n):
            cross = self._cross(vertices[i], vertices[(i + 1) % n], vertices[(i + 2) % n])
            if cross == 0:
                continue
            current = 1 if cross > 0 else -1
            if sign == 0:
                sign = current
            elif current != sign:
                return False

        # A pentagram turns consistently but is not simple
        return sign != 0 and not self.self_intersects(ring)

    def self_intersects(self, ring: Ring) -> bool:
        """True when any two non-adjacent edges touch or cross.

        Adjacent edges that fold back onto each other (a spike) also count.
        Every edge pair is tested, which is fine for parcel-sized rings.
        """
        vertices = self._distinct_vertices(ring)
        n = len(vertices)
        if n < 3:
            return False

        edges = [(vertices[i], vertices[(i + 1) % n]) for i in range(n)]

        for i in range(n):
            a1, a2 = edges[i]
            b1, b2 = edges[(i + 1) % n]
            if self._cross(a1, a2, b2) == 0 and self._dot(a1, a2, b1, b2) < 0:
                return True

        if n < 4:
            return False

        for i in range(n):
            for j in range(i + 2, n):
                if i == 0 and j == n - 1:
                    continue
                if self._segments_intersect(*edges[i], *edges[j]):
                    return True
        return False

    def equals(self, a: Ring, b: Ring, tolerance: Optional[float] = None) -> bool:
        """True when both rings bound the same region.

        The comparison ignores the starting vertex, the winding direction,
        repeated points and collinear midpoints.
        """
        tol = self.tolerance if tolerance is None else tolerance
        va = self._canonical_vertices(a, tol)
        vb = self._canonical_vertices(b, tol)

        if len(va) != len(vb):
            return False
        n = len(va)
        if n == 0:
            return True

        for candidate in (vb, vb[::-1]):
            for offset in range(n):
                if all(
                    self._close(va[i], candidate[(i + offset) % n], tol)
                    for i in range(n)
                ):
                    return True
        return False

    def intersection_area(self, a: Ring, b: Ring) -> Optional[float]:
        """Area in square metres shared by both rings, or None if disjoint.

        Both rings are projected around ``a`` so the result is directly
        comparable with ``area(a)``.
        """
        origin = self._origin(a)
        poly_a = self._to_shapely(a, origin)
        poly_b = self._to_shapely(b, origin)
        if poly_a is None or poly_b is None:
            return None
        if poly_a.is_empty or poly_b.is_empty or poly_a.area == 0:
            return None
        if not poly_a.intersects(poly_b):
            return None
        return float(poly_a.intersection(poly_b).area)

    def contains_point(self, ring: Ring, lng: float, lat: float) -> bool:
        if len(ring.vertices) < 3:
            return False
        polygon = Polygon(ring.closed().coordinates)
        if not polygon.is_valid:
            polygon = polygon.buffer(0)
        return bool(polygon.contains(Point(lng, lat)))

    def aspect_ratio(self, ring: Ring) -> float:
        """Long side over short side of the metric bounding box."""
        if not ring.coordinates:
            return math.inf
        min_lng, min_lat, max_lng, max_lat = ring.bounds
        lat0 = math.radians((min_lat + max_lat) / 2)
        width = EARTH_RADIUS_M * math.radians(max_lng - min_lng) * math.cos(lat0)
        height = EARTH_RADIUS_M * math.radians(max_lat - min_lat)
        if min(width, height) <= 0:
            return math.inf
        return max(width, height) / min(width, height)

    def bboxes_intersect(self, a: Ring, b: Ring) -> bool:
        if not a.coordinates or not b.coordinates:
            return False
        a_min_lng, a_min_lat, a_max_lng, a_max_lat = a.bounds
        b_min_lng, b_min_lat, b_max_lng, b_max_lat = b.bounds
        return not (
            a_max_lng < b_min_lng
            or a_min_lng > b_max_lng
            or a_max_lat < b_min_lat
            or a_min_lat > b_max_lat
        )

    @staticmethod
    def haversine_distance(start: Coordinate, end: Coordinate) -> float:
        lng1, lat1 = map(math.radians, start)
        lng2, lat2 = map(math.radians, end)
        dlat = lat2 - lat1
        dlng = lng2 - lng1
        h = (
            math.sin(dlat / 2) ** 2
            + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
        )
        return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    def _origin(self, ring: Ring) -> Coordinate:
        if not ring.coordinates:
            return (0.0, 0.0)
        min_lng, min_lat, max_lng, max_lat = ring.bounds
        return ((min_lng + max_lng) / 2, (min_lat + max_lat) / 2)

    def _project(self, point: Coordinate, origin: Coordinate) -> Coordinate:
        lng0, lat0 = origin
        x = EARTH_RADIUS_M * math.radians(point[0] - lng0) * math.cos(math.radians(lat0))
        y = EARTH_RADIUS_M * math.radians(point[1] - lat0)
        return (x, y)

    def _to_shapely(self, ring: Ring, origin: Coordinate):
        """Projected Shapely geometry for the ring, repaired if invalid."""
        if len(self._distinct_vertices(ring)) < 3:
            return None
        projected = [self._project(p, origin) for p in ring.closed().coordinates]
        polygon = Polygon(projected)
        if not polygon.is_valid:
            polygon = polygon.buffer(0)
        return polygon

    def _distinct_vertices(self, ring: Ring) -> list[Coordinate]:
        """Vertices with consecutive repeats (and the closing point) removed."""
        result: list[Coordinate] = []
        for point in ring.vertices:
            if not result or point != result[-1]:
                result.append(point)
        while len(result) > 1 and result[0] == result[-1]:
            result.pop()
        return result

    def _canonical_vertices(self, ring: Ring, tol: float) -> list[Coordinate]:
        vertices: list[Coordinate] = []
        for point in self._distinct_vertices(ring):
            if not vertices or not self._close(point, vertices[-1], tol):
                vertices.append(point)
        while len(vertices) > 1 and self._close(vertices[0], vertices[-1], tol):
            vertices.pop()

        changed = True
        while changed and len(vertices) > 3:
            changed = False
            n = len(vertices)
            for i in range(n):
                prev_pt, pt, next_pt = vertices[i - 1], vertices[i], vertices[(i + 1) % n]
                if abs(self._cross(prev_pt, pt, next_pt)) <= tol * tol:
                    del vertices[i]
                    changed = True
                    break
        return vertices

    @staticmethod
    def _close(p: Coordinate, q: Coordinate, tol: float) -> bool:
        return abs(p[0] - q[0]) <= tol and abs(p[1] - q[1]) <= tol

    @staticmethod
    def _cross(a: Coordinate, b: Coordinate, c: Coordinate) -> float:
        """Z component of (b - a) x (c - b); the sign gives the turn direction."""
        return (b[0] - a[0]) * (c[1] - b[1]) - (b[1] - a[1]) * (c[0] - b[0])

    @staticmethod
    def _dot(a1: Coordinate, a2: Coordinate, b1: Coordinate, b2: Coordinate) -> float:
        return (a2[0] - a1[0]) * (b2[0] - b1[0]) + (a2[1] - a1[1]) * (b2[1] - b1[1])

    @staticmethod
    def _orientation(a: Coordinate, b: Coordinate, c: Coordinate) -> int:
        value = (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])
        if value > 0:
            return 1
        if value < 0:
            return -1
        return 0

    @staticmethod
    def _on_segment(a: Coordinate, b: Coordinate, p: Coordinate) -> bool:
        return (
            min(a[0], b[0]) <= p[0] <= max(a[0], b[0])
            and min(a[1], b[1]) <= p[1] <= max(a[1], b[1])
        )

    def _segments_intersect(
        self,
        p1: Coordinate,
        p2: Coordinate,
        p3: Coordinate,
        p4: Coordinate,
    ) -> bool:
        d1 = self._orientation(p3, p4, p1)
        d2 = self._orientation(p3, p4, p2)
        d3 = self._orientation(p1, p2, p3)
        d4 = self._orientation(p1, p2, p4)

        if d1 * d2 < 0 and d3 * d4 < 0:
            return True

        if d1 == 0 and self._on_segment(p3, p4, p1):
            return True
        if d2 == 0 and self._on_segment(p3, p4, p2):
            return True
        if d3 == 0 and self._on_segment(p1, p2, p3):
            return True
        if d4 == 0 and self._on_segment(p1, p2, p4):
            return True
        return False
