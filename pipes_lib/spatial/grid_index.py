"""
Uniform grid-based spatial index shared by every pipe grower.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union
import logging
import numpy as np
from ..core.types import Point3D, Direction3D
from ..core.geometry import Segment, TurnMarker, segment_to_segment_distance

logger = logging.getLogger(__name__)

Piece = Union[Segment, TurnMarker]
Cell = Tuple[int, int, int]


class SpatialQueryService(ABC):
    """Scene-wide occupancy queried by all growers."""

    @abstractmethod
    def register(self, piece: Piece) -> None:
        """Add an emitted piece; visible to every later query."""
        pass

    @abstractmethod
    def query_ray(
        self,
        origin: Point3D,
        direction: Direction3D,
        max_distance: float,
        radius: float = 0.0,
        owner: Optional[int] = None,
    ) -> bool:
        """Check whether existing geometry blocks the (thick) ray."""
        pass

    @abstractmethod
    def is_occupied(self, point: Point3D, radius: float = 0.0) -> bool:
        """Check whether a ball of `radius` at `point` touches existing geometry."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Drop all registered geometry."""
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass


class SpatialIndex(SpatialQueryService):
    """
    Uniform 3D grid spatial index over pipe segments and turn markers.

    Append-only: pieces are never removed individually, only by `clear()`.

    Blocking tests treat every piece as thick as the thickest piece
    registered, and never thinner than the query itself, so a segment end
    that later receives a wider turn marker still keeps its clearance.
    """

    def __init__(self, cell_size: float = 4.0):
        """
        Initialize spatial index.

        Parameters
        ----------
        cell_size : float
            Size of grid cells. Should be close to the typical segment length.
        """
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self.cell_size = cell_size
        self.grid: Dict[Cell, Set[int]] = defaultdict(set)
        self.pieces: List[Piece] = []
        self.max_piece_radius = 0.0

    def __len__(self) -> int:
        return len(self.pieces)

    def _get_cell_coords(self, point: np.ndarray) -> Cell:
        """Convert world coordinates to grid cell coordinates."""
        return (
            int(np.floor(point[0] / self.cell_size)),
            int(np.floor(point[1] / self.cell_size)),
            int(np.floor(point[2] / self.cell_size)),
        )

    def _cells_for_box(self, lo: np.ndarray, hi: np.ndarray) -> Iterable[Cell]:
        """All grid cells overlapping the axis-aligned box `lo`-`hi`."""
        c1 = self._get_cell_coords(lo)
        c2 = self._get_cell_coords(hi)

        for i in range(c1[0], c2[0] + 1):
            for j in range(c1[1], c2[1] + 1):
                for k in range(c1[2], c2[2] + 1):
                    yield (i, j, k)

    def register(self, piece: Piece) -> None:
        """Add a piece to the index."""
        a, b = piece.axis()
        lo = np.minimum(a, b) - piece.radius
        hi = np.maximum(a, b) + piece.radius

        piece_id = len(self.pieces)
        self.pieces.append(piece)
        self.max_piece_radius = max(self.max_piece_radius, piece.radius)

        for cell in self._cells_for_box(lo, hi):
            self.grid[cell].add(piece_id)

    def _candidates(self, lo: np.ndarray, hi: np.ndarray) -> Set[int]:
        candidate_ids: Set[int] = set()
        for cell in self._cells_for_box(lo, hi):
            candidate_ids.update(self.grid.get(cell, ()))
        return candidate_ids

    def query_ray(
        self,
        origin: Point3D,
        direction: Direction3D,
        max_distance: float,
        radius: float = 0.0,
        owner: Optional[int] = None,
    ) -> bool:
        """
        Check whether a ray swept with thickness `radius` hits geometry.

        Parameters
        ----------
        origin : Point3D
            Ray start
        direction : Direction3D
            Unit direction of travel
        max_distance : float
            Length of the ray
        radius : float
            Thickness of the swept ray (0 for a thin ray)
        owner : int, optional
            Pipe issuing the query. When given, only that pipe's pieces are
            exempt when they contain the origin.

        Returns
        -------
        bool
            True if any piece lies within ``radius + max(max_piece_radius, radius)``
            of the swept ray. Pieces that already contain the origin are ignored,
            as a physics ray cast ignores colliders it starts inside.
        """
        if not self.pieces:
            return False

        p = origin.to_array()
        q = p + direction.to_array() * max_distance
        reach = radius + max(self.max_piece_radius, radius)
        candidates = self._candidates(np.minimum(p, q) - reach, np.maximum(p, q) + reach)

        for piece_id in candidates:
            piece = self.pieces[piece_id]
            if (owner is None or piece.pipe_id == owner) and piece.contains(p, margin=radius):
                continue

            a, b = piece.axis()
            if segment_to_segment_distance(p, q, a, b) < reach:
                logger.debug(
                    "Ray from %s blocked by %s of pipe %d",
                    origin.to_tuple(), type(piece).__name__, piece.pipe_id,
                )
                return True

        return False

    def is_occupied(self, point: Point3D, radius: float = 0.0) -> bool:
        """Check whether a ball at `point` touches any registered piece."""
        if not self.pieces:
            return False

        p = point.to_array()
        reach = radius + max(self.max_piece_radius, radius)
        for piece_id in self._candidates(p - reach, p + reach):
            piece = self.pieces[piece_id]
            if piece.distance_to_point(p) < reach:
                return True
        return False

    def pieces_for_pipe(self, pipe_id: int) -> List[Piece]:
        """All registered pieces emitted by one pipe, in growth order."""
        return [piece for piece in self.pieces if piece.pipe_id == pipe_id]

    def clear(self) -> None:
        """Remove everything from the index."""
        self.grid.clear()
        self.pieces.clear()
        self.max_piece_radius = 0.0
