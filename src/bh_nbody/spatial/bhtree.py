"""
Barnes-Hut quadtree for gravitational force approximation.

The quadtree recursively subdivides the universe into quadrants. Every
internal node carries the total mass and mass-weighted centroid of its
subtree, so a distant cluster can stand in as a single pseudo-body and the
per-step force computation drops from O(n^2) to O(n log n).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Union

from ..body import EPS, Body, G, PointMass
from ..validation import validate_max_depth
from .quad import Quad

MAX_DEPTH = 64
"""Depth at which leaves stop subdividing and absorb coincident bodies."""


@dataclass
class EmptyNode:
    """A region containing no bodies."""

    quad: Quad


@dataclass
class LeafNode:
    """
    A region holding one body.

    Attributes:
        quad: Region covered by this node
        members: Snapshots stored here. Holds more than one entry only for
            coincident bodies at MAX_DEPTH.
        centroid: Aggregate of members
    """

    quad: Quad
    members: List[PointMass]
    centroid: PointMass


@dataclass
class InternalNode:
    """
    A subdivided region.

    Attributes:
        quad: Region covered by this node
        centroid: Pseudo-body: total mass at the mass-weighted centroid
        children: Four subtrees in Quadrant order [NW, NE, SW, SE]
    """

    quad: Quad
    centroid: PointMass
    children: List[TreeNode] = field(default_factory=list)


TreeNode = Union[EmptyNode, LeafNode, InternalNode]


class BHTree:
    """
    Barnes-Hut quadtree over one snapshot of the bodies.

    The tree is rebuilt from scratch every timestep. Insertion mutates shared
    nodes and is not thread-safe; concurrent builders must hold a lock.
    Force queries only read the tree and may run concurrently once the
    build is complete.

    Usage:
        tree = BHTree(Quad(0, 0, 2 * radius), theta=0.5)
        for body in bodies:
            if body.is_in(tree.quad):
                tree.insert(body)

        for body in bodies:
            body.reset_force()
            tree.update_force(body)

    The theta parameter controls the accuracy/speed tradeoff:
    - theta = 0: Every leaf is visited (matches pairwise summation)
    - theta = 0.5: Good balance (recommended)
    - theta = 1.0+: Fast but less accurate
    """

    def __init__(
        self,
        quad: Quad,
        theta: float = 0.5,
        gravity: float = G,
        softening: float = EPS,
        max_depth: int = MAX_DEPTH,
    ):
        """
        Initialize an empty tree.

        Args:
            quad: Region covered by the root
            theta: Opening angle threshold (0 = no approximation)
            gravity: Gravitational constant used for force queries
            softening: Term added to squared distances in force queries
            max_depth: Depth at which leaves absorb further bodies
        """
        self.quad = quad
        self.theta = theta
        self.gravity = gravity
        self.softening = softening
        self.max_depth = validate_max_depth(max_depth)
        self.root: TreeNode = EmptyNode(quad)
        self.body_count = 0

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def insert(self, body: Body) -> None:
        """Insert a body. The body must lie within the root quad."""
        self.root = self._insert_into(self.root, body.snapshot(), 0)
        self.body_count += 1

    def _insert_into(self, node: TreeNode, point: PointMass, depth: int) -> TreeNode:
        """Insert point into the subtree rooted at node, returning its new root."""
        if isinstance(node, EmptyNode):
            return LeafNode(node.quad, [point], PointMass(point.x, point.y, point.mass))

        if isinstance(node, LeafNode):
            if depth >= self.max_depth:
                node.members.append(point)
                node.centroid = PointMass.combine(node.centroid, point)
                return node

            # Demote the existing members into a fresh subdivision
            internal = InternalNode(
                node.quad,
                node.centroid,
                [EmptyNode(child) for child in node.quad.children()],
            )
            for member in node.members:
                self._insert_into_child(internal, member, depth)
            node = internal

        node.centroid = PointMass.combine(node.centroid, point)
        self._insert_into_child(node, point, depth)
        return node

    def _insert_into_child(self, node: InternalNode, point: PointMass, depth: int) -> None:
        """Route point into the child quadrant that contains it."""
        index = node.quad.locate(point.x, point.y)
        node.children[index] = self._insert_into(node.children[index], point, depth + 1)

    # -------------------------------------------------------------------------
    # Force evaluation
    # -------------------------------------------------------------------------

    def update_force(self, body: Body) -> None:
        """
        Accumulate the approximate net force of the tree on body.

        Internal nodes with s/d < theta act as one pseudo-body, where s is
        the node's side length and d the distance from body to the node's
        centroid. Otherwise the walk descends into the children. Leaf
        entries originating from body itself are skipped by identity.

        Args:
            body: Body whose fx, fy accumulators receive the force
        """
        self._update_force(self.root, body)

    def _update_force(self, node: TreeNode, body: Body) -> None:
        """Recursively accumulate force contribution from node."""
        if isinstance(node, EmptyNode):
            return

        if isinstance(node, LeafNode):
            for member in node.members:
                if member.source is not body:
                    body.add_force(member, self.gravity, self.softening)
            return

        centroid = node.centroid
        dist = math.hypot(centroid.x - body.x, centroid.y - body.y)

        # Barnes-Hut criterion: s/d < theta
        if dist > 0 and node.quad.length / dist < self.theta:
            body.add_force(centroid, self.gravity, self.softening)
            return

        for child in node.children:
            self._update_force(child, body)

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    @property
    def total_mass(self) -> float:
        """Total mass stored in the tree."""
        if isinstance(self.root, EmptyNode):
            return 0.0
        return self.root.centroid.mass

    @property
    def centroid(self) -> Optional[tuple[float, float]]:
        """Mass-weighted centroid of all stored bodies, or None if empty."""
        if isinstance(self.root, EmptyNode):
            return None
        return self.root.centroid.x, self.root.centroid.y

    def leaves(self) -> Iterator[LeafNode]:
        """Iterate over leaf nodes in depth-first, Quadrant order."""
        stack: list[TreeNode] = [self.root]
        while stack:
            node = stack.pop()
            if isinstance(node, LeafNode):
                yield node
            elif isinstance(node, InternalNode):
                stack.extend(reversed(node.children))

    def depth(self) -> int:
        """Height of the tree (0 for an empty tree or a single leaf)."""
        return self._depth(self.root)

    def _depth(self, node: TreeNode) -> int:
        if isinstance(node, InternalNode):
            return 1 + max(self._depth(child) for child in node.children)
        return 0

    @classmethod
    def from_bodies(
        cls,
        bodies: Sequence[Body],
        radius: float,
        theta: float = 0.5,
        gravity: float = G,
        softening: float = EPS,
        max_depth: int = MAX_DEPTH,
    ) -> BHTree:
        """
        Build a tree over the universe square of the given radius.

        Bodies outside the square are skipped.

        Args:
            bodies: Bodies to insert, in order
            radius: Half the side of the universe square centred at the origin
            theta: Opening angle threshold
            gravity: Gravitational constant
            softening: Term added to squared distances
            max_depth: Depth at which leaves absorb further bodies

        Returns:
            BHTree with every contained body inserted
        """
        tree = cls(
            Quad(0.0, 0.0, 2 * radius),
            theta=theta,
            gravity=gravity,
            softening=softening,
            max_depth=max_depth,
        )
        for body in bodies:
            if body.is_in(tree.quad):
                tree.insert(body)
        return tree


__all__ = [
    "MAX_DEPTH",
    "BHTree",
    "EmptyNode",
    "LeafNode",
    "InternalNode",
    "TreeNode",
]
