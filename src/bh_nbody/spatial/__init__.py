"""
Spatial data structures for efficient force calculations.

Provides the square region type and the Barnes-Hut quadtree used for
O(n log n) gravitational force approximation.
"""

from .bhtree import MAX_DEPTH, BHTree, EmptyNode, InternalNode, LeafNode, TreeNode
from .quad import Quad, Quadrant

__all__ = [
    "MAX_DEPTH",
    "BHTree",
    "EmptyNode",
    "InternalNode",
    "LeafNode",
    "TreeNode",
    "Quad",
    "Quadrant",
]
