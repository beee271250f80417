"""
Bounding Volume Hierarchy (BVH) for accelerating ray-object intersection.

The BVH is a binary tree stored as a flat list of nodes. Interior nodes refer
to their children by position in that list, and leaves refer to exactly one
primitive by its position in the scene, so the tree never owns or copies
geometry.

The tree is built once, top-down, before rendering starts. Traversal only
reads it and is safe to run from many rendering tasks at once.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Optional

from .ray import Ray
from .scene import Scene
from .shapes import AABB, HitRecord, Sphere, closest_hit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BVHNode:
    """A node in the flattened BVH.

    Interior nodes have ``left``/``right`` node indices; leaf nodes have a
    ``primitive_index`` into the scene and no children.
    """
    bbox: AABB
    left: int = -1
    right: int = -1
    primitive_index: int = -1

    @property
    def is_leaf(self) -> bool:
        return self.primitive_index >= 0


class BVH:
    """Bounding Volume Hierarchy acceleration structure.

    Turns the O(n) per-ray search over all primitives into an O(log n)
    search on average. It only filters: exact intersection is still done by
    each candidate primitive.
    """

    def __init__(self, nodes: List[BVHNode], primitive_count: int):
        self.nodes = nodes
        self.primitive_count = primitive_count

    @classmethod
    def build(cls, scene: Scene) -> BVH:
        """Build a BVH over every primitive in the scene.

        Each primitive's ``bvh_index`` is set to the index of the leaf that
        references it, and the scene is frozen.

        Args:
            scene: The scene to accelerate

        Returns:
            The BVH for ``scene``
        """
        boxes = [primitive.bounding_box() for primitive in scene]
        centroids = [box.centroid() for box in boxes]
        nodes: List[Optional[BVHNode]] = []

        def build_node(indices: List[int]) -> int:
            node_index = len(nodes)

            if len(indices) == 1:
                nodes.append(BVHNode(bbox=boxes[indices[0]], primitive_index=indices[0]))
                return node_index

            # Reserve the slot so the parent precedes its children
            nodes.append(None)

            # Sort by centroid along the axis where centroids spread the most
            axis = AABB.from_points(centroids[i] for i in indices).longest_axis()
            indices = sorted(indices, key=lambda i: (centroids[i][axis], i))
            mid = len(indices) // 2

            left = build_node(indices[:mid])
            right = build_node(indices[mid:])
            bbox = AABB.surrounding_box(nodes[left].bbox, nodes[right].bbox)
            nodes[node_index] = BVHNode(bbox=bbox, left=left, right=right)
            return node_index

        if len(scene) > 0:
            build_node(list(range(len(scene))))

        for node_index, node in enumerate(nodes):
            if node.is_leaf:
                scene[node.primitive_index].bvh_index = node_index
        scene.freeze()

        bvh = cls(nodes, len(scene))
        logger.debug(
            "Built BVH over %d primitives: %d nodes, depth %d",
            bvh.primitive_count, bvh.node_count, bvh.depth()
        )
        return bvh

    def traverse(
        self,
        ray: Ray,
        scene: Scene,
        t_min: float = 0.0,
        t_max: float = float('inf')
    ) -> List[Sphere]:
        """Return the primitives whose bounding boxes the ray passes through.

        The result may contain primitives the ray misses, but never leaves out
        one it hits within ``(t_min, t_max)``.
        """
        candidates: List[Sphere] = []
        if not self.nodes:
            return candidates

        stack = [0]
        while stack:
            node = self.nodes[stack.pop()]
            if not node.bbox.hit(ray, t_min, t_max):
                continue
            if node.is_leaf:
                candidates.append(scene[node.primitive_index])
            else:
                stack.append(node.right)
                stack.append(node.left)

        return candidates

    def hit(self, ray: Ray, scene: Scene, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Closest hit among the candidates returned by ``traverse``."""
        return closest_hit(self.traverse(ray, scene, t_min, t_max), ray, t_min, t_max)

    def bounding_box(self) -> Optional[AABB]:
        """Return the bounding box for the entire BVH."""
        if not self.nodes:
            return None
        return self.nodes[0].bbox

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    def depth(self) -> int:
        """Number of levels in the tree (0 for an empty BVH)."""
        if not self.nodes:
            return 0

        deepest = 0
        stack = [(0, 1)]
        while stack:
            index, level = stack.pop()
            deepest = max(deepest, level)
            node = self.nodes[index]
            if not node.is_leaf:
                stack.append((node.left, level + 1))
                stack.append((node.right, level + 1))
        return deepest

    def __len__(self) -> int:
        """Return the number of primitives in the BVH."""
        return self.primitive_count
