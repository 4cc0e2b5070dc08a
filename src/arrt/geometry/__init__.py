"""Geometry module for shape primitives and spatial acceleration.

This module provides geometric primitives and intersection algorithms:

Components:
    primitive: Surfel hit record and the Primitive protocol
    aabb: Axis-aligned bounding boxes and the slab test
    sphere: Sphere primitive
    plane: Infinite plane primitive
    mesh: Triangle meshes, the SMF loader and the mesh library
    instance: Transformed references to library meshes
    superquadric: Superquadric tessellation
    bpatch: Bicubic Bezier patch files and tessellation
    bvh: Bounding volume hierarchy over bounded primitives

Ray-object intersection follows the pattern:
    surfel = shape.intersect(ray, t_range)  # Surfel or None
"""

from .aabb import AABB, merge, merge_all
from .bvh import Bvh
from .instance import Instance
from .mesh import Mesh, MeshLibrary, load_mesh
from .plane import Plane
from .primitive import Primitive, Surfel
from .sphere import Sphere

__all__ = [
    "AABB",
    "merge",
    "merge_all",
    "Bvh",
    "Instance",
    "Mesh",
    "MeshLibrary",
    "load_mesh",
    "Plane",
    "Primitive",
    "Surfel",
    "Sphere",
]
