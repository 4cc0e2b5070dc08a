"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Rays, parametric ranges and vector helpers
    matrix: 4x4 affine matrices and angle types
    transform: Translate/rotate/scale object transforms
    integrator: Whitted shading with shadows, reflection and refraction
    tracer: Per-thread trace contexts and statistics
    supersample: Adaptive supersampling of a single pixel
    framebuffer: RGB float image storage
    renderer: Two-pass threaded rendering loop

Only the dependency-free modules are re-exported here; import integrator,
tracer and renderer from their modules directly to avoid import cycles with
the scene package.
"""

from .framebuffer import Framebuffer
from .matrix import Degree, Radian
from .ray import (
    EPSILON,
    FLOAT_MAX,
    Range,
    Ray,
    Vec3,
    as_vec3,
    cross,
    dot,
    in_range,
    length,
    nearly_zero,
    normalize,
    reflect,
    refract,
    vec3,
)
from .transform import Transform

__all__ = [
    "EPSILON",
    "FLOAT_MAX",
    "Range",
    "Ray",
    "Vec3",
    "as_vec3",
    "cross",
    "dot",
    "in_range",
    "length",
    "nearly_zero",
    "normalize",
    "reflect",
    "refract",
    "vec3",
    "Degree",
    "Radian",
    "Transform",
    "Framebuffer",
]
