"""A Whitted-style recursive ray tracer.

This package renders YAML scene descriptions with Phong shading, mirror
reflection, refraction and shadows, accelerated by a bounding volume
hierarchy and antialiased by adaptive supersampling:
- Spheres, planes, triangle meshes, superquadrics and Bezier patches
- Point and spot lights with transmissive shadows
- Two-pass rendering over a thread pool

Subpackages:
    core: Vector math, transforms, integrator, tracer and renderer
    geometry: Primitives, bounding boxes and the BVH
    materials: Material definitions and the material table
    scene: Scene files, lights and the scene factory
    camera: Pinhole camera ray generation
    preview: Image export
"""

__version__ = "0.1.0"
