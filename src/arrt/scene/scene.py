"""Scene: materials, lights and the factory for cameras and objects.

A Scene is built from a SceneConfig and a MaterialMap. Construction checks
that every material an object refers to exists, so a bad reference fails
before any ray is traced. ``make_camera()`` and ``make_objects()`` are
pure functions of the configuration.

Example:
    >>> from arrt.scene.scene import Scene
    >>> scene = Scene.from_file("scenes/spheres.yaml")  # doctest: +SKIP
    >>> objects = scene.make_objects()  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import os

from arrt.camera.pinhole import Camera
from arrt.core.ray import Vec3
from arrt.geometry.bpatch import read_bpt, tessellate_bpatch
from arrt.geometry.bvh import Bvh
from arrt.geometry.instance import Instance
from arrt.geometry.mesh import MeshLibrary
from arrt.geometry.plane import Plane
from arrt.geometry.primitive import Primitive, Surfel
from arrt.geometry.sphere import Sphere
from arrt.geometry.superquadric import tessellate_superquadric
from arrt.materials.material import Material, MaterialMap, load_materials
from arrt.scene.config import (
    MATERIALS_FILE,
    BPatchConfig,
    LightConfig,
    ModelConfig,
    PlaneConfig,
    SceneConfig,
    SceneError,
    SphereConfig,
    SuperQuadricConfig,
    load_scene_config,
)

logger = logging.getLogger(__name__)


class Scene:
    """Validated scene description.

    Attributes:
        config: The parsed configuration.
        materials: The material table.
    """

    def __init__(self, config: SceneConfig, materials: MaterialMap | None = None) -> None:
        """Create a scene.

        Args:
            config: The scene configuration.
            materials: Material table. When omitted, the inline table from
                ``config.materials`` is used, or ``materials.yaml`` next to
                the scene file is loaded.

        Raises:
            SceneError: If an object refers to an unknown material or the
                material table is malformed.
            FileNotFoundError: If ``materials.yaml`` is needed but missing.
        """
        self.config = config
        if materials is None:
            if config.materials is not None:
                try:
                    materials = MaterialMap.from_list(config.materials)
                except ValueError as e:
                    raise SceneError(f"Invalid material table: {e}") from e
            else:
                try:
                    materials = load_materials(os.path.join(config.base_dir, MATERIALS_FILE))
                except ValueError as e:
                    raise SceneError(f"Invalid material table: {e}") from e
        self.materials = materials

        unknown = sorted(
            {obj.material for obj in config.objects if obj.material not in materials}
        )
        if unknown:
            raise SceneError(
                f"Objects reference unknown materials {unknown}; "
                f"known materials are {materials.names()}"
            )

    @classmethod
    def from_file(cls, path: str | os.PathLike) -> Scene:
        return cls(load_scene_config(path))

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    @property
    def bgcolor(self) -> Vec3:
        return self.config.bgcolor

    @property
    def ambient(self) -> Vec3:
        return self.config.ambient

    @property
    def lights(self) -> list[LightConfig]:
        return self.config.lights

    def material(self, material_id: int) -> Material:
        return self.materials.get_material(material_id)

    def material_for_surfel(self, surfel: Surfel) -> Material:
        return self.materials.get_material(surfel.material_id)

    # =========================================================================
    # Factories
    # =========================================================================

    def make_camera(self) -> Camera:
        return Camera(self.config.camera, self.width, self.height)

    def make_objects(self) -> list[Primitive]:
        """Build the traceable objects.

        Unbounded objects (planes) come first, followed by a single BVH
        holding every bounded object.

        Raises:
            FileNotFoundError: If a mesh or patch file is missing.
            ValueError: If a mesh or patch file is malformed.
        """
        library = MeshLibrary()
        unbounded: list[Primitive] = []
        bounded: list[Primitive] = []

        for obj in self.config.objects:
            material_id = self.materials.get_material_id(obj.material)
            if isinstance(obj, PlaneConfig):
                unbounded.append(Plane(obj.point, obj.normal, material_id))
            elif isinstance(obj, SphereConfig):
                bounded.append(Sphere(obj.center, obj.radius, material_id))
            elif isinstance(obj, ModelConfig):
                handle = library.load(self.config.resolve_mesh_path(obj.mesh))
                bounded.append(Instance(library, handle, material_id, obj.transform))
            elif isinstance(obj, SuperQuadricConfig):
                mesh = tessellate_superquadric(obj.a, obj.e1, obj.e2, obj.vslices, obj.hslices)
                handle = library.add(mesh)
                bounded.append(Instance(library, handle, material_id, obj.transform))
            elif isinstance(obj, BPatchConfig):
                path = self.config.resolve_mesh_path(obj.fpath)
                mesh = tessellate_bpatch(
                    read_bpt(path), obj.slices, obj.flip_normals, name=os.path.basename(path)
                )
                handle = library.add(mesh)
                bounded.append(Instance(library, handle, material_id, obj.transform))
            else:
                raise SceneError(f"Unsupported object configuration {obj!r}")

        bvh = Bvh(bounded, axis=0)
        logger.info(
            "Built %d unbounded objects and a BVH over %d bounded objects (depth %d, %d meshes)",
            len(unbounded),
            len(bounded),
            bvh.depth(),
            len(library),
        )
        return unbounded + [bvh]
