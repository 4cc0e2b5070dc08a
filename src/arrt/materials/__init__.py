"""Material definitions and the name-to-id material table."""

from .material import Material, MaterialMap, load_materials, parse_color

__all__ = ["Material", "MaterialMap", "load_materials", "parse_color"]
