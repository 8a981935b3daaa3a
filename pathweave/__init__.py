"""
PathWeave - A Python Monte-Carlo Path Tracer

An offline, physically based renderer with support for:
- Unidirectional path tracing with light importance sampling
- Diffuse, metal, glass and emissive materials
- Constant density participating media (smoke, fog)
- Procedural textures (checker, Perlin marble)
- BVH acceleration
- Thread-parallel rendering split by sample count
"""

__version__ = "0.1.0"
__author__ = "PathWeave Team"

from .vec3 import Vec3, Point3, Color, de_nan
from .ray import Ray
from .onb import ONB
from .shapes import (
    Hittable, HitRecord, AABB, Sphere, XYRect, XZRect, YZRect,
    FlipNormals, HittableList, Cuboid, Translate, RotateY
)
from .volumes import ConstantMedium
from .bvh import BVH, BVHNode, BVHBuildError, build_bvh
from .pdf import PDF, CosinePDF, SpherePDF, HittablePDF, MixturePDF
from .textures import Texture, SolidColor, CheckerTexture, NoiseTexture
from .materials import (
    ScatterRecord, Material, Lambertian, Metal, Dielectric, DiffuseLight, Isotropic
)
from .camera import Camera
from .scene import Scene
from .renderer import Renderer, RenderSettings, MissingMaterialError, render
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
from .scenes import SCENES, build_scene
from .logging_config import setup_logging
