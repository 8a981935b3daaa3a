"""
Scene description language parser.

Supports a JSON (or YAML, when PyYAML is installed) scene description with:
- Camera configuration
- Render settings
- Textures and materials library
- Objects (shapes with materials, optionally flipped, rotated, translated)
- Lights (emitting objects that are also importance-sampling targets)

Example scene file:
```yaml
camera:
  look_from: [278, 278, -800]
  look_at: [278, 278, 0]
  vfov: 40

render:
  width: 200
  height: 200
  samples: 64
  seed: 7

materials:
  white:
    type: lambertian
    albedo: [0.73, 0.73, 0.73]
  lamp:
    type: diffuse_light
    emit: [15, 15, 15]

objects:
  - type: xz_rect
    bounds: [0, 555, 0, 555]
    k: 0
    material: white
  - type: box
    p0: [0, 0, 0]
    p1: [165, 330, 165]
    material: white
    rotate_y: 15
    translate: [265, 0, 295]

lights:
  - type: xz_rect
    bounds: [213, 343, 227, 332]
    k: 554
    flip: true
    material: lamp
```
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Any, Optional, Tuple
import json
import logging

from .vec3 import Vec3, Point3, Color
from .camera import Camera
from .shapes import (
    Hittable, Sphere, XYRect, XZRect, YZRect, FlipNormals, Cuboid, Translate, RotateY
)
from .volumes import ConstantMedium
from .materials import Material, Lambertian, Metal, Dielectric, DiffuseLight, Isotropic
from .textures import Texture, SolidColor, CheckerTexture, NoiseTexture
from .renderer import RenderSettings
from .scene import Scene

logger = logging.getLogger(__name__)

RECT_TYPES = {
    'xy_rect': XYRect,
    'xz_rect': XZRect,
    'yz_rect': YZRect,
}


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


class SceneParser:
    """Parser for scene description files."""

    def __init__(self):
        self.textures: Dict[str, Texture] = {}
        self.materials: Dict[str, Material] = {}
        self.scene: Scene = Scene()
        self.camera: Optional[Camera] = None
        self.settings: Optional[RenderSettings] = None

    def parse_file(self, filepath: str) -> Tuple[Scene, Camera, RenderSettings]:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            Tuple of (scene, camera, settings)
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()

        if path.suffix in ('.yaml', '.yml'):
            data = self._load_yaml(content)
        else:
            try:
                data = json.loads(content)
            except json.JSONDecodeError as exc:
                if path.suffix == '.json':
                    raise SceneParseError(f"Invalid JSON in {filepath}: {exc}") from exc
                data = self._load_yaml(content)

        if not isinstance(data, dict):
            raise SceneParseError(f"Scene file must contain a mapping, got {type(data).__name__}")

        logger.debug("Loaded scene description from %s", filepath)
        return self.parse_dict(data)

    @staticmethod
    def _load_yaml(content: str) -> Any:
        try:
            import yaml
        except ImportError as exc:
            raise SceneParseError("PyYAML not installed. Install with: pip install pyyaml") from exc
        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise SceneParseError(f"Invalid YAML: {exc}") from exc

    def parse_dict(self, data: Dict[str, Any]) -> Tuple[Scene, Camera, RenderSettings]:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (scene, camera, settings)
        """
        # Render settings first: the camera defaults to the image aspect ratio
        if 'render' in data:
            self._parse_settings(data['render'])
        else:
            self.settings = RenderSettings()

        if 'textures' in data:
            self._parse_textures(data['textures'])

        # Parse materials before objects (objects reference them)
        if 'materials' in data:
            self._parse_materials(data['materials'])

        if 'objects' in data:
            for obj_data in data['objects']:
                self.scene.add(self._parse_object(obj_data))

        if 'lights' in data:
            self._parse_lights(data['lights'])

        if 'camera' in data:
            self._parse_camera(data['camera'])
        else:
            self.camera = Camera(
                look_from=Point3(0, 0, 5),
                look_at=Point3(0, 0, 0),
                vfov=60,
                aspect_ratio=self.settings.width / self.settings.height
            )

        logger.info(
            "Parsed scene: %d objects, %d materials",
            len(self.scene), len(self.materials)
        )
        return self.scene, self.camera, self.settings

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from various formats."""
        if isinstance(data, (int, float)):
            return Vec3(float(data), float(data), float(data))
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
            return Vec3(float(data[0]), float(data[1]), float(data[2]))
        elif isinstance(data, dict):
            return Vec3(
                float(data.get('x', 0)),
                float(data.get('y', 0)),
                float(data.get('z', 0))
            )
        else:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from various formats."""
        if isinstance(data, (int, float)):
            return Color(float(data), float(data), float(data))
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Color must have 3 components, got {len(data)}")
            return Color(float(data[0]), float(data[1]), float(data[2]))
        elif isinstance(data, dict):
            return Color(
                float(data.get('r', 0)),
                float(data.get('g', 0)),
                float(data.get('b', 0))
            )
        elif isinstance(data, str):
            # Handle hex colors
            if data.startswith('#'):
                hex_color = data[1:]
                if len(hex_color) == 6:
                    r = int(hex_color[0:2], 16) / 255.0
                    g = int(hex_color[2:4], 16) / 255.0
                    b = int(hex_color[4:6], 16) / 255.0
                    return Color(r, g, b)
            raise SceneParseError(f"Cannot parse color from string: {data}")
        else:
            raise SceneParseError(f"Cannot parse Color from: {data}")

    def _parse_textures(self, textures_data: Dict[str, Any]) -> None:
        for name, tex_data in textures_data.items():
            self.textures[name] = self._build_texture(tex_data)

    def _build_texture(self, tex_data: Dict[str, Any]) -> Texture:
        tex_type = tex_data.get('type', 'solid').lower()

        if tex_type == 'solid':
            return SolidColor(self._parse_color(tex_data.get('color', [0.5, 0.5, 0.5])))

        elif tex_type == 'checker':
            odd = self._get_texture(tex_data.get('odd', [0.2, 0.3, 0.1]))
            even = self._get_texture(tex_data.get('even', [0.9, 0.9, 0.9]))
            frequency = float(tex_data.get('frequency', 10.0))
            return CheckerTexture(odd, even, frequency)

        elif tex_type == 'noise':
            scale = float(tex_data.get('scale', 1.0))
            color = self._parse_color(tex_data.get('color', [1, 1, 1]))
            return NoiseTexture(scale, color)

        else:
            raise SceneParseError(f"Unknown texture type: {tex_type}")

    def _get_texture(self, ref: Any) -> Texture:
        """Resolve a texture name, inline texture definition, or plain color."""
        if isinstance(ref, str) and not ref.startswith('#'):
            if ref not in self.textures:
                raise SceneParseError(f"Unknown texture: {ref}")
            return self.textures[ref]
        if isinstance(ref, dict) and 'type' in ref:
            return self._build_texture(ref)
        return SolidColor(self._parse_color(ref))

    def _parse_materials(self, materials_data: Dict[str, Any]) -> None:
        """Parse materials section."""
        for name, mat_data in materials_data.items():
            self.materials[name] = self._build_material(mat_data)

    def _build_material(self, mat_data: Dict[str, Any]) -> Material:
        mat_type = mat_data.get('type', 'lambertian').lower()

        if mat_type == 'lambertian':
            return Lambertian(self._get_texture(mat_data.get('albedo', [0.5, 0.5, 0.5])))

        elif mat_type == 'metal':
            albedo = self._parse_color(mat_data.get('albedo', [0.8, 0.8, 0.8]))
            fuzz = float(mat_data.get('fuzz', 0.0))
            return Metal(albedo, fuzz)

        elif mat_type == 'dielectric':
            return Dielectric(float(mat_data.get('ior', 1.5)))

        elif mat_type == 'diffuse_light':
            return DiffuseLight(self._get_texture(mat_data.get('emit', [1, 1, 1])))

        elif mat_type == 'isotropic':
            return Isotropic(self._get_texture(mat_data.get('albedo', [1, 1, 1])))

        else:
            raise SceneParseError(f"Unknown material type: {mat_type}")

    def _get_material(self, mat_ref: Any) -> Optional[Material]:
        """Get a material by name or inline definition."""
        if mat_ref is None:
            return None
        if isinstance(mat_ref, str):
            if mat_ref not in self.materials:
                raise SceneParseError(f"Unknown material: {mat_ref}")
            return self.materials[mat_ref]
        elif isinstance(mat_ref, dict):
            return self._build_material(mat_ref)
        else:
            raise SceneParseError(f"Invalid material reference: {mat_ref}")

    def _parse_object(self, obj_data: Dict[str, Any]) -> Hittable:
        """Build one object, then apply its flip/rotate/translate modifiers."""
        obj_type = obj_data.get('type', 'sphere').lower()

        if obj_type == 'constant_medium':
            if 'boundary' not in obj_data:
                raise SceneParseError("constant_medium requires a 'boundary' object")
            boundary = self._parse_object(obj_data['boundary'])
            density = float(obj_data.get('density', 0.01))
            albedo = self._get_texture(obj_data.get('albedo', [1, 1, 1]))
            try:
                obj: Hittable = ConstantMedium(boundary, density, albedo)
            except ValueError as exc:
                raise SceneParseError(str(exc)) from exc
            return self._apply_transforms(obj, obj_data)

        material = self._get_material(obj_data.get('material'))

        if obj_type == 'sphere':
            center = self._parse_vec3(obj_data.get('center', [0, 0, 0]))
            radius = float(obj_data.get('radius', 1.0))
            obj = Sphere(center, radius, material)

        elif obj_type in RECT_TYPES:
            bounds = obj_data.get('bounds')
            if not isinstance(bounds, (list, tuple)) or len(bounds) != 4:
                raise SceneParseError(f"{obj_type} requires 'bounds' with 4 numbers")
            a0, a1, b0, b1 = (float(b) for b in bounds)
            k = float(obj_data.get('k', 0.0))
            obj = RECT_TYPES[obj_type](a0, a1, b0, b1, k, material)

        elif obj_type == 'box':
            p0 = self._parse_vec3(obj_data.get('p0', [0, 0, 0]))
            p1 = self._parse_vec3(obj_data.get('p1', [1, 1, 1]))
            obj = Cuboid(p0, p1, material)

        else:
            raise SceneParseError(f"Unknown object type: {obj_type}")

        return self._apply_transforms(obj, obj_data)

    def _apply_transforms(self, obj: Hittable, obj_data: Dict[str, Any]) -> Hittable:
        if obj_data.get('flip', False):
            obj = FlipNormals(obj)
        if 'rotate_y' in obj_data:
            obj = RotateY(obj, float(obj_data['rotate_y']))
        if 'translate' in obj_data:
            obj = Translate(obj, self._parse_vec3(obj_data['translate']))
        return obj

    def _parse_lights(self, lights_data: list) -> None:
        """Parse lights section. Each light is rendered and importance sampled."""
        for light_data in lights_data:
            light = self._parse_object(light_data)
            try:
                self.scene.add_light(light)
            except ValueError as exc:
                raise SceneParseError(f"Invalid light: {exc}") from exc
            self.scene.add(light)

    def _parse_camera(self, camera_data: Dict[str, Any]) -> None:
        """Parse camera section."""
        look_from = self._parse_vec3(camera_data.get('look_from', [0, 0, 5]))
        look_at = self._parse_vec3(camera_data.get('look_at', [0, 0, 0]))
        vup = self._parse_vec3(camera_data.get('vup', [0, 1, 0]))
        vfov = float(camera_data.get('vfov', 60))
        default_aspect = self.settings.width / self.settings.height
        aspect_ratio = float(camera_data.get('aspect_ratio', default_aspect))
        aperture = float(camera_data.get('aperture', 0.0))
        focus_dist = float(camera_data.get('focus_dist', 10.0))

        self.camera = Camera(
            look_from=look_from,
            look_at=look_at,
            vup=vup,
            vfov=vfov,
            aspect_ratio=aspect_ratio,
            aperture=aperture,
            focus_dist=focus_dist
        )

    def _parse_settings(self, settings_data: Dict[str, Any]) -> None:
        """Parse render settings section."""
        seed = settings_data.get('seed')
        background = settings_data.get('background')
        if background is not None:
            self.scene.background = self._parse_color(background)
        try:
            self.settings = RenderSettings(
                width=int(settings_data.get('width', 800)),
                height=int(settings_data.get('height', 600)),
                samples_per_pixel=int(settings_data.get('samples', 100)),
                max_depth=int(settings_data.get('max_depth', 50)),
                num_threads=int(settings_data.get('threads', 0)),
                seed=int(seed) if seed is not None else None,
                share_bvh=bool(settings_data.get('share_bvh', False)),
                gamma=float(settings_data.get('gamma', 2.0))
            )
        except ValueError as exc:
            raise SceneParseError(f"Invalid render settings: {exc}") from exc


def load_scene(filepath: str) -> Tuple[Scene, Camera, RenderSettings]:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(data: Dict[str, Any]) -> Tuple[Scene, Camera, RenderSettings]:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_dict(data)
