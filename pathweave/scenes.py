"""
Built-in scenes.

Each builder takes the image aspect ratio and returns the camera and
the scene, ready to hand to the renderer.
"""

from __future__ import annotations
from typing import Callable, Dict, Tuple

from .vec3 import Vec3, Color, Point3
from .camera import Camera
from .shapes import (
    Sphere, XYRect, XZRect, YZRect, FlipNormals, Cuboid, Translate, RotateY
)
from .volumes import ConstantMedium
from .materials import Lambertian, DiffuseLight
from .textures import NoiseTexture
from .scene import Scene


def _cornell_camera(aspect_ratio: float) -> Camera:
    return Camera(
        look_from=Point3(278, 278, -800),
        look_at=Point3(278, 278, 0),
        vup=Vec3(0, 1, 0),
        vfov=40.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=10.0
    )


def _cornell_walls(scene: Scene) -> Lambertian:
    """Add the five walls of the Cornell box and return the white material."""
    red = Lambertian(Color(0.65, 0.05, 0.05))
    white = Lambertian(Color(0.73, 0.73, 0.73))
    green = Lambertian(Color(0.12, 0.45, 0.15))

    scene.add(FlipNormals(YZRect(0, 555, 0, 555, 555, green)))   # left
    scene.add(YZRect(0, 555, 0, 555, 0, red))                    # right
    scene.add(FlipNormals(XZRect(0, 555, 0, 555, 555, white)))   # ceiling
    scene.add(XZRect(0, 555, 0, 555, 0, white))                  # floor
    scene.add(FlipNormals(XYRect(0, 555, 0, 555, 555, white)))   # back
    return white


def cornell_box(aspect_ratio: float = 1.0) -> Tuple[Camera, Scene]:
    """The Cornell box with two rotated blocks and a ceiling light."""
    scene = Scene()
    white = _cornell_walls(scene)

    light = DiffuseLight(Color(15, 15, 15))
    scene.add(FlipNormals(XZRect(213, 343, 227, 332, 554, light)))
    scene.add_light(XZRect(213, 343, 227, 332, 554))

    short_block = Cuboid(Point3(0, 0, 0), Point3(165, 165, 165), white)
    scene.add(Translate(RotateY(short_block, -18), Vec3(130, 0, 65)))

    tall_block = Cuboid(Point3(0, 0, 0), Point3(165, 330, 165), white)
    scene.add(Translate(RotateY(tall_block, 15), Vec3(265, 0, 295)))

    return _cornell_camera(aspect_ratio), scene


def cornell_smoke(aspect_ratio: float = 1.0) -> Tuple[Camera, Scene]:
    """The Cornell box with its blocks replaced by white and black smoke."""
    scene = Scene()
    white = _cornell_walls(scene)

    light = DiffuseLight(Color(7, 7, 7))
    scene.add(FlipNormals(XZRect(113, 443, 127, 432, 554, light)))
    scene.add_light(XZRect(113, 443, 127, 432, 554))

    short_block = Translate(
        RotateY(Cuboid(Point3(0, 0, 0), Point3(165, 165, 165), white), -18),
        Vec3(130, 0, 65)
    )
    tall_block = Translate(
        RotateY(Cuboid(Point3(0, 0, 0), Point3(165, 330, 165), white), 15),
        Vec3(265, 0, 295)
    )
    scene.add(ConstantMedium(short_block, 0.01, Color(1, 1, 1)))
    scene.add(ConstantMedium(tall_block, 0.01, Color(0, 0, 0)))

    return _cornell_camera(aspect_ratio), scene


def two_spheres(aspect_ratio: float = 1.0) -> Tuple[Camera, Scene]:
    """A blue diffuse ground sphere under a large emissive sphere."""
    scene = Scene()
    scene.add(Sphere(Point3(0, -10, 0), 10, Lambertian(Color(0.0, 0.0, 0.5))))

    lamp = Sphere(Point3(0, 10, 0), 10, DiffuseLight(Color(4, 4, 4)))
    scene.add(lamp)
    scene.add_light(lamp)

    camera = Camera(
        look_from=Point3(13, 2, 3),
        look_at=Point3(0, 0, 0),
        vup=Vec3(0, 1, 0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=10.0
    )
    return camera, scene


def simple_light(aspect_ratio: float = 1.0) -> Tuple[Camera, Scene]:
    """Marble spheres lit by a single rectangular lamp."""
    scene = Scene()
    marble = Lambertian(NoiseTexture(4.0))
    scene.add(Sphere(Point3(0, -1000, 0), 1000, marble))
    scene.add(Sphere(Point3(0, 2, 0), 2, marble))

    lamp = XYRect(3, 5, 1, 3, -2, DiffuseLight(Color(4, 4, 4)))
    scene.add(lamp)
    scene.add_light(lamp)

    camera = Camera(
        look_from=Point3(30, 2, 3),
        look_at=Point3(0, 0, 0),
        vup=Vec3(0, 1, 0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=10.0
    )
    return camera, scene


SCENES: Dict[str, Callable[[float], Tuple[Camera, Scene]]] = {
    'cornell': cornell_box,
    'smoke': cornell_smoke,
    'spheres': two_spheres,
    'light': simple_light,
}


def build_scene(name: str, aspect_ratio: float = 1.0) -> Tuple[Camera, Scene]:
    """Look up a built-in scene by name.

    Raises:
        KeyError: If no scene has that name
    """
    try:
        builder = SCENES[name]
    except KeyError:
        raise KeyError(f"Unknown scene '{name}'. Available: {', '.join(sorted(SCENES))}") from None
    return builder(aspect_ratio)
