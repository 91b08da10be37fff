"""
Scene post-processing for alternate-revision levels

Coronas become lights, the level's lightmap multiplier is folded into
light intensities and an ambient colour is recommended from the baked
vertex colours.
"""

import logging
import math
from typing import List, Optional, Tuple

from .config import DecodeConfig
from .models import Color, Corona, Light, LightType, Mat3, Scene

DEFAULT_CORONA_RANGE = 15.0
MIN_CORONA_INTENSITY = 0.01
SPOT_CONE_LIMIT = 60.0
MIN_CONE_DIRECTION = 0.001
POINT_FOV = 15.0
CORONA_LIGHT_STATE = 2
CORONA_TUBE_WIDTH = 4.0
AMBIENT_BOOST = 1.5


def is_black(corona: Corona) -> bool:
    return all(int(c * 255) == 0 for c in corona.color[:3])


def is_directional(corona: Corona) -> bool:
    return (corona.cone_angle < SPOT_CONE_LIMIT
            and corona.orientation.forward.length_squared() > MIN_CONE_DIRECTION)


def corona_base_range(lights: List[Light]) -> float:
    """Half the median range of the existing lights, or the default without lights"""
    if not lights:
        return DEFAULT_CORONA_RANGE
    ranges = sorted(light.range for light in lights)
    return ranges[len(ranges) // 2] / 2


def light_from_corona(corona: Corona, uid: int, base_range: float, light_scale: float) -> Light:
    """Synthesize a bake-eligible light standing in for a corona"""
    light = Light(
        uid=uid,
        class_name="Light",
        position=corona.position,
        script_name=corona.script_name,
        hidden_in_editor=False,
        dynamic=False,
        fade=False,
        shadow_casting=True,
        enabled=True,
        initial_state=CORONA_LIGHT_STATE,
        color=Color(corona.color.r, corona.color.g, corona.color.b, 1.0),
        range=base_range * math.sqrt(max(corona.intensity, MIN_CORONA_INTENSITY)),
        intensity_at_max_range=0.0,
        dropoff_type=0,
        tube_width=CORONA_TUBE_WIDTH,
        on_intensity=corona.intensity * light_scale,
        on_time=1.0,
        on_time_variation=0.0,
        off_intensity=0.0,
        off_time=1.0,
        off_time_variation=0.0,
    )

    if is_directional(corona):
        light.type = LightType.SPOT
        light.fov = light.fov_dropoff = corona.cone_angle / 2.0
        orientation = corona.orientation
        light.rotation = Mat3(
            orientation.right.normalized(),
            orientation.up.normalized(),
            orientation.forward.normalized(),
        )
    else:
        light.type = LightType.POINT
        light.rotation = Mat3.IDENTITY
        light.fov = light.fov_dropoff = POINT_FOV
    return light


def recommend_ambient(raw: Tuple[int, ...], median: Optional[Tuple[int, int, int]]) -> Tuple[int, int, int]:
    """
    Per-channel ambient estimate from the baked vertex colour median

    The raw ambient is kept when it is already brighter.
    """
    median = median or (0, 0, 0)
    return tuple(
        min(255, max(raw_channel, round(median_channel * AMBIENT_BOOST)))
        for raw_channel, median_channel in zip(raw[:3], median)
    )


class PostProcessor:
    """Final pass over a decoded scene"""

    def __init__(self, config: Optional[DecodeConfig] = None):
        self.config = config or DecodeConfig()
        self.logger = logging.getLogger(self.__class__.__name__)

    def process(self, scene: Scene, revision) -> Scene:
        """
        Apply the alternate-revision adjustments in place

        Args:
            scene: Scene produced by the section loop
            revision: Classified revision of the level

        Returns:
            The same scene
        """
        if not revision.is_alternate:
            return scene

        if scene.coronas:
            self.convert_coronas(scene)
        self.apply_lightmap_multiplier(scene)
        self.report_ambient(scene)
        return scene

    def convert_coronas(self, scene: Scene) -> int:
        base_range = corona_base_range(scene.lights)
        max_uid = max(0, max(scene.all_uids(), default=0))
        next_uid = max_uid + 1

        converted: List[Light] = []
        skipped = 0
        for corona in scene.coronas:
            if is_black(corona):
                skipped += 1
                continue
            light = light_from_corona(corona, next_uid, base_range, self.config.light_scale)
            next_uid += 1
            if light.type == LightType.SPOT:
                self.logger.debug(
                    f"Corona {corona.uid} -> spotlight cone={corona.cone_angle} dir={light.rotation.forward}"
                )
            converted.append(light)

        scene.lights.extend(converted)
        scene.corona_light_count = len(converted)

        spots = sum(1 for light in converted if light.type == LightType.SPOT)
        if converted:
            ranges = [light.range for light in converted]
            self.logger.warning(
                f"Converted {len(converted)} coronas to lights ({spots} spot, "
                f"{len(converted) - spots} point, {skipped} black skipped, "
                f"range={min(ranges):.1f}-{max(ranges):.1f}, UIDs {max_uid + 1}-{next_uid - 1})"
            )
        else:
            self.logger.warning(f"No coronas converted ({skipped} black skipped)")
        return len(converted)

    def apply_lightmap_multiplier(self, scene: Scene) -> None:
        multiplier = scene.lightmap_multiplier
        if multiplier == 1.0:
            return
        self.logger.warning(f"Applying lightmap multiplier ({multiplier}) to {len(scene.lights)} lights")
        for light in scene.lights:
            light.on_intensity *= multiplier
            light.off_intensity *= multiplier

    def report_ambient(self, scene: Scene) -> None:
        props = scene.level_properties
        raw = props.ambient_color if props is not None else (0, 0, 0, 255)
        scene.recommended_ambient = recommend_ambient(raw, scene.median_baked_color)

        original_count = len(scene.lights) - scene.corona_light_count
        self.logger.warning(
            f"Light conversion summary: {original_count} lights + {scene.corona_light_count} "
            f"corona-derived lights, light scale={self.config.light_scale}, "
            f"lightmap multiplier={scene.lightmap_multiplier}"
        )
        self.logger.warning(f"Ambient (raw): {tuple(raw[:3])}, baked median: {scene.median_baked_color}")
        self.logger.warning(f"Recommended ambient: {scene.recommended_ambient}")

        if props is not None:
            self.logger.warning(
                f"Fog: color={tuple(props.fog_color[:3])} near={props.fog_near} far={props.fog_far}"
            )

        geoable = [brush.uid for brush in scene.brushes if brush.solid.is_geoable]
        if geoable:
            self.logger.warning(f"Geoable brush UIDs ({len(geoable)}): {', '.join(map(str, geoable))}")
        else:
            self.logger.warning("Geoable brush UIDs: none")
