"""
Level-wide section decoders: properties, editor info and waypoint lists
"""

import logging

from .base_decoder import SectionDecoder
from ..base.structs import FogSettings, SunSettings
from ..models import EditorView, EditorViewType, LevelInfo, LevelProperties, WaypointList

logger = logging.getLogger(__name__)

EDITOR_VIEW_COUNT = 4


class LevelPropertiesDecoder(SectionDecoder):
    """Decoder for level properties (0x900)"""

    section_type = 0x900
    name = "level properties"

    def decode(self, cursor, context):
        props = LevelProperties()
        props.geomod_texture = cursor.read_vstring()
        props.hardness = cursor.read_i32()
        props.ambient_color = cursor.read_rgba()
        props.directional_ambient = cursor.read_bool()

        fog = cursor.read_struct(FogSettings)
        props.fog_color = tuple(fog.fog_color)
        props.fog_near = fog.fog_near
        props.fog_far = fog.fog_far

        if context.revision.is_alternate:
            sun = cursor.read_struct(SunSettings)
            props.sun_color = tuple(sun.sun_color)
            props.sun_yaw = sun.sun_yaw
            props.sun_pitch = sun.sun_pitch
            props.sun_intensity = sun.sun_intensity
            props.sun_spread = sun.sun_spread
            props.hardlight_color = tuple(sun.hardlight_color)
            props.hardlight_intensity = sun.hardlight_intensity
            props.lightmap_multiplier = sun.lightmap_multiplier
            logger.info(
                f"Baking parameters: sun RGB {props.sun_color[:3]} yaw={props.sun_yaw} "
                f"pitch={props.sun_pitch} intensity={props.sun_intensity}, "
                f"lightmap multiplier {props.lightmap_multiplier}"
            )

        logger.info(
            f"Level properties: geomod {props.geomod_texture!r} hardness {props.hardness}, "
            f"ambient {props.ambient_color}, fog {props.fog_color} {props.fog_near}-{props.fog_far}"
        )
        return props

    def store(self, scene, result):
        scene.level_properties = result


class LevelInfoDecoder(SectionDecoder):
    """Decoder for editor level info (0x01000000)"""

    section_type = 0x01000000
    name = "level info"

    def decode(self, cursor, context):
        info = LevelInfo()
        info.unknown = cursor.read_i32()
        info.name = cursor.read_vstring()
        info.author = cursor.read_vstring()
        info.date = cursor.read_vstring()
        info.has_movers = cursor.read_bool()
        info.multiplayer = cursor.read_bool()

        for _ in range(EDITOR_VIEW_COUNT):
            view = EditorView(view_type=cursor.read_i32())
            if view.view_type == EditorViewType.FREE_LOOK:
                view.position = cursor.read_floats(3)
            else:
                view.position = cursor.read_floats(4)
            view.rotation = cursor.read_mat3()
            info.views.append(view)

        logger.info(f"Level info: {info.name!r} by {info.author!r} ({info.date}), multiplayer={info.multiplayer}")
        return info

    def store(self, scene, result):
        scene.level_info = result


class WaypointListDecoder(SectionDecoder):
    """Decoder for waypoint lists (0x10000)"""

    section_type = 0x10000
    name = "waypoint lists"
    target = "waypoint_lists"

    def decode(self, cursor, context):
        return self.read_records(cursor, lambda c, i: self.read_list(c), "waypoint lists")

    @staticmethod
    def read_list(cursor) -> WaypointList:
        waypoints = WaypointList(name=cursor.read_vstring())
        waypoints.indices = cursor.read_uid_list(f"waypoint list {waypoints.name!r}")
        return waypoints
