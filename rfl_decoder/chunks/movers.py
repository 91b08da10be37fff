"""
Moving group decoder
"""

import logging

from .base_decoder import SectionDecoder
from ..base.structs import KeyframeTiming
from ..models import Group, Keyframe, MemberTransform, MovingGroupData

logger = logging.getLogger(__name__)

ALTERNATE_GROUP_TAIL = 10


class GroupDecoder(SectionDecoder):
    """Decoder for groups and their moving data (0x3000)"""

    section_type = 0x3000
    name = "groups"
    target = "groups"

    def decode(self, cursor, context):
        groups = self.read_records(cursor, lambda c, i: self.read_group(c, context.revision), "groups")
        logger.debug(f"Parsed {len(groups)} groups")
        return groups

    @classmethod
    def read_group(cls, cursor, revision) -> Group:
        alternate = revision.is_alternate
        group = Group()
        group.name = cursor.read_vstring()
        cursor.read_u8()
        if alternate:
            cursor.skip(4)
        group.is_moving = cursor.read_bool()
        if group.is_moving:
            group.moving_data = cls.read_moving_data(cursor, alternate)
        if alternate:
            cursor.read_i32()

        group.object_uids = cursor.read_uid_list(f"group {group.name!r} object")
        group.brush_uids = cursor.read_uid_list(f"group {group.name!r} brush")
        if alternate:
            cursor.skip(ALTERNATE_GROUP_TAIL * 4)

        logger.debug(
            f"Group {group.name!r}: moving={group.is_moving}, "
            f"{len(group.object_uids)} objects, {len(group.brush_uids)} brushes"
        )
        return group

    @staticmethod
    def read_keyframe(cursor) -> Keyframe:
        keyframe = Keyframe()
        keyframe.uid = cursor.read_i32()
        keyframe.position = cursor.read_vec3()
        keyframe.rotation = cursor.read_mat3()
        keyframe.script_name = cursor.read_vstring()
        keyframe.hidden_in_editor = cursor.read_bool()
        timing = cursor.read_struct(KeyframeTiming)
        keyframe.pause_time = timing.pause_time
        keyframe.depart_travel_time = timing.depart_travel_time
        keyframe.return_travel_time = timing.return_travel_time
        keyframe.acceleration_time = timing.acceleration_time
        keyframe.deceleration_time = timing.deceleration_time
        keyframe.event_uid = timing.event_uid
        keyframe.item_uid_1 = timing.item_uid_1
        keyframe.item_uid_2 = timing.item_uid_2
        keyframe.degrees_about_axis = timing.degrees_about_axis
        return keyframe

    @classmethod
    def read_moving_data(cls, cursor, alternate: bool) -> MovingGroupData:
        data = MovingGroupData()
        data.keyframes = [cls.read_keyframe(cursor) for _ in range(max(0, cursor.read_i32()))]
        for _ in range(max(0, cursor.read_i32())):
            data.member_transforms.append(MemberTransform(
                uid=cursor.read_i32(),
                position=cursor.read_vec3(),
                rotation=cursor.read_mat3(),
            ))

        (data.is_door, data.rotate_in_place, data.starts_backwards,
         data.use_travel_time_as_speed, data.force_orient,
         data.no_player_collide) = (b != 0 for b in cursor.read_bytes(6))
        if alternate:
            cursor.read_u8()

        data.movement_type = cursor.read_i32()
        data.starting_keyframe = cursor.read_i32()
        data.start_sound = cursor.read_vstring()
        data.start_volume = cursor.read_f32()
        data.looping_sound = cursor.read_vstring()
        data.looping_volume = cursor.read_f32()
        data.stop_sound = cursor.read_vstring()
        data.stop_volume = cursor.read_f32()
        data.close_sound = cursor.read_vstring()
        data.close_volume = cursor.read_f32()
        return data
