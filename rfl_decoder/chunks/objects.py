"""
Event, trigger, item, clutter and respawn point decoders
"""

import logging

from .base_decoder import SectionDecoder
from ..base.structs import RespawnTail
from ..format_detector import (
    EVENT_COLOR,
    EVENT_ROT_ALARM,
    EVENT_ROT_ANCHOR,
    EVENT_ROT_TELEPORT,
    EXTENDED,
    TRIGGER_TEAM,
)
from ..models import Clutter, Event, Item, RespawnPoint, Trigger, TriggerShape

logger = logging.getLogger(__name__)

# Event classes that carry a rotation, keyed by the revision introducing it
EVENT_ROTATION_CLASSES = (
    (EVENT_ROT_TELEPORT, ("Teleport", "Play_Vclip", "Teleport_Player")),
    (EVENT_ROT_ALARM, ("Alarm",)),
    (EXTENDED, ("AF_Teleport_Player", "Clone_Entity")),
    (EVENT_ROT_ANCHOR, ("Anchor_Marker_Orient",)),
)
ALTERNATE_EVENT_ROTATION_CLASSES = ("Play_Explosion", "Teleport")
ALTERNATE_ITEM_TAIL = 6
TRIGGER_AUTO_FLAG = 0x0008


def legacy_event_has_rotation(revision, class_name: str) -> bool:
    return any(
        revision.at_least(threshold) and class_name in classes
        for threshold, classes in EVENT_ROTATION_CLASSES
    )


class LegacyEventDecoder(SectionDecoder):
    """Decoder for legacy events (0x600)"""

    section_type = 0x600
    name = "events"
    target = "events"

    def decode(self, cursor, context):
        return self.read_records(cursor, lambda c, i: self.read_event(c, context.revision), "events")

    @staticmethod
    def read_event(cursor, revision) -> Event:
        ev = Event()
        ev.uid = cursor.read_i32()
        ev.class_name = cursor.read_vstring()
        ev.position = cursor.read_vec3()
        ev.script_name = cursor.read_vstring()
        ev.hidden_in_editor = cursor.read_bool()
        ev.delay = cursor.read_f32()
        ev.bool1 = cursor.read_bool()
        ev.bool2 = cursor.read_bool()
        ev.int1, ev.int2, ev.float1, ev.float2 = cursor.unpack('iiff')
        ev.str1 = cursor.read_vstring()
        ev.str2 = cursor.read_vstring()
        ev.links = cursor.read_uid_list(f"event {ev.uid} link")

        if legacy_event_has_rotation(revision, ev.class_name):
            ev.has_rotation = True
            ev.rotation = cursor.read_mat3()
        if revision.at_least(EVENT_COLOR):
            ev.raw_color = cursor.read_u32()

        logger.debug(f"Event {ev.uid} {ev.class_name!r} links={ev.links}")
        return ev


class AlternateEventDecoder(SectionDecoder):
    """Decoder for alternate-revision events (0x600)"""

    section_type = 0x600
    name = "events"
    target = "events"

    def decode(self, cursor, context):
        return self.read_records(cursor, lambda c, i: self.read_event(c), "events")

    @staticmethod
    def read_event(cursor) -> Event:
        ev = Event()
        ev.uid = cursor.read_i32()
        ev.class_name = cursor.read_vstring()
        ev.position = cursor.read_vec3()
        ev.script_name = cursor.read_vstring()
        ev.hidden_in_editor = cursor.read_bool()
        ev.delay = cursor.read_f32()

        unknown0, unknown1 = cursor.unpack('ii')
        ev.bool1 = cursor.read_bool()
        ev.bool2 = cursor.read_bool()
        ev.int1, ev.int2, unknown4, unknown5, ev.float1, ev.float2, unknown8 = cursor.unpack('iiiiffi')
        ev.str1 = cursor.read_vstring()
        ev.str2 = cursor.read_vstring()
        unknown9 = cursor.read_vstring()
        ev.unknown = {
            'unknown0': unknown0,
            'unknown1': unknown1,
            'unknown4': unknown4,
            'unknown5': unknown5,
            'unknown8': unknown8,
            'unknown9': unknown9,
        }

        ev.links = cursor.read_uid_list(f"event {ev.uid} link")
        if ev.class_name in ALTERNATE_EVENT_ROTATION_CLASSES:
            ev.has_rotation = True
            ev.rotation = cursor.read_mat3()
        ev.raw_color = cursor.read_u32()

        logger.debug(f"Event {ev.uid} {ev.class_name!r} unknown={ev.unknown}")
        return ev


class TriggerDecoder(SectionDecoder):
    """Decoder for triggers (0x60000)"""

    section_type = 0x60000
    name = "triggers"
    target = "triggers"

    def decode(self, cursor, context):
        return self.read_records(cursor, lambda c, i: self.read_trigger(c, context.revision), "triggers")

    @staticmethod
    def read_trigger(cursor, revision) -> Trigger:
        legacy = revision.is_legacy
        t = Trigger()
        t.uid = cursor.read_i32()
        t.script_name = cursor.read_vstring()
        t.hidden_in_editor = cursor.read_bool()
        t.shape = TriggerShape.SPHERE if cursor.read_i32() == TriggerShape.SPHERE else TriggerShape.BOX
        t.resets_after = cursor.read_f32()
        t.resets_times = cursor.read_i32()
        t.use_key_is_required = cursor.read_bool()
        t.key_name = cursor.read_vstring() if legacy else cursor.read_plain_string()
        if legacy:
            t.weapon_activates = cursor.read_bool()
        t.activated_by = cursor.read_u8()
        if legacy:
            t.is_npc = cursor.read_bool()
            t.is_auto = cursor.read_bool()
            t.in_vehicle = cursor.read_bool()

        t.position = cursor.read_vec3()
        if t.shape == TriggerShape.SPHERE:
            t.sphere_radius = cursor.read_f32()
        else:
            t.rotation = cursor.read_mat3()
            t.box_height, t.box_width, t.box_depth = cursor.read_floats(3)
            if legacy:
                t.one_way = cursor.read_bool()

        t.airlock_room_uid, t.attached_to_uid, t.use_clutter_uid = cursor.unpack('iii')
        t.disabled = cursor.read_bool()
        t.button_active_time = cursor.read_f32()
        if legacy:
            t.inside_time = cursor.read_f32()
        else:
            t.unknown['inside_time'] = cursor.read_f32()
            t.unknown['byte'] = cursor.read_u8()
            t.unknown['flags'] = cursor.read_u16()
            flags2 = cursor.read_u32()
            t.unknown['flags2'] = flags2
            t.is_auto = bool(flags2 & TRIGGER_AUTO_FLAG)

        if legacy and revision.at_least(TRIGGER_TEAM):
            t.team = cursor.read_i32()

        t.links = cursor.read_uid_list(f"trigger {t.uid} link")
        logger.debug(f"Trigger {t.uid} shape={t.shape.name} links={t.links}")
        return t


class ItemDecoder(SectionDecoder):
    """Decoder for items (0x40000)"""

    section_type = 0x40000
    name = "items"
    target = "items"

    def decode(self, cursor, context):
        return self.read_records(cursor, lambda c, i: self.read_item(c, context.revision), "items")

    @classmethod
    def read_item(cls, cursor, revision) -> Item:
        header = cls.read_object_header(cursor)
        item = Item(*header)
        item.count, item.respawn_time, item.team_id = cursor.unpack('iii')
        if revision.is_alternate:
            cursor.skip(ALTERNATE_ITEM_TAIL)
        return item


class ClutterDecoder(SectionDecoder):
    """Decoder for clutter (0x50000)"""

    section_type = 0x50000
    name = "clutters"
    target = "clutters"

    def decode(self, cursor, context):
        return self.read_records(cursor, lambda c, i: self.read_clutter(c, context.revision), "clutters")

    @classmethod
    def read_clutter(cls, cursor, revision) -> Clutter:
        clutter = Clutter(*cls.read_object_header(cursor))
        if revision.is_legacy:
            cursor.read_i32()
        clutter.skin = cursor.read_vstring()
        clutter.links = cursor.read_uid_list(f"clutter {clutter.uid} link")
        return clutter


class RespawnPointDecoder(SectionDecoder):
    """Decoder for multiplayer respawn points (0x700)"""

    section_type = 0x700
    name = "respawn points"
    target = "respawn_points"

    def decode(self, cursor, context):
        return self.read_records(cursor, lambda c, i: self.read_point(c), "respawn points")

    @staticmethod
    def read_point(cursor) -> RespawnPoint:
        point = RespawnPoint()
        point.uid = cursor.read_i32()
        point.position = cursor.read_vec3()
        point.rotation = cursor.read_mat3()
        point.script_name = cursor.read_vstring()
        point.hidden_in_editor = cursor.read_bool()
        tail = cursor.read_struct(RespawnTail)
        point.team = tail.team
        point.red_team = bool(tail.red_team)
        point.blue_team = bool(tail.blue_team)
        point.bot = bool(tail.bot)
        return point
