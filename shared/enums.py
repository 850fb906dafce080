import enum


class ImageField(str, enum.Enum):
    """Image attachment slots on application and response records.

    The value is the filename stem used when an update replaces the image,
    e.g. ``meterImage_<ConsumerID>.png``.
    """
    METER_IMAGE = "meterImage"
    POLE_IMAGE = "poleImage"
    TIMER_PANEL_IMAGE = "timerPanelImage"


class GroupField(str, enum.Enum):
    """Field paths supported by the grouped count reports."""
    RESPONSE_WARD = "Response.WardCommittee"
    WARD = "WardCommittee"
