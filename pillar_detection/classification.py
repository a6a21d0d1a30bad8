"""Object taxonomy and the detector label mapping.

The detector emits a class index per box. It is mapped to a fine-grained
subtype, which in turn fixes the coarse object type.
"""
import logging
from enum import IntEnum

import numpy as np

logger = logging.getLogger(__name__)


class ObjectType(IntEnum):
    UNKNOWN = 0
    UNKNOWN_MOVABLE = 1
    UNKNOWN_UNMOVABLE = 2
    PEDESTRIAN = 3
    BICYCLE = 4
    VEHICLE = 5


MAX_OBJECT_TYPE = len(ObjectType)


class ObjectSubType(IntEnum):
    UNKNOWN = 0
    UNKNOWN_MOVABLE = 1
    UNKNOWN_UNMOVABLE = 2
    CAR = 3
    VAN = 4
    TRUCK = 5
    BUS = 6
    CYCLIST = 7
    MOTORCYCLIST = 8
    TRICYCLIST = 9
    PEDESTRIAN = 10
    TRAFFICCONE = 11


# Detector class index -> subtype (nuScenes class order)
LABEL_TO_SUBTYPE = {
    0: ObjectSubType.BUS,
    1: ObjectSubType.CAR,
    2: ObjectSubType.UNKNOWN_MOVABLE,    # construction vehicle
    3: ObjectSubType.UNKNOWN_MOVABLE,    # trailer
    4: ObjectSubType.TRUCK,
    5: ObjectSubType.UNKNOWN_UNMOVABLE,  # barrier
    6: ObjectSubType.CYCLIST,
    7: ObjectSubType.MOTORCYCLIST,
    8: ObjectSubType.PEDESTRIAN,
    9: ObjectSubType.TRAFFICCONE,
}

SUBTYPE_TO_TYPE = {
    ObjectSubType.UNKNOWN: ObjectType.UNKNOWN,
    ObjectSubType.UNKNOWN_MOVABLE: ObjectType.UNKNOWN_MOVABLE,
    ObjectSubType.UNKNOWN_UNMOVABLE: ObjectType.UNKNOWN_UNMOVABLE,
    ObjectSubType.CAR: ObjectType.VEHICLE,
    ObjectSubType.VAN: ObjectType.VEHICLE,
    ObjectSubType.TRUCK: ObjectType.VEHICLE,
    ObjectSubType.BUS: ObjectType.VEHICLE,
    ObjectSubType.CYCLIST: ObjectType.BICYCLE,
    ObjectSubType.MOTORCYCLIST: ObjectType.BICYCLE,
    ObjectSubType.TRICYCLIST: ObjectType.BICYCLE,
    ObjectSubType.PEDESTRIAN: ObjectType.PEDESTRIAN,
    ObjectSubType.TRAFFICCONE: ObjectType.UNKNOWN_UNMOVABLE,
}


def is_known_label(label: int) -> bool:
    return int(label) in LABEL_TO_SUBTYPE


def label_to_subtype(label: int) -> ObjectSubType:
    """Map a detector label to a subtype; unknown labels give UNKNOWN."""
    subtype = LABEL_TO_SUBTYPE.get(int(label))
    if subtype is None:
        logger.warning("Unknown detector label %d, classified as UNKNOWN",
                       label)
        return ObjectSubType.UNKNOWN
    return subtype


def subtype_to_type(subtype: ObjectSubType) -> ObjectType:
    return SUBTYPE_TO_TYPE[subtype]


def one_hot_probs(obj_type: ObjectType) -> np.ndarray:
    """Probability vector over all object types, 1.0 on `obj_type`."""
    probs = np.zeros(MAX_OBJECT_TYPE, dtype=np.float32)
    probs[int(obj_type)] = 1.0
    return probs
