"""
Tracking module for MCSORT.
Provides multi-class object tracking with motion prediction.
"""

from .types import Detection, TrackingRecord
from .kalman import KalmanFilter, bbox_to_xyah, xyah_to_bbox, bbox_to_tlbr, check_bbox
from .assignment import AssignmentResult, associate, iou_batch, iou_cost_matrix, linear_assignment
from .track import Track, TrackState
from .mcsort import MCSORT


def build_tracker(config):
    """
    Build a tracker based on configuration.

    Args:
        config: Either a string (tracker name) or dict with 'name' and params

    Returns:
        Tracker instance
    """
    if isinstance(config, str):
        name = config.lower()
        params = {}
    else:
        name = config.get('name', 'mcsort').lower()
        params = {k: v for k, v in config.items() if k != 'name'}

    if name in ('mcsort', 'sort'):
        return MCSORT(**params)
    else:
        raise ValueError(f'Unknown tracker: {name}')


__all__ = [
    'Detection',
    'TrackingRecord',
    'KalmanFilter',
    'bbox_to_xyah',
    'xyah_to_bbox',
    'bbox_to_tlbr',
    'check_bbox',
    'AssignmentResult',
    'associate',
    'iou_batch',
    'iou_cost_matrix',
    'linear_assignment',
    'Track',
    'TrackState',
    'MCSORT',
    'build_tracker',
]
