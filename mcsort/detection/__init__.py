"""
Detection module for MCSORT.
Supports a YOLOv8 backend and a random detector for testing.
"""

from .detector import RandomDetector
from .yolov8 import YOLOv8Detector


def build_detector(config):
    """
    Build a detector based on configuration.

    Args:
        config: Either a string (detector name) or dict with 'name' and params

    Returns:
        Detector instance
    """
    if isinstance(config, str):
        name = config.lower()
        params = {}
    else:
        name = config.get('name', 'random').lower()
        params = {k: v for k, v in config.items() if k != 'name'}

    if name in ('random', 'dummy'):
        return RandomDetector(**params)
    elif name == 'yolov8':
        return YOLOv8Detector(**params)
    else:
        raise ValueError(f'Unknown detector: {name}')


__all__ = ['RandomDetector', 'YOLOv8Detector', 'build_detector']
