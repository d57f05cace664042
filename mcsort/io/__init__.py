"""
I/O module for MCSORT.
Handles image-sequence input and tracking result output.
"""

from .frames import ImageSequence, IMAGE_EXTENSIONS
from .sink import TrackingRecordWriter


__all__ = [
    'ImageSequence',
    'IMAGE_EXTENSIONS',
    'TrackingRecordWriter',
]
