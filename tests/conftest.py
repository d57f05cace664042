"""
Pytest configuration and fixtures.
"""

import pytest
import numpy as np
import cv2
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from mcsort.tracking import Detection


class ScriptedDetector:
    """Returns a fixed list of detections per call, cycling through a script."""

    def __init__(self, script):
        self.script = list(script)
        self.calls = 0

    def detect(self, frame):
        dets = self.script[self.calls % len(self.script)]
        self.calls += 1
        return list(dets)


@pytest.fixture
def sample_frame():
    """Generate a sample video frame."""
    return np.random.randint(0, 255, (480, 640, 3), dtype=np.uint8)


@pytest.fixture
def sample_detections():
    """Generate sample detections."""
    return [
        Detection('person', (100, 100, 50, 100), 0.9),
        Detection('car', (300, 200, 60, 120), 0.85),
    ]


@pytest.fixture
def static_detector():
    """Detector that sees one static person every frame."""
    return ScriptedDetector([[Detection('person', (10, 10, 20, 20), 0.9)]])


@pytest.fixture
def make_sequence(tmp_path):
    """Factory writing <tmp>/data/<name>/images/NNNNNN.png frames."""
    data_dir = tmp_path / 'data'

    def _make(name='seq1', num_frames=5, size=(64, 96)):
        img_dir = data_dir / name / 'images'
        img_dir.mkdir(parents=True)
        for i in range(num_frames):
            img = np.full((size[0], size[1], 3), i * 10 % 255, dtype=np.uint8)
            cv2.imwrite(str(img_dir / f'{i:06d}.png'), img)
        return data_dir

    return _make


@pytest.fixture
def tracker_config():
    """Tracker configuration with documented defaults."""
    return {
        'name': 'mcsort',
        'min_hits': 3,
        'max_age': 3,
        'tentative_max_age': 0,
        'iou_threshold': 0.3,
    }
