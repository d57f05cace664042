"""
Tests for detection module.
"""

import sys
import threading
import time
import types
from concurrent.futures import ThreadPoolExecutor

import pytest
import numpy as np

from mcsort.detection import build_detector, RandomDetector, YOLOv8Detector
from mcsort.errors import ModelLoadError
from mcsort.tracking import Detection


class TestRandomDetector:
    """Tests for RandomDetector."""

    def test_detect_returns_list(self):
        detector = RandomDetector()
        frame = np.zeros((480, 640, 3), dtype=np.uint8)

        dets = detector.detect(frame)

        assert isinstance(dets, list)
        assert len(dets) == 3
        assert all(isinstance(d, Detection) for d in dets)

    def test_boxes_are_valid(self):
        detector = RandomDetector(num_objects=5, jitter=10.0)
        frame = np.zeros((480, 640, 3), dtype=np.uint8)

        for _ in range(20):
            for det in detector.detect(frame):
                assert det.is_valid()
                assert 0.5 <= det.confidence <= 1.0

    def test_labels_cycle(self):
        detector = RandomDetector(num_objects=4, labels=('person', 'car'))
        frame = np.zeros((480, 640, 3), dtype=np.uint8)

        labels = [d.label for d in detector.detect(frame)]

        assert labels == ['person', 'car', 'person', 'car']

    def test_seeded_is_reproducible(self):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        a = RandomDetector(seed=42)
        b = RandomDetector(seed=42)

        assert [a.detect(frame) for _ in range(5)] == [b.detect(frame) for _ in range(5)]

    def test_drop_rate(self):
        detector = RandomDetector(drop_rate=1.0)
        frame = np.zeros((480, 640, 3), dtype=np.uint8)

        assert detector.detect(frame) == []


class TestYOLOv8Detector:
    """Tests for YOLOv8Detector that do not need model weights."""

    def test_missing_ultralytics_is_fatal(self, monkeypatch):
        monkeypatch.setitem(sys.modules, 'ultralytics', None)

        with pytest.raises(ModelLoadError):
            YOLOv8Detector()

    def test_shared_model_is_never_called_concurrently(self, monkeypatch):
        class FakeYOLO:
            names = {0: 'person'}

            def __init__(self, model):
                self._guard = threading.Lock()
                self.active = 0
                self.max_active = 0
                self.calls = 0

            def predict(self, frame, **kwargs):
                with self._guard:
                    self.active += 1
                    self.calls += 1
                    self.max_active = max(self.max_active, self.active)
                time.sleep(0.01)
                with self._guard:
                    self.active -= 1
                return []

        fake = types.ModuleType('ultralytics')
        fake.YOLO = FakeYOLO
        monkeypatch.setitem(sys.modules, 'ultralytics', fake)

        detector = YOLOv8Detector(img_size=32)
        frame = np.zeros((32, 32, 3), dtype=np.uint8)
        with ThreadPoolExecutor(max_workers=4) as pool:
            outputs = list(pool.map(lambda _: detector.detect(frame), range(16)))

        assert outputs == [[]] * 16
        # Warmup call plus one per frame
        assert detector.model.calls == 17
        assert detector.model.max_active == 1
        assert detector.names == {0: 'person'}


class TestBuildDetector:
    """Tests for build_detector factory."""

    def test_build_random(self):
        detector = build_detector('random')
        assert isinstance(detector, RandomDetector)

    def test_build_with_dict_config(self):
        detector = build_detector({'name': 'random', 'num_objects': 2, 'labels': ['a']})

        assert isinstance(detector, RandomDetector)
        assert detector.num_objects == 2

    def test_build_unknown_raises(self):
        with pytest.raises(ValueError):
            build_detector('unknown')
