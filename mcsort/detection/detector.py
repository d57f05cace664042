import threading
from typing import Sequence

import numpy as np

from ..tracking.types import Detection


class RandomDetector:
    """A fast CPU-only fake detector.
    Produces a few drifting, jittered boxes with class labels so the pipeline
    is testable without ML deps.
    """
    def __init__(self, num_objects: int = 3, labels: Sequence[str] = ('person', 'car'),
                 seed: int = 0, jitter: float = 2.0, drop_rate: float = 0.0,
                 box_size=(60, 120)):
        self.rng = np.random.default_rng(seed)
        self.labels = list(labels)
        self.jitter = jitter
        self.drop_rate = drop_rate
        self.box_size = box_size
        self.num_objects = num_objects
        self.traj = None
        self._lock = threading.Lock()

    def _init_traj(self, W, H):
        self.traj = []
        for i in range(self.num_objects):
            self.traj.append({
                'x': float(self.rng.uniform(0, W)),
                'y': float(self.rng.uniform(0, H)),
                'vx': float(self.rng.uniform(-2, 2)),
                'vy': float(self.rng.uniform(-2, 2)),
                'label': self.labels[i % len(self.labels)],
            })

    def detect(self, frame):
        H, W = frame.shape[:2]
        w, h = self.box_size
        dets = []
        with self._lock:
            if self.traj is None:
                self._init_traj(W, H)
            for t in self.traj:
                t['x'] = (t['x'] + t['vx']) % W
                t['y'] = (t['y'] + t['vy']) % H
                if self.drop_rate and self.rng.random() < self.drop_rate:
                    continue
                dx, dy = self.rng.normal(0, self.jitter, size=2)
                x1 = max(0.0, t['x'] - w / 2 + dx)
                y1 = max(0.0, t['y'] - h / 2 + dy)
                score = float(self.rng.uniform(0.5, 1.0))
                dets.append(Detection(t['label'], (x1, y1, float(w), float(h)), score))
        return dets
