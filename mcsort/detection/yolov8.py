"""
YOLOv8 multi-class detector using Ultralytics.
"""

import logging
import threading
from typing import Dict, List, Optional

import numpy as np

from ..errors import ModelLoadError
from ..tracking.types import Detection

logger = logging.getLogger(__name__)


class YOLOv8Detector:
    """
    YOLOv8-based object detector.
    Each detection is labelled with the model's class name.
    """

    def __init__(
        self,
        model: str = 'yolov8n.pt',
        device: str = 'auto',
        conf: float = 0.25,
        iou: float = 0.45,
        img_size: int = 640,
        half: bool = False,
        classes: Optional[List[int]] = None,
    ):
        """
        Initialize YOLOv8 detector.

        Args:
            model: Model name or path (yolov8n/s/m/l/x.pt or exported model)
            device: Device to run on ('auto', 'cpu', 'cuda', '0', '1', etc.)
            conf: Confidence threshold for detections
            iou: IoU threshold for NMS
            img_size: Input image size
            half: Use FP16 inference (GPU only)
            classes: List of class IDs to detect (None = all classes)
        """
        self.model_name = model
        self.conf = conf
        self.iou = iou
        self.img_size = img_size
        self.half = half
        self.classes = classes
        # Ultralytics picks the best available device when given None
        self.device = None if device == 'auto' else device

        self.model = None
        # One model instance; Ultralytics predictors are not safe to share across threads
        self._lock = threading.Lock()
        self.names: Dict[int, str] = {}
        self._load_model()

        logger.info(f"YOLOv8 detector initialized: model={model}, device={device}")

    def _load_model(self):
        """Load the YOLO model; any failure is fatal."""
        try:
            from ultralytics import YOLO
        except ImportError as e:
            raise ModelLoadError("ultralytics is not installed; install the 'yolo' extra") from e

        try:
            self.model = YOLO(self.model_name)

            # Warmup
            dummy = np.zeros((self.img_size, self.img_size, 3), dtype=np.uint8)
            _ = self.model.predict(dummy, verbose=False)
        except Exception as e:
            raise ModelLoadError(f"Failed to load YOLO model {self.model_name}: {e}") from e

        self.names = dict(self.model.names)
        logger.info(f"Loaded Ultralytics model: {self.model_name}")

    def detect(self, frame: np.ndarray) -> List[Detection]:
        """
        Detect objects in frame.

        Args:
            frame: BGR image as numpy array (H, W, 3)

        Returns:
            List of Detection with (x, y, w, h) boxes in pixel coordinates
        """
        with self._lock:
            results = self.model.predict(
                frame,
                conf=self.conf,
                iou=self.iou,
                imgsz=self.img_size,
                classes=self.classes,
                device=self.device,
                half=self.half,
                verbose=False
            )

        detections = []
        for result in results:
            boxes = result.boxes
            if boxes is None:
                continue

            xyxy = boxes.xyxy.cpu().numpy()
            confs = boxes.conf.cpu().numpy()
            cls_ids = boxes.cls.cpu().numpy().astype(int)

            for (x1, y1, x2, y2), conf, cls in zip(xyxy, confs, cls_ids):
                detections.append(Detection(
                    label=self.names.get(int(cls), str(cls)),
                    bbox=(float(x1), float(y1), float(x2 - x1), float(y2 - y1)),
                    confidence=float(conf),
                ))

        return detections
