"""
Image-sequence frame source.

Frames are the image files of one directory in lexicographic filename order;
that order defines which frame is "next" and therefore track continuity.
"""

import logging
from pathlib import Path
from typing import Iterator, List, Tuple

import cv2
import numpy as np

from ..errors import DirectoryNotFound, FileOpenFailure

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.bmp')


class ImageSequence:
    """Ordered, finite sequence of decoded images from a directory."""

    def __init__(self, directory, extensions: Tuple[str, ...] = IMAGE_EXTENSIONS):
        self.directory = Path(directory)
        if not self.directory.is_dir():
            raise DirectoryNotFound(f"Could not open directory {self.directory}")
        self.extensions = tuple(e.lower() for e in extensions)
        self.paths: List[Path] = sorted(
            (p for p in self.directory.iterdir()
             if p.is_file() and p.suffix.lower() in self.extensions),
            key=lambda p: p.name,
        )
        logger.debug(f"{self.directory}: {len(self.paths)} frames")

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self) -> Iterator[Tuple[int, Path, np.ndarray]]:
        for frame_index, path in enumerate(self.paths):
            yield frame_index, path, self.read(path)

    @staticmethod
    def read(path) -> np.ndarray:
        image = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if image is None:
            raise FileOpenFailure(f"Could not open file {path}")
        return image
