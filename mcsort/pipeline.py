"""
Per-sequence detect-and-track pipeline.

Reads a sequence's images in filename order, runs the detector and a fresh
MCSORT tracker on each frame and writes confirmed tracks to
<data_dir>/results/<sequence>/<model_type>/track.txt.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .errors import FileOpenFailure, OutputAlreadyExists
from .io import ImageSequence, TrackingRecordWriter
from .tracking import build_tracker

logger = logging.getLogger(__name__)


@dataclass
class SequenceResult:
    """Timing for one processed sequence."""
    sequence: str
    duration_ms: float = 0.0
    frame_count: int = 0
    skipped: bool = False

    @property
    def fps(self) -> float:
        if self.duration_ms <= 0:
            return 0.0
        return self.frame_count * 1000.0 / self.duration_ms


def read_sequences_file(path) -> List[str]:
    """Read one sequence path per non-empty line."""
    try:
        with open(path, 'r') as f:
            return [line.strip() for line in f if line.strip()]
    except OSError as e:
        raise FileOpenFailure(f"Could not open file {path}") from e


class DetectAndTrackPipeline:
    def __init__(self, detector, model_type: str, data_dir, tracker_config=None):
        """
        Args:
            detector: Object with detect(frame) -> List[Detection]; shared
                read-only across sequences
            model_type: Names the results subdirectory
            data_dir: Root holding <sequence>/images and results/
            tracker_config: build_tracker config; a new tracker per sequence
        """
        self.detector = detector
        self.model_type = model_type
        self.data_dir = Path(data_dir)
        self.tracker_config = tracker_config if tracker_config is not None else 'mcsort'

    def input_dir(self, sequence: str) -> Path:
        return self.data_dir / sequence / 'images'

    def output_path(self, sequence: str) -> Path:
        return self.data_dir / 'results' / sequence / self.model_type / 'track.txt'

    def run_sequence(self, sequence: str) -> SequenceResult:
        """
        Detect and track one sequence.

        Raises:
            DirectoryNotFound: the image directory is missing
            FileOpenFailure: an image or the output file cannot be opened
        """
        frames = ImageSequence(self.input_dir(sequence))

        try:
            writer = TrackingRecordWriter(self.output_path(sequence))
        except OutputAlreadyExists as e:
            logger.warning(str(e))
            return SequenceResult(sequence, skipped=True)

        tracker = build_tracker(self.tracker_config)
        result = SequenceResult(sequence)
        try:
            with writer:
                for frame_index, path, image in frames:
                    start = time.perf_counter()
                    detections = self.detector.detect(image)
                    records = tracker.step(detections)
                    result.duration_ms += (time.perf_counter() - start) * 1000.0

                    writer.write_all(records)
                    result.frame_count += 1
                    logger.debug(
                        f"{sequence} frame {frame_index} ({path.name}): "
                        f"{len(detections)} detections, {len(records)} tracks"
                    )
        except BaseException:
            # A partial result would make the next run skip this sequence
            Path(writer.path).unlink(missing_ok=True)
            raise

        logger.info(
            f"Sequence {sequence}: {result.duration_ms:.0f}ms "
            f"({result.fps:.1f}fps, {result.frame_count} frames, {writer.count} records)"
        )
        return result

    def run(self, sequences: Sequence[str], workers: Optional[int] = 1) -> List[SequenceResult]:
        """
        Process sequences, optionally in parallel; results keep input order.
        """
        start = time.perf_counter()
        if workers is None or workers <= 1 or len(sequences) <= 1:
            results = [self.run_sequence(s) for s in sequences]
        else:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(self.run_sequence, sequences))
        wall_ms = (time.perf_counter() - start) * 1000.0

        total = summarize(results)
        logger.info(
            f"Total: {total.duration_ms:.0f}ms ({total.fps:.1f}fps) over "
            f"{len(results)} sequences, wall time {wall_ms:.0f}ms"
        )
        return results


def summarize(results: Sequence[SequenceResult]) -> SequenceResult:
    """Accumulate durations and frame counts across sequences."""
    return SequenceResult(
        sequence='total',
        duration_ms=sum(r.duration_ms for r in results),
        frame_count=sum(r.frame_count for r in results),
    )
