"""
Detection-to-track association.

Builds a 1 - IoU cost matrix between predicted track boxes and detections
and solves it with the Hungarian algorithm, one dense problem per class
label so a track can only ever be matched to a detection of its own label.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Sequence, Tuple

import numpy as np
from scipy.optimize import linear_sum_assignment

logger = logging.getLogger(__name__)


@dataclass
class AssignmentResult:
    """Matched (track, detection) index pairs plus both unmatched sides."""
    matches: List[Tuple[int, int]] = field(default_factory=list)
    unmatched_tracks: List[int] = field(default_factory=list)
    unmatched_detections: List[int] = field(default_factory=list)


def iou_batch(boxes1: np.ndarray, boxes2: np.ndarray) -> np.ndarray:
    """Compute IoU between two sets of [x1, y1, x2, y2] boxes."""
    boxes1 = np.asarray(boxes1, dtype=float).reshape(-1, 4)
    boxes2 = np.asarray(boxes2, dtype=float).reshape(-1, 4)

    area1 = (boxes1[:, 2] - boxes1[:, 0]) * (boxes1[:, 3] - boxes1[:, 1])
    area2 = (boxes2[:, 2] - boxes2[:, 0]) * (boxes2[:, 3] - boxes2[:, 1])

    # Intersection
    lt = np.maximum(boxes1[:, None, :2], boxes2[None, :, :2])
    rb = np.minimum(boxes1[:, None, 2:], boxes2[None, :, 2:])
    wh = np.clip(rb - lt, 0, None)
    inter = wh[:, :, 0] * wh[:, :, 1]

    # Union
    union = area1[:, None] + area2[None, :] - inter

    return np.divide(inter, union, out=np.zeros_like(inter), where=union > 0)


def iou_cost_matrix(
    track_boxes: np.ndarray,
    det_boxes: np.ndarray,
    track_labels: Sequence[Hashable],
    det_labels: Sequence[Hashable],
) -> np.ndarray:
    """
    Compute the (N_tracks, N_dets) cost matrix.

    Same-label pairs cost 1 - IoU; cross-label pairs cost infinity.
    """
    n_tracks, n_dets = len(track_labels), len(det_labels)
    if n_tracks == 0 or n_dets == 0:
        return np.zeros((n_tracks, n_dets))

    cost = 1.0 - iou_batch(track_boxes, det_boxes)
    same_label = np.array(
        [[tl == dl for dl in det_labels] for tl in track_labels], dtype=bool
    )
    cost[~same_label] = np.inf
    return cost


def linear_assignment(cost_matrix: np.ndarray, max_cost: float) -> AssignmentResult:
    """
    Solve a minimum-cost assignment and drop pairs costing more than max_cost.

    Returns:
        AssignmentResult with indices into the rows/columns of cost_matrix
    """
    n_rows, n_cols = cost_matrix.shape
    if cost_matrix.size == 0:
        return AssignmentResult([], list(range(n_rows)), list(range(n_cols)))

    row_ind, col_ind = linear_sum_assignment(cost_matrix)

    matched_rows = set()
    matched_cols = set()
    matches = []
    for r, c in zip(row_ind, col_ind):
        # The optimal pairing may still pair boxes that barely overlap
        if cost_matrix[r, c] > max_cost:
            continue
        matches.append((int(r), int(c)))
        matched_rows.add(r)
        matched_cols.add(c)

    unmatched_rows = [i for i in range(n_rows) if i not in matched_rows]
    unmatched_cols = [j for j in range(n_cols) if j not in matched_cols]
    return AssignmentResult(matches, unmatched_rows, unmatched_cols)


def _group_by_label(labels: Sequence[Hashable]) -> Dict[Hashable, List[int]]:
    groups: Dict[Hashable, List[int]] = {}
    for i, label in enumerate(labels):
        groups.setdefault(label, []).append(i)
    return groups


def associate(
    track_boxes: np.ndarray,
    track_labels: Sequence[Hashable],
    det_boxes: np.ndarray,
    det_labels: Sequence[Hashable],
    iou_threshold: float = 0.3,
) -> AssignmentResult:
    """
    Match predicted track boxes to detections, independently per label.

    Args:
        track_boxes: (N, 4) predicted track boxes as [x1, y1, x2, y2]
        track_labels: N class labels
        det_boxes: (M, 4) detection boxes as [x1, y1, x2, y2]
        det_labels: M class labels
        iou_threshold: Minimum IoU for a match to be accepted

    Returns:
        AssignmentResult with indices into the input sequences, sorted
    """
    track_boxes = np.asarray(track_boxes, dtype=float).reshape(-1, 4)
    det_boxes = np.asarray(det_boxes, dtype=float).reshape(-1, 4)

    track_groups = _group_by_label(track_labels)
    det_groups = _group_by_label(det_labels)

    result = AssignmentResult()
    max_cost = 1.0 - iou_threshold
    cost = iou_cost_matrix(track_boxes, det_boxes, track_labels, det_labels)

    for label, t_idx in track_groups.items():
        d_idx = det_groups.get(label, [])
        if not d_idx:
            result.unmatched_tracks.extend(t_idx)
            continue

        # Same-label block of the full matrix, so it holds no inf entries
        sub = linear_assignment(cost[np.ix_(t_idx, d_idx)], max_cost)

        result.matches.extend((t_idx[r], d_idx[c]) for r, c in sub.matches)
        result.unmatched_tracks.extend(t_idx[r] for r in sub.unmatched_tracks)
        result.unmatched_detections.extend(d_idx[c] for c in sub.unmatched_detections)
        logger.debug(
            f"label={label} tracks={len(t_idx)} dets={len(d_idx)} matched={len(sub.matches)}"
        )

    # Labels with detections but no tracks
    for label, d_idx in det_groups.items():
        if label not in track_groups:
            result.unmatched_detections.extend(d_idx)

    result.matches.sort()
    result.unmatched_tracks.sort()
    result.unmatched_detections.sort()
    return result
