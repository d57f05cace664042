"""
Runtime configuration.

Configuration is a plain dict loaded from YAML and merged over defaults.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import FileOpenFailure

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    'paths': {
        'data_dir': 'data',
        'model_dir': 'models',
    },
    'tracker': {
        'name': 'mcsort',
        'min_hits': 3,
        'max_age': 3,
        'tentative_max_age': 0,
        'iou_threshold': 0.3,
        'std_weight_position': 1.0 / 20,
        'std_weight_velocity': 1.0 / 160,
    },
    'runtime': {
        'workers': 1,
        'log_level': 'INFO',
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path: Path) -> dict:
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise FileOpenFailure(f"Could not open file {path}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level")
    return data


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration, falling back to defaults for missing keys.

    Args:
        path: YAML file; None returns the defaults

    Returns:
        Configuration dict
    """
    if path is None:
        return copy.deepcopy(DEFAULT_CONFIG)
    cfg = _deep_merge(DEFAULT_CONFIG, _read_yaml(Path(path)))
    logger.debug(f"Loaded config from {path}")
    return cfg


def load_model_config(model_dir, name: str) -> Dict[str, Any]:
    """
    Load a model config from <model_dir>/config/<name>.

    The file names the model type (used for the results directory) and the
    detector to build:

        type: yolov8n
        detector: {name: yolov8, model: yolov8n.pt}
    """
    path = Path(model_dir) / 'config' / name
    data = _read_yaml(path)
    if 'detector' not in data:
        raise ValueError(f"{path}: missing 'detector' section")
    model_type = data.get('type')
    if not model_type:
        model_type = Path(name).stem
    detector = data['detector']
    if isinstance(detector, dict) and 'model' in detector:
        # Model files are relative to the model directory
        model_path = Path(model_dir) / detector['model']
        if model_path.exists():
            detector = dict(detector, model=str(model_path))
    return {'type': model_type, 'detector': detector}
