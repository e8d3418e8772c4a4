"""
Render job files.

A job file fixes the render settings, the scene and the output path.
YAML and JSON are both accepted:

```yaml
scene: cornell
output: output/cornell.png
texture: textures/earth.jpg   # optional, used by the globe scenes

render:
  width: 600
  height: 600
  samples: 200
  max_depth: 50
  threads: 0
```
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import json
import logging

import yaml

from .renderer import RenderSettings
from .scenes import SCENES

logger = logging.getLogger(__name__)

# Keys of the ``render`` section and the RenderSettings field they set
RENDER_KEYS = {
    'width': 'width',
    'height': 'height',
    'samples': 'samples_per_pixel',
    'max_depth': 'max_depth',
    'threads': 'num_threads',
}
TOP_LEVEL_KEYS = {'scene', 'output', 'texture', 'render'}


class ConfigError(Exception):
    """Error in a render job description."""
    pass


@dataclass
class RenderJob:
    """Everything needed to produce one image."""
    settings: RenderSettings
    scene: str = 'cornell'
    output: str = 'output/render.png'
    texture: Optional[str] = None


def load_job(filepath: str) -> RenderJob:
    """Parse a job file.

    Args:
        filepath: Path to the job file (.yaml, .yml or .json)

    Raises:
        ConfigError: The file is missing, unreadable or invalid
    """
    path = Path(filepath)
    if not path.exists():
        raise ConfigError(f"Job file not found: {filepath}")

    content = path.read_text()
    try:
        if path.suffix == '.json':
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse {filepath}: {e}") from e

    logger.debug("Loaded job file %s", path)
    return parse_job(data or {})


def parse_job(data: Dict[str, Any]) -> RenderJob:
    """Build a RenderJob from a dictionary.

    Raises:
        ConfigError: Unknown keys, wrong types or an unknown scene
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Job must be a mapping, got {type(data).__name__}")

    unknown = set(data) - TOP_LEVEL_KEYS
    if unknown:
        raise ConfigError(f"Unknown job keys: {sorted(unknown)}")

    render = data.get('render', {}) or {}
    if not isinstance(render, dict):
        raise ConfigError("'render' must be a mapping")

    kwargs: Dict[str, int] = {}
    for key, value in render.items():
        if key not in RENDER_KEYS:
            raise ConfigError(f"Unknown render setting: {key}")
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"Render setting '{key}' must be an integer, got {value!r}")
        kwargs[RENDER_KEYS[key]] = value

    try:
        settings = RenderSettings(**kwargs)
    except ValueError as e:
        raise ConfigError(str(e)) from e

    scene = data.get('scene', 'cornell')
    if scene not in SCENES:
        raise ConfigError(f"Unknown scene: {scene}")

    texture = data.get('texture')
    if texture is not None and not isinstance(texture, str):
        raise ConfigError(f"'texture' must be a file path, got {texture!r}")

    return RenderJob(
        settings=settings,
        scene=scene,
        output=str(data.get('output', 'output/render.png')),
        texture=texture
    )
