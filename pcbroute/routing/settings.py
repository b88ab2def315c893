"""
Routing Settings

Grid extents and search parameters for the router. Grid extents are always
explicit: nothing here is derived from board geometry.

Settings can be built directly, from a mapping, or from a YAML file:

    routing:
      board_width: 50
      board_height: 40
      grid_spacing: 0.25
      max_passes: 3
      via_penalty: 10
"""

import logging
import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from ..board.errors import BoardError, ErrorKind

logger = logging.getLogger(__name__)


@dataclass
class RouteSettings:
    """Configuration for a routing run. Distances are in board units (mm)."""
    # Grid extents
    board_width: float
    board_height: float
    grid_spacing: float = 0.25
    origin_x: float = 0.0
    origin_y: float = 0.0

    # Search
    max_passes: int = 3
    via_penalty: float = 10.0   # Cost of a layer change, in planar steps
    default_layer: int = 0      # Grid layer for pads naming no routable layer

    # Output geometry
    trace_width: float = 0.25
    via_size: float = 0.6
    via_drill: float = 0.3

    @property
    def origin(self) -> Tuple[float, float]:
        return (self.origin_x, self.origin_y)

    def grid_dimensions(self) -> Tuple[int, int]:
        """(x_cells, y_cells) covering the board extents."""
        # Round first so 1.1 / 0.1 gives 11 cells, not 12
        x_cells = math.ceil(round(self.board_width / self.grid_spacing, 9))
        y_cells = math.ceil(round(self.board_height / self.grid_spacing, 9))
        return x_cells, y_cells

    def validate(self):
        """Check structural preconditions for routing.

        Raises:
            BoardError: INVALID_SETTINGS describing the first problem found
        """
        problems = []
        for name in ("board_width", "board_height", "grid_spacing",
                     "trace_width", "via_size", "via_drill"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                problems.append(f"{name} must be a number, got {value!r}")
            elif not math.isfinite(value) or value <= 0:
                problems.append(f"{name} must be positive, got {value}")

        for name in ("origin_x", "origin_y", "via_penalty"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                problems.append(f"{name} must be a number, got {value!r}")
            elif not math.isfinite(value):
                problems.append(f"{name} must be finite, got {value}")

        if not problems and self.via_penalty <= 0:
            problems.append(f"via_penalty must be positive, got {self.via_penalty}")

        if not isinstance(self.max_passes, int) or isinstance(self.max_passes, bool) \
                or self.max_passes < 1:
            problems.append(f"max_passes must be an integer >= 1, got {self.max_passes!r}")

        if not isinstance(self.default_layer, int) or isinstance(self.default_layer, bool) \
                or self.default_layer < 0:
            problems.append(f"default_layer must be an integer >= 0, got {self.default_layer!r}")

        if problems:
            raise BoardError(ErrorKind.INVALID_SETTINGS, "; ".join(problems))

        x_cells, y_cells = self.grid_dimensions()
        if x_cells < 1 or y_cells < 1:
            raise BoardError(ErrorKind.INVALID_SETTINGS,
                             f"grid of {x_cells}x{y_cells} cells is empty")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RouteSettings":
        """Build settings from a mapping; unknown keys are rejected.

        Raises:
            BoardError: INVALID_SETTINGS on unknown or missing keys
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise BoardError(ErrorKind.INVALID_SETTINGS, f"unknown settings: {unknown}")

        missing = [name for name in ("board_width", "board_height") if data.get(name) is None]
        if missing:
            raise BoardError(ErrorKind.INVALID_SETTINGS, f"missing required settings: {missing}")

        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_settings(path: Optional[Union[str, Path]] = None, **overrides) -> RouteSettings:
    """
    Load settings from a YAML file, then apply keyword overrides.

    The file may hold the settings at top level or under a ``routing``
    key. Overrides whose value is None are ignored, so parsed CLI options
    can be passed straight through.

    Args:
        path: Optional YAML file
        **overrides: Individual settings taking precedence over the file

    Returns:
        Validated settings

    Raises:
        BoardError: IO_FAILURE if the file cannot be read, INVALID_SETTINGS
            if it is malformed or the resulting settings are invalid
    """
    data: Dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        if path.is_symlink():
            raise BoardError(ErrorKind.INVALID_SETTINGS,
                             f"settings file cannot be a symlink: {path}")
        try:
            with open(path, "r") as f:
                loaded = yaml.safe_load(f)
        except OSError as e:
            raise BoardError(ErrorKind.IO_FAILURE, f"{path}: {e}") from e
        except yaml.YAMLError as e:
            raise BoardError(ErrorKind.INVALID_SETTINGS, f"{path}: {e}") from e

        if loaded is None:
            loaded = {}
        if isinstance(loaded, dict) and isinstance(loaded.get("routing"), dict):
            loaded = loaded["routing"]
        if not isinstance(loaded, dict):
            raise BoardError(ErrorKind.INVALID_SETTINGS,
                             f"{path} must contain a mapping of settings")
        data.update(loaded)
        logger.debug(f"Loaded {len(loaded)} setting(s) from {path}")

    data.update({k: v for k, v in overrides.items() if v is not None})

    settings = RouteSettings.from_dict(data)
    settings.validate()
    return settings
