from __future__ import annotations
import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from core.config import SessionConfig


@dataclass
class AppConfig:
    """
    Central configuration for the desktop runner.
    Recognition tuning lives in the nested SessionConfig.
    """
    # ---- paths ---------------------------------------------------------
    dataset_path: Path = Path("data/fingerspelling.json")

    # ---- camera --------------------------------------------------------
    camera_device: int = 0
    fps_limit: int = 30
    frame_width: Optional[int] = None
    frame_height: Optional[int] = None

    # ---- tracker -------------------------------------------------------
    min_detection_confidence: float = 0.6
    min_tracking_confidence: float = 0.6

    # ---- trainer -------------------------------------------------------
    samples_per_press: int = 10

    # ---- ui ------------------------------------------------------------
    window_name: str = "SignKey"
    event_history: int = 5

    # ---- recognition ---------------------------------------------------
    session: SessionConfig = field(default_factory=SessionConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """
        Build a config from plain data. Keys missing from ``data`` keep
        their defaults; unknown keys raise ValueError.
        """
        data = dict(data)
        session_data = data.pop("session", {})
        known = {f.name for f in fields(cls)} - {"session"}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"unknown config keys: {', '.join(sorted(unknown))}")

        session_known = {f.name for f in fields(SessionConfig)}
        session_unknown = set(session_data) - session_known
        if session_unknown:
            raise ValueError(f"unknown session keys: {', '.join(sorted(session_unknown))}")

        if "dataset_path" in data:
            data["dataset_path"] = Path(data["dataset_path"])
        return cls(session=SessionConfig(**session_data), **data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "AppConfig":
        with Path(path).open("r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))


# Default instance; import it or build your own in tests.
default_config = AppConfig()
