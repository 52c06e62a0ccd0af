from __future__ import annotations
from dataclasses import dataclass


@dataclass
class SessionConfig:
    """
    Recognition tuning injected into the pipeline components.
    All times are in seconds.
    """
    # ---- classifier ----------------------------------------------------
    k: int = 3

    # ---- letter stabilizer ---------------------------------------------
    stabilizer: str = "window_lock"     # or "consecutive"
    window_size: int = 6
    min_stable_frames: int = 3
    min_confidence: float = 0.60
    change_frames: int = 4
    no_confidence_reset_frames: int = 8
    absence_reset_frames: int = 4
    consecutive_frames: int = 4         # only for "consecutive"

    # ---- word segmenter ------------------------------------------------
    idle_word_gap: float = 1.2
    word_cooldown: float = 0.8

    # ---- shortcuts -----------------------------------------------------
    shortcut_stable_frames: int = 5
    shortcut_release_frames: int = 4
    shortcut_cooldown: float = 1.2
    thumb_extended_threshold: float = 0.10
    finger_extended_threshold: float = 0.07

    # ---- session -------------------------------------------------------
    storage_key: str = "fs_knn_v1"
    poll_interval: float = 0.01
    max_capture_samples: int = 50

    def __post_init__(self) -> None:
        for name in (
            "k", "window_size", "min_stable_frames", "change_frames",
            "no_confidence_reset_frames", "absence_reset_frames",
            "consecutive_frames", "shortcut_stable_frames",
            "shortcut_release_frames", "max_capture_samples",
        ):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")
        if self.min_stable_frames > self.window_size:
            raise ValueError("min_stable_frames cannot exceed window_size")
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError("min_confidence must be within [0, 1]")
        for name in ("idle_word_gap", "word_cooldown", "shortcut_cooldown", "poll_interval"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")
        if self.stabilizer not in ("window_lock", "consecutive"):
            raise ValueError(f"unknown stabilizer {self.stabilizer!r}")


# Default instance; import it or build your own in tests.
default_session_config = SessionConfig()
