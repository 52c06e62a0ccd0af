from core.config import SessionConfig
from core.cooldown_manager import CooldownManager
from core.features import extract_features
from core.pipeline import RecognitionPipeline
from core.session import FrameSource, Session
from core.shortcut_detector import ShortcutDetector
from core.state_stabilizer import (
    ConsecutiveStabilizer,
    StabilizationStrategy,
    WindowLockStabilizer,
)
from core.store import JsonFileStore, KeyValueStore, MemoryStore
from core.symbol_classifier import Dataset, KNNClassifier, SymbolClassifier
from core.word_segmenter import WordSegmenter

# Camera, HandTracker and CameraLandmarkSource pull in OpenCV and MediaPipe;
# import them from their modules directly.

__all__ = [
    "SessionConfig",
    "CooldownManager",
    "extract_features",
    "RecognitionPipeline",
    "FrameSource",
    "Session",
    "ShortcutDetector",
    "ConsecutiveStabilizer",
    "StabilizationStrategy",
    "WindowLockStabilizer",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "Dataset",
    "KNNClassifier",
    "SymbolClassifier",
    "WordSegmenter",
]
