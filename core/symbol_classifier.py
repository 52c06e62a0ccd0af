"""
SymbolClassifier — maps a feature vector to a (label, confidence) pair.

The canonical implementation is an online k-NN over the recorded
training samples: new symbols are added at runtime by appending samples,
there is no training phase.
"""
from __future__ import annotations
import json
import logging
import math
import threading
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

import numpy as np

from domain.errors import InvalidFrame, InvalidLabel, StoreError
from domain.models import Prediction, TrainingSample

logger = logging.getLogger(__name__)


def normalize_label(label: str) -> str:
    """Trimmed, upper-case label. Raises InvalidLabel when empty."""
    normalized = str(label).strip().upper()
    if not normalized:
        raise InvalidLabel("label cannot be empty")
    return normalized


# ---- dataset ---------------------------------------------------------------
class Dataset:
    """
    Ordered collection of TrainingSamples.

    Serialises to the JSON blob ``[{"label": "A", "vec": [...]}, ...]``.
    """

    def __init__(self, samples: Iterable[TrainingSample] = ()) -> None:
        self._samples: List[TrainingSample] = list(samples)

    def append(self, sample: TrainingSample) -> None:
        self._samples.append(sample)

    def clear(self) -> None:
        self._samples.clear()

    @property
    def labels(self) -> List[str]:
        return sorted({s.label for s in self._samples})

    @property
    def dimension(self) -> Optional[int]:
        return len(self._samples[0].vector) if self._samples else None

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[TrainingSample]:
        return iter(list(self._samples))

    # ------------------------------------------------------------------
    def to_json(self) -> str:
        return json.dumps([{"label": s.label, "vec": list(s.vector)} for s in self._samples])

    @classmethod
    def from_json(cls, raw: str) -> "Dataset":
        """
        Parse a serialised dataset.

        Raises
        ------
        StoreError
            The blob is not valid JSON, does not have the expected shape,
            or holds empty or non-finite vectors.
        """
        try:
            items = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise StoreError(f"dataset blob is not valid JSON: {exc}") from exc

        if not isinstance(items, list):
            raise StoreError("dataset blob must be a JSON list")

        samples: List[TrainingSample] = []
        for i, item in enumerate(items):
            try:
                label = normalize_label(item["label"])
                vector = tuple(float(v) for v in item["vec"])
            except (KeyError, TypeError, ValueError) as exc:
                raise StoreError(f"malformed sample #{i}: {exc}") from exc
            if not vector:
                raise StoreError(f"sample #{i} has an empty vector")
            if not all(math.isfinite(v) for v in vector):
                raise StoreError(f"sample #{i} has non-finite values")
            if samples and len(vector) != len(samples[0].vector):
                raise StoreError(f"sample #{i} has dimension {len(vector)}, "
                                 f"expected {len(samples[0].vector)}")
            samples.append(TrainingSample(label, vector))
        return cls(samples)


# ---- classifiers -----------------------------------------------------------
class SymbolClassifier(ABC):
    """Base class for symbol classifiers."""

    @abstractmethod
    def add_example(self, label: str, vector: Sequence[float]) -> TrainingSample:
        """Append one training sample."""

    @abstractmethod
    def predict(self, vector: Sequence[float], k: int = 3) -> Optional[Prediction]:
        """Best label for ``vector``, or None when nothing has been recorded."""

    @abstractmethod
    def reset(self) -> None:
        """Forget every sample."""

    @abstractmethod
    def replace(self, dataset: Dataset) -> None:
        """Swap in a freshly loaded dataset."""

    @abstractmethod
    def to_json(self) -> str:
        """Serialised dataset, as understood by Dataset.from_json."""

    @property
    @abstractmethod
    def labels(self) -> List[str]:
        """Sorted distinct labels known to the classifier."""

    @abstractmethod
    def __len__(self) -> int: ...


class KNNClassifier(SymbolClassifier):
    """
    k-nearest-neighbour classifier over a mutable Dataset.

    Voting: majority among the k nearest samples (k is clipped to the
    dataset size). Confidence = winning votes / k. Ties on vote count go
    to the label with the lowest total distance, then alphabetically.

    Parameters
    ----------
    dataset : Dataset, optional
        Initial samples. The classifier takes ownership.
    """

    def __init__(self, dataset: Optional[Dataset] = None) -> None:
        self._dataset = dataset if dataset is not None else Dataset()
        self._lock = threading.Lock()
        self._matrix: Optional[np.ndarray] = None
        self._matrix_labels: List[str] = []

    # ------------------------------------------------------------------
    def add_example(self, label: str, vector: Sequence[float]) -> TrainingSample:
        vec = tuple(float(v) for v in np.asarray(vector, dtype=np.float64).ravel())
        sample = TrainingSample(normalize_label(label), vec)
        with self._lock:
            dim = self._dataset.dimension
            if dim is not None and dim != len(vec):
                raise InvalidFrame(f"vector has dimension {len(vec)}, dataset uses {dim}")
            self._dataset.append(sample)
            self._matrix = None
        return sample

    def predict(self, vector: Sequence[float], k: int = 3) -> Optional[Prediction]:
        if k < 1:
            raise ValueError("k must be >= 1")
        query = np.asarray(vector, dtype=np.float64).ravel()

        with self._lock:
            if len(self._dataset) == 0:
                return None
            matrix, labels = self._snapshot()

        if query.shape[0] != matrix.shape[1]:
            raise InvalidFrame(f"vector has dimension {query.shape[0]}, "
                               f"dataset uses {matrix.shape[1]}")

        distances = np.linalg.norm(matrix - query, axis=1)
        k_eff = min(k, len(labels))
        nearest = np.argsort(distances, kind="stable")[:k_eff]

        votes: Dict[str, List[float]] = {}
        for i in nearest:
            tally = votes.setdefault(labels[i], [0, 0.0])
            tally[0] += 1
            tally[1] += float(distances[i])

        label, (count, total) = min(
            votes.items(), key=lambda kv: (-kv[1][0], kv[1][1], kv[0])
        )
        return Prediction(label=label, confidence=count / k_eff, distance=total / count)

    def reset(self) -> None:
        with self._lock:
            self._dataset.clear()
            self._matrix = None

    def replace(self, dataset: Dataset) -> None:
        """Swap in a freshly loaded dataset."""
        with self._lock:
            self._dataset = dataset
            self._matrix = None

    # ------------------------------------------------------------------
    @property
    def dataset(self) -> Dataset:
        return self._dataset

    @property
    def labels(self) -> List[str]:
        with self._lock:
            return self._dataset.labels

    def __len__(self) -> int:
        return len(self._dataset)

    def to_json(self) -> str:
        with self._lock:
            return self._dataset.to_json()

    def _snapshot(self):
        # caller holds the lock
        if self._matrix is None:
            samples = list(self._dataset)
            self._matrix = np.array([s.vector for s in samples], dtype=np.float64)
            self._matrix_labels = [s.label for s in samples]
            logger.debug("Rebuilt k-NN matrix: %d samples, dim %d",
                         *self._matrix.shape)
        return self._matrix, self._matrix_labels
