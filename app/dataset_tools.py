"""
Offline tools for a saved fingerspelling dataset.

    python -m app.dataset_tools report --dataset data/fingerspelling.json
    python -m app.dataset_tools export --dataset data/fingerspelling.json --out samples.csv
"""
from __future__ import annotations
import argparse
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd
from sklearn.metrics import accuracy_score, classification_report, confusion_matrix
from sklearn.model_selection import LeaveOneOut, cross_val_predict
from sklearn.neighbors import KNeighborsClassifier

from core.config import default_session_config
from core.store import JsonFileStore
from core.symbol_classifier import Dataset
from domain.models import TrainingSample


def samples_frame(samples: Iterable[TrainingSample]) -> pd.DataFrame:
    """One row per sample: ``label`` then ``f0..fN``."""
    samples = list(samples)
    if not samples:
        return pd.DataFrame(columns=["label"])
    dim = len(samples[0].vector)
    df = pd.DataFrame([s.vector for s in samples], columns=[f"f{i}" for i in range(dim)])
    df.insert(0, "label", [s.label for s in samples])
    return df


def export_csv(samples: Iterable[TrainingSample], path: Union[str, Path]) -> int:
    """Write the samples to CSV. Returns the number of rows written."""
    df = samples_frame(samples)
    df.to_csv(path, index=False)
    return len(df)


def evaluate(samples: Iterable[TrainingSample], k: int = 3) -> Dict[str, Any]:
    """
    Leave-one-out accuracy of a k-NN classifier on the dataset.

    Every sample is predicted from all the others, which matches how the
    live classifier sees a new frame.

    Returns
    -------
    dict
        ``accuracy``, ``samples``, ``counts`` (per label),
        ``confusion`` (DataFrame) and ``report`` (text).
    """
    df = samples_frame(samples)
    if len(df) < 2:
        raise ValueError("need at least 2 samples to evaluate")

    X = df.drop(columns=["label"]).to_numpy()
    y = df["label"].to_numpy()
    labels = sorted(set(y))

    clf = KNeighborsClassifier(n_neighbors=max(1, min(k, len(df) - 1)))
    y_pred = cross_val_predict(clf, X, y, cv=LeaveOneOut())

    return {
        "accuracy": float(accuracy_score(y, y_pred)),
        "samples": len(df),
        "counts": df["label"].value_counts().sort_index().to_dict(),
        "confusion": pd.DataFrame(confusion_matrix(y, y_pred, labels=labels),
                                  index=labels, columns=labels),
        "report": classification_report(y, y_pred, zero_division=0),
    }


def load_samples(path: Union[str, Path], key: str = default_session_config.storage_key) -> List[TrainingSample]:
    raw = JsonFileStore(path).get(key)
    if raw is None:
        return []
    return list(Dataset.from_json(raw))


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Inspect a saved fingerspelling dataset")
    parser.add_argument("command", choices=["report", "export"])
    parser.add_argument("--dataset", required=True, help="JSON store written by the app")
    parser.add_argument("--key", default=default_session_config.storage_key)
    parser.add_argument("--out", help="CSV path for 'export'")
    parser.add_argument("--k", type=int, default=default_session_config.k)
    args = parser.parse_args(argv)

    samples = load_samples(args.dataset, args.key)
    print(f"Dataset loaded: {len(samples)} samples")

    if args.command == "export":
        if not args.out:
            parser.error("export needs --out")
        rows = export_csv(samples, args.out)
        print(f"✓ {rows} rows written to: {args.out}")
        return

    if len(samples) < 2:
        print("Not enough samples to evaluate")
        return

    result = evaluate(samples, k=args.k)
    print("\nLabel distribution:")
    for label, count in result["counts"].items():
        print(f"  {label}: {count}")
    print("\n" + "="*50)
    print(f"Leave-one-out accuracy (k={args.k}): {result['accuracy']:.4f}")
    print("="*50)
    print("\n=== Classification Report ===")
    print(result["report"])
    print("\n=== Confusion Matrix ===")
    print(result["confusion"].to_string())


if __name__ == "__main__":
    main()
