"""
main.py — desktop entry point.

    Camera → HandTracker → Session (frame loop thread)
                              → on_letter / on_word / on_shortcut → console + overlay

The main thread only renders and handles keys; recognition runs on the
session's own thread.
"""
from __future__ import annotations
import argparse
import logging
import time
from typing import List, Optional

from app.config import AppConfig, default_config
from app.ui import OpenCVUI
from core.camera import Camera
from core.hand_tracker import HandTracker
from core.landmark_source import CameraLandmarkSource
from core.session import Session
from core.store import JsonFileStore
from domain.enums import EventKind
from domain.errors import StoreError


def _handle_key(key: int, session: Session, config: AppConfig) -> None:
    char = chr(key).upper() if key < 128 else ""
    if "A" <= char <= "Z":
        session.capture_samples(char, config.samples_per_press)
    elif char == "1":
        try:
            session.save()
            print(f"[SAVE] {session.sample_count} samples → {config.dataset_path}")
        except StoreError as exc:
            print(f"[ERROR] Save failed: {exc}")
    elif char == "0":
        session.reset()
        print("[RESET] Dataset cleared")


def run(config: AppConfig = default_config) -> None:
    print("="*55)
    print("  SIGNKEY — fingerspelling recognition")
    print("="*55)
    print(f"  Dataset : {config.dataset_path}")
    print(f"  FPS cap : {config.fps_limit}")
    print(f"  Conf ≥  : {config.session.min_confidence:.0%}")
    print("  A-Z record, 1 save, 0 reset, ESC quit")
    print("="*55 + "\n")

    session = Session(config.session, store=JsonFileStore(config.dataset_path))
    try:
        session.load()
    except StoreError as exc:
        print(f"[WARN] Could not load dataset: {exc}")
    print(f"  Labels  : {', '.join(session.labels) or '(none yet)'}\n")

    ui = OpenCVUI(config)

    def report(kind: EventKind):
        def callback(value: str) -> None:
            print(f"[{kind.value}] {value}")
            ui.push_event(kind, value)
        return callback

    session.on_letter(report(EventKind.LETTER))
    session.on_word(report(EventKind.WORD))
    session.on_shortcut(report(EventKind.SHORTCUT))

    source = CameraLandmarkSource(
        Camera(config.camera_device, config.fps_limit, config.frame_width, config.frame_height),
        HandTracker(config.min_detection_confidence, config.min_tracking_confidence),
    )

    try:
        session.start(source)
        while True:
            frame = source.latest_frame()
            if frame is None:
                time.sleep(0.01)
                continue

            ui.render(
                frame=frame,
                phase=session.phase,
                locked_symbol=session.locked_symbol,
                prediction=session.last_prediction,
                word_buffer=session.word_buffer,
                capture_remaining=session.capture_remaining,
            )

            if ui.should_quit():
                break
            if ui.last_key != 255:
                _handle_key(ui.last_key, session, config)

    finally:
        session.stop()
        source.close()
        ui.close()
        print("\n✓ Application closed cleanly")


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Real-time fingerspelling recognition")
    parser.add_argument("--config", help="JSON file overriding the default configuration")
    parser.add_argument("--verbose", "-v", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    config = AppConfig.from_file(args.config) if args.config else default_config
    run(config)


if __name__ == "__main__":
    main()
