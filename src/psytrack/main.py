"""Command-line entrypoint — summarize capsule exports or run a sample fusion."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from psytrack.capsule import EmotionTimeCapsule
from psytrack.config import get_settings
from psytrack.fusion import FacialSignal, TextSignal, VoiceSignal, WearableSignal
from psytrack.logger import setup_logging
from psytrack.models import ActivityMetadata
from psytrack.pipeline import EmotionTracker


def _summarize(path: Path, label: str | None) -> int:
    capsule = EmotionTimeCapsule(get_settings().capsule_max_entries)
    try:
        imported = capsule.import_data(path.read_text(encoding="utf-8"))
    except OSError:
        imported = False
    if not imported:
        print(f"Could not read a capsule export from {path}.", file=sys.stderr)
        return 2
    summary = capsule.summarize_history()
    period = summary.period.model_copy(update={"label": label}) if label else None
    print(capsule.generate_therapist_summary(period))
    print(json.dumps(summary.model_dump(mode="json"), indent=2))
    return 0


def _demo() -> int:
    tracker = EmotionTracker.from_settings()
    start = 1_700_000_000_000
    minute = 60_000
    activity = ActivityMetadata(activity="homework", timestamp=start)

    for step in range(12):
        observation = tracker.observe(
            face=FacialSignal(embedding=[0.2, 0.8, 0.1], confidence=0.8),
            voice=VoiceSignal(pitch=0.7, energy=0.6, tone="stressed"),
            text=TextSignal(text="I'm so stressed about this test, it's too much"),
            wearable=WearableSignal(heart_rate=108, step_count=10),
            activity=activity,
            now=start + step * minute,
        )
        print(
            f"t+{step:02d}m  {observation.state.mood.value:<12} "
            f"confidence={observation.state.confidence:.2f}"
        )
        for alert in observation.alerts:
            print(f"        ALERT {alert.type.value} [{alert.severity.value}] {alert.suggestion}")

    print(tracker.capsule.generate_therapist_summary(now=start + 12 * minute))
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="psytrack",
        description="Multimodal emotion tracking, alerting and history summaries.",
    )
    sub = parser.add_subparsers(dest="command")

    # ── summarize ─────────────────────────────────────────────
    summarize_parser = sub.add_parser("summarize", help="Summarize an exported capsule JSON file.")
    summarize_parser.add_argument("export", type=Path)
    summarize_parser.add_argument("--label", default=None, help="Period label used in the prose.")

    # ── demo ──────────────────────────────────────────────────
    sub.add_parser("demo", help="Fuse a scripted stream of signals and print alerts.")

    args = parser.parse_args(argv)
    setup_logging(get_settings().log_level)

    if args.command == "summarize":
        sys.exit(_summarize(args.export, args.label))
    elif args.command == "demo":
        sys.exit(_demo())
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
