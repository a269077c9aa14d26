import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ..config.config_manager import DecoderPreferences
from ..config.constants import DECODER_LOG_FILENAME
from .events import Event, EventType
from .formatters import ActionFormatter
from .log_finder import find_latest_log
from .log_follower import LogFollower
from .monitoring import get_monitor
from .pipeline import LogPipeline

logger = logging.getLogger(__name__)


def configure_logging(prefs: DecoderPreferences, verbose: bool = False):
    """File + console logging, the file under prefs.log_dir."""
    log_dir = Path(prefs.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file_path = log_dir / DECODER_LOG_FILENAME

    level = logging.DEBUG if verbose else getattr(logging, prefs.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file_path, encoding='utf-8'),
            logging.StreamHandler()
        ],
        force=True,
    )


class DecoderApp:
    """
    Command line front end: replays a saved log or follows the live one and
    prints what the pipeline decodes.
    """

    def __init__(self, prefs: DecoderPreferences, as_json: bool = False, out=None):
        self.prefs = prefs
        self.as_json = as_json
        self.out = out or sys.stdout
        self.formatter = ActionFormatter(use_color=not as_json and self.out.isatty())
        self.pipeline = LogPipeline(max_pending_rpcs=prefs.max_pending_rpcs)
        self.follower: Optional[LogFollower] = None

    def _print(self, text: str):
        print(text, file=self.out, flush=True)

    def _on_event(self, event: Event):
        if self.as_json:
            if event.event_type is EventType.RAW_LINE or event.data is None:
                return
            record = {"event": event.event_type.name.lower(), "source": event.source}
            record.update(event.data.to_dict())
            self._print(json.dumps(record, default=str))
            return

        if event.event_type is EventType.RAW_LINE:
            if self.prefs.show_raw_lines:
                self._print(f"  {event.data.index:>6} | {event.data.message}")
        elif event.event_type is EventType.RPC_COMPLETED:
            self._print(self.formatter.format_rpc_call(event.data))
        elif event.event_type is EventType.EVENT_INTERPRETED:
            self._print(self.formatter.format_event(event.data))
        elif event.event_type is EventType.TEXT_EVENT:
            self._print(self.formatter.format_text_event(event.data))
        elif event.event_type is EventType.GAME_ACTION:
            self._print(self.formatter.format_action(event.data))
        elif event.event_type is EventType.PIPELINE_RESET:
            self._print("--- log reset ---")

    def replay(self, log_path: Path, summary: bool = False) -> int:
        """
        Decode a saved log from start to end.

        Args:
            log_path: Path to a Player.log (or a copy of one)
            summary: Print a table of all game actions at the end instead of
                streaming every item

        Returns:
            Process exit code
        """
        if not summary:
            self.pipeline.bus.subscribe_all(self._on_event)
        try:
            with open(log_path, 'r', encoding='utf-8', errors='replace') as f:
                result = self.pipeline.replay(f)
        except OSError as e:
            logger.error(f"Cannot read {log_path}: {e}")
            return 1

        if summary:
            if self.as_json:
                for action in result.actions:
                    self._print(json.dumps(action.to_dict(), default=str))
            else:
                self._print(self.formatter.format_actions_table(result.actions))
        return 0

    def follow(self, log_path: Path) -> int:
        """Follow the live log until interrupted."""
        self.pipeline.bus.subscribe_all(self._on_event)
        self.follower = LogFollower(
            str(log_path),
            start_at_end=self.prefs.start_at_end,
            poll_interval=self.prefs.poll_interval,
        )
        try:
            self.follower.follow(self.pipeline.process_raw, on_discontinuity=self.pipeline.reset)
        except KeyboardInterrupt:
            logger.info("Interrupted, stopping follower")
            self.follower.close()
        return 0


def _resolve_log_path(explicit: Optional[str], prefs: DecoderPreferences) -> Optional[Path]:
    if explicit:
        return Path(explicit)
    if prefs.log_path:
        return Path(prefs.log_path)
    return find_latest_log()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="MTGA log decoder")
    parser.add_argument("--json", action="store_true", help="Print one JSON object per decoded item")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--max-pending", type=int, default=None,
                        help="Evict the oldest pending RPC call beyond this many")
    parser.add_argument("--config", default=None, help="Preferences file (JSON)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    replay_parser = subparsers.add_parser("replay", help="Decode a saved log file")
    replay_parser.add_argument("file", help="Path to Player.log")
    replay_parser.add_argument("--summary", action="store_true", help="Print a table of game actions at the end")

    follow_parser = subparsers.add_parser("follow", help="Follow the live MTGA log")
    follow_parser.add_argument("--path", default=None, help="Log file (default: auto-detect)")
    follow_parser.add_argument("--from-end", action="store_true", help="Skip what is already in the file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    prefs = DecoderPreferences.load(Path(args.config) if args.config else None).apply_env_overrides()
    if args.max_pending is not None:
        prefs.max_pending_rpcs = args.max_pending if args.max_pending > 0 else None
    configure_logging(prefs, verbose=args.verbose)

    app = DecoderApp(prefs, as_json=args.json)
    try:
        if args.command == "replay":
            return app.replay(Path(args.file), summary=args.summary)

        if args.from_end:
            prefs.start_at_end = True
        log_path = _resolve_log_path(args.path, prefs)
        if log_path is None:
            logger.error("No MTGA log found. Pass --path or set MTGA_LOG_PATH.")
            return 1
        return app.follow(log_path)
    finally:
        get_monitor().log_report()


if __name__ == "__main__":
    sys.exit(main())
