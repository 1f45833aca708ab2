"""
Slotify command line.

Usage:
    slotify state
    slotify clear
    slotify upload calendar.csv
    slotify slots --required alice bob --optional carol --duration 45 --blackout 12:00-13:00
"""

from __future__ import annotations
from dataclasses import replace
from typing import List, Optional
import argparse
import asyncio
import logging
import sys

from .api.client import SlotifyClient
from .config import ClientConfig
from .contracts import ParticipantCategory, format_time
from .errors import SlotifyError
from .presentation.viewmodels import build_result_list
from .state.lifecycle import UploadPhase, UploadState
from .state.session import SchedulerSession


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="slotify", description="Meeting slot finder client")
    parser.add_argument("--base-url", help="Server URL (default: $SLOTIFY_BASE_URL)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("state", help="Show participants held by the server")
    sub.add_parser("clear", help="Clear server-held calendar data")

    upload = sub.add_parser("upload", help="Upload a calendar export")
    upload.add_argument("file", help="Path to the calendar CSV")

    slots = sub.add_parser("slots", help="Find available meeting slots")
    slots.add_argument("--required", nargs="+", required=True, metavar="NAME")
    slots.add_argument("--optional", nargs="*", default=[], metavar="NAME")
    slots.add_argument("--duration", type=int, help="Meeting length in minutes")
    buffer = slots.add_mutually_exclusive_group()
    buffer.add_argument("--buffer", type=int, help="Minutes kept free between meetings")
    buffer.add_argument("--no-buffer", action="store_true")
    slots.add_argument("--blackout", action="append", default=[], metavar="HH:MM-HH:MM",
                       help="Blocked time window (repeatable)")
    return parser


def _print_state(session: SchedulerSession):
    if not session.has_data:
        print("No calendar data loaded.")
        return
    print(f"{len(session.participants)} participants")
    view = session.timeline_view()
    for row in view.rows:
        busy = ", ".join(str(block) for block in row.busy) or "free"
        print(f"  {row.name}: {busy}")


def _print_upload(state: UploadState):
    if state.phase is UploadPhase.STREAMING and state.message:
        print(f"[*] {state.message}")


async def _run(args: argparse.Namespace, config: ClientConfig) -> int:
    session = SchedulerSession(config)

    async with SlotifyClient(config) as client:
        if args.command == "clear":
            await client.clear_state()
            session.reset()
            print("Calendar data cleared.")
            return 0

        if args.command == "upload":
            state = await client.upload_into(session, args.file, on_state=_print_upload)
            if state.phase is not UploadPhase.COMPLETED:
                state.raise_for_error()
                if state.error is not None:
                    # Stream closed early; absorbed, nothing loaded
                    print(f"[*] {state.error.message}, no calendar data loaded")
                    return 0
                print(f"[!] Upload not started: {state.message}", file=sys.stderr)
                return 1
            _print_state(session)
            return 0

        session.restore(await client.get_state())
        if args.command == "state":
            _print_state(session)
            return 0

        for name in args.required:
            session.toggle(name, ParticipantCategory.REQUIRED)
        for name in args.optional:
            session.toggle(name, ParticipantCategory.OPTIONAL)
        for window in args.blackout:
            start, _, end = window.partition("-")
            session.blackouts.add(start, end)
        if args.buffer is not None:
            session.buffer.set(args.buffer)
        session.buffer.toggle_no_buffer(args.no_buffer)

        slots = await client.search_into(session, args.duration)
        results = build_result_list(slots, len(session.selection.required_names()))
        print(results.header)
        for slot, card in zip(slots, results.cards):
            line = f"  {card.time_label}-{format_time(slot.end)}"
            if card.attendee_summary:
                line += f"  {card.attendee_summary}"
            print(line)
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = ClientConfig.from_env()
    if args.base_url:
        config = replace(config, base_url=args.base_url)

    level = logging.DEBUG if args.verbose else getattr(logging, config.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        return asyncio.run(_run(args, config))
    except SlotifyError as e:
        print(f"[!] Failed: {e.message}", file=sys.stderr)
        return 1
    except (ValueError, OSError) as e:
        print(f"[!] {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
