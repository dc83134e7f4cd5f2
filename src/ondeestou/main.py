"""Main tracker application."""

import sys
import json
import signal
import asyncio
import logging
import argparse
from typing import Any, Callable, Iterable, Iterator, Optional, TextIO

from .config import (
    LOG_LEVEL, DEVICE_PROFILE, QUEUE_TIMER_INTERVAL, ANNOUNCE_FULL_ADDRESS, PROJECT_NAME,
)
from .address_cache import AddressCache
from .announcer import ChangeAnnouncer
from .gatekeeper import PositionGatekeeper
from .notification_queue import NotificationItem, PriorityNotificationQueue
from .reverse_geocoder import ReverseGeocoder

logger = logging.getLogger(__name__)


def configure_logging(level: str = LOG_LEVEL):
    """Configure root logging for the command line application."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # urllib3 logs every connection at DEBUG, keep it quiet
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def read_positions(stream: TextIO) -> Iterator[dict]:
    """Yield raw positions from a JSON-lines stream, skipping bad lines."""
    for line_number, line in enumerate(stream, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning(f"Skipping line {line_number}: invalid JSON ({e})")
            continue
        if not isinstance(data, dict):
            logger.warning(f"Skipping line {line_number}: expected a JSON object")
            continue
        yield data


def print_notification(text: str):
    print(text, flush=True)


class Tracker:
    """
    Composition root wiring the pipeline together.

    raw position -> PositionGatekeeper -> ReverseGeocoder -> AddressCache
    -> ChangeAnnouncer -> PriorityNotificationQueue -> speak()

    Components:
        - gatekeeper: filters raw positions (one per process)
        - geocoder: resolves accepted positions
        - address_cache: stores addresses, detects changes (one per process)
        - queue: notifications waiting to be spoken
        - announcer: builds notification texts from changes
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        profile: str = DEVICE_PROFILE,
        speak: Callable[[str], None] = print_notification,
        gatekeeper: Optional[PositionGatekeeper] = None,
        address_cache: Optional[AddressCache] = None,
        queue: Optional[PriorityNotificationQueue] = None,
        announce_full_address: bool = ANNOUNCE_FULL_ADDRESS,
    ):
        self.gatekeeper = gatekeeper if gatekeeper is not None else PositionGatekeeper(profile=profile)
        self.geocoder = ReverseGeocoder(client)
        self.address_cache = address_cache if address_cache is not None else AddressCache()
        self.queue = queue if queue is not None else PriorityNotificationQueue()
        self.announcer = ChangeAnnouncer(self.address_cache, self.queue, announce_full_address)
        self.speak = speak
        self.running = False

        self.gatekeeper.subscribe(self.geocoder)
        self.geocoder.subscribe(self.address_cache)
        self.geocoder.subscribe(self.announcer)

    def submit(self, raw_position: Any):
        """Hand a raw position to the gatekeeper."""
        return self.gatekeeper.submit(raw_position)

    async def process(self, raw_position: Any):
        """Submit a position and wait until its address lookup finished."""
        event = self.submit(raw_position)
        await self.geocoder.drain()
        return event

    def speak_next(self) -> Optional[NotificationItem]:
        """Speak the next queued notification, if any."""
        item = self.queue.dequeue()
        if item is not None:
            logger.info(f"Speaking (priority {item.priority}): {item.text}")
            try:
                self.speak(item.text)
            except Exception as e:
                logger.error(f"Error speaking notification: {e}")
        return item

    def speak_all(self) -> int:
        """Speak every queued notification. Returns how many were spoken."""
        spoken = 0
        while self.speak_next() is not None:
            spoken += 1
        return spoken

    async def _speaker_loop(self, interval: float):
        """Speak one notification every interval seconds."""
        while self.running:
            self.speak_next()
            await asyncio.sleep(interval)

    async def replay(self, positions: Iterable[dict], realtime: bool = False, interval: float = QUEUE_TIMER_INTERVAL):
        """
        Feed recorded positions through the pipeline.

        In real-time mode the gaps between position timestamps are honoured
        and notifications are spoken every ``interval`` seconds; otherwise
        positions are processed back to back and the queue is flushed after
        each one.
        """
        self.running = True
        speaker = None
        if realtime:
            speaker = asyncio.get_running_loop().create_task(self._speaker_loop(interval))

        previous_timestamp = None
        try:
            for raw in positions:
                if not self.running:
                    break
                timestamp = raw.get("timestamp")
                if realtime and previous_timestamp is not None and isinstance(timestamp, (int, float)):
                    await asyncio.sleep(max(0.0, timestamp - previous_timestamp))
                if isinstance(timestamp, (int, float)):
                    previous_timestamp = timestamp
                await self.process(raw)
                if not realtime:
                    self.speak_all()
        finally:
            self.running = False
            if speaker is not None:
                speaker.cancel()
                try:
                    await speaker
                except asyncio.CancelledError:
                    pass
            await self.geocoder.drain()
            self.speak_all()

    def stop(self):
        """Stop a running replay."""
        if not self.running:
            return
        logger.info("Stopping tracker...")
        self.running = False


def main(argv: Optional[list] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="ondeestou",
        description=f"{PROJECT_NAME}: announce address changes along a recorded route",
    )
    parser.add_argument(
        "positions", nargs="?", default="-",
        help="JSON-lines file with one position per line ('-' for stdin)",
    )
    parser.add_argument("--realtime", action="store_true", help="honour the gaps between timestamps")
    parser.add_argument("--profile", choices=["mobile", "desktop"], default=DEVICE_PROFILE,
                        help="device profile used for accuracy thresholds")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="logging level (default from LOG_LEVEL)")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    tracker = Tracker(profile=args.profile)

    def _signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        tracker.stop()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    logger.info(f"Starting {PROJECT_NAME} ({args.profile} profile)")
    if args.positions == "-":
        asyncio.run(tracker.replay(read_positions(sys.stdin), realtime=args.realtime))
    else:
        with open(args.positions, "r", encoding="utf-8") as stream:
            asyncio.run(tracker.replay(read_positions(stream), realtime=args.realtime))
    logger.info("Tracker stopped")


if __name__ == "__main__":
    main()
