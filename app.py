"""
app.py
──────
RailStream Depot Agent — Application Entry Point.

Startup sequence:
  1. Configure logging and resolve depot(s), profile and random source
  2. Build the vehicle and point-machine simulators
  3. Connect the MQTT publisher (or a recording publisher for --dry-run)
  4. Announce each depot, then tick until SIGINT / SIGTERM
"""
import argparse
import asyncio
import logging
import signal
import time

import numpy as np

from config.fleet import DEPOT_IDS
from config.settings import settings
from src.agent.driver import TickDriver
from src.data.point_machines import PointMachineEngine
from src.data.profiles import get_profile
from src.data.simulator import VehicleTelemetryEngine
from src.transport.publisher import MqttPublisher, RecordingPublisher, TopicScheme

_logger = logging.getLogger("railstream")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="RailStream depot telemetry simulator")
    parser.add_argument("--depot", default=settings.DEPOT_ID, help="Depot id, or ALL for every depot")
    parser.add_argument("--profile", default=settings.SIMULATION_PROFILE, help="Simulation profile name")
    parser.add_argument("--seed", type=int, default=settings.SIMULATION_SEED, help="Seed for a reproducible run")
    parser.add_argument("--ticks", type=int, default=None, help="Stop after this many ticks")
    parser.add_argument("--dry-run", action="store_true", help="Do not connect to the broker")
    return parser.parse_args(argv)


async def _run(driver: TickDriver, max_ticks: int | None) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, driver.stop)
        except NotImplementedError:  # Windows event loops
            pass
    await driver.run(max_ticks=max_ticks)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    # ── 1. Depots, profile, randomness ───────────────────────────────────────
    depot_ids = DEPOT_IDS if args.depot.upper() == "ALL" else [args.depot.upper()]
    profile = get_profile(args.profile)
    rng = np.random.default_rng(args.seed)
    _logger.info(
        "Depot agent starting: depots=%s profile=%s seed=%s interval=%dms",
        ",".join(depot_ids), profile.name, args.seed, settings.PUBLISH_INTERVAL_MS,
    )

    # ── 2. Simulators share one random source ────────────────────────────────
    vehicles = VehicleTelemetryEngine(profile=profile, rng=rng)
    point_machines = PointMachineEngine(rng=rng)

    # ── 3. Transport ─────────────────────────────────────────────────────────
    if args.dry_run:
        publisher = RecordingPublisher()
    else:
        publisher = MqttPublisher(
            settings.MQTT_BROKER,
            client_id=f"depot-agent-{'-'.join(depot_ids)}-{int(time.time() * 1000)}",
            reconnect_delay_s=settings.RECONNECT_DELAY_S,
            connect_timeout_s=settings.CONNECT_TIMEOUT_S,
        )
        publisher.start()

    driver = TickDriver(
        depot_ids,
        vehicles,
        point_machines,
        publisher,
        topics=TopicScheme(settings.TOPIC_PREFIX),
        interval_s=settings.PUBLISH_INTERVAL_MS / 1000.0,
        point_machine_every=settings.POINT_MACHINE_EVERY,
        agent_version=settings.AGENT_VERSION,
    )

    # ── 4. Run ───────────────────────────────────────────────────────────────
    try:
        asyncio.run(_run(driver, args.ticks))
    finally:
        if isinstance(publisher, MqttPublisher):
            publisher.stop()
        else:
            _logger.info("Dry run recorded %d messages", len(publisher.messages))


if __name__ == "__main__":
    main()
