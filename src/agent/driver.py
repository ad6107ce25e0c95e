"""
src/agent/driver.py
───────────────────
Fixed-interval tick loop feeding simulator events to a publisher.

Each driver tick:
  - advances the next vehicle of every depot (round-robin over the roster),
    so with N vehicles and period T each vehicle moves every N×T
  - every ``point_machine_every`` ticks, sweeps all point machines of each depot

Single-threaded: the loop only yields at the interval boundary, so the
engines and their state registries are never touched concurrently.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from src.analytics.health_index import worst_severity
from src.data.fleet import build_announcement, build_fleet, depot_info
from src.data.models import DepotAnnouncement, FleetEntry, PointMachineTelemetry, VehicleTelemetry
from src.data.point_machines import PointMachineEngine
from src.data.simulator import Clock, VehicleTelemetryEngine, utcnow
from src.transport.publisher import Publisher, TopicScheme

_logger = logging.getLogger(__name__)


@dataclass
class DepotRoster:
    depot_id: str
    depot_name: str
    entries: list[FleetEntry]
    cursor: int = 0

    @classmethod
    def for_depot(cls, depot_id: str) -> DepotRoster:
        return cls(depot_id=depot_id, depot_name=depot_info(depot_id)["name"], entries=build_fleet(depot_id))

    def next_entry(self) -> FleetEntry:
        entry = self.entries[self.cursor % len(self.entries)]
        self.cursor += 1
        return entry


@dataclass
class TickResult:
    tick: int
    vehicles: list[VehicleTelemetry] = field(default_factory=list)
    point_machines: list[PointMachineTelemetry] = field(default_factory=list)


class TickDriver:
    def __init__(
        self,
        depot_ids: list[str],
        vehicles: VehicleTelemetryEngine,
        point_machines: PointMachineEngine,
        publisher: Publisher,
        *,
        topics: TopicScheme | None = None,
        interval_s: float = 3.0,
        point_machine_every: int = 3,
        agent_version: str = "1.0.0",
        clock: Clock = utcnow,
    ) -> None:
        if not depot_ids:
            raise ValueError("TickDriver needs at least one depot")
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        if point_machine_every < 1:
            raise ValueError("point_machine_every must be >= 1")
        self.rosters = [DepotRoster.for_depot(d) for d in depot_ids]
        self.vehicles = vehicles
        self.point_machines = point_machines
        self.publisher = publisher
        self.topics = topics or TopicScheme()
        self.interval_s = interval_s
        self.point_machine_every = point_machine_every
        self.agent_version = agent_version
        self.clock = clock
        self.tick_count = 0
        self._stopped = asyncio.Event()

    # ── Publishing ────────────────────────────────────────────────────────────

    def _publish(self, topic: str, payload: dict[str, Any], *, qos: int = 1, retain: bool = False) -> bool:
        try:
            self.publisher.publish(topic, payload, qos=qos, retain=retain)
        except Exception:
            _logger.exception("Publish error for %s", topic)
            return False
        return True

    def announce(self) -> list[DepotAnnouncement]:
        """Publish the retained registration of every depot."""
        announcements = []
        for roster in self.rosters:
            announcement = build_announcement(roster.depot_id, self.agent_version, self.clock())
            self._publish(self.topics.depot_status(roster.depot_id), announcement.to_payload(), retain=True)
            _logger.info(
                "[%s] %s: %d trains, %d point machines",
                roster.depot_id,
                roster.depot_name,
                announcement.vehicle_count,
                len(announcement.device_roster),
            )
            announcements.append(announcement)
        return announcements

    # ── Ticking ───────────────────────────────────────────────────────────────

    def tick(self) -> TickResult:
        self.tick_count += 1
        result = TickResult(tick=self.tick_count)
        sweep_due = self.tick_count % self.point_machine_every == 0

        for roster in self.rosters:
            entry = roster.next_entry()
            event = self.vehicles.advance(entry.vehicle_id, entry, depot_id=roster.depot_id, depot_name=roster.depot_name)
            result.vehicles.append(event)
            if self._publish(self.topics.vehicle(roster.depot_id, entry.vehicle_id), event.to_payload()):
                worst = worst_severity(event.alerts)
                alert_tag = f" ⚠ {len(event.alerts)} alert(s), worst {worst.value}" if worst is not None else ""
                _logger.info(
                    "[%s] %s | %-11s | %5.1f km/h | Health: %d%% | %s%s",
                    roster.depot_id,
                    entry.vehicle_id,
                    event.operational_status.value,
                    event.speed,
                    event.health_score,
                    event.current_stop,
                    alert_tag,
                )

            if sweep_due:
                for pm in self.point_machines.sweep(roster.depot_id):
                    result.point_machines.append(pm)
                    self._publish(self.topics.point_machine(roster.depot_id, pm.device_id), pm.to_payload())

        return result

    async def run(self, max_ticks: int | None = None) -> None:
        """Announce, then tick every ``interval_s`` until stopped or ``max_ticks`` reached."""
        loop = asyncio.get_running_loop()
        self._stopped.clear()
        self.announce()
        deadline = loop.time()
        ticks = 0
        while not self._stopped.is_set():
            self.tick()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            deadline += self.interval_s
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=max(0.0, deadline - loop.time()))
            except TimeoutError:
                pass
        _logger.info("Tick loop stopped after %d ticks", ticks)

    def stop(self) -> None:
        self._stopped.set()
