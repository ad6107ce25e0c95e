"""
src/data/fleet.py
─────────────────
Roster helpers built on config/fleet.py.

Vehicle id : "<series>-<3-digit number>"  e.g. EMU-A1-001, EMU-A2-053
Device id  : "<depot>-PM-<local id>"      e.g. MOC-PM-A1
"""
from __future__ import annotations

from datetime import datetime

from config.fleet import DEPOT_CONFIG, DEPOT_POINT_MACHINES, EMU_SERIES, LINE_STATIONS, SUKHUMVIT_STATIONS
from src.data.models import DepotAnnouncement, FleetEntry


def depot_info(depot_id: str) -> dict:
    try:
        return DEPOT_CONFIG[depot_id]
    except KeyError:
        raise ValueError(f"unknown depot {depot_id!r}; expected one of {sorted(DEPOT_CONFIG)}") from None


def stations_for_line(line: str) -> tuple[str, ...]:
    """Station sequence of a line; unknown lines run on the Sukhumvit route."""
    return LINE_STATIONS.get(line, SUKHUMVIT_STATIONS)


def build_fleet(depot_id: str) -> list[FleetEntry]:
    depot_info(depot_id)
    return [
        FleetEntry(
            vehicle_id=f"{s['series']}-{number:03d}",
            series=s["series"],
            manufacturer=s["manufacturer"],
            line=s["line"],
        )
        for s in EMU_SERIES
        if s["depot"] == depot_id
        for number in range(s["start"], s["end"] + 1)
    ]


def point_machine_ids(depot_id: str) -> list[str]:
    depot_info(depot_id)
    return [f"{depot_id}-PM-{local}" for local in DEPOT_POINT_MACHINES.get(depot_id, ())]


def build_announcement(depot_id: str, agent_version: str, connected_at: datetime) -> DepotAnnouncement:
    """Registration event published once per depot at startup (retained by the broker)."""
    info = depot_info(depot_id)
    fleet = build_fleet(depot_id)
    return DepotAnnouncement(
        depot_id=depot_id,
        depot_name=info["name"],
        line=info["line"],
        vehicle_count=len(fleet),
        vehicle_roster=[e.vehicle_id for e in fleet],
        device_roster=point_machine_ids(depot_id),
        fleet=fleet,
        agent_version=agent_version,
        connected_at=connected_at,
    )
