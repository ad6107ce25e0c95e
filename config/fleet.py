"""
config/fleet.py
───────────────
BTS Skytrain fleet roster, station lists and depot registry.

Fleet composition (98 trains total):
  MOC — Mo Chit Depot : EMU-A1 (1-35) + EMU-B1 (36-47) + EMU-B2 (48-52) = 52 trains
  KHU — Khukhot Depot : EMU-A2 (53-74)                                  = 22 trains
  KHA — Kheha Depot   : EMU-B3 (75-98)                                  = 24 trains
"""

# ── Station lists ─────────────────────────────────────────────────────────────
SUKHUMVIT_STATIONS: tuple[str, ...] = (
    "Mo Chit", "Saphan Khwai", "Sena Nikhom", "Ari", "Sanam Pao",
    "Victory Monument", "Phaya Thai", "Ratchathewi", "Siam",
    "Chit Lom", "Phloen Chit", "Nana", "Asok", "Phrom Phong",
    "Thong Lo", "Ekkamai", "Phra Khanong", "On Nut", "Bang Chak",
    "Punnawithi", "Udom Suk", "Bang Na", "Bearing", "Samrong",
    "Pu Chao", "Chang Erawan", "Kheha",
)

SILOM_STATIONS: tuple[str, ...] = (
    "National Stadium", "Siam", "Ratchadamri", "Sala Daeng",
    "Chong Nonsi", "Surasak", "Saphan Taksin", "Krung Thon Buri",
    "Wongwian Yai", "Pho Nimit", "Talat Phlu", "Wutthakat", "Bang Wa",
)

LINE_STATIONS: dict[str, tuple[str, ...]] = {
    "Sukhumvit": SUKHUMVIT_STATIONS,
    "Silom": SILOM_STATIONS,
}

# ── EMU series ────────────────────────────────────────────────────────────────
EMU_SERIES: list[dict] = [
    {"series": "EMU-A1", "manufacturer": "Siemens Mobility", "start": 1, "end": 35, "line": "Sukhumvit", "depot": "MOC"},
    {"series": "EMU-B1", "manufacturer": "CNR", "start": 36, "end": 47, "line": "Sukhumvit", "depot": "MOC"},
    {"series": "EMU-B2", "manufacturer": "CNR", "start": 48, "end": 52, "line": "Sukhumvit", "depot": "MOC"},
    {"series": "EMU-A2", "manufacturer": "Siemens-Bozankaya", "start": 53, "end": 74, "line": "Sukhumvit", "depot": "KHU"},
    {"series": "EMU-B3", "manufacturer": "CRRC", "start": 75, "end": 98, "line": "Sukhumvit", "depot": "KHA"},
]

# ── Depot registry ────────────────────────────────────────────────────────────
DEPOT_CONFIG: dict[str, dict] = {
    "MOC": {"id": "MOC", "name": "Mo Chit Depot", "line": "Sukhumvit"},
    "KHU": {"id": "KHU", "name": "Khukhot Depot", "line": "Sukhumvit"},
    "KHA": {"id": "KHA", "name": "Kheha Depot", "line": "Sukhumvit"},
}

# Trackside point machines, statically enumerated per depot
DEPOT_POINT_MACHINES: dict[str, tuple[str, ...]] = {
    "MOC": ("A1", "A2", "A3", "B1", "B2", "C1", "C2", "D1"),
    "KHU": ("A1", "A2", "B1", "B2", "C1"),
    "KHA": ("A1", "A2", "B1", "B2", "C1", "C2"),
}

DEPOT_IDS = list(DEPOT_CONFIG.keys())
