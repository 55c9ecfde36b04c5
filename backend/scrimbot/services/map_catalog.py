# Static map knowledge: which server config a map needs, and which maps are
# official for each format.
import re
from dataclasses import dataclass

from scrimbot.core.constants import GameFormat, GameKind


@dataclass(frozen=True)
class ServerConfig:
    name: str
    id: int


SIXES_5CP_SCRIM = ServerConfig("rgl_6s_5cp_scrim", 69)
SIXES_KOTH_SCRIM = ServerConfig("rgl_6s_koth_scrim", 113)
SIXES_5CP_MATCH = ServerConfig("rgl_6s_5cp_match_pro", 70)
SIXES_KOTH_MATCH = ServerConfig("rgl_6s_koth_bo5", 114)
HL_KOTH = ServerConfig("rgl_HL_koth_bo5", 54)
HL_STOPWATCH = ServerConfig("rgl_HL_stopwatch", 55)

# (kind, format) -> [(map prefixes, config)]
SERVER_CONFIGS = {
    (GameKind.SCRIM, GameFormat.SIXES): [
        (("cp_",), SIXES_5CP_SCRIM),
        (("koth_",), SIXES_KOTH_SCRIM),
    ],
    (GameKind.MATCH, GameFormat.SIXES): [
        (("cp_",), SIXES_5CP_MATCH),
        (("koth_",), SIXES_KOTH_MATCH),
    ],
    (GameKind.SCRIM, GameFormat.HIGHLANDER): [
        (("pl_", "cp_"), HL_STOPWATCH),
        (("koth_",), HL_KOTH),
    ],
    (GameKind.MATCH, GameFormat.HIGHLANDER): [
        (("pl_", "cp_"), HL_STOPWATCH),
        (("koth_",), HL_KOTH),
    ],
}

OFFICIAL_MAPS = {
    GameFormat.SIXES: (
        "cp_gullywash_f9",
        "cp_metalworks_f5",
        "cp_process_f12",
        "cp_snakewater_final1",
        "cp_sultry_b8a",
        "cp_sunshine",
        "koth_bagel_rc10",
        "koth_clearcut_b17",
        "cp_granary_pro_rc8",
        "koth_product_final",
    ),
    GameFormat.HIGHLANDER: (
        "cp_steel_f12",
        "koth_ashville_final1",
        "koth_lakeside_f5",
        "koth_product_final",
        "pl_swiftwater_final1",
        "pl_upward_f12",
        "pl_vigil_rc10",
    ),
}

ALL_OFFICIAL_MAPS = frozenset(m for maps in OFFICIAL_MAPS.values() for m in maps)

MAP_SEPARATORS = re.compile(r"[,/\s]+")


def server_config(map_name: str, kind: GameKind, game_format: GameFormat) -> ServerConfig | None:
    for prefixes, config in SERVER_CONFIGS.get((kind, game_format), []):
        if map_name.startswith(prefixes):
            return config
    return None


def is_official(map_name: str, game_format: GameFormat | None = None) -> bool:
    if game_format is None:
        return map_name in ALL_OFFICIAL_MAPS
    return map_name in OFFICIAL_MAPS[game_format]


def sort_catalog(maps, game_format: GameFormat | None = None) -> list[str]:
    # official maps first, then everything else, each alphabetically
    return sorted(maps, key=lambda m: (not is_official(m, game_format), m.lower()))


def parse_map_list(text: str | None) -> list[str]:
    if not text:
        return []
    return [m for m in MAP_SEPARATORS.split(text.strip()) if m]


def has_trailing_separator(text: str) -> bool:
    return bool(text) and (text[-1] in ",/" or text[-1].isspace())


def format_map_list(maps) -> str:
    if not maps:
        return "Maps not set"
    return ", ".join(f"`{m}`" for m in maps)
