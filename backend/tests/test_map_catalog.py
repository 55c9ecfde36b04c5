from scrimbot.core.constants import GameFormat, GameKind
from scrimbot.services.map_catalog import (
    format_map_list,
    has_trailing_separator,
    is_official,
    parse_map_list,
    server_config,
    sort_catalog,
)


def test_server_config_by_kind_format_and_prefix():
    assert server_config("cp_process_f12", GameKind.SCRIM, GameFormat.SIXES).id == 69
    assert server_config("koth_product_final", GameKind.SCRIM, GameFormat.SIXES).id == 113
    assert server_config("koth_product_final", GameKind.MATCH, GameFormat.SIXES).id == 114
    assert server_config("pl_upward_f12", GameKind.SCRIM, GameFormat.HIGHLANDER).id == 55
    assert server_config("koth_lakeside_f5", GameKind.MATCH, GameFormat.HIGHLANDER).id == 54


def test_server_config_unknown_prefix():
    assert server_config("ultiduo_baloo", GameKind.SCRIM, GameFormat.SIXES) is None
    assert server_config("pl_upward_f12", GameKind.SCRIM, GameFormat.SIXES) is None


def test_is_official_per_format():
    assert is_official("cp_sunshine", GameFormat.SIXES)
    assert not is_official("cp_sunshine", GameFormat.HIGHLANDER)
    assert is_official("pl_upward_f12")
    assert not is_official("cp_badlands")


def test_sort_catalog_puts_official_maps_first():
    maps = ["cp_badlands", "koth_product_final", "cp_sunshine", "cp_ashville"]
    assert sort_catalog(maps, GameFormat.SIXES) == [
        "cp_sunshine",
        "koth_product_final",
        "cp_ashville",
        "cp_badlands",
    ]


def test_parse_map_list_accepts_any_separator():
    assert parse_map_list("cp_process_f12, koth_product_final/cp_sunshine") == [
        "cp_process_f12",
        "koth_product_final",
        "cp_sunshine",
    ]
    assert parse_map_list("  ") == []
    assert parse_map_list(None) == []


def test_trailing_separator():
    assert has_trailing_separator("cp_process_f12,")
    assert has_trailing_separator("cp_process_f12 ")
    assert has_trailing_separator("cp_process_f12/")
    assert not has_trailing_separator("cp_process_f12")
    assert not has_trailing_separator("")


def test_format_map_list():
    assert format_map_list([]) == "Maps not set"
    assert format_map_list(["cp_sunshine", "koth_bagel_rc10"]) == "`cp_sunshine`, `koth_bagel_rc10`"
