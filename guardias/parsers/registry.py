from __future__ import annotations

from guardias.config import ParserProfile
from guardias.core.constants import (
    CUELLAR,
    EL_ESPINAR,
    SEGOVIA_CAPITAL,
    SEGOVIA_RURAL,
    ZONES_BY_ID,
)
from guardias.core.models import (
    CAPITAL_DAY,
    CAPITAL_NIGHT,
    FULL_DAY,
    RURAL_DAYTIME,
    RURAL_EXTENDED_DAYTIME,
    Region,
)
from guardias.parsers.errors import UnknownRegionError
from guardias.parsers.layouts import ColumnLayout, LayoutKind, LayoutStrategy, ZoneSpec
from guardias.parsers.scanner import Margins

RURAL_ZONES: tuple[ZoneSpec, ...] = (
    ZoneSpec(
        zbs=ZONES_BY_ID["riaza-sepulveda"],
        span=FULL_DAY,
        headers=("RIAZA", "RIAZA SEPULVEDA", "SEPULVEDA"),
        towns=("RIAZA", "SEPÚLVEDA", "CEREZO ABAJO", "BOCEGUILLAS", "AYLLÓN"),
    ),
    ZoneSpec(
        zbs=ZONES_BY_ID["la-granja"],
        span=RURAL_EXTENDED_DAYTIME,
        headers=("SAN ILDEFONSO", "REAL SITIO DE SAN ILDEFONSO"),
        towns=("SAN ILDEFONSO", "VALENCIANA", "PLAZA LOS DOLORES"),
    ),
    ZoneSpec(
        zbs=ZONES_BY_ID["la-sierra"],
        span=RURAL_DAYTIME,
        towns=("PRÁDENA", "ARCONES", "NAVAFRÍA", "TORREVAL"),
    ),
    ZoneSpec(
        zbs=ZONES_BY_ID["fuentiduena"],
        span=RURAL_DAYTIME,
        towns=(
            "HONTALBILLA",
            "TORRECILLA",
            "OLOMBRADA",
            "FUENTIDUEÑA",
            "SACRAMENIA",
            "FUENTESAÚCO",
        ),
    ),
    ZoneSpec(
        zbs=ZONES_BY_ID["carbonero"],
        span=RURAL_DAYTIME,
        headers=("CARBONERO EL MAYOR",),
        towns=(
            "NAVALMANZANO",
            "CARBONERO",
            "ZARZUELA DEL PINAR",
            "ESCARABAJOSA",
            "LASTRAS DE CUÉLLAR",
            "FUENTEPELAYO",
            "CANTIMPALOS",
            "AGUILAFUENTE",
            "MOZONCILLO",
            "ESCALONA",
        ),
    ),
    ZoneSpec(
        zbs=ZONES_BY_ID["navas-asuncion"],
        span=RURAL_DAYTIME,
        headers=("NAVA DE LA ASUNCIÓN",),
        towns=(
            "COCA",
            "SANTA MARÍA LA REAL DE NIEVA",
            "NIEVA",
            "SANTIUSTE",
            "NAVAS DE ORO",
            "NAVA DE LA ASUNCIÓN",
            "BERNARDOS",
        ),
    ),
    ZoneSpec(
        zbs=ZONES_BY_ID["villacastin"],
        span=RURAL_DAYTIME,
        towns=("VILLACASTÍN", "ZARZUELA DEL MONTE", "NAVAS DE SAN ANTONIO", "MAELLO"),
    ),
    ZoneSpec(
        zbs=ZONES_BY_ID["cantalejo"],
        span=RURAL_DAYTIME,
        towns=("CANTALEJO",),
    ),
)


def _capital(profile: ParserProfile) -> LayoutStrategy:
    date_ratio = profile.capital_date_ratio
    shift_ratio = (1.0 - date_ratio) / 2
    return LayoutStrategy(
        kind=LayoutKind.DAY_NIGHT,
        region=SEGOVIA_CAPITAL,
        columns=(
            ColumnLayout("date", 0.0, date_ratio),
            ColumnLayout("day", date_ratio, shift_ratio),
            ColumnLayout("night", date_ratio + shift_ratio, shift_ratio),
        ),
        shift_columns=(("day", CAPITAL_DAY), ("night", CAPITAL_NIGHT)),
        margins=Margins(left=profile.page_margin, right=profile.page_margin),
        column_gap=profile.column_gap,
    )


def _full_day(region: Region, profile: ParserProfile) -> LayoutStrategy:
    return LayoutStrategy(
        kind=LayoutKind.FULL_DAY,
        region=region,
        columns=(
            ColumnLayout("date", 0.0, 0.5),
            ColumnLayout("pharmacy", 0.5, 0.5),
        ),
        shift_columns=(("pharmacy", FULL_DAY),),
        margins=Margins(left=profile.page_margin, right=profile.page_margin),
        column_gap=profile.column_gap,
        accept_abbreviated_dates=True,
    )


def _rural(profile: ParserProfile) -> LayoutStrategy:
    date_ratio = profile.rural_date_ratio
    return LayoutStrategy(
        kind=LayoutKind.RURAL,
        region=SEGOVIA_RURAL,
        columns=(
            ColumnLayout("date", 0.0, date_ratio),
            ColumnLayout("zones", date_ratio, 1.0 - date_ratio),
        ),
        margins=Margins(left=profile.page_margin, right=profile.page_margin),
        column_gap=profile.column_gap,
        accept_abbreviated_dates=True,
        zones=RURAL_ZONES,
    )


def build_strategies(profile: ParserProfile) -> dict[str, LayoutStrategy]:
    strategies = (
        _capital(profile),
        _full_day(CUELLAR, profile),
        _full_day(EL_ESPINAR, profile),
        _rural(profile),
    )
    return {strategy.region.id: strategy for strategy in strategies}


def get_strategy(strategies: dict[str, LayoutStrategy], region_id: str) -> LayoutStrategy:
    strategy = strategies.get(region_id)
    if strategy is None:
        raise UnknownRegionError(f"Unsupported region: {region_id}")
    return strategy
