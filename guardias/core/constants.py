from __future__ import annotations

from guardias.core.models import DutyLocation, Region, RegionMetadata, ZBS

CACHE_VERSION = 3

SEGOVIA_CAPITAL = Region(
    id="capital",
    name="Segovia Capital",
    icon="🏙",
    pdf_url="https://cofsegovia.com/wp-content/uploads/2025/05/CALENDARIO-GUARDIAS-SEGOVIA-CAPITAL-DIA-2025.pdf",
    metadata=RegionMetadata(notes="Includes both day and night shifts", has_24h=True),
)

CUELLAR = Region(
    id="cuellar",
    name="Cuéllar",
    icon="🌳",
    pdf_url="https://cofsegovia.com/wp-content/uploads/2025/01/GUARDIAS-CUELLAR_2025.pdf",
    metadata=RegionMetadata(notes="Servicios semanales excepto primera semana de septiembre"),
)

EL_ESPINAR = Region(
    id="el-espinar",
    name="El Espinar / San Rafael",
    icon="🏔️",
    pdf_url="https://cofsegovia.com/wp-content/uploads/2025/01/Guardias-EL-ESPINAR_2025.pdf",
    metadata=RegionMetadata(notes="Servicios semanales"),
)

SEGOVIA_RURAL = Region(
    id="rural",
    name="Segovia Rural",
    icon="🚜",
    pdf_url="https://cofsegovia.com/wp-content/uploads/2025/06/SERVICIOS-DE-URGENCIA-RURALES-2025.pdf",
    metadata=RegionMetadata(notes="Servicios de urgencia rurales"),
)

REGIONS: dict[str, Region] = {
    region.id: region for region in (SEGOVIA_CAPITAL, CUELLAR, EL_ESPINAR, SEGOVIA_RURAL)
}

ZONES: tuple[ZBS, ...] = (
    ZBS(id="riaza-sepulveda", name="Riaza / Sepúlveda", icon="🏔️"),
    ZBS(id="la-granja", name="La Granja", icon="🏰"),
    ZBS(id="la-sierra", name="La Sierra", icon="⛰️"),
    ZBS(id="fuentiduena", name="Fuentidueña", icon="🏞️"),
    ZBS(id="carbonero", name="Carbonero", icon="🌲"),
    ZBS(id="navas-asuncion", name="Navas de la Asunción", icon="🏘️"),
    ZBS(id="villacastin", name="Villacastín", icon="🚂"),
    ZBS(id="cantalejo", name="Cantalejo", icon="🏘️"),
)

ZONES_BY_ID: dict[str, ZBS] = {zone.id: zone for zone in ZONES}


def location_from_id(location_id: str) -> DutyLocation:
    region = REGIONS.get(location_id)
    if region is not None:
        return DutyLocation.from_region(region)
    zone = ZONES_BY_ID.get(location_id)
    if zone is not None:
        return DutyLocation.from_zbs(zone, SEGOVIA_RURAL)
    raise KeyError(f"Unknown duty location: {location_id}")
