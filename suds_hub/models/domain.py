from datetime import datetime, timezone
from enum import Enum
from typing import Optional


# Collection names under the namespace
SUDS_TYPES = "sudsTypes"
CONTRACTS = "contracts"
ACTIVITY_RECORDS = "activityRecords"
APP_SETTINGS = "appSettings"

# appSettings documents
CATEGORIES_DOC = "maintenanceCategories"
ACTIVITY_NAMES_DOC = "definedActivityNames"


class ProposalStatus(str, Enum):
    INCLUDED = "included"
    INTEGRABLE = "integrable"
    SPECIFIC = "specific"
    NOT_APPLICABLE = "not-applicable"
    UNSET = "unset"


# Traffic-light codes used by the dashboard, stored as given
STATUS_ALIASES = {
    "verde": ProposalStatus.INCLUDED,
    "amarillo": ProposalStatus.INTEGRABLE,
    "rojo": ProposalStatus.SPECIFIC,
    "gris": ProposalStatus.NOT_APPLICABLE,
}


def canonical_status(value: Optional[str]) -> ProposalStatus:
    """Map a stored status (canonical value or colour alias) to ProposalStatus.

    Anything unrecognised counts as UNSET.
    """
    if not value:
        return ProposalStatus.UNSET
    key = str(value).strip().lower()
    if key in STATUS_ALIASES:
        return STATUS_ALIASES[key]
    try:
        return ProposalStatus(key)
    except ValueError:
        return ProposalStatus.UNSET


def is_known_status(value: str) -> bool:
    key = str(value).strip().lower()
    return key in STATUS_ALIASES or key in {s.value for s in ProposalStatus}


class ValidationStatus(str, Enum):
    PENDING = "pending"
    VALIDATED = "validated"
    REJECTED = "rejected"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def step(self) -> int:
        return -1 if self in (Direction.UP, Direction.LEFT) else 1


LOCATION_TAGS = [
    {"id": "acera", "name": "Acera", "icon": "🚶‍♀️"},
    {"id": "zona_verde", "name": "Zona Verde", "icon": "🌳"},
    {"id": "viario", "name": "Viario", "icon": "🚗"},
    {
        "id": "infraestructura",
        "name": "Infraestructura",
        "icon": "https://img.freepik.com/vector-premium/icono-tuberia-fontanero-vector-simple-servicio-agua-tubo-aguas-residuales_98396-55465.jpg",
    },
]
LOCATION_TAG_IDS = {t["id"] for t in LOCATION_TAGS}


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
