"""Draft state data models - single source of truth for all draft information."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional


def utc_now() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


def _string(data: Dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _records(data: Dict, key: str, required: bool = True) -> List[Dict]:
    """List of JSON objects stored under *key*."""
    value = data[key] if required else data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise TypeError(f"{key} must be a list of objects")
    return value


class DraftStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETE = "complete"


@dataclass
class DraftConfig:
    """Draft configuration settings."""

    total_rounds: int

    def to_dict(self) -> Dict:
        return {"totalRounds": self.total_rounds}

    @classmethod
    def from_dict(cls, data: Dict) -> "DraftConfig":
        return cls(total_rounds=int(data["totalRounds"]))


@dataclass
class Drafter:
    """A fixed seat in the draft room."""

    id: str
    name: str
    order: int

    def to_dict(self) -> Dict:
        return {"id": self.id, "name": self.name, "order": self.order}

    @classmethod
    def from_dict(cls, data: Dict) -> "Drafter":
        return cls(
            id=_string(data, "id"), name=_string(data, "name"), order=int(data["order"])
        )


@dataclass
class Pick:
    """Represents a single draft pick."""

    id: str
    overall_number: int
    round: int
    drafter_id: str
    drafter_name: str
    celebrity_name: str
    created_at: str

    @classmethod
    def create(
        cls,
        overall_number: int,
        round: int,
        drafter: Drafter,
        celebrity_name: str,
    ) -> "Pick":
        return cls(
            id=f"p-{overall_number}",
            overall_number=overall_number,
            round=round,
            drafter_id=drafter.id,
            drafter_name=drafter.name,
            celebrity_name=celebrity_name,
            created_at=utc_now(),
        )

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "overallNumber": self.overall_number,
            "round": self.round,
            "drafterId": self.drafter_id,
            "drafterName": self.drafter_name,
            "celebrityName": self.celebrity_name,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Pick":
        return cls(
            id=_string(data, "id"),
            overall_number=int(data["overallNumber"]),
            round=int(data["round"]),
            drafter_id=_string(data, "drafterId"),
            drafter_name=data.get("drafterName", ""),
            celebrity_name=_string(data, "celebrityName"),
            created_at=data.get("createdAt", ""),
        )


# JSON key -> attribute name for the optional validation-derived fields
_CELEBRITY_OPTIONAL_FIELDS = {
    "draftedById": "drafted_by_id",
    "fullName": "full_name",
    "dateOfBirth": "date_of_birth",
    "wikipediaUrl": "wikipedia_url",
    "hasWikipediaPage": "has_wikipedia_page",
    "isValidated": "is_validated",
    "validationAttempted": "validation_attempted",
    "isDeceased": "is_deceased",
    "validationNotes": "validation_notes",
}


@dataclass
class Celebrity:
    """A celebrity in the pool, optionally drafted and validated."""

    id: str
    name: str
    drafted_by_id: Optional[str] = None
    full_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    wikipedia_url: Optional[str] = None
    has_wikipedia_page: Optional[bool] = None
    is_validated: Optional[bool] = None
    validation_attempted: Optional[bool] = None
    is_deceased: Optional[bool] = None
    validation_notes: Optional[str] = None

    def to_dict(self) -> Dict:
        data = {"id": self.id, "name": self.name}
        for key, attr in _CELEBRITY_OPTIONAL_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "Celebrity":
        kwargs = {
            attr: data.get(key) for key, attr in _CELEBRITY_OPTIONAL_FIELDS.items()
        }
        return cls(id=_string(data, "id"), name=_string(data, "name"), **kwargs)


@dataclass
class DraftState:
    """Complete draft state - single source of truth."""

    status: DraftStatus
    config: DraftConfig
    drafters: List[Drafter]
    picks: List[Pick] = field(default_factory=list)
    celebrities: List[Celebrity] = field(default_factory=list)
    current_round: int = 1
    current_pick_index: int = 0
    created_at: str = ""
    updated_at: str = ""
    version: int = 0

    @property
    def total_slots(self) -> int:
        return self.config.total_rounds * len(self.drafters)

    @property
    def is_complete(self) -> bool:
        return self.status == DraftStatus.COMPLETE

    def find_drafter(self, drafter_id: str) -> Optional[Drafter]:
        for drafter in self.drafters:
            if drafter.id == drafter_id:
                return drafter
        return None

    def find_celebrity(self, name: str) -> Optional[Celebrity]:
        """Case-insensitive celebrity lookup by name."""
        wanted = name.lower()
        for celeb in self.celebrities:
            if celeb.name.lower() == wanted:
                return celeb
        return None

    def find_pick(self, pick_id: str) -> Optional[Pick]:
        for pick in self.picks:
            if pick.id == pick_id:
                return pick
        return None

    def is_celebrity_drafted(self, name: str) -> bool:
        wanted = name.lower()
        return any(p.celebrity_name.lower() == wanted for p in self.picks)

    def validate(self) -> None:
        """
        Validate draft state consistency.

        Raises:
            ValueError: If state is inconsistent
        """
        if self.current_pick_index < 0 or self.current_pick_index > self.total_slots:
            raise ValueError(
                f"currentPickIndex {self.current_pick_index} outside "
                f"[0, {self.total_slots}]"
            )

        at_end = self.current_pick_index == self.total_slots
        if at_end != self.is_complete:
            raise ValueError(
                f"Status {self.status.value} inconsistent with pick index "
                f"{self.current_pick_index}/{self.total_slots}"
            )

        if len(self.picks) != self.current_pick_index:
            raise ValueError(
                f"{len(self.picks)} picks recorded but pick index is "
                f"{self.current_pick_index}"
            )

        orders = sorted(d.order for d in self.drafters)
        if orders != list(range(1, len(self.drafters) + 1)):
            raise ValueError(f"Drafter order must be consecutive from 1: {orders}")

        seen_names = set()
        drafter_ids = {d.id for d in self.drafters}
        for position, pick in enumerate(self.picks, 1):
            if pick.overall_number != position:
                raise ValueError(
                    f"Pick {pick.id} has overallNumber {pick.overall_number}, "
                    f"expected {position}"
                )
            if pick.drafter_id not in drafter_ids:
                raise ValueError(f"Pick {pick.id} references unknown drafter")
            key = pick.celebrity_name.lower()
            if key in seen_names:
                raise ValueError(f"{pick.celebrity_name} drafted more than once")
            seen_names.add(key)

        pool_names = [c.name.lower() for c in self.celebrities]
        if len(set(pool_names)) != len(pool_names):
            raise ValueError("Celebrity pool contains duplicate names")

        for celeb in self.celebrities:
            drafted = celeb.name.lower() in seen_names
            if celeb.drafted_by_id and not drafted:
                raise ValueError(f"{celeb.name} marked drafted without a pick")
            if drafted and not celeb.drafted_by_id:
                raise ValueError(f"{celeb.name} picked but not marked drafted")

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "status": self.status.value,
            "config": self.config.to_dict(),
            "drafters": [d.to_dict() for d in self.drafters],
            "picks": [p.to_dict() for p in self.picks],
            "celebrities": [c.to_dict() for c in self.celebrities],
            "currentRound": self.current_round,
            "currentPickIndex": self.current_pick_index,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "DraftState":
        """Create DraftState from dictionary."""
        return cls(
            status=DraftStatus(data["status"]),
            config=DraftConfig.from_dict(data["config"]),
            drafters=[Drafter.from_dict(d) for d in _records(data, "drafters")],
            picks=[Pick.from_dict(p) for p in _records(data, "picks", required=False)],
            celebrities=[
                Celebrity.from_dict(c)
                for c in _records(data, "celebrities", required=False)
            ],
            current_round=int(data.get("currentRound", 1)),
            current_pick_index=int(data.get("currentPickIndex", 0)),
            created_at=data.get("createdAt", ""),
            updated_at=data.get("updatedAt", ""),
            version=int(data.get("version", 0)),
        )
