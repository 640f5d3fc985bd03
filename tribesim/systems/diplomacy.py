"""Tribe-level diplomacy: directed relationships and proposals.

Each ordered tribe pair has its own relationship record. Status is derived
from the relationship value, and agreements flip on accepted proposals.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tribesim.simulation.protocols import RandomSource, TribeMember

logger = logging.getLogger(__name__)


class RelationStatus(str, Enum):
    ALLIED = "allied"
    FRIENDLY = "friendly"
    NEUTRAL = "neutral"
    UNFRIENDLY = "unfriendly"
    HOSTILE = "hostile"
    WAR = "war"


class ProposalType(str, Enum):
    ALLIANCE = "alliance"
    PEACE_TREATY = "peace_treaty"
    TRADE_AGREEMENT = "trade_agreement"
    NON_AGGRESSION = "non_aggression"
    DECLARE_WAR = "declare_war"
    RESEARCH_PACT = "research_pact"


TRADE_MODIFIERS: dict[RelationStatus, float] = {
    RelationStatus.ALLIED: 1.3,
    RelationStatus.FRIENDLY: 1.15,
    RelationStatus.NEUTRAL: 1.0,
    RelationStatus.UNFRIENDLY: 0.8,
    RelationStatus.HOSTILE: 0.5,
    RelationStatus.WAR: 0.1,
}
TRADE_AGREEMENT_MODIFIER = 1.5


def status_for(value: float) -> RelationStatus:
    """Map a relationship value in [-100, 100] to a status band."""
    if value >= 75:
        return RelationStatus.ALLIED
    if value >= 40:
        return RelationStatus.FRIENDLY
    if value >= -20:
        return RelationStatus.NEUTRAL
    if value >= -50:
        return RelationStatus.UNFRIENDLY
    if value >= -80:
        return RelationStatus.HOSTILE
    return RelationStatus.WAR


@dataclass
class Relationship:
    """How ``tribe`` regards ``other``."""

    tribe: str
    other: str
    status: RelationStatus = RelationStatus.NEUTRAL
    value: float = 0.0
    trust: float = 50.0
    last_interaction_day: int = 0
    trade_agreement: bool = False
    non_aggression: bool = False
    shared_research: bool = False

    def shift(self, amount: float) -> None:
        self.value = max(-100.0, min(100.0, self.value + amount))
        self.status = status_for(self.value)


@dataclass
class Proposal:
    """A diplomatic offer from one tribe to another."""

    id: str
    from_tribe: str
    to_tribe: str
    type: ProposalType
    day: int
    status: str = "pending"  # pending | accepted | rejected


class TribeDiplomacy:
    """Relationship ledger for every ordered pair of tribes."""

    def __init__(self, tribes: list[str] | None = None):
        self._tribes = list(tribes or ["Alpha", "Beta", "Gamma"])
        self._relations: dict[tuple[str, str], Relationship] = {}
        self._proposals: dict[str, Proposal] = {}
        self._proposal_count = 0
        self._init_relations()

    def _init_relations(self) -> None:
        for a in self._tribes:
            for b in self._tribes:
                if a != b:
                    self._relations[(a, b)] = Relationship(tribe=a, other=b)

    def relationship(self, tribe: str, other: str) -> Relationship | None:
        return self._relations.get((tribe, other))

    def relationships_of(self, tribe: str) -> list[Relationship]:
        return [r for (a, _), r in self._relations.items() if a == tribe]

    def modify_relationship(self, tribe: str, other: str, amount: float) -> bool:
        rel = self._relations.get((tribe, other))
        if rel is None:
            return False
        rel.shift(amount)
        return True

    # --- Queries used by the interaction resolver ---

    def trade_modifier(self, tribe_a: str, tribe_b: str) -> float:
        """Token multiplier for trade between members of two tribes."""
        rel = self._relations.get((tribe_a, tribe_b))
        if rel is None:
            return 1.0
        if rel.trade_agreement:
            return TRADE_AGREEMENT_MODIFIER
        return TRADE_MODIFIERS.get(rel.status, 1.0)

    def can_fight(self, tribe_a: str, tribe_b: str) -> bool:
        """False when a pact or alliance forbids combat."""
        rel = self._relations.get((tribe_a, tribe_b))
        if rel is None:
            return True
        return not (rel.non_aggression or rel.status is RelationStatus.ALLIED)

    # --- Proposals ---

    def create_proposal(
        self, from_tribe: str, to_tribe: str, type: ProposalType, day: int = 0
    ) -> Proposal:
        proposal = Proposal(
            id=f"proposal-{self._proposal_count}",
            from_tribe=from_tribe,
            to_tribe=to_tribe,
            type=type,
            day=day,
        )
        self._proposal_count += 1
        self._proposals[proposal.id] = proposal
        return proposal

    def generate_proposal(
        self,
        from_tribe: str,
        to_tribe: str,
        from_members: Sequence[TribeMember],
        to_members: Sequence[TribeMember],
        rng: RandomSource,
        day: int,
    ) -> Proposal | None:
        """Let a tribe's AI consider making an offer, based on current status.

        Member lists are accepted for richer heuristics but the roll only
        depends on the relationship.
        """
        rel = self._relations.get((from_tribe, to_tribe))
        if rel is None:
            return None

        roll = rng.random() * 100
        kind: ProposalType | None = None
        if rel.status is RelationStatus.WAR:
            if roll < 15:
                kind = ProposalType.PEACE_TREATY
        elif rel.status in (RelationStatus.HOSTILE, RelationStatus.UNFRIENDLY):
            if roll < 10:
                kind = ProposalType.NON_AGGRESSION
        elif rel.status is RelationStatus.NEUTRAL:
            if roll < 8:
                kind = ProposalType.TRADE_AGREEMENT
        elif rel.status is RelationStatus.FRIENDLY:
            if roll < 12 and not rel.shared_research:
                kind = ProposalType.RESEARCH_PACT
            elif roll < 8:
                kind = ProposalType.NON_AGGRESSION
        elif rel.status is RelationStatus.ALLIED:
            if roll < 5 and not rel.trade_agreement:
                kind = ProposalType.TRADE_AGREEMENT

        if kind is None:
            return None
        return self.create_proposal(from_tribe, to_tribe, kind, day)

    def evaluate(self, proposal: Proposal) -> tuple[bool, str]:
        """Decide, from the receiver's point of view, whether to accept."""
        rel = self._relations.get((proposal.to_tribe, proposal.from_tribe))
        if rel is None:
            return False, "No relationship data"

        kind = proposal.type
        if kind is ProposalType.ALLIANCE:
            if rel.value >= 60:
                return True, "Friendly relationship"
            return False, "Relationship not strong enough"
        if kind is ProposalType.PEACE_TREATY:
            if rel.status in (RelationStatus.WAR, RelationStatus.HOSTILE) and rel.value > -60:
                return True, "Tired of war"
            return False, "Not interested in peace"
        if kind is ProposalType.TRADE_AGREEMENT:
            if rel.status not in (RelationStatus.WAR, RelationStatus.HOSTILE):
                return True, "Economic benefit"
            return False, "Too hostile for trade"
        if kind is ProposalType.NON_AGGRESSION:
            if rel.status is not RelationStatus.WAR:
                return True, "Mutual benefit"
            return False, "Currently at war"
        if kind is ProposalType.RESEARCH_PACT:
            if rel.value >= 30 and not rel.shared_research:
                return True, "Scientific cooperation"
            return False, "Insufficient trust"
        return False, "Unknown proposal type"

    def respond(self, proposal_id: str, accept: bool) -> bool:
        """Settle a pending proposal. False if unknown or already settled."""
        proposal = self._proposals.get(proposal_id)
        if proposal is None or proposal.status != "pending":
            return False
        proposal.status = "accepted" if accept else "rejected"
        if accept:
            self._apply(proposal)
            logger.info(
                f"{proposal.from_tribe} and {proposal.to_tribe} agreed to {proposal.type.value}"
            )
        return True

    def _apply(self, proposal: Proposal) -> None:
        forward = self._relations.get((proposal.from_tribe, proposal.to_tribe))
        backward = self._relations.get((proposal.to_tribe, proposal.from_tribe))
        if forward is None or backward is None:
            return

        for rel in (forward, backward):
            kind = proposal.type
            if kind is ProposalType.ALLIANCE:
                rel.value = 80.0
                rel.non_aggression = True
                rel.trade_agreement = True
            elif kind is ProposalType.PEACE_TREATY:
                rel.value = max(0.0, rel.value)
            elif kind is ProposalType.TRADE_AGREEMENT:
                rel.trade_agreement = True
                rel.value += 20
            elif kind is ProposalType.NON_AGGRESSION:
                rel.non_aggression = True
                rel.value += 15
            elif kind is ProposalType.DECLARE_WAR:
                rel.value = -90.0
                rel.trade_agreement = False
                rel.non_aggression = False
                rel.shared_research = False
            elif kind is ProposalType.RESEARCH_PACT:
                rel.shared_research = True
                rel.value += 25
            rel.shift(0)

    def pending(self) -> list[Proposal]:
        return [p for p in self._proposals.values() if p.status == "pending"]

    def update_agreements(self, day: int) -> None:
        """Drop agreements the relationship can no longer sustain."""
        for rel in self._relations.values():
            if rel.value < -70 and rel.trade_agreement:
                rel.trade_agreement = False
                logger.debug(f"{rel.tribe}->{rel.other} trade agreement lapsed on day {day}")
            if rel.value < -50 and rel.non_aggression:
                rel.non_aggression = False
            if rel.value < 30 and rel.shared_research:
                rel.shared_research = False

    def serialize(self) -> dict:
        relations = []
        for rel in self._relations.values():
            raw = asdict(rel)
            raw["status"] = rel.status.value
            relations.append(raw)
        proposals = []
        for proposal in self._proposals.values():
            raw = asdict(proposal)
            raw["type"] = proposal.type.value
            proposals.append(raw)
        return {
            "version": 1,
            "relations": relations,
            "proposals": proposals,
            "proposal_count": self._proposal_count,
        }

    def deserialize(self, data: dict) -> None:
        self._relations = {}
        self._proposals = {}
        self._proposal_count = int(data.get("proposal_count", 0))
        if "relations" not in data:
            self._init_relations()
        for raw in data.get("relations", []):
            rel = Relationship(**{**raw, "status": RelationStatus(raw["status"])})
            self._relations[(rel.tribe, rel.other)] = rel
        for raw in data.get("proposals", []):
            proposal = Proposal(**{**raw, "type": ProposalType(raw["type"])})
            self._proposals[proposal.id] = proposal
