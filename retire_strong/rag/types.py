"""Retrieval types.

All types are frozen dataclasses. Passages carry their provenance
(source title and collection) so coaching replies can cite them.
"""

from dataclasses import dataclass, field
from typing import Literal

CollectionName = Literal[
    "clinical_guidelines",
    "behavior_change",
    "longevity_and_exercise",
    "internal_coaching_materials",
    "movement_explanations",
    "youtube_content",
]

COLLECTIONS: dict[str, str] = {
    "clinical_guidelines": "Safety, dosage and evidence-based recommendations for older adults",
    "behavior_change": "Motivation, habit formation and behavior change strategies",
    "longevity_and_exercise": "Long-term framing and benefits of exercise",
    "internal_coaching_materials": "Tone, philosophy and coaching approach",
    "movement_explanations": "Why specific movements matter and how to do them safely",
    "youtube_content": "Video-based explanations and alternative perspectives",
}

DEFAULT_LIMIT = 5
DEFAULT_MIN_SIMILARITY = 0.6


@dataclass(frozen=True)
class RagDocument:
    """A reference passage in the content index.

    Attributes:
        doc_id: Unique document identifier
        collection: Collection the document belongs to
        content: Passage text
        source_title: Source title or file name
        topics: Topic tags used for filtering
        movement_ids: Catalog movement ids the passage explains
    """

    doc_id: str
    collection: CollectionName
    content: str
    source_title: str
    topics: tuple[str, ...] = ()
    movement_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class RetrievalQuery:
    query: str
    collection: CollectionName | None = None
    topics: tuple[str, ...] = ()
    movement_ids: tuple[str, ...] = ()
    limit: int = DEFAULT_LIMIT
    min_similarity: float = DEFAULT_MIN_SIMILARITY


@dataclass(frozen=True)
class RetrievedPassage:
    """A ranked search hit with provenance."""

    content: str
    source_title: str
    collection: str
    score: float
    metadata: dict[str, str] = field(default_factory=dict)


def rank_passages(passages: list[RetrievedPassage], query: RetrievalQuery) -> list[RetrievedPassage]:
    """Apply the similarity floor, sort by score descending and cap at the limit."""
    kept = [p for p in passages if p.score >= query.min_similarity]
    kept.sort(key=lambda p: p.score, reverse=True)
    return kept[: query.limit]
