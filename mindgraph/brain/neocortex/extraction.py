"""Concept Extraction - Distilling concepts from memory text.

Classifies a memory's text and keywords into six fixed concept categories
using lexical heuristics:
- Category keyword lists (word-prefix match)
- Regex patterns (pronouns, event verbs, proper nouns)
- The memory's own keywords, categorised by keyword-list containment

The extractor is a pure function of the memory: no I/O, no identifiers.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator

from pydantic import ValidationError as PydanticValidationError

from mindgraph.brain.amygdala import ValenceAnalyzer
from mindgraph.config import ExtractionHeuristics
from mindgraph.domain.models import ConceptCandidate, ConceptCategory, MemoryRecord

logger = logging.getLogger(__name__)


class ConceptExtractor:
    """Turns one memory into candidate concepts."""

    CATEGORY_KEYWORDS: dict[ConceptCategory, list[str]] = {
        ConceptCategory.ENTITY: [
            "person",
            "place",
            "thing",
            "object",
            "item",
            "someone",
            "somewhere",
        ],
        ConceptCategory.TOPIC: [
            "science",
            "technology",
            "art",
            "music",
            "history",
            "philosophy",
            "mathematics",
            "literature",
            "psychology",
            "nature",
            "space",
            "politics",
            "economics",
            "culture",
            "religion",
            "education",
            "health",
            "sports",
            "entertainment",
            "food",
            "travel",
            "programming",
            "artificial intelligence",
            "machine learning",
            "data",
            "creativity",
        ],
        ConceptCategory.EMOTION: [
            "happy",
            "sad",
            "angry",
            "afraid",
            "surprised",
            "disgusted",
            "joyful",
            "excited",
            "anxious",
            "worried",
            "calm",
            "peaceful",
            "frustrated",
            "hopeful",
            "grateful",
            "love",
            "hate",
            "fear",
            "trust",
            "anticipation",
            "melancholy",
            "enthusiasm",
            "curiosity",
        ],
        ConceptCategory.EVENT: [
            "event",
            "meeting",
            "conversation",
            "experience",
            "moment",
            "occurrence",
        ],
        ConceptCategory.ATTRIBUTE: [
            "important",
            "significant",
            "interesting",
            "beautiful",
            "useful",
            "difficult",
            "easy",
            "complex",
            "simple",
            "valuable",
            "creative",
            "intelligent",
            "kind",
            "helpful",
            "strong",
            "weak",
            "new",
            "old",
        ],
        ConceptCategory.RELATION: [
            "friend",
            "family",
            "colleague",
            "mentor",
            "student",
            "partner",
            "relationship",
            "connection",
            "bond",
            "association",
            "interaction",
        ],
    }

    # Patterns applied to the lower-cased text
    CATEGORY_PATTERNS: dict[ConceptCategory, list[re.Pattern[str]]] = {
        ConceptCategory.ENTITY: [
            re.compile(r"\b(?:i|me|my|myself)\b"),
            re.compile(r"\b(?:you|your|yourself)\b"),
            re.compile(r"\b(?:he|she|they|it|him|her|them)\b"),
        ],
        ConceptCategory.EVENT: [
            re.compile(r"\b(?:happened|occurred|took place|started|ended|began|finished)\b"),
            re.compile(r"\b(?:meeting|conversation|discussion|event|activity|experience)\b"),
        ],
    }

    # Applied to the original-case text
    PROPER_NOUN_PATTERN = re.compile(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\b")
    SENTENCE_END = (".", "!", "?")

    def __init__(
        self,
        heuristics: ExtractionHeuristics | None = None,
        valence_analyzer: ValenceAnalyzer | None = None,
    ) -> None:
        self.heuristics = heuristics or ExtractionHeuristics()
        self.valence_analyzer = valence_analyzer or ValenceAnalyzer(
            window=self.heuristics.valence_window,
            step=self.heuristics.valence_step,
        )

    def extract(self, memory: MemoryRecord) -> list[ConceptCandidate]:
        """Extract candidate concepts from a memory.

        Bad candidates are skipped individually; the rest of the batch
        is still returned.
        """
        raw_text = " ".join(
            part for part in (memory.content, memory.summary, memory.context) if part
        )
        text = raw_text.lower()
        found: set[str] = set()
        candidates: list[ConceptCandidate] = []

        for surface, category in self._scan(text, raw_text, memory):
            name = surface.lower().strip()
            if len(name) < self.heuristics.min_match_length or name in found:
                continue
            found.add(name)
            candidate = self._build_candidate(surface.strip(), category, memory)
            if candidate is not None:
                candidates.append(candidate)

        return candidates

    def categorize_keyword(self, keyword: str) -> ConceptCategory:
        """Categorize a free keyword by containment in the category lists."""
        lower = keyword.lower()
        for category, keywords in self.CATEGORY_KEYWORDS.items():
            if any(lower in k or k in lower for k in keywords):
                return category
        return ConceptCategory.TOPIC

    def _scan(
        self, text: str, raw_text: str, memory: MemoryRecord
    ) -> Iterator[tuple[str, ConceptCategory]]:
        for category, keywords in self.CATEGORY_KEYWORDS.items():
            for keyword in keywords:
                if re.search(r"\b" + re.escape(keyword), text):
                    yield keyword, category

            for pattern in self.CATEGORY_PATTERNS.get(category, []):
                for match in pattern.finditer(text):
                    yield match.group(0), category

            if category is ConceptCategory.ENTITY:
                for match in self.PROPER_NOUN_PATTERN.finditer(raw_text):
                    if not self._starts_sentence(raw_text, match.start()):
                        yield match.group(0), category

        for keyword in memory.keywords or []:
            if not isinstance(keyword, str) or not keyword.strip():
                logger.debug(f"Skipping malformed keyword {keyword!r} on {memory.id}")
                continue
            yield keyword, self.categorize_keyword(keyword.strip())

    def _starts_sentence(self, text: str, index: int) -> bool:
        before = text[:index].rstrip()
        return not before or before.endswith(self.SENTENCE_END)

    def _build_candidate(
        self, surface: str, category: ConceptCategory, memory: MemoryRecord
    ) -> ConceptCandidate | None:
        try:
            return ConceptCandidate(
                name=surface.lower(),
                category=category,
                description=self._describe(memory),
                importance=self._initial_importance(surface, memory),
                emotional_valence=self.valence_analyzer.analyze(
                    surface, memory.content
                ).valence,
            )
        except (PydanticValidationError, TypeError, ValueError) as e:
            logger.debug(f"Skipping candidate {surface!r} from {memory.id}: {e}")
            return None

    def _describe(self, memory: MemoryRecord) -> str:
        source = memory.summary or memory.content or ""
        preview = source[: self.heuristics.description_preview_length]
        return f'Concept extracted from memory: "{preview}..."'

    def _initial_importance(self, surface: str, memory: MemoryRecord) -> float:
        h = self.heuristics
        importance = h.base_importance

        if any(
            isinstance(k, str) and k.lower() == surface.lower()
            for k in memory.keywords or []
        ):
            importance += h.keyword_importance_boost

        importance += (memory.importance / 10) * h.memory_importance_weight

        if surface[:1].isupper():
            importance += h.proper_noun_boost

        return min(importance, 1.0)
