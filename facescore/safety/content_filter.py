"""
Banned-terminology filter for AI-generated and user-submitted text

Two matching strategies:
- single tokens use word boundaries, so "cope" never matches "microscope"
  and "mog" never matches "mogul"
- phrases match as one contiguous run of words ("beta male"), never as
  words that merely occur somewhere in the same text
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Iterable

from facescore.config import BANNED_PHRASES, BANNED_TERMS
from facescore.exceptions import ContentPolicyError
from facescore.models.analysis import AnalysisResult

logger = logging.getLogger(__name__)

BANNED_TERM_LABEL = "banned term"
BANNED_PHRASE_LABEL = "banned phrase"

# ASCII or typographic (U+2019) apostrophe, optional
_APOSTROPHE = "['’]?"


@dataclass(frozen=True)
class ContentScanResult:
    flagged: bool
    categories: list[str] = field(default_factory=list)
    matched_terms: list[str] = field(default_factory=list)


def _term_pattern(term: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(term)}\b", re.IGNORECASE)


def _phrase_pattern(phrase: str) -> re.Pattern:
    # "it's over" also catches "its over" and "it’s over"; words must be adjacent
    words = [_APOSTROPHE.join(re.escape(part) for part in re.split(r"['’]", word)) for word in phrase.split()]
    body = r"\s+".join(words)
    return re.compile(rf"\b{body}\b", re.IGNORECASE)


class ContentFilter:
    """Scans text against configured banned terms and phrases"""

    def __init__(self, banned_terms: Iterable[str], banned_phrases: Iterable[str]):
        self._terms = [(term, _term_pattern(term)) for term in banned_terms if term]
        self._phrases = [(phrase, _phrase_pattern(phrase)) for phrase in banned_phrases if phrase]

    def scan(self, text: str) -> ContentScanResult:
        """
        Scan serialized text

        Returns:
            ContentScanResult with the labels of every matching strategy
            and the terms that matched
        """
        lowered = text.lower()
        matched_terms = [term for term, pattern in self._terms if pattern.search(lowered)]
        matched_phrases = [phrase for phrase, pattern in self._phrases if pattern.search(lowered)]

        categories = []
        if matched_terms:
            categories.append(BANNED_TERM_LABEL)
        if matched_phrases:
            categories.append(BANNED_PHRASE_LABEL)

        return ContentScanResult(
            flagged=bool(categories),
            categories=categories,
            matched_terms=matched_terms + matched_phrases,
        )

    def check_analysis_result(self, result: AnalysisResult | dict) -> None:
        """
        Gate an analysis result before it reaches a user

        Raises:
            ContentPolicyError: if any banned term or phrase is present
        """
        payload = result.model_dump() if isinstance(result, AnalysisResult) else result
        serialized = json.dumps(payload, ensure_ascii=False).lower()

        scan = self.scan(serialized)
        if scan.flagged:
            logger.warning(f"[SAFETY] Banned terminology in AI response: {scan.matched_terms}")
            raise ContentPolicyError(
                "AI response contains inappropriate terminology",
                matched_terms=scan.matched_terms,
                operation="content_filter"
            )


content_filter = ContentFilter(BANNED_TERMS, BANNED_PHRASES)
