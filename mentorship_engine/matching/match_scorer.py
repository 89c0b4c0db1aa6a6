"""
Five-factor compatibility score between one mentor and one mentee.

Every component is a pure function of the two profiles: no clock, no
randomness and no I/O, so scoring the same profiles always reproduces the same
numbers. Components are rounded to two decimals and the total is the rounded
sum of the rounded components, capped at MAX_MATCH_SCORE.
"""

import re
from dataclasses import dataclass

from mentorship_engine.common.constants import (
    INDUSTRY_RELEVANCE_PER_HIT,
    MAX_MATCH_SCORE,
    MISMATCH_INDUSTRY_RELEVANCE,
    NEUTRAL_AVAILABILITY_MATCH,
    NEUTRAL_COMMUNICATION_MATCH,
    NEUTRAL_INDUSTRY_RELEVANCE,
    NEUTRAL_PERSONALITY_FIT,
    NEUTRAL_SKILL_MATCH,
    ScoreComponent,
)

_WORD_SPLIT = re.compile(r"[^a-z0-9+#]+")
# Keywords shorter than this carry no domain signal ("a", "of", "it").
_MIN_KEYWORD_LENGTH = 3


@dataclass(frozen=True)
class ScoreBreakdown:
    skill_match: float
    industry_relevance: float
    availability_match: float
    communication_match: float
    personality_fit: float
    match_score: float

    def as_columns(self) -> dict:
        """Column values for a match row."""
        return {
            "match_score": self.match_score,
            "skill_match": self.skill_match,
            "industry_relevance": self.industry_relevance,
            "availability_match": self.availability_match,
            "communication_match": self.communication_match,
            "personality_fit": self.personality_fit,
        }


def _words(text) -> set[str]:
    if not text:
        return set()
    return {word for word in _WORD_SPLIT.split(str(text).lower()) if word}


def _normalize(values) -> set[str]:
    return {str(value).strip().lower() for value in values or [] if str(value).strip()}


def _share(wanted: set, offered: set) -> float:
    return len(wanted & offered) / len(wanted)


def score_skill_match(mentor, mentee) -> float:
    """
    Share of the mentee's terms (field of interest and skills) that the mentor's
    themes and skills cover. A term is covered when any of its words appears in
    the mentor's vocabulary.
    """
    mentee_terms = [
        words
        for words in map(_words, [mentee.field_of_interest, *(mentee.skills or [])])
        if words
    ]
    if not mentee_terms:
        return NEUTRAL_SKILL_MATCH

    mentor_words = set()
    for term in [*(mentor.themes or []), *(mentor.skills or [])]:
        mentor_words |= _words(term)

    covered = sum(1 for term in mentee_terms if term & mentor_words)
    return ScoreComponent.SKILL_MATCH.value * covered / len(mentee_terms)


def score_industry_relevance(mentor, mentee) -> float:
    mentor_keywords = set()
    for text in [mentor.industry, mentor.company, *(mentor.themes or [])]:
        mentor_keywords |= _words(text)
    mentor_keywords = {k for k in mentor_keywords if len(k) >= _MIN_KEYWORD_LENGTH}
    mentee_words = _words(mentee.career_goals) | _words(mentee.field_of_interest)
    if not mentor_keywords or not mentee_words:
        return NEUTRAL_INDUSTRY_RELEVANCE

    hits = len(mentor_keywords & mentee_words)
    if hits == 0:
        return MISMATCH_INDUSTRY_RELEVANCE
    return min(
        ScoreComponent.INDUSTRY_RELEVANCE.value,
        NEUTRAL_INDUSTRY_RELEVANCE + INDUSTRY_RELEVANCE_PER_HIT * hits,
    )


def _availability_sets(availability) -> tuple[set, set]:
    if not availability:
        return set(), set()
    return (
        _normalize(availability.get("days")),
        _normalize(availability.get("timeBlocks") or availability.get("time_blocks")),
    )


def score_availability_match(mentor, mentee) -> float:
    """
    Half the weight goes to shared days, half to shared time blocks, each
    measured against what the mentee declared. A dimension the mentee left empty
    counts as half covered.
    """
    mentor_days, mentor_blocks = _availability_sets(mentor.availability)
    mentee_days, mentee_blocks = _availability_sets(mentee.availability)
    if not (mentor_days or mentor_blocks) or not (mentee_days or mentee_blocks):
        return NEUTRAL_AVAILABILITY_MATCH

    day_overlap = _share(mentee_days, mentor_days) if mentee_days else 0.5
    block_overlap = _share(mentee_blocks, mentor_blocks) if mentee_blocks else 0.5
    return ScoreComponent.AVAILABILITY_MATCH.value * (
        0.5 * day_overlap + 0.5 * block_overlap
    )


def score_communication_match(mentor, mentee) -> float:
    preferences = _normalize(mentee.learning_preference)
    mediums = _normalize(mentor.communication_mediums)
    if not preferences or not mediums:
        return NEUTRAL_COMMUNICATION_MATCH
    return ScoreComponent.COMMUNICATION_MATCH.value * _share(preferences, mediums)


def score_personality_fit(mentor, mentee) -> float:
    mentor_interests = _normalize(mentor.interests)
    mentee_interests = _normalize(mentee.interests)
    if not mentor_interests or not mentee_interests:
        return NEUTRAL_PERSONALITY_FIT

    shared = len(mentor_interests & mentee_interests)
    larger = max(len(mentor_interests), len(mentee_interests))
    return max(
        NEUTRAL_PERSONALITY_FIT,
        ScoreComponent.PERSONALITY_FIT.value * shared / larger,
    )


class MatchScorer:
    """Scores mentor/mentee pairs. Stateless; one instance is shared app-wide."""

    def score(self, mentor, mentee) -> ScoreBreakdown:
        """
        Compute the five sub-scores and their total.

        Args:
            mentor: Mentor profile (entity or any object with the same attributes).
            mentee: Mentee profile (entity or any object with the same attributes).

        Returns:
            ScoreBreakdown: Rounded components and `match_score`, their sum.
        """
        skill = round(score_skill_match(mentor, mentee), 2)
        industry = round(score_industry_relevance(mentor, mentee), 2)
        availability = round(score_availability_match(mentor, mentee), 2)
        communication = round(score_communication_match(mentor, mentee), 2)
        personality = round(score_personality_fit(mentor, mentee), 2)
        total = round(skill + industry + availability + communication + personality, 2)

        return ScoreBreakdown(
            skill_match=skill,
            industry_relevance=industry,
            availability_match=availability,
            communication_match=communication,
            personality_fit=personality,
            match_score=min(MAX_MATCH_SCORE, total),
        )
