# eduvibe/ml/recommender.py
"""
Recommendation Engine
Mentor matching: hard filters, weighted soft signals, reasons and deterministic ranking
"""

import logging
import math
from collections import Counter
from typing import Dict, List, Optional, Protocol, Sequence

from eduvibe.ml.vectorizer import text_similarities
from eduvibe.schemas.recommendation import (
    EXPERIENCE_LEVELS,
    AvailabilityResult,
    AvailabilitySlot,
    MentorCandidate,
    MentorRecommendation,
    PopularSubject,
    RecommendationFilters,
    RecommendationResult,
    StudentPreferences,
)

logger = logging.getLogger(__name__)


class CandidateSource(Protocol):
    """Read side the scorer needs. ``MentorDirectory`` is the SQL implementation."""

    def list_eligible_mentors(self) -> Sequence[MentorCandidate]: ...

    def get_student_preferences(self, student_id) -> Optional[StudentPreferences]: ...

    def get_mentor(self, mentor_id) -> Optional[MentorCandidate]: ...


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def slots_overlap(first: AvailabilitySlot, second: AvailabilitySlot) -> bool:
    """Same weekday and the half-open time windows intersect."""
    if first.day.strip().lower() != second.day.strip().lower():
        return False
    return (
        time_to_minutes(first.start_time) < time_to_minutes(second.end_time)
        and time_to_minutes(second.start_time) < time_to_minutes(first.end_time)
    )


def _normalized(values) -> set:
    return {v.strip().lower() for v in values or [] if v and v.strip()}


def _exact(values) -> set:
    return {v.strip() for v in values or [] if v and v.strip()}


def _overlap_ratio(requested, offered) -> float:
    wanted = _normalized(requested)
    if not wanted:
        return 0.0
    return len(wanted & _normalized(offered)) / len(wanted)


def _id_sort_key(candidate_id: str):
    """Digit-only ids order numerically and ahead of any other id."""
    if candidate_id.isdigit():
        return (0, int(candidate_id), "")
    return (1, 0, candidate_id)


class RecommendationScorer:
    """
    Ranks eligible mentors for a student.

    Every candidate first has to pass the hard filters. Survivors are scored as a
    weighted sum of soft signals in [0, 1], turned into an integer 0-100 match
    score, explained with reasons and ranked deterministically.
    """

    # Soft-signal weights, highest impact first. Reasons follow this order.
    SIGNAL_WEIGHTS: Dict[str, float] = {
        "subjects": 0.28,
        "rating": 0.18,
        "popularity": 0.12,
        "goals": 0.10,
        "experience": 0.08,
        "availability": 0.07,
        "response_time": 0.07,
        "language": 0.05,
        "budget": 0.05,
    }

    RESPONSE_TIME_SCORES = {
        "Within 1 hour": 1.0,
        "Within 2 hours": 0.9,
        "Within 4 hours": 0.7,
        "Within 24 hours": 0.4,
    }

    DEFAULT_LIMIT = 10
    MAX_LIMIT = 50

    # Reason thresholds
    HIGH_RATING = 4.5
    GOOD_RATING = 4.0
    POPULARITY_THRESHOLD = 0.5
    GOAL_THRESHOLD = 0.2
    FAST_RESPONSE_THRESHOLD = 0.7

    def __init__(self, directory: CandidateSource):
        self.directory = directory

    # ======================
    # HARD FILTERS
    # ======================

    def passes_filters(self, candidate: MentorCandidate, filters: RecommendationFilters) -> bool:
        """
        True when the candidate satisfies every filter that is set.
        Filters are checked in a fixed order and the first failure rejects.
        """
        if filters.subjects:
            if not _exact(filters.subjects) & _exact(candidate.subjects):
                return False

        if filters.experience_level:
            if candidate.experience_level != filters.experience_level:
                return False

        if filters.price_range is not None:
            low, high = filters.price_range.min, filters.price_range.max
            # No max means no upper bound
            if low < 0 or (high is not None and (high < 0 or low > high)):
                return False
            if candidate.hourly_rate < low or (high is not None and candidate.hourly_rate > high):
                return False

        if filters.rating is not None:
            if not (0 <= filters.rating <= 5):
                return False
            if candidate.rating < filters.rating:
                return False

        if filters.location and filters.location.strip():
            needle = filters.location.strip().lower()
            if not candidate.location or needle not in candidate.location.lower():
                return False

        if filters.language:
            if not _exact(filters.language) & _exact(candidate.languages):
                return False

        return True

    # ======================
    # SOFT SIGNALS
    # ======================

    @staticmethod
    def requested_subjects(filters: RecommendationFilters, preferences: StudentPreferences) -> List[str]:
        return list(filters.subjects) if filters.subjects else list(preferences.interested_subjects)

    @staticmethod
    def requested_languages(filters: RecommendationFilters, preferences: StudentPreferences) -> List[str]:
        return list(filters.language) if filters.language else list(preferences.preferred_languages)

    @staticmethod
    def popularity_signal(total_sessions: int, pool_max_sessions: int) -> float:
        """Log-normalized completed sessions relative to the busiest surviving mentor."""
        if pool_max_sessions <= 0 or total_sessions <= 0:
            return 0.0
        return min(math.log1p(total_sessions) / math.log1p(pool_max_sessions), 1.0)

    @staticmethod
    def experience_signal(mentor_level: str, student_level: Optional[str]) -> float:
        """1.0 when the mentor is at or above the student's current level."""
        student_rank = EXPERIENCE_LEVELS.index(student_level) if student_level in EXPERIENCE_LEVELS else 0
        if mentor_level not in EXPERIENCE_LEVELS:
            return 0.0
        return 1.0 if EXPERIENCE_LEVELS.index(mentor_level) >= student_rank else 0.0

    @staticmethod
    def availability_signal(candidate: MentorCandidate, preferences: StudentPreferences) -> float:
        for wanted in preferences.preferred_times:
            if any(slots_overlap(wanted, offered) for offered in candidate.availability):
                return 1.0
        return 0.0

    @staticmethod
    def budget_signal(hourly_rate: float, preferences: StudentPreferences) -> float:
        low, high = preferences.budget_min, preferences.budget_max
        if low is None and high is None:
            return 0.0
        if low is not None and hourly_rate < low:
            return 0.0
        if high is not None and hourly_rate > high:
            return 0.0
        return 1.0

    def compute_signals(
        self,
        candidate: MentorCandidate,
        preferences: StudentPreferences,
        filters: RecommendationFilters,
        pool_max_sessions: int,
        goal_similarity: float = 0.0,
    ) -> Dict[str, float]:
        signals = {
            "subjects": _overlap_ratio(self.requested_subjects(filters, preferences), candidate.subjects),
            "rating": min(max(candidate.rating / 5.0, 0.0), 1.0),
            "popularity": self.popularity_signal(candidate.total_sessions, pool_max_sessions),
            "goals": min(max(goal_similarity, 0.0), 1.0),
            "experience": self.experience_signal(candidate.experience_level, preferences.current_level),
            "availability": self.availability_signal(candidate, preferences),
            "response_time": self.RESPONSE_TIME_SCORES.get(candidate.response_time, 0.0),
            "language": _overlap_ratio(self.requested_languages(filters, preferences), candidate.languages),
            "budget": self.budget_signal(candidate.hourly_rate, preferences),
        }
        return signals

    def calculate_match_score(self, signals: Dict[str, float]) -> int:
        """Weighted sum scaled to 0-100, rounded half up."""
        total = sum(self.SIGNAL_WEIGHTS[name] * signals.get(name, 0.0) for name in self.SIGNAL_WEIGHTS)
        score = int(math.floor(total * 100 + 0.5))
        return min(max(score, 0), 100)

    def explain(
        self,
        candidate: MentorCandidate,
        signals: Dict[str, float],
        preferences: StudentPreferences,
        filters: RecommendationFilters,
    ) -> List[str]:
        """Human-readable reasons, highest-weighted signal first."""
        reasons = []
        for name in self.SIGNAL_WEIGHTS:
            value = signals.get(name, 0.0)

            if name == "subjects" and value > 0:
                matched = _normalized(self.requested_subjects(filters, preferences)) & _normalized(candidate.subjects)
                reasons.append(f"Specializes in {len(matched)} of your requested subjects")
            elif name == "rating":
                if candidate.rating >= self.HIGH_RATING:
                    reasons.append(f"Highly rated mentor ({candidate.rating:.1f} stars)")
                elif candidate.rating >= self.GOOD_RATING:
                    reasons.append(f"Well-rated mentor ({candidate.rating:.1f} stars)")
            elif name == "popularity" and value >= self.POPULARITY_THRESHOLD:
                reasons.append(f"Experienced mentor with {candidate.total_sessions} completed sessions")
            elif name == "goals" and value >= self.GOAL_THRESHOLD:
                reasons.append("Background aligns with your learning goals")
            elif name == "experience" and value > 0:
                reasons.append(f"{candidate.experience_level} level suits your current level")
            elif name == "availability" and value > 0:
                reasons.append("Available during your preferred times")
            elif name == "response_time" and value >= self.FAST_RESPONSE_THRESHOLD:
                reasons.append(f"Responds quickly ({candidate.response_time.lower()})")
            elif name == "language" and value > 0:
                reasons.append("Speaks your preferred language")
            elif name == "budget" and value > 0:
                reasons.append("Within your budget range")

        return reasons

    # ======================
    # RANKING
    # ======================

    def resolve_limit(self, limit: Optional[int], filters: RecommendationFilters) -> int:
        if limit is None:
            limit = filters.limit if filters.limit is not None else self.DEFAULT_LIMIT
        if limit <= 0:
            return 0
        return min(limit, self.MAX_LIMIT)

    def rank(
        self,
        pool: Sequence[MentorCandidate],
        preferences: StudentPreferences,
        filters: RecommendationFilters,
        limit: Optional[int] = None,
    ) -> List[MentorRecommendation]:
        """Filter, score, explain, sort and truncate an already-loaded pool."""
        count = self.resolve_limit(limit, filters)
        if count == 0:
            return []

        survivors = [c for c in pool if self.passes_filters(c, filters)]
        if not survivors:
            return []

        pool_max_sessions = max(c.total_sessions for c in survivors)
        goal_scores = text_similarities(preferences.learning_goals or "", [c.bio or "" for c in survivors])

        recommendations = []
        for candidate, goal_similarity in zip(survivors, goal_scores):
            signals = self.compute_signals(candidate, preferences, filters, pool_max_sessions, goal_similarity)
            recommendations.append(
                MentorRecommendation(
                    **candidate.model_dump(),
                    match_score=self.calculate_match_score(signals),
                    match_reasons=self.explain(candidate, signals, preferences, filters),
                )
            )

        recommendations.sort(key=lambda r: (-r.match_score, -r.rating, -r.total_sessions, _id_sort_key(r.id)))
        return recommendations[:count]

    # ======================
    # ENTRY POINTS
    # ======================

    def get_recommendations(
        self,
        student_id,
        filters: Optional[RecommendationFilters] = None,
        limit: Optional[int] = None,
    ) -> RecommendationResult:
        """
        Top mentors for a student. Never raises; failures come back as
        ``success=False`` with an error message.
        """
        filters = filters or RecommendationFilters()
        try:
            preferences = self.directory.get_student_preferences(student_id)
            if preferences is None:
                return RecommendationResult(success=False, error="Student not found")

            pool = list(self.directory.list_eligible_mentors())
            recommendations = self.rank(pool, preferences, filters, limit)
        except Exception as exc:
            logger.warning("Recommendations failed for student %s: %s", student_id, exc)
            return RecommendationResult(success=False, error=str(exc) or "Failed to get recommendations")

        logger.debug(
            "Ranked %d of %d mentors for student %s", len(recommendations), len(pool), student_id
        )
        return RecommendationResult(success=True, recommendations=recommendations)

    def get_popular_subjects(self, limit: int = 10) -> List[PopularSubject]:
        """Subjects by number of eligible mentors teaching them, ties alphabetical."""
        try:
            pool = list(self.directory.list_eligible_mentors())
        except Exception as exc:
            logger.warning("Popular subjects unavailable: %s", exc)
            return []

        counts = Counter()
        for candidate in pool:
            counts.update({s.strip() for s in candidate.subjects if s and s.strip()})

        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [PopularSubject(subject=subject, count=count) for subject, count in ordered[:max(limit, 0)]]

    def get_mentor_availability(self, mentor_id) -> AvailabilityResult:
        try:
            mentor = self.directory.get_mentor(mentor_id)
        except Exception as exc:
            logger.warning("Availability lookup failed for mentor %s: %s", mentor_id, exc)
            return AvailabilityResult(success=False, error=str(exc) or "Failed to get mentor availability")

        if mentor is None:
            return AvailabilityResult(success=False, error="Mentor not found")

        return AvailabilityResult(success=True, availability=list(mentor.availability))
