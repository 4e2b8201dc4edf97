"""
Recommendation scorer: hard filters, soft signals, reasons, ranking and truncation
"""

import pytest

from eduvibe.ml.recommender import RecommendationScorer, slots_overlap, time_to_minutes
from eduvibe.schemas.recommendation import (
    AvailabilitySlot,
    MentorCandidate,
    PriceRange,
    RecommendationFilters,
    StudentPreferences,
)


class FakeDirectory:
    """In-memory candidate pool."""

    def __init__(self, mentors=None, preferences=None):
        self.mentors = list(mentors or [])
        self.preferences = preferences if preferences is not None else StudentPreferences(student_id="s1")
        self.pool_reads = 0

    def list_eligible_mentors(self):
        self.pool_reads += 1
        return list(self.mentors)

    def get_student_preferences(self, student_id):
        if str(student_id) != self.preferences.student_id:
            return None
        return self.preferences

    def get_mentor(self, mentor_id):
        for mentor in self.mentors:
            if mentor.id == str(mentor_id):
                return mentor
        return None


class BrokenDirectory(FakeDirectory):
    def list_eligible_mentors(self):
        raise RuntimeError("directory unavailable")

    def get_mentor(self, mentor_id):
        raise RuntimeError("directory unavailable")


def mentor(id, **overrides):
    fields = dict(
        id=id,
        name=f"Mentor {id}",
        subjects=["Math"],
        hourly_rate=30.0,
        rating=4.0,
        total_sessions=0,
        experience_level="Advanced",
        response_time="Within 24 hours",
        languages=["English"],
    )
    fields.update(overrides)
    return MentorCandidate(**fields)


def recommend(mentors, filters=None, limit=None, preferences=None):
    scorer = RecommendationScorer(FakeDirectory(mentors, preferences))
    result = scorer.get_recommendations("s1", filters, limit)
    assert result.success, result.error
    return result.recommendations


# ======================
# HARD FILTERS
# ======================

def test_subject_filter_excludes_non_matching_mentors():
    m1 = mentor("m1", subjects=["Math", "Physics"])
    m2 = mentor("m2", subjects=["Art"])

    results = recommend([m1, m2], RecommendationFilters(subjects=["Math"]))

    assert [r.id for r in results] == ["m1"]


def test_subject_filter_never_returns_mentor_without_subject():
    pool = [mentor(f"m{i}", subjects=["Math"] if i % 2 else ["Biology", "Art"]) for i in range(10)]
    results = recommend(pool, RecommendationFilters(subjects=["Math"]))

    assert results
    assert all("Math" in r.subjects for r in results)


def test_experience_level_is_exact():
    pool = [
        mentor("m1", experience_level="Expert"),
        mentor("m2", experience_level="Advanced"),
    ]
    results = recommend(pool, RecommendationFilters(experience_level="Advanced"))
    assert [r.id for r in results] == ["m2"]


def test_price_range_is_inclusive():
    pool = [
        mentor("m1", hourly_rate=20.0),
        mentor("m2", hourly_rate=40.0),
        mentor("m3", hourly_rate=41.0),
    ]
    results = recommend(pool, RecommendationFilters(price_range=PriceRange(min=20, max=40)))
    assert sorted(r.id for r in results) == ["m1", "m2"]


def test_minimum_rating():
    pool = [mentor("m1", rating=4.5), mentor("m2", rating=3.9)]
    results = recommend(pool, RecommendationFilters(rating=4.0))
    assert [r.id for r in results] == ["m1"]


def test_location_is_case_insensitive_substring():
    pool = [
        mentor("m1", location="New York, USA"),
        mentor("m2", location="Boston"),
        mentor("m3", location=None),
    ]
    results = recommend(pool, RecommendationFilters(location="new york"))
    assert [r.id for r in results] == ["m1"]


def test_language_filter_requires_shared_language():
    pool = [
        mentor("m1", languages=["English", "Spanish"]),
        mentor("m2", languages=["French"]),
    ]
    results = recommend(pool, RecommendationFilters(language=["Spanish"]))
    assert [r.id for r in results] == ["m1"]


def test_subject_and_language_filters_match_exact_names():
    pool = [
        mentor("m1", subjects=["Math"], languages=["English"]),
        mentor("m2", subjects=["math"], languages=["english"]),
    ]
    assert [r.id for r in recommend(pool, RecommendationFilters(subjects=["Math"]))] == ["m1"]
    assert recommend(pool, RecommendationFilters(subjects=["MATH"])) == []
    assert [r.id for r in recommend(pool, RecommendationFilters(language=["english"]))] == ["m2"]


def test_inverted_price_range_matches_nothing():
    results = recommend([mentor("m1")], RecommendationFilters(price_range=PriceRange(min=50, max=10)))
    assert results == []


def test_minimum_price_alone_has_no_upper_bound():
    pool = [mentor("m1", hourly_rate=1000.0), mentor("m2", hourly_rate=2000.0)]
    results = recommend(pool, RecommendationFilters(price_range=PriceRange(min=1500)))
    assert [r.id for r in results] == ["m2"]


def test_negative_price_matches_nothing():
    filters = RecommendationFilters.model_construct(price_range=PriceRange.model_construct(min=-5, max=100))
    results = recommend([mentor("m1")], filters)
    assert results == []


def test_out_of_range_rating_matches_nothing():
    filters = RecommendationFilters.model_construct(rating=7)
    results = recommend([mentor("m1", rating=5.0)], filters)
    assert results == []


def test_filter_schema_rejects_bad_values():
    with pytest.raises(ValueError):
        RecommendationFilters(rating=6)
    with pytest.raises(ValueError):
        RecommendationFilters(limit=0)
    with pytest.raises(ValueError):
        PriceRange(min=-1, max=10)


# ======================
# SCORING
# ======================

def test_signal_weights_sum_to_one():
    assert sum(RecommendationScorer.SIGNAL_WEIGHTS.values()) == pytest.approx(1.0)


def test_known_score():
    # subjects 1.0, rating 1.0, experience 1.0, response 0.4
    m = mentor("m1", rating=5.0, experience_level="Expert")
    results = recommend([m], RecommendationFilters(subjects=["Math"]))
    assert results[0].match_score == 57


def test_perfect_match_scores_100():
    slot = AvailabilitySlot(day="Monday", start_time="09:00", end_time="11:00")
    prefs = StudentPreferences(
        student_id="s1",
        interested_subjects=["Math"],
        preferred_languages=["English"],
        current_level="Beginner",
        budget_min=10,
        budget_max=50,
        preferred_times=[slot],
        learning_goals="calculus exam preparation",
    )
    m = mentor(
        "m1",
        rating=5.0,
        total_sessions=12,
        experience_level="Expert",
        response_time="Within 1 hour",
        availability=[slot],
        bio="calculus exam preparation",
    )
    results = recommend([m], preferences=prefs)
    assert results[0].match_score == 100


def test_scores_stay_in_range():
    pool = [mentor(f"m{i}", rating=float(i % 6), total_sessions=i * 3) for i in range(12)]
    for r in recommend(pool, limit=50):
        assert 0 <= r.match_score <= 100


def test_higher_rating_never_ranks_lower():
    low = mentor("a", rating=3.0, total_sessions=4)
    high = mentor("b", rating=5.0, total_sessions=4)

    results = recommend([low, high], RecommendationFilters(subjects=["Math"]))
    by_id = {r.id: r for r in results}

    assert by_id["b"].match_score >= by_id["a"].match_score
    assert [r.id for r in results] == ["b", "a"]


def test_popularity_is_relative_to_surviving_pool():
    assert RecommendationScorer.popularity_signal(0, 0) == 0.0
    assert RecommendationScorer.popularity_signal(10, 10) == 1.0
    assert 0.0 < RecommendationScorer.popularity_signal(3, 10) < 1.0


def test_preferences_drive_subjects_when_no_filter():
    prefs = StudentPreferences(student_id="s1", interested_subjects=["Art"])
    pool = [mentor("m1", subjects=["Math"]), mentor("m2", subjects=["Art"])]

    results = recommend(pool, preferences=prefs)

    assert [r.id for r in results] == ["m2", "m1"]


def test_goal_alignment_prefers_matching_bio():
    prefs = StudentPreferences(student_id="s1", learning_goals="machine learning with python")
    pool = [
        mentor("m1", bio="Watercolor painting and sketching"),
        mentor("m2", bio="Python developer teaching machine learning"),
    ]
    results = recommend(pool, preferences=prefs)
    assert results[0].id == "m2"
    assert "Background aligns with your learning goals" in results[0].match_reasons


# ======================
# REASONS
# ======================

def test_reasons_follow_weight_order():
    prefs = StudentPreferences(student_id="s1", budget_min=10, budget_max=50)
    m = mentor("m1", rating=4.8, experience_level="Expert")

    reasons = recommend([m], RecommendationFilters(subjects=["Math"]), preferences=prefs)[0].match_reasons

    assert reasons[0] == "Specializes in 1 of your requested subjects"
    assert reasons[1] == "Highly rated mentor (4.8 stars)"
    assert reasons.index("Expert level suits your current level") > 1
    assert reasons[-1] == "Within your budget range"


def test_no_reason_for_weak_signals():
    m = mentor("m1", subjects=["Art"], rating=2.0, experience_level="Unknown")
    reasons = recommend([m], preferences=StudentPreferences(student_id="s1", interested_subjects=["Math"]))[0].match_reasons
    assert reasons == []


# ======================
# RANKING & TRUNCATION
# ======================

def test_ties_break_by_id():
    pool = [mentor("c"), mentor("a"), mentor("b")]
    assert [r.id for r in recommend(pool)] == ["a", "b", "c"]


def test_numeric_ids_tie_break_numerically():
    pool = [mentor("10"), mentor("9"), mentor("100")]
    assert [r.id for r in recommend(pool)] == ["9", "10", "100"]


def test_ties_break_by_sessions_before_id():
    # Same score after rounding, more sessions ranks first
    pool = [mentor("a", total_sessions=100), mentor("b", total_sessions=101)]
    results = recommend(pool)
    assert results[0].match_score == results[1].match_score
    assert [r.id for r in results] == ["b", "a"]


@pytest.mark.parametrize("limit,expected", [(None, 10), (3, 3), (0, 0), (-2, 0), (100, 50)])
def test_limit(limit, expected):
    pool = [mentor(f"m{i:02d}") for i in range(60)]
    assert len(recommend(pool, limit=limit)) == expected


def test_limit_from_filters():
    pool = [mentor(f"m{i}") for i in range(8)]
    assert len(recommend(pool, RecommendationFilters(limit=5))) == 5


def test_output_never_exceeds_survivors():
    pool = [mentor("m1"), mentor("m2", subjects=["Art"])]
    assert len(recommend(pool, RecommendationFilters(subjects=["Math"]), limit=10)) == 1


def test_identical_inputs_identical_output():
    pool = [mentor(f"m{i}", rating=4.0 + (i % 3) * 0.3, total_sessions=i) for i in range(15)]
    first = [r.model_dump() for r in recommend(pool)]
    second = [r.model_dump() for r in recommend(pool)]
    assert first == second


def test_pool_is_read_once():
    directory = FakeDirectory([mentor("m1"), mentor("m2")])
    RecommendationScorer(directory).get_recommendations("s1")
    assert directory.pool_reads == 1


# ======================
# FAILURES
# ======================

def test_unknown_student():
    result = RecommendationScorer(FakeDirectory([mentor("m1")])).get_recommendations("nobody")
    assert result.success is False
    assert result.error == "Student not found"
    assert result.recommendations == []


def test_directory_failure_is_reported_not_raised():
    result = RecommendationScorer(BrokenDirectory()).get_recommendations("s1")
    assert result.success is False
    assert result.error == "directory unavailable"


# ======================
# POPULAR SUBJECTS & AVAILABILITY
# ======================

def test_popular_subjects():
    pool = (
        [mentor(f"m{i}", subjects=["Math", "Physics"]) for i in range(3)]
        + [mentor(f"n{i}", subjects=["Math"]) for i in range(2)]
        + [mentor("c1", subjects=["Chemistry"])]
    )
    popular = RecommendationScorer(FakeDirectory(pool)).get_popular_subjects(2)

    assert [(p.subject, p.count) for p in popular] == [("Math", 5), ("Physics", 3)]


def test_popular_subjects_count_each_mentor_once_and_sort_ties_alphabetically():
    pool = [
        mentor("m1", subjects=["Math", "Math", "Biology"]),
        mentor("m2", subjects=["Art"]),
    ]
    popular = RecommendationScorer(FakeDirectory(pool)).get_popular_subjects(10)
    assert [(p.subject, p.count) for p in popular] == [("Art", 1), ("Biology", 1), ("Math", 1)]


def test_popular_subjects_on_failure_is_empty():
    assert RecommendationScorer(BrokenDirectory()).get_popular_subjects() == []


def test_mentor_availability():
    slot = AvailabilitySlot(day="Tuesday", start_time="14:00", end_time="16:00")
    scorer = RecommendationScorer(FakeDirectory([mentor("7", availability=[slot])]))

    found = scorer.get_mentor_availability(7)
    assert found.success
    assert found.availability == [slot]

    missing = scorer.get_mentor_availability(99)
    assert missing.success is False
    assert missing.error == "Mentor not found"


def test_mentor_availability_failure():
    result = RecommendationScorer(BrokenDirectory()).get_mentor_availability(1)
    assert result.success is False


def test_slots_overlap():
    a = AvailabilitySlot(day="Monday", start_time="09:00", end_time="11:00")
    assert slots_overlap(a, AvailabilitySlot(day="monday", start_time="10:30", end_time="12:00"))
    assert not slots_overlap(a, AvailabilitySlot(day="Monday", start_time="11:00", end_time="12:00"))
    assert not slots_overlap(a, AvailabilitySlot(day="Tuesday", start_time="09:00", end_time="11:00"))


def test_time_to_minutes():
    assert time_to_minutes("00:00") == 0
    assert time_to_minutes("9:30") == 570
    assert time_to_minutes("23:59") == 1439
