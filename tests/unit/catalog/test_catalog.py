"""Tests for the exercise catalog and exercise profiles."""

import pytest
from pydantic import ValidationError

from athletica.catalog.exercise_catalog import EXERCISE_CATALOG, get_exercise, register_exercise
from athletica.catalog.exercise_profile import (DifficultyTier, ExerciseProfile, compare_difficulty,
                                                muscle_overlap_ratio, )
from athletica.catalog.providers import BuiltinExerciseCatalog

CATEGORIES = {"lower_body", "upper_push", "upper_pull", "core", "conditioning"}


class TestCatalogContents:
    """Verify the built-in exercise catalog is well-formed."""

    def test_catalog_not_empty(self):
        assert len(EXERCISE_CATALOG) >= 30, f"Expected at least 30 exercises, got {len(EXERCISE_CATALOG)}"

    def test_exercise_id_matches_key(self):
        for key, profile in EXERCISE_CATALOG.items():
            assert profile.exercise_id == key, f"Key '{key}' does not match exercise_id '{profile.exercise_id}'"

    def test_known_categories(self):
        for eid, profile in EXERCISE_CATALOG.items():
            assert profile.category in CATEGORIES, f"{eid}: unknown category '{profile.category}'"

    def test_every_entry_targets_muscles(self):
        for eid, profile in EXERCISE_CATALOG.items():
            assert profile.primary_muscles, f"{eid}: no primary muscles"

    def test_no_duplicate_display_names(self):
        names = [p.display_name for p in EXERCISE_CATALOG.values()]
        assert len(names) == len(set(names))

    def test_every_category_offers_alternatives(self):
        for category in CATEGORIES:
            assert len([p for p in EXERCISE_CATALOG.values() if p.category == category]) >= 3, category


class TestLookup:
    def test_get_exercise(self):
        squat = get_exercise("back_squat")
        assert squat.display_name == "Back Squat"
        assert squat.difficulty == DifficultyTier.INTERMEDIATE

    def test_unknown_exercise(self):
        assert get_exercise("underwater_basket_weaving") is None

    def test_register_exercise(self):
        profile = ExerciseProfile(exercise_id="sissy_squat", display_name="Sissy Squat", category="lower_body",
                                  difficulty=DifficultyTier.ADVANCED, primary_muscles=["quadriceps"])
        try:
            register_exercise(profile)
            assert get_exercise("sissy_squat") is profile
        finally:
            EXERCISE_CATALOG.pop("sissy_squat", None)

    def test_profile_requires_known_tier(self):
        with pytest.raises(ValidationError):
            ExerciseProfile(exercise_id="x", display_name="X", category="core", difficulty="olympic")


class TestBuiltinExerciseCatalog:
    def test_in_category_keeps_catalog_order(self):
        ids = [p.exercise_id for p in BuiltinExerciseCatalog().in_category("lower_body", exclude="back_squat")]
        assert ids[:3] == ["goblet_squat", "bodyweight_squat", "front_squat"]
        assert "back_squat" not in ids

    def test_in_category_limit(self):
        assert len(BuiltinExerciseCatalog().in_category("lower_body", limit=4)) == 4

    def test_get(self):
        assert BuiltinExerciseCatalog().get("plank").category == "core"
        assert BuiltinExerciseCatalog().get("nope") is None


class TestDifficulty:
    def test_tiers_are_ordered(self):
        ranks = [t.rank for t in (DifficultyTier.BEGINNER, DifficultyTier.INTERMEDIATE, DifficultyTier.ADVANCED,
                                  DifficultyTier.EXPERT)]
        assert ranks == [0, 1, 2, 3]

    @pytest.mark.parametrize("candidate, expected", [
        ("goblet_squat", "easier"),
        ("bulgarian_split_squat", "same"),
        ("front_squat", "harder"),
        ("pistol_squat", "harder"),
    ])
    def test_compare_difficulty(self, candidate, expected):
        assert compare_difficulty(get_exercise("back_squat"), get_exercise(candidate)) == expected


class TestMuscleOverlap:
    def test_partial_overlap(self):
        # quadriceps, glutes, core of quadriceps, glutes, hamstrings, core
        assert muscle_overlap_ratio(get_exercise("back_squat"), get_exercise("goblet_squat")) == 0.75

    def test_overlap_is_relative_to_original(self):
        assert muscle_overlap_ratio(get_exercise("goblet_squat"), get_exercise("back_squat")) == 1.0

    def test_no_overlap(self):
        assert muscle_overlap_ratio(get_exercise("back_squat"), get_exercise("bench_press")) == 0.0

    def test_original_without_muscles(self):
        bare = ExerciseProfile(exercise_id="bare", display_name="Bare", category="core",
                               difficulty=DifficultyTier.BEGINNER)
        assert muscle_overlap_ratio(bare, get_exercise("plank")) == 0.0
