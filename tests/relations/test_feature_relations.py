"""Test the depends-on relations between features."""
import unittest

from fe_analysis.fes.feature_effect_finder import VariableWithFeatureEffect
from fe_analysis.logic.formula import TRUE, Variable
from fe_analysis.logic.parser import parse_formula
from fe_analysis.relations.feature_relations import (
    FeatureDependencyRelation,
    FeatureRelations,
    FeatureRelationStorage,
    compute_context,
    normalize_variable,
)


def fe(variable: str, feature_effect: str) -> VariableWithFeatureEffect:
    return VariableWithFeatureEffect(variable, parse_formula(feature_effect))


class TestFeatureRelations(unittest.TestCase):
    """Tests for FeatureRelations."""

    def test_operator_removal(self):
        """Value comparisons of an already reported feature are skipped."""
        results = list(FeatureRelations().run([fe("A", "1"), fe("A>0", "1")]))

        self.assertEqual(
            results, [FeatureDependencyRelation("A", "TRUE", TRUE)]
        )

    def test_context(self):
        results = list(
            FeatureRelations().run([fe("A", "B || C"), fe("B", "C && D")])
        )

        self.assertEqual(
            results, [
                FeatureDependencyRelation("A", "B", TRUE),
                FeatureDependencyRelation("A", "C", TRUE),
                FeatureDependencyRelation("B", "C", Variable("D")),
                FeatureDependencyRelation("B", "D", Variable("C")),
            ]
        )

    def test_value_comparisons_in_feature_effect(self):
        """Compared features are reported once, self references are
        skipped."""
        results = list(
            FeatureRelations().run([fe("A=1", "B=1 || B=2 && A=2 || !C")])
        )

        self.assertEqual([(result.feature, result.depends_on)
                          for result in results], [("A", "B"), ("A", "C")])
        # only a variable named exactly like the feature is replaced
        self.assertEqual(
            results[0].context, parse_formula("B=1 || B=2 && A=2 || !C")
        )
        self.assertEqual(results[1].context, parse_formula("B=1 || B=2 && A=2"))

    def test_values_of_same_feature_merged(self):
        results = list(
            FeatureRelations().run([fe("A=1", "B"), fe("A=2", "B || C")])
        )

        self.assertEqual(
            results, [
                FeatureDependencyRelation("A", "B", TRUE),
                FeatureDependencyRelation("A", "C", TRUE),
            ]
        )

    def test_constant_false(self):
        results = list(FeatureRelations().run([fe("A", "0")]))

        self.assertEqual(
            results,
            [FeatureDependencyRelation("A", "TRUE", parse_formula("0"))]
        )

    def test_str(self):
        self.assertEqual(
            str(FeatureDependencyRelation("B", "C", Variable("D"))),
            "B -> C [D]"
        )


class TestFeatureRelationHelpers(unittest.TestCase):
    """Tests for the helpers of the feature relation computation."""

    def test_normalize_variable(self):
        self.assertEqual(normalize_variable("A"), "A")
        self.assertEqual(normalize_variable("A=1"), "A")
        self.assertEqual(normalize_variable("A >= 3"), "A")
        self.assertEqual(normalize_variable("A!=3"), "A")
        self.assertEqual(normalize_variable("=1"), "")

    def test_compute_context(self):
        self.assertEqual(
            compute_context("B", parse_formula("B && C || D")),
            parse_formula("C || D")
        )
        self.assertEqual(compute_context("B", parse_formula("B || C")), TRUE)

    def test_storage(self):
        storage = FeatureRelationStorage()

        self.assertTrue(storage.mark_processed("A", "B"))
        self.assertFalse(storage.mark_processed("A", "B"))
        self.assertTrue(storage.mark_processed("A", "C"))
        self.assertTrue(storage.mark_processed("AB", "C"))
        self.assertEqual(len(storage), 2)

        # a feature of a new group forgets the old ones
        self.assertTrue(storage.mark_processed("B", "A"))
        self.assertEqual(len(storage), 1)
        self.assertTrue(storage.mark_processed("A", "B"))
