"""Test the presence condition analysis helper."""
import unittest

from fe_analysis.code_model import VariabilityModel
from fe_analysis.helper import PresenceConditionAnalysisHelper
from fe_analysis.logic.formula import Conjunction, Negation, Variable
from fe_analysis.settings import AnalysisSettings, SimplificationType
from fe_analysis.utils.exceptions import SetUpError

NON_BOOLEAN = AnalysisSettings(preparation_classes=("NonBooleanPreparation",))


class TestPresenceConditionAnalysisHelper(unittest.TestCase):
    """Relevance checks and name translations."""

    def test_relevant_by_pattern(self):
        """The pattern has to match the whole name."""
        helper = PresenceConditionAnalysisHelper(
            AnalysisSettings(relevant_variables="CONFIG_.+")
        )
        self.assertTrue(helper.is_relevant("CONFIG_A"))
        self.assertFalse(helper.is_relevant("A"))
        self.assertFalse(helper.is_relevant("CONFIG_"))
        self.assertFalse(helper.is_relevant("X_CONFIG_A"))

    def test_relevant_formula(self):
        helper = PresenceConditionAnalysisHelper(
            AnalysisSettings(relevant_variables="CONFIG_.+")
        )
        self.assertTrue(
            helper.is_relevant_formula(
                Conjunction(Variable("A"), Negation(Variable("CONFIG_B")))
            )
        )
        self.assertFalse(helper.is_relevant_formula(Variable("B")))

    def test_varmodel_required(self):
        with self.assertRaises(SetUpError):
            PresenceConditionAnalysisHelper(
                AnalysisSettings(use_varmodel_variables_only=True)
            )

    def test_relevant_by_varmodel(self):
        helper = PresenceConditionAnalysisHelper(
            AnalysisSettings(use_varmodel_variables_only=True),
            VariabilityModel(["A", "B"])
        )
        self.assertTrue(helper.is_relevant("A"))
        self.assertFalse(helper.is_relevant("C"))
        self.assertFalse(helper.is_relevant("A_eq_1"))

    def test_relevant_by_varmodel_non_boolean(self):
        """Replaced non-boolean variables count with their base name."""
        helper = PresenceConditionAnalysisHelper(
            AnalysisSettings(
                use_varmodel_variables_only=True,
                preparation_classes=("NonBooleanPreparation",)
            ), VariabilityModel({"A": "tristate"})
        )
        self.assertTrue(helper.is_relevant("A_eq_1"))
        self.assertFalse(helper.is_relevant("B_eq_1"))

    def test_varmodel_ignored_if_not_enabled(self):
        helper = PresenceConditionAnalysisHelper(
            AnalysisSettings(relevant_variables="C"), VariabilityModel(["A"])
        )
        self.assertFalse(helper.is_relevant("A"))
        self.assertTrue(helper.is_relevant("C"))

    def test_do_replacements(self):
        helper = PresenceConditionAnalysisHelper(NON_BOOLEAN)
        self.assertEqual(helper.do_replacements("A_eq_1"), "A=1")
        self.assertEqual(helper.do_replacements("A_ne_1"), "A!=1")
        self.assertEqual(helper.do_replacements("A_gt_1"), "A>1")
        self.assertEqual(helper.do_replacements("A_ge_1"), "A>=1")
        self.assertEqual(helper.do_replacements("A_lt_1"), "A<1")
        self.assertEqual(helper.do_replacements("A_le_1"), "A<=1")
        self.assertEqual(helper.do_replacements("A"), "A")

    def test_no_replacements_in_boolean_mode(self):
        helper = PresenceConditionAnalysisHelper(AnalysisSettings())
        self.assertEqual(helper.do_replacements("A_eq_1"), "A_eq_1")
        formula = Variable("A_eq_1")
        self.assertIs(helper.do_formula_replacements(formula), formula)

    def test_formula_replacements(self):
        helper = PresenceConditionAnalysisHelper(
            AnalysisSettings(fuzzy_parsing=True)
        )
        self.assertEqual(
            helper.do_formula_replacements(
                Conjunction(Variable("A_eq_1"), Negation(Variable("B_lt_2")))
            ), Conjunction(Variable("A=1"), Negation(Variable("B<2")))
        )

    def test_remove_replacements(self):
        helper = PresenceConditionAnalysisHelper(AnalysisSettings())
        self.assertEqual(
            PresenceConditionAnalysisHelper.remove_replacements("A_eq_1"), "A"
        )
        self.assertEqual(
            helper.remove_formula_replacements(
                Conjunction(Variable("A_eq_1"), Variable("C_lt_1"))
            ), Conjunction(Variable("A"), Variable("C"))
        )

    def test_simplification_mode(self):
        helper = PresenceConditionAnalysisHelper(
            AnalysisSettings(
                simplification=SimplificationType.FEATURE_EFFECTS
            )
        )
        self.assertEqual(
            helper.simplification_mode, SimplificationType.FEATURE_EFFECTS
        )
        self.assertFalse(helper.is_non_boolean_mode())
