"""Test the presence condition finder."""
import unittest

from fe_analysis.code_model import BuildModel
from fe_analysis.helper import PresenceConditionAnalysisHelper
from fe_analysis.logic.formula import TRUE, Formula, Variable
from fe_analysis.logic.parser import parse_formula
from fe_analysis.logic.simplifier import PyedaSimplifier
from fe_analysis.pcs.pc_finder import PcFinder, VariableWithPcs
from fe_analysis.settings import AnalysisSettings, SimplificationType
from fe_analysis.utils.exceptions import SetUpError
from tests.test_utils import block, source_file, top_level


def pcs(*formulas: str) -> frozenset:
    return frozenset(parse_formula(formula) for formula in formulas)


def find_pcs(tree, settings=None, build_model=None, simplifier=None):
    settings = settings or AnalysisSettings()
    finder = PcFinder(
        settings, PresenceConditionAnalysisHelper(settings), simplifier
    )
    return finder.find([source_file("file1.c", tree)], build_model)


class TestPcFinder(unittest.TestCase):
    """Tests for the PcFinder."""

    def test_single_statement(self):
        results = find_pcs(block("A"))
        self.assertEqual(results, [VariableWithPcs("A", pcs("A"))])

    def test_multiple_elements(self):
        """Results are sorted by variable name."""
        results = find_pcs(top_level(block("A || B"), block("A && C")))

        self.assertEqual([result.variable for result in results],
                         ["A", "B", "C"])
        self.assertEqual(results[0].pcs, pcs("A || B", "A && C"))
        self.assertEqual(results[1].pcs, pcs("A || B"))
        self.assertEqual(results[2].pcs, pcs("A && C"))

    def test_multiple_nested_elements(self):
        results = find_pcs(
            top_level(block("A || B"), block("A", block("A && C")))
        )

        self.assertEqual(len(results), 3)
        self.assertEqual(results[0].pcs, pcs("A || B", "A && C", "A"))
        self.assertEqual(results[1].pcs, pcs("A || B"))
        self.assertEqual(results[2].pcs, pcs("A && C"))

    def test_irrelevant_variables(self):
        """Blocks without relevant variables are skipped, but nested blocks
        of relevant blocks are kept."""
        settings = AnalysisSettings(relevant_variables="CONFIG_.+")
        results = find_pcs(
            top_level(
                block("A"), block("CONFIG_B", block("CONFIG_B && C"))
            ), settings
        )

        self.assertEqual([result.variable for result in results],
                         ["C", "CONFIG_B"])
        self.assertEqual(results[0].pcs, pcs("CONFIG_B && C"))

    def test_nested_blocks_of_relevant_blocks(self):
        settings = AnalysisSettings(relevant_variables="CONFIG_.+")
        results = find_pcs(block("CONFIG_B", block("C")), settings)

        self.assertEqual(results[0], VariableWithPcs("C", pcs("C")))

    def test_with_build_model(self):
        build_model = BuildModel({
            "file1.c": Variable("B"),
            "file2.c": Variable("C"),
        })
        results = find_pcs(block("A"), build_model=build_model)

        self.assertEqual(len(results), 2)
        self.assertEqual(results[0], VariableWithPcs("A", pcs("B && A")))
        self.assertEqual(results[1], VariableWithPcs("B", pcs("B", "B && A")))

    def test_build_model_with_always_present_block(self):
        """A block that is always present gets the plain file PC."""
        build_model = BuildModel({"file1.c": Variable("B")})
        results = find_pcs(block("A", block(TRUE)), build_model=build_model)

        self.assertEqual(results[0], VariableWithPcs("A", pcs("B && A")))
        self.assertEqual(results[1], VariableWithPcs("B", pcs("B", "B && A")))

    def test_with_irrelevant_build_model(self):
        build_model = BuildModel({"file2.c": Variable("C")})
        with self.assertLogs("fe_analysis.pcs.pc_finder", level="WARNING"):
            results = find_pcs(block("A"), build_model=build_model)

        self.assertEqual(results, [VariableWithPcs("A", pcs("A"))])

    def test_consider_all_build_model(self):
        build_model = BuildModel({
            "file1.c": Variable("B"),
            "file2.c": Variable("C"),
        })
        results = find_pcs(
            block("A"), AnalysisSettings(add_all_bm_pcs=True), build_model
        )

        self.assertEqual(len(results), 3)
        self.assertEqual(results[0], VariableWithPcs("A", pcs("B && A")))
        self.assertEqual(results[1], VariableWithPcs("B", pcs("B", "B && A")))
        self.assertEqual(results[2], VariableWithPcs("C", pcs("C")))

    def test_missing_build_model(self):
        finder = PcFinder(
            AnalysisSettings(),
            PresenceConditionAnalysisHelper(AnalysisSettings())
        )
        with self.assertLogs("fe_analysis.pcs.pc_finder", level="WARNING"):
            results = finder.find([source_file("file1.c", block("A"))],
                                  build_model_expected=True)
        self.assertEqual(len(results), 1)

    def test_combine_non_boolean(self):
        settings = AnalysisSettings(combine_non_boolean=True)
        results = find_pcs(
            top_level(block("A || B"), block("A_eq_1 && C_lt_1")), settings
        )

        self.assertEqual(len(results), 3)
        self.assertEqual(results[0].pcs, pcs("A || B", "A && C"))
        self.assertEqual(results[1].pcs, pcs("A || B"))
        self.assertEqual(results[2].pcs, pcs("A && C"))

    def test_multiple_files(self):
        settings = AnalysisSettings()
        finder = PcFinder(settings, PresenceConditionAnalysisHelper(settings))
        results = finder.find([
            source_file("a.c", block("A")),
            source_file("b.c", block("A && B")),
        ])
        self.assertEqual(results[0].pcs, pcs("A", "A && B"))

    def test_simplified_pcs(self):
        settings = AnalysisSettings(
            simplification=SimplificationType.PRESENCE_CONDITIONS
        )
        results = find_pcs(
            block("A && (A || B)", block("C && !C || D")), settings,
            simplifier=PyedaSimplifier()
        )

        simplified: dict = {
            result.variable: result.pcs for result in results
        }
        self.assertEqual(simplified["A"], pcs("A"))
        self.assertEqual(simplified["B"], pcs("A"))
        self.assertEqual(simplified["C"], pcs("D"))
        self.assertEqual(simplified["D"], pcs("D"))

    def test_simplifier_required(self):
        settings = AnalysisSettings(
            simplification=SimplificationType.PRESENCE_CONDITIONS
        )
        with self.assertRaises(SetUpError):
            PcFinder(settings, PresenceConditionAnalysisHelper(settings))

    def test_str(self):
        var_with_pcs = VariableWithPcs("A", pcs("A", "A && B"))
        self.assertEqual(str(var_with_pcs), "PCs[A] = ['A', 'A && B']")
        self.assertIsInstance(next(iter(var_with_pcs.pcs)), Formula)
