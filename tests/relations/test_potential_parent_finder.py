"""Test the potential parent finder."""
import unittest

from fe_analysis.logic.parser import parse_formula
from fe_analysis.pcs.pc_finder import VariableWithPcs
from fe_analysis.relations.potential_parent_finder import (
    PotentialParentFinder,
    PotentialParentRelation,
    VariableWithPotentialParents,
)


def var_with_pcs(variable: str, *pcs: str) -> VariableWithPcs:
    return VariableWithPcs(
        variable, frozenset(parse_formula(pc) for pc in pcs)
    )


class TestPotentialParentFinder(unittest.TestCase):
    """Tests for the PotentialParentFinder."""

    @classmethod
    def setUpClass(cls):
        cls.results = list(
            PotentialParentFinder().run([
                var_with_pcs("A", "A", "A && B"),
                var_with_pcs("B", "A && B", "A && B && C", "B && C"),
                var_with_pcs("C", "A && B && C"),
                var_with_pcs("D", "D && A", "D && (A && B)",
                             "D && (A && B && C)"),
            ])
        )

    def test_number_of_results(self):
        self.assertEqual([result.variable for result in self.results],
                         ["A", "B", "C", "D"])

    def test_single_parent(self):
        parents = self.results[0]
        self.assertIsNone(parents.get_potential_parent("A"))
        self.assertAlmostEqual(
            parents.get_potential_parent("B").probability, 0.5
        )
        self.assertIsNone(parents.get_potential_parent("C"))

    def test_fractions(self):
        parents = self.results[1]
        self.assertAlmostEqual(
            parents.get_potential_parent("A").probability, 2.0 / 3.0
        )
        self.assertIsNone(parents.get_potential_parent("B"))
        self.assertAlmostEqual(
            parents.get_potential_parent("C").probability, 2.0 / 3.0
        )

        parents = self.results[2]
        self.assertAlmostEqual(
            parents.get_potential_parent("A").probability, 1.0
        )
        self.assertAlmostEqual(
            parents.get_potential_parent("B").probability, 1.0
        )

    def test_sorted_by_probability(self):
        parents = self.results[3]
        self.assertEqual([parent.variable for parent in parents],
                         ["A", "B", "C"])
        self.assertEqual(
            str(parents),
            "PotentialParents for D: [A (100.00%), B (66.67%), C (33.33%)]"
        )

    def test_relations(self):
        relations = self.results[0].to_relations()
        self.assertEqual(relations, [PotentialParentRelation("A", "B", 0.5)])

    def test_no_other_variables(self):
        parents = PotentialParentFinder.find(var_with_pcs("A", "A", "!A"))
        self.assertEqual(len(parents), 0)

    def test_get_or_create(self):
        parents = VariableWithPotentialParents("A")
        parent = parents.get_or_create_potential_parent("B")
        parent.probability = 0.25
        self.assertIs(parents.get_or_create_potential_parent("B"), parent)
        self.assertEqual(len(parents), 1)
        self.assertEqual(str(parent), "B (25.00%)")
