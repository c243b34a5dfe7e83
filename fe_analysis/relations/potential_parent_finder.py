"""
Heuristic detection of parent features.

A variable ``W`` is a potential parent of ``V`` if it occurs in the presence
conditions of ``V``. The probability is the fraction of presence conditions of
``V`` that contain ``W``.
"""

import typing as tp
from dataclasses import dataclass

from fe_analysis.logic.formula import find_vars
from fe_analysis.pcs.pc_finder import VariableWithPcs


@dataclass
class PotentialParent:
    variable: str
    probability: float = 0.0

    def __str__(self) -> str:
        return f"{self.variable} ({self.probability * 100:.2f}%)"


@dataclass(frozen=True)
class PotentialParentRelation:
    """One row of the flattened potential parent relation."""
    feature: str
    parent: str
    probability: float


class VariableWithPotentialParents():
    """A variable and its potential parents, sorted descending by
    probability after :meth:`sort` was called."""

    def __init__(self, variable: str) -> None:
        self.variable = variable
        self.__potential_parents: tp.List[PotentialParent] = []

    @property
    def potential_parents(self) -> tp.List[PotentialParent]:
        return self.__potential_parents

    def get_potential_parent(self, name: str) -> tp.Optional[PotentialParent]:
        for parent in self.__potential_parents:
            if parent.variable == name:
                return parent
        return None

    def get_or_create_potential_parent(self, name: str) -> PotentialParent:
        parent = self.get_potential_parent(name)
        if parent is None:
            parent = PotentialParent(name)
            self.__potential_parents.append(parent)
        return parent

    def sort(self) -> None:
        self.__potential_parents.sort(
            key=lambda parent: parent.probability, reverse=True
        )

    def to_relations(self) -> tp.List[PotentialParentRelation]:
        return [
            PotentialParentRelation(
                self.variable, parent.variable, parent.probability
            ) for parent in self.__potential_parents
        ]

    def __iter__(self) -> tp.Iterator[PotentialParent]:
        return iter(self.__potential_parents)

    def __len__(self) -> int:
        return len(self.__potential_parents)

    def __str__(self) -> str:
        parents = ", ".join(map(str, self.__potential_parents))
        return f"PotentialParents for {self.variable}: [{parents}]"


class PotentialParentFinder():
    """Computes the potential parents of variables from their presence
    conditions."""

    @staticmethod
    def find(var_with_pcs: VariableWithPcs) -> VariableWithPotentialParents:
        """
        Compute the potential parents of a single variable.

        Each presence condition adds ``1 / number of PCs`` to every other
        variable it contains, at most once.

        Args:
            var_with_pcs: the variable and its presence conditions

        Returns: the potential parents, sorted descending by probability
        """
        result = VariableWithPotentialParents(var_with_pcs.variable)
        num_pcs = len(var_with_pcs.pcs)

        for presence_condition in sorted(var_with_pcs.pcs, key=str):
            variables = find_vars(presence_condition)
            variables.discard(var_with_pcs.variable)
            for variable in sorted(variables):
                parent = result.get_or_create_potential_parent(variable)
                parent.probability += 1.0 / num_pcs

        result.sort()
        return result

    def run(
        self, variables: tp.Iterable[VariableWithPcs]
    ) -> tp.Iterator[VariableWithPotentialParents]:
        for var_with_pcs in variables:
            yield self.find(var_with_pcs)
