"""
Input model of the analysis.

Source files consist of trees of conditional code blocks, the build model maps
files to the condition under which they are compiled at all, and the
variability model lists the known configuration variables.
"""

from __future__ import annotations

import typing as tp
from dataclasses import dataclass, field

from fe_analysis.logic.formula import TRUE, Formula


@dataclass
class CodeBlock:
    """
    A conditionally compiled block of code.

    ``condition`` is the condition of the block itself, ``presence_condition``
    already includes the conditions of all enclosing blocks.
    """
    condition: Formula = TRUE
    presence_condition: Formula = TRUE
    children: tp.List[CodeBlock] = field(default_factory=list)

    def __iter__(self) -> tp.Iterator[CodeBlock]:
        return iter(self.children)

    def iter_preorder(self) -> tp.Iterator[CodeBlock]:
        """Block tree preorder iterator."""
        stack = [self]
        while stack:
            block = stack.pop()
            yield block
            stack.extend(reversed(block.children))


@dataclass
class SourceFile:
    """A source file with its top-level code blocks."""
    path: str
    blocks: tp.List[CodeBlock] = field(default_factory=list)

    def __iter__(self) -> tp.Iterator[CodeBlock]:
        return iter(self.blocks)


class BuildModel():
    """Maps file paths to the condition under which the file is compiled."""

    def __init__(
        self, file_pcs: tp.Optional[tp.Mapping[str, Formula]] = None
    ) -> None:
        self.__file_pcs: tp.Dict[str, Formula] = dict(file_pcs or {})

    def set_pc(self, file_path: str, presence_condition: Formula) -> None:
        self.__file_pcs[file_path] = presence_condition

    def get_pc(self, file_path: str) -> tp.Optional[Formula]:
        return self.__file_pcs.get(file_path, None)

    def __iter__(self) -> tp.Iterator[str]:
        return iter(self.__file_pcs)

    def __len__(self) -> int:
        return len(self.__file_pcs)


class VariabilityModel():
    """Known configuration variables with optional metadata, e.g., their
    type."""

    def __init__(
        self,
        variables: tp.Union[tp.Iterable[str], tp.Mapping[str, tp.Any]] = ()
    ) -> None:
        if isinstance(variables, tp.Mapping):
            self.__variables: tp.Dict[str, tp.Any] = dict(variables)
        else:
            self.__variables = {variable: None for variable in variables}

    def __contains__(self, variable: object) -> bool:
        return variable in self.__variables

    def __iter__(self) -> tp.Iterator[str]:
        return iter(self.__variables)

    def __len__(self) -> int:
        return len(self.__variables)

    def get_metadata(self, variable: str) -> tp.Any:
        return self.__variables.get(variable, None)
