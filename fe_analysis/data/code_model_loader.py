"""
Loading of code, build and variability models from yaml files.

A model file contains one yaml document per source file::

    path: src/main.c
    pc: CONFIG_MAIN           # optional, condition of the whole file
    blocks:
      - condition: A
        presence_condition: A # optional, derived from the parent block
        children:
          - condition: B

Additional documents may hold a ``build_model`` mapping from file paths to
conditions and a ``variability_model`` list of variables.
"""
import errno
import logging
import os
import typing as tp
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from fe_analysis.code_model import (
    BuildModel,
    CodeBlock,
    SourceFile,
    VariabilityModel,
)
from fe_analysis.logic.formula import (
    FALSE,
    TRUE,
    Conjunction,
    Formula,
    is_true,
)
from fe_analysis.logic.parser import parse_formula
from fe_analysis.utils.exceptions import FormulaParseError

LOG = logging.getLogger(__name__)


@dataclass
class CodeModel:
    """Everything that was loaded from a model file."""
    source_files: tp.List[SourceFile] = field(default_factory=list)
    build_model: tp.Optional[BuildModel] = None
    variability_model: tp.Optional[VariabilityModel] = None


def _to_formula(value: tp.Any) -> Formula:
    if isinstance(value, bool):
        return TRUE if value else FALSE
    return parse_formula(str(value))


def _load_block(
    block_dict: tp.Dict[str, tp.Any], parent_pc: Formula
) -> CodeBlock:
    condition = _to_formula(block_dict.get("condition", "1"))
    if "presence_condition" in block_dict:
        presence_condition = _to_formula(block_dict["presence_condition"])
    elif is_true(parent_pc):
        presence_condition = condition
    else:
        presence_condition = Conjunction(parent_pc, condition)

    children = [
        _load_block(child, presence_condition)
        for child in block_dict.get("children", None) or []
    ]
    return CodeBlock(condition, presence_condition, children)


def _load_source_file(
    document: tp.Dict[str, tp.Any], build_model: BuildModel
) -> SourceFile:
    file_path = str(document["path"])
    if document.get("pc", None) is not None:
        build_model.set_pc(file_path, _to_formula(document["pc"]))

    return SourceFile(
        file_path, [
            _load_block(block, TRUE)
            for block in document.get("blocks", None) or []
        ]
    )


def load_code_model(file_path: Path) -> CodeModel:
    """
    Load a model file.

    Documents that cannot be read are logged and skipped.

    Args:
        file_path: the yaml file to load

    Returns: the loaded models, ``build_model`` is only set if the file
             contains file conditions
    """
    if not file_path.exists():
        raise FileNotFoundError(
            errno.ENOENT, os.strerror(errno.ENOENT), str(file_path)
        )

    with open(file_path, "r") as yaml_file:
        documents = list(yaml.load_all(yaml_file, Loader=yaml.SafeLoader))

    model = CodeModel()
    build_model = BuildModel()
    for index, document in enumerate(documents):
        if not isinstance(document, dict):
            if document is not None:
                LOG.warning(
                    "Skipping document %d in %s: not a mapping", index,
                    file_path
                )
            continue

        try:
            if "build_model" in document:
                for path, condition in (document["build_model"] or {}).items():
                    build_model.set_pc(str(path), _to_formula(condition))
            elif "variability_model" in document:
                model.variability_model = VariabilityModel(
                    document["variability_model"] or []
                )
            else:
                model.source_files.append(
                    _load_source_file(document, build_model)
                )
        except (FormulaParseError, KeyError, TypeError,
                AttributeError) as err:
            LOG.warning(
                "Skipping document %d in %s: %s", index, file_path, err
            )

    if len(build_model) > 0:
        model.build_model = build_model

    LOG.debug(
        "Loaded %d source files from %s", len(model.source_files), file_path
    )
    return model
