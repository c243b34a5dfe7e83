"""
Settings module for the feature-effect analysis.

All settings are stored in a benchbuild configuration tree. Each setting can
be set in a ``.fe_analysis.yaml`` config file or via environment variable,
e.g., ``analysis/relevant_variables`` is read from
``FE_ANALYSIS_RELEVANT_VARIABLES``.

Analysis components never access the configuration tree directly, they get
an :class:`AnalysisSettings` value that is created once with
:meth:`AnalysisSettings.from_config`.
"""
import logging
import os
import re
import typing as tp
from dataclasses import dataclass
from enum import Enum
from os import path

import benchbuild.utils.settings as s
import yaml
from plumbum import LocalPath

from fe_analysis.utils.exceptions import SetUpError

LOG = logging.getLogger(__name__)

CONFIG_FILE_NAMES = ['.fe_analysis.yaml', '.fe_analysis.yml']
CONFIG_FILE_ENV_VAR = "FE_ANALYSIS_CONFIG_FILE"

NON_BOOLEAN_PREPARATION_SUFFIXES = (
    "NonBooleanPreperation", "NonBooleanPreparation"
)


class SimplificationType(int, Enum):
    """
    Analysis step after which formulas are simplified.

    The order of the values matters, later steps compare against
    ``PRESENCE_CONDITIONS``.
    """
    NO_SIMPLIFICATION = 0
    PRESENCE_CONDITIONS = 1
    FEATURE_EFFECTS = 2

    @staticmethod
    def parse(
        value: tp.Union[str, 'SimplificationType']
    ) -> 'SimplificationType':
        """
        Convert a config value into a :class:`SimplificationType`.

        Raises:
            SetUpError: if ``value`` does not name a simplification type
        """
        if isinstance(value, SimplificationType):
            return value
        try:
            return SimplificationType[str(value).strip().upper()]
        except KeyError as err:
            raise SetUpError(
                f"Unknown simplification type '{value}', expected one of "
                f"{', '.join(stype.name for stype in SimplificationType)}"
            ) from err


def create_new_fe_config() -> s.Configuration:
    """
    Create a new default (uninitialized) analysis config.

    For internal use only! If you want to access the current config, use
    :func:`fe_cfg()` instead.

    Returns:
        a new default analysis config object
    """
    cfg = s.Configuration(
        "fe",
        node={
            "config_file": {
                "desc": "Config file path. Not guaranteed to exist.",
                "default": None,
            },
        }
    )

    cfg["analysis"] = {
        "relevant_variables": {
            "desc":
                "Regular expression that specifies which variables should "
                "be present in the output.",
            "default": ".*",
        },
        "use_varmodel_variables_only": {
            "desc":
                "Only consider variables that are part of the variability "
                "model. Requires a variability model.",
            "default": False,
        },
        "simplify_conditions": {
            "desc":
                "After which analysis step results are simplified: "
                "NO_SIMPLIFICATION, PRESENCE_CONDITIONS (presence conditions "
                "and all later steps) or FEATURE_EFFECTS.",
            "default": SimplificationType.NO_SIMPLIFICATION.name,
        },
        "preparation_classes": {
            "desc":
                "Preparation steps that ran on the code model. A step ending "
                "in NonBooleanPreparation enables the non-boolean mode.",
            "default": [],
        },
        "fuzzy_parsing": {
            "desc":
                "The code model was parsed fuzzily, i.e., variables may carry "
                "non-boolean value assignments.",
            "default": False,
        },
        "threads": {
            "desc": "Number of worker threads for the feature-effect finder.",
            "default": 6,
        },
    }

    cfg["analysis"]["pc_finder"] = {
        "add_all_bm_pcs": {
            "desc":
                "Consider all presence conditions from the build model, "
                "even if no source file for them exists.",
            "default": False,
        },
        "combine_non_boolean": {
            "desc":
                "Collapse all non-boolean replacements into a single "
                "variable, e.g., VAR and VAR_eq_1 are treated as VAR.",
            "default": False,
        },
    }
    return cfg


_CFG: tp.Optional[s.Configuration] = None


def fe_cfg() -> s.Configuration:
    """Get the current analysis config."""
    global _CFG  # pylint: disable=global-statement
    if not _CFG:
        _CFG = create_new_fe_config()
        config_file = find_config_file()
        if config_file:
            load_config_file(_CFG, config_file)
        _CFG.init_from_env()
    return _CFG


def find_config_file() -> tp.Optional[str]:
    """Look up the config file, either from the environment or by walking up
    from the current directory."""
    config_path = os.getenv(CONFIG_FILE_ENV_VAR, None)
    if config_path:
        return config_path

    found = s.find_config(defaults=CONFIG_FILE_NAMES)
    return str(found) if found else None


def load_config_file(cfg: s.Configuration, config_file: str) -> None:
    """
    Load values from a yaml config file into ``cfg``.

    Unknown keys are ignored with a debug message.

    Args:
        cfg: config to update
        config_file: path to a file created by :func:`save_config`
    """

    def load_rec(
        inode: tp.Dict[str, tp.Any], loaded: tp.Dict[str, tp.Any]
    ) -> None:
        for key, value in loaded.items():
            if isinstance(value, dict) and key not in ['value', 'default']:
                if key in inode:
                    load_rec(inode[key], value)
                else:
                    LOG.debug("Ignoring unknown config element '%s'", key)
            else:
                inode[key] = value

    with open(config_file, 'r') as infile:
        loaded = yaml.safe_load(infile) or {}

    load_rec(cfg.node, loaded)
    cfg["config_file"] = path.abspath(config_file)


def save_config() -> None:
    """Persist the analysis config to a yaml file."""
    if fe_cfg()["config_file"].value is None:
        config_file = CONFIG_FILE_NAMES[0]
    else:
        config_file = str(fe_cfg()["config_file"])

    fe_cfg()["config_file"] = path.abspath(config_file)
    fe_cfg().store(LocalPath(config_file))


@dataclass(frozen=True)
class AnalysisSettings:
    """Settings that are passed to every analysis component."""
    relevant_variables: str = ".*"
    use_varmodel_variables_only: bool = False
    simplification: SimplificationType = SimplificationType.NO_SIMPLIFICATION
    preparation_classes: tp.Tuple[str, ...] = ()
    fuzzy_parsing: bool = False
    add_all_bm_pcs: bool = False
    combine_non_boolean: bool = False
    threads: int = 6

    def __post_init__(self) -> None:
        try:
            re.compile(self.relevant_variables)
        except re.error as err:
            raise SetUpError(
                f"Invalid regular expression for relevant variables: "
                f"'{self.relevant_variables}'"
            ) from err
        if self.threads < 1:
            raise SetUpError(
                f"Number of threads must be positive, got {self.threads}"
            )

    @property
    def non_boolean_replacements(self) -> bool:
        """Whether a preparation step replaced non-boolean variables."""
        return any(
            prep_class.endswith(NON_BOOLEAN_PREPARATION_SUFFIXES)
            for prep_class in self.preparation_classes
        )

    @property
    def non_boolean_mode(self) -> bool:
        """Whether variable names carry non-boolean value assignments."""
        return self.non_boolean_replacements or self.fuzzy_parsing

    @property
    def simplify_results(self) -> bool:
        """Whether feature effects and later results are simplified."""
        return self.simplification >= SimplificationType.PRESENCE_CONDITIONS

    @property
    def simplify_pcs(self) -> bool:
        return self.simplification == SimplificationType.PRESENCE_CONDITIONS

    @staticmethod
    def from_config(
        cfg: tp.Optional[s.Configuration] = None
    ) -> 'AnalysisSettings':
        """
        Create settings from a config tree.

        Args:
            cfg: config to read from, defaults to :func:`fe_cfg()`

        Returns: the settings
        """
        if cfg is None:
            cfg = fe_cfg()
        analysis = cfg["analysis"]
        preparation_classes = analysis["preparation_classes"].value or []
        if isinstance(preparation_classes, str):
            preparation_classes = [preparation_classes]

        return AnalysisSettings(
            relevant_variables=str(analysis["relevant_variables"].value),
            use_varmodel_variables_only=bool(
                analysis["use_varmodel_variables_only"].value
            ),
            simplification=SimplificationType.parse(
                analysis["simplify_conditions"].value
            ),
            preparation_classes=tuple(
                str(prep_class) for prep_class in preparation_classes
            ),
            fuzzy_parsing=bool(analysis["fuzzy_parsing"].value),
            add_all_bm_pcs=bool(analysis["pc_finder"]["add_all_bm_pcs"].value),
            combine_non_boolean=bool(
                analysis["pc_finder"]["combine_non_boolean"].value
            ),
            threads=int(analysis["threads"].value),
        )
