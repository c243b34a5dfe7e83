"""
Driver module for `fe-analysis`.

This module handles command-line parsing and maps the commands to the
analysis pipeline.
"""
import logging
import sys
import typing as tp
from pathlib import Path

import click
import yaml
from benchbuild.utils.settings import Configuration

from fe_analysis.arch_components.arch_component_resolver import (
    ArchComponentResolver,
)
from fe_analysis.code_model import VariabilityModel
from fe_analysis.data.code_model_loader import load_code_model
from fe_analysis.data.tables import (
    TablePath,
    read_arch_components,
    read_feature_effects,
    read_pcs,
    write_arch_split,
    write_feature_effects,
    write_feature_relations,
    write_pcs,
    write_potential_parents,
)
from fe_analysis.fes.fe_aggregator import FeAggregator
from fe_analysis.fes.feature_effect_finder import (
    FeatureEffectFinder,
    VariableWithFeatureEffect,
)
from fe_analysis.fes.non_boolean_fe_expander import NonBooleanFeExpander
from fe_analysis.fes.threaded_feature_effect_finder import (
    ThreadedFeatureEffectFinder,
)
from fe_analysis.helper import PresenceConditionAnalysisHelper
from fe_analysis.logic.simplifier import PyedaSimplifier, default_simplify
from fe_analysis.pcs.pc_finder import PcFinder, VariableWithPcs
from fe_analysis.relations.feature_relations import FeatureRelations
from fe_analysis.relations.potential_parent_finder import PotentialParentFinder
from fe_analysis.settings import AnalysisSettings, fe_cfg, save_config
from fe_analysis.tools.tool_util import analysis_error_handler, is_table_file
from fe_analysis.utils.cli_util import initialize_cli_tool

LOG = logging.getLogger(__name__)


@click.group("fe-analysis")
def main() -> None:
    """
    Compute feature effects from presence conditions.

    `fe-analysis`
    """
    initialize_cli_tool()


def __output(output: tp.Optional[Path]) -> TablePath:
    if output is None:
        return sys.stdout
    return output


def __load_variables(
    input_file: Path, settings: AnalysisSettings,
    simplifier: PyedaSimplifier, build_model_expected: bool,
    variability_model: tp.Optional[VariabilityModel]
) -> tp.Tuple[tp.List[VariableWithPcs], tp.Optional[VariabilityModel]]:
    """Read presence conditions from a table or find them in a model file."""
    if is_table_file(input_file):
        LOG.debug("Reading presence conditions from %s", input_file)
        return read_pcs(
            input_file, simplifier if settings.simplify_pcs else None
        ), variability_model

    code_model = load_code_model(input_file)
    if variability_model is None:
        variability_model = code_model.variability_model
    helper = PresenceConditionAnalysisHelper(settings, variability_model)
    finder = PcFinder(settings, helper, simplifier)
    return finder.find(
        code_model.source_files, code_model.build_model, build_model_expected
    ), variability_model


def __load_variability_model(
    model_file: tp.Optional[Path]
) -> tp.Optional[VariabilityModel]:
    if model_file is None:
        return None
    return load_code_model(model_file).variability_model


@main.command("pcs")
@click.argument("model_file", type=click.Path(path_type=Path))
@click.option(
    "--build-model-expected",
    is_flag=True,
    help="Warn if the model file contains no build model."
)
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    required=False,
    help="CSV file to write to, defaults to stdout."
)
@analysis_error_handler
def __pcs(
    model_file: Path, build_model_expected: bool, output: tp.Optional[Path]
) -> None:
    """Find the presence conditions of all variables of MODEL_FILE."""
    settings = AnalysisSettings.from_config()
    code_model = load_code_model(model_file)
    helper = PresenceConditionAnalysisHelper(
        settings, code_model.variability_model
    )
    finder = PcFinder(settings, helper, PyedaSimplifier())

    variables = finder.find(
        code_model.source_files, code_model.build_model, build_model_expected
    )
    write_pcs(variables, __output(output))


@main.command("feature-effects")
@click.argument("input_file", type=click.Path(path_type=Path))
@click.option(
    "--threads",
    metavar="THREADS",
    type=int,
    required=False,
    help="Number of worker threads, defaults to the configured value."
)
@click.option(
    "--aggregate",
    is_flag=True,
    help="Merge the feature effects of all values of a non-boolean variable."
)
@click.option(
    "--expand",
    is_flag=True,
    help="Extend the feature effects of values by the feature effect of "
    "their variable."
)
@click.option(
    "--varmodel",
    type=click.Path(path_type=Path),
    required=False,
    help="Model file to read the variability model from."
)
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    required=False,
    help="CSV file to write to, defaults to stdout."
)
@analysis_error_handler
def __feature_effects(
    input_file: Path, threads: tp.Optional[int], aggregate: bool,
    expand: bool, varmodel: tp.Optional[Path], output: tp.Optional[Path]
) -> None:
    """
    Compute the feature effects of all relevant variables.

    INPUT_FILE is either a presence condition table (.csv) or a model file.
    """
    if aggregate and expand:
        raise click.UsageError(
            "At most one argument of: --aggregate, --expand can be used."
        )

    settings = AnalysisSettings.from_config()
    simplifier = PyedaSimplifier()
    variables, variability_model = __load_variables(
        input_file, settings, simplifier, False,
        __load_variability_model(varmodel)
    )
    helper = PresenceConditionAnalysisHelper(settings, variability_model)

    num_threads = threads if threads is not None else settings.threads
    finder: FeatureEffectFinder
    if num_threads > 1:
        finder = ThreadedFeatureEffectFinder(
            settings, helper, simplifier, num_threads
        )
    else:
        finder = FeatureEffectFinder(settings, helper, simplifier)

    effects: tp.Iterable[VariableWithFeatureEffect] = finder.run(variables)
    if aggregate:
        effects = FeAggregator(settings.simplify_results,
                               simplifier).aggregate(effects)
    elif expand:
        effects = NonBooleanFeExpander(
            settings.non_boolean_mode,
            simplifier if settings.simplify_results else default_simplify
        ).expand(effects)

    write_feature_effects(effects, __output(output))


@main.command("arch-split")
@click.argument("feature_effect_file", type=click.Path(path_type=Path))
@click.argument("component_file", type=click.Path(path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    required=False,
    help="CSV file to write to, defaults to stdout."
)
@analysis_error_handler
def __arch_split(
    feature_effect_file: Path, component_file: Path,
    output: tp.Optional[Path]
) -> None:
    """
    Split feature effects by architecture components.

    FEATURE_EFFECT_FILE is a feature effect table, COMPONENT_FILE a table
    with an "Architecture Component" column.
    """
    resolver = ArchComponentResolver(read_arch_components(component_file))
    write_arch_split(
        resolver.run(read_feature_effects(feature_effect_file)),
        __output(output)
    )


@main.command("potential-parents")
@click.argument("input_file", type=click.Path(path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    required=False,
    help="CSV file to write to, defaults to stdout."
)
@analysis_error_handler
def __potential_parents(input_file: Path, output: tp.Optional[Path]) -> None:
    """
    Find potential parents of all variables.

    INPUT_FILE is either a presence condition table (.csv) or a model file.
    """
    settings = AnalysisSettings.from_config()
    variables, _ = __load_variables(
        input_file, settings, PyedaSimplifier(), False, None
    )
    write_potential_parents(
        PotentialParentFinder().run(variables), __output(output)
    )


@main.command("feature-relations")
@click.argument("feature_effect_file", type=click.Path(path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    required=False,
    help="CSV file to write to, defaults to stdout."
)
@analysis_error_handler
def __feature_relations(
    feature_effect_file: Path, output: tp.Optional[Path]
) -> None:
    """
    List which features depend on which other features.

    FEATURE_EFFECT_FILE is a feature effect table, sorted by variable name.
    """
    write_feature_relations(
        FeatureRelations().run(read_feature_effects(feature_effect_file)),
        __output(output)
    )


@main.group("config")
def config() -> None:
    """Manage the analysis config."""


def __get_config_for_path(option_path: tp.List[str]) -> Configuration:
    """Walk down the config tree, options the tree does not know about are
    rejected."""
    config_node = fe_cfg()
    for depth, opt in enumerate(option_path):
        if opt not in config_node:
            raise click.UsageError(
                f"Unknown config option '{'/'.join(option_path[:depth + 1])}'"
            )
        config_node = config_node[opt]
    return config_node


def __collect_values(
    config_node: Configuration, option_path: tp.List[str]
) -> tp.Dict[str, tp.Any]:
    """Map the path of every option below ``config_node`` to its value."""
    if config_node.is_leaf():
        return {"/".join(option_path): config_node.value}

    values: tp.Dict[str, tp.Any] = {}
    for key in config_node.node:
        values.update(
            __collect_values(config_node[key], option_path + [key])
        )
    return values


def __parse_config_value(value: str) -> tp.Any:
    try:
        return yaml.safe_load(value)
    except yaml.YAMLError:
        return value


@config.command("set")
@click.argument("config_values", nargs=-1, metavar="KEY=VALUE")
@analysis_error_handler
def __config_set(config_values: tp.List[str]) -> None:
    """
    KEY=VALUE Key-Value pairs of configuration options and values.

    Specify the config options like paths, e.g., analysis/threads. Do not put
    spaces before or after the '=' sign; if a value contains spaces, you should
    define it with double quotes: foo="bar baz". Values are read as yaml, so
    analysis/fuzzy_parsing=true sets a boolean.
    """
    for config_value in config_values:
        if "=" not in config_value:
            raise click.UsageError(
                f"Expected KEY=VALUE, got '{config_value}'"
            )
        option, value = config_value.split("=", 1)
        option_path = option.replace('-', '_').split("/")
        if not __get_config_for_path(option_path).is_leaf():
            raise click.UsageError(
                f"'{option}' is a group of options, set its options instead"
            )
        config_node = __get_config_for_path(option_path[:-1])
        config_node[option_path[-1]] = __parse_config_value(value)

    # reject values the analysis can not work with
    AnalysisSettings.from_config()
    save_config()


@config.command("show")
@click.argument("config_options", nargs=-1)
def __config_show(config_options: tp.Optional[tp.List[str]]) -> None:
    """
    \b CONFIG_OPTIONS The config options to show, e.g., analysis/threads.

    Whole groups like analysis/pc_finder show all their options. Show the
    complete config if no options are given.
    """
    option_paths = [
        option.replace('-', '_').split("/") for option in config_options
    ] if config_options else [[]]

    values: tp.Dict[str, tp.Any] = {}
    for option_path in option_paths:
        values.update(
            __collect_values(__get_config_for_path(option_path), option_path)
        )
    click.echo(yaml.safe_dump(values, default_flow_style=False), nl=False)


if __name__ == '__main__':
    main()
