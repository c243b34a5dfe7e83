"""Module for test utility functions."""
import contextlib
import os
import shutil
import tempfile
import typing as tp
from functools import wraps
from pathlib import Path

import fe_analysis.settings as settings
from fe_analysis.code_model import CodeBlock, SourceFile
from fe_analysis.logic.formula import TRUE, Formula, Variable
from fe_analysis.logic.parser import parse_formula

TEST_INPUTS_DIR = Path(os.path.dirname(__file__)) / 'TEST_INPUTS'

TestFunctionTy = tp.Callable[..., tp.Any]


def block(
    presence_condition: tp.Union[str, Formula], *children: CodeBlock
) -> CodeBlock:
    """Create a code block whose condition is its presence condition."""
    if isinstance(presence_condition, str):
        presence_condition = parse_formula(presence_condition)
    return CodeBlock(presence_condition, presence_condition, list(children))


def source_file(path: str, *blocks: CodeBlock) -> SourceFile:
    return SourceFile(path, list(blocks))


def top_level(*children: CodeBlock) -> CodeBlock:
    """An always present block, like the whole file."""
    return CodeBlock(TRUE, TRUE, list(children))


def var(name: str) -> Variable:
    return Variable(name)


class TestEnvironment():
    """
    Test environment implementation.

    The wrapped test is run inside a temporary directory with a fresh default
    analysis config. The config can be accessed via the usual `fe_cfg()`
    getter.

    Args:
        required_test_inputs: names of files in ``TEST_INPUTS`` to be copied
                              into the test environment
    """

    def __init__(self, required_test_inputs: tp.Iterable[str]) -> None:
        self.__tmp_dir = tempfile.TemporaryDirectory()
        self.__tmp_path = Path(self.__tmp_dir.name)
        self.__cwd = os.getcwd()
        self.__test_inputs = required_test_inputs
        self.__old_config: tp.Optional[tp.Any] = None

    @contextlib.contextmanager
    def _decoration_helper(self) -> tp.Any:
        self.__enter__()
        try:
            yield
        finally:
            self.__exit__(None, None, None)

    def __call__(self, func: TestFunctionTy) -> TestFunctionTy:

        @wraps(func)
        def wrapper(*args: tp.Any, **kwargs: tp.Any) -> tp.Any:
            with self._decoration_helper():
                return func(*args, **kwargs)

        return wrapper

    def __enter__(self) -> Path:
        # pylint: disable=protected-access
        self.__old_config = settings._CFG
        os.chdir(self.__tmp_dir.name)
        fe_cfg = settings.create_new_fe_config()
        fe_cfg.init_from_env()
        # pylint: disable=protected-access
        settings._CFG = fe_cfg
        settings.save_config()

        for test_input in self.__test_inputs:
            shutil.copy(TEST_INPUTS_DIR / test_input, self.__tmp_path)

        return self.__tmp_path

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        # pylint: disable=protected-access
        settings._CFG = self.__old_config

        os.chdir(self.__cwd)
        if self.__tmp_dir:
            self.__tmp_dir.cleanup()


def run_in_test_environment(*required_test_inputs: str) -> TestFunctionTy:
    """
    Run a test in an isolated test environment.

    The wrapped test is run inside a temporary directory with a fresh default
    analysis config. The config can be accessed via the usual `fe_cfg()`
    getter.

    Args:
        required_test_inputs: test inputs to be copied into the test environment

    Returns:
        the wrapped test function
    """

    def wrapper_func(test_func: TestFunctionTy) -> TestFunctionTy:
        return TestEnvironment(required_test_inputs)(test_func)

    return wrapper_func
