"""
Parallel computation of feature effects.

Work packages are numbered while they are submitted, a collector thread
buffers finished packages until all their predecessors were emitted. This way
results are delivered in input order, no matter in which order the workers
finish.
"""

import logging
import queue
import threading
import typing as tp

from fe_analysis.fes.feature_effect_finder import (
    FeatureEffectFinder,
    VariableWithFeatureEffect,
)
from fe_analysis.helper import PresenceConditionAnalysisHelper
from fe_analysis.logic.simplifier import Simplifier
from fe_analysis.pcs.pc_finder import VariableWithPcs
from fe_analysis.settings import AnalysisSettings

LOG = logging.getLogger(__name__)

NUM_THREADS = 6


class WorkPackage():
    """Computation of the feature effect of one variable."""

    def __init__(self, index: int, var_with_pcs: VariableWithPcs) -> None:
        self.index = index
        self.input = var_with_pcs
        self.output: tp.Optional[VariableWithFeatureEffect] = None

    def execute(self, finder: FeatureEffectFinder) -> None:
        self.output = finder.process_single(self.input)


class ThreadedFeatureEffectFinder(FeatureEffectFinder):
    """
    :class:`FeatureEffectFinder` that computes feature effects with a fixed
    number of worker threads.

    Args:
        settings: analysis settings
        helper: decides which variables are relevant
        simplifier: used if results should be simplified
        num_threads: number of worker threads
        queue_size: maximum number of submitted but not yet delivered work
                    packages, submission blocks while the limit is reached
    """

    def __init__(
        self,
        settings: AnalysisSettings,
        helper: PresenceConditionAnalysisHelper,
        simplifier: tp.Optional[Simplifier] = None,
        num_threads: int = NUM_THREADS,
        queue_size: tp.Optional[int] = None
    ) -> None:
        super().__init__(settings, helper, simplifier)
        self.__num_threads = max(1, num_threads)
        self.__queue_size = queue_size if queue_size else self.__num_threads * 4

    def run_with_consumer(
        self, variables: tp.Iterable[VariableWithPcs],
        consumer: tp.Callable[[VariableWithFeatureEffect], None]
    ) -> None:
        """
        Compute the feature effects of all variables and pass them to
        ``consumer`` in input order.

        At most ``queue_size`` work packages are in flight, i.e., submitted
        but not yet passed to ``consumer``. A slow consumer therefore stalls
        the submission of further variables. Returns after all results were
        delivered.

        Args:
            variables: the variables and their presence conditions
            consumer: called with each result, from the collector thread
        """
        todo: 'queue.Queue[tp.Optional[WorkPackage]]' = queue.Queue(
            maxsize=self.__queue_size
        )
        done: 'queue.Queue[tp.Optional[WorkPackage]]' = queue.Queue()
        in_flight = threading.BoundedSemaphore(self.__queue_size)

        workers = [
            threading.Thread(
                target=self.__work,
                args=(todo, done),
                name=f"ThreadedFeatureEffectFinder-Worker-{i + 1}",
                daemon=True
            ) for i in range(self.__num_threads)
        ]
        for worker in workers:
            worker.start()

        collector = threading.Thread(
            target=self.__collect,
            args=(done, consumer, in_flight),
            name="ThreadedFeatureEffectFinder-Collector",
            daemon=True
        )
        collector.start()

        index = 0
        try:
            for var_with_pcs in variables:
                in_flight.acquire()
                todo.put(WorkPackage(index, var_with_pcs))
                index += 1
            LOG.debug("Submitted %d work packages", index)
        finally:
            # one end marker per worker
            for _ in workers:
                todo.put(None)

            for worker in workers:
                worker.join()
            done.put(None)
            collector.join()

    def run(
        self, variables: tp.Iterable[VariableWithPcs]
    ) -> tp.Iterator[VariableWithFeatureEffect]:
        results: tp.List[VariableWithFeatureEffect] = []
        self.run_with_consumer(variables, results.append)
        return iter(results)

    def __work(
        self, todo: 'queue.Queue[tp.Optional[WorkPackage]]',
        done: 'queue.Queue[tp.Optional[WorkPackage]]'
    ) -> None:
        while True:
            package = todo.get()
            if package is None:
                break
            try:
                package.execute(self)
            except Exception:  # pylint: disable=broad-except
                LOG.exception(
                    "Could not compute feature effect for %s",
                    package.input.variable
                )
                package.output = None
            done.put(package)

    @staticmethod
    def __collect(
        done: 'queue.Queue[tp.Optional[WorkPackage]]',
        consumer: tp.Callable[[VariableWithFeatureEffect], None],
        in_flight: threading.BoundedSemaphore
    ) -> None:
        received: tp.Dict[int, WorkPackage] = {}
        next_wanted_index = 0

        while True:
            package = done.get()
            if package is None:
                break
            received[package.index] = package

            while next_wanted_index in received:
                next_package = received.pop(next_wanted_index)
                try:
                    if next_package.output is not None:
                        consumer(next_package.output)
                except Exception:  # pylint: disable=broad-except
                    LOG.exception(
                        "Could not pass feature effect for %s to consumer",
                        next_package.input.variable
                    )
                finally:
                    in_flight.release()
                next_wanted_index += 1

        if received:
            LOG.error(
                "%d results could not be delivered in order", len(received)
            )
