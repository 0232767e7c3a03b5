"""
Iteration runner module for the simulator.

Runs a configured encounter many times and aggregates the results. Each
iteration starts from a fresh simulation state; only the immutable
configuration and the runner's random generator carry over.
"""

import multiprocessing as mp
import time
from random import Random
from statistics import mean
from typing import Optional

from catchery import log_debug
from core.constants import Ability, AttackType, CharacterClass
from core.error_handling import require_non_negative, require_positive
from pydantic import BaseModel, Field

from .base_simulator import BaseSimulator
from .config import SimulationConfig
from .mage_simulator import MageSimulator
from .result import AbilityStats, SimulationResult
from .rogue_simulator import RogueSimulator
from .shaman_simulator import ShamanSimulator
from .warrior_simulator import WarriorSimulator

SIMULATORS: dict[CharacterClass, type[BaseSimulator]] = {
    simulator.character_class: simulator
    for simulator in (RogueSimulator, WarriorSimulator, MageSimulator, ShamanSimulator)
}


def create_simulator(config: SimulationConfig, rng: Optional[Random] = None) -> BaseSimulator:
    """
    Builds the simulator of the configured archetype.

    Args:
        config (SimulationConfig): The run's configuration.
        rng (Optional[Random]): The random generator to inject.

    Returns:
        BaseSimulator: The archetype's simulator.

    """
    return SIMULATORS[config.character_class](config, rng)


class AbilitySummary(BaseModel):
    """Aggregated figures of one ability over a whole run."""

    ability: Ability = Field(description="The ability.")
    total: int = Field(description="Output summed over every iteration.")
    share: float = Field(description="Percentage of the run's total output.")
    average_hit: float = Field(description="Average output of a landed use.")
    hits: int = Field(description="Uses that produced output.")
    crits: int = Field(description="Critical uses.")
    misses: int = Field(description="Missed uses.")
    dodges: int = Field(description="Dodged uses.")
    glancing: int = Field(description="Glancing uses.")
    miss_percent: float = Field(description="Misses over landed and missed uses.")
    overhealing: int = Field(default=0, description="Overhealing summed over every iteration.")


class RunSummary(BaseModel):
    """
    The results of many iterations of one configuration.

    Attributes:
        results (list[SimulationResult]): One result per iteration.
        execution_time (float): Wall-clock duration of the run, in seconds.

    """

    results: list[SimulationResult] = Field(default_factory=list)
    execution_time: float = Field(default=0.0, description="Wall-clock seconds.")

    @property
    def iterations(self) -> int:
        return len(self.results)

    @property
    def label(self) -> str:
        return self.results[0].label if self.results else "DPS"

    @property
    def outputs_per_second(self) -> list[float]:
        return [result.output_per_second for result in self.results]

    @property
    def mean_output_per_second(self) -> float:
        return mean(self.outputs_per_second) if self.results else 0.0

    @property
    def min_output_per_second(self) -> float:
        return min(self.outputs_per_second, default=0.0)

    @property
    def max_output_per_second(self) -> float:
        return max(self.outputs_per_second, default=0.0)

    def aggregate_breakdown(self) -> list[AbilitySummary]:
        """
        Merges the per-iteration breakdowns into per-ability summaries.

        Returns:
            list[AbilitySummary]: One entry per ability, highest total first.

        """
        merged: dict[Ability, AbilityStats] = {}
        for result in self.results:
            for ability, stats in result.breakdown.items():
                total = merged.setdefault(ability, AbilityStats(ability=ability))
                total.total += stats.total
                total.overhealing += stats.overhealing
                total.count += stats.count
                total.landed += stats.landed
                total.crits += stats.crits
                total.misses += stats.misses
                total.dodges += stats.dodges
                total.glancing += stats.glancing
        grand_total = sum(stats.total for stats in merged.values())
        summaries = [
            AbilitySummary(
                ability=ability,
                total=stats.total,
                share=100 * stats.total / grand_total if grand_total else 0.0,
                average_hit=stats.average_hit,
                hits=stats.landed,
                crits=stats.crits,
                misses=stats.misses,
                dodges=stats.dodges,
                glancing=stats.glancing,
                miss_percent=stats.miss_percent,
                overhealing=stats.overhealing,
            )
            for ability, stats in merged.items()
        ]
        return sorted(summaries, key=lambda summary: summary.total, reverse=True)

    def aggregate_statistics(self) -> dict[str, float]:
        """
        Returns run-wide rates of each outcome kind, in percent, plus totals.

        Returns:
            dict[str, float]: Keys are "crit", "hit", "glancing", "miss",
            "dodge", "events" and "average_total".

        """
        counts: dict[AttackType, int] = {}
        for result in self.results:
            for outcome, count in result.outcome_counts.items():
                counts[outcome] = counts.get(outcome, 0) + count
        events = sum(counts.values())
        statistics: dict[str, float] = {
            outcome.value.lower(): 100 * counts.get(outcome, 0) / events if events else 0.0
            for outcome in (
                AttackType.CRIT,
                AttackType.HIT,
                AttackType.GLANCING,
                AttackType.MISS,
                AttackType.DODGE,
            )
        }
        statistics["events"] = float(events)
        statistics["average_total"] = (
            mean(result.total_output for result in self.results) if self.results else 0.0
        )
        return statistics


def _run_chunk(args: tuple[SimulationConfig, int, int]) -> list[SimulationResult]:
    """Runs a chunk of iterations in a worker process."""
    config, iterations, seed = args
    simulator = create_simulator(config, Random(seed))
    return [simulator.simulate() for _ in range(iterations)]


class IterationRunner:
    """
    Repeats one configured encounter and collects the results.

    The runner owns a single random generator, seeded from the
    configuration, that every iteration of ``run_many`` draws from.
    """

    def __init__(self, config: SimulationConfig) -> None:
        self.config = config
        self.rng = Random(config.seed)
        self.simulator = create_simulator(config, self.rng)

    def simulate(self) -> SimulationResult:
        """Runs a single iteration from a fresh state."""
        return self.simulator.simulate()

    def run_many(self, iterations: Optional[int] = None) -> RunSummary:
        """
        Runs the encounter repeatedly.

        Args:
            iterations (Optional[int]): The number of iterations, defaults to
                the configured count.

        Raises:
            ConfigurationError: If the iteration count is not positive.

        Returns:
            RunSummary: The results and the measured execution time.

        """
        iterations = self.config.iterations if iterations is None else iterations
        require_positive(iterations, "iterations")
        start = time.perf_counter()
        results = [self.simulate() for _ in range(iterations)]
        elapsed = time.perf_counter() - start
        log_debug(
            "Finished iterations",
            {
                "class": self.config.character_class.value,
                "iterations": iterations,
                "seconds": elapsed,
            },
        )
        return RunSummary(results=results, execution_time=elapsed)

    def run_parallel(self, iterations: Optional[int] = None, workers: int = 0) -> RunSummary:
        """
        Runs the iterations split across worker processes.

        Each worker builds its own simulator and generator, seeded from this
        runner's generator, so no state is shared between processes.

        Args:
            iterations (Optional[int]): The number of iterations, defaults to
                the configured count.
            workers (int): The number of processes, 0 for one per CPU.

        Returns:
            RunSummary: The results and the measured execution time.

        """
        iterations = self.config.iterations if iterations is None else iterations
        require_positive(iterations, "iterations")
        require_non_negative(workers, "workers")
        workers = min(workers or mp.cpu_count(), iterations)
        if workers <= 1:
            return self.run_many(iterations)
        base, extra = divmod(iterations, workers)
        chunks = [base + (1 if i < extra else 0) for i in range(workers)]
        args = [(self.config, chunk, self.rng.randrange(2**32)) for chunk in chunks]
        start = time.perf_counter()
        with mp.Pool(workers) as pool:
            chunk_results = pool.map(_run_chunk, args)
        elapsed = time.perf_counter() - start
        results = [result for chunk in chunk_results for result in chunk]
        log_debug(
            "Finished parallel iterations",
            {"iterations": iterations, "workers": workers, "seconds": elapsed},
        )
        return RunSummary(results=results, execution_time=elapsed)
