"""Tunable parameters of the search loops.

Every empirically chosen constant lives here. Size-dependent defaults are
``None`` and resolved from the instance by the ``resolve_*`` helpers.
"""

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, Optional


@dataclass
class TabuConfig:
    """
    Maze tabu search.

    Attributes:
        tabu_size: Base neighbourhood size K0; each round uses
            K = max(1, K0 ** 2 / best_cost). None means min(h, w).
        max_fails: Non-improving rounds tolerated before a restart. None means h + w.
        empty_round_penalty: Fails added when every candidate was tabu
        restart: Restart from a fresh random path when stalled (False stops the run)
        use_outer_tabu: Keep local optima of earlier restarts out of later ones
    """
    tabu_size: Optional[int] = None
    max_fails: Optional[int] = None
    empty_round_penalty: int = 5
    restart: bool = True
    use_outer_tabu: bool = True


@dataclass
class TourTabuConfig:
    """
    TSP tabu search.

    Attributes:
        neighbourhood_size: K survivors per round (raw candidates capped at K*K);
            None evaluates the full swap neighbourhood
        tabu_insert_probability: Chance that an evaluated candidate joins the tabu set
        tabu_capacity: Maximum tabu size (oldest evicted first), None for unbounded
        max_inner_iters: Rounds per local start before restarting
        max_fails: Non-improving rounds per local start. None means 2 * n.
        use_outer_tabu: Keep local optima of earlier starts out of later ones
    """
    neighbourhood_size: Optional[int] = None
    tabu_insert_probability: float = 0.3
    tabu_capacity: Optional[int] = None
    max_inner_iters: int = 2000
    max_fails: Optional[int] = None
    use_outer_tabu: bool = True


@dataclass
class AnnealingConfig:
    """
    Simulated annealing.

    Attributes:
        initial_temperature: Starting temperature
        alpha: Geometric cooling factor applied each round (None disables it)
        cooling_step: Linear decrement applied each round (None disables it)
        min_temperature: Floor for the temperature
        max_fails: Fail budget before stopping. None means (h + w) ** fail_exponent
            for mazes and no limit elsewhere.
        fail_exponent: Exponent of the maze fail budget
        near_scale: Continuous neighbour radius per unit of temperature
        resize_probability: Image blocks only, chance of a block-size move
        perturb_probability: Image blocks only, chance that a block changes colour
        perturb_sigma: Image blocks only, stddev of a colour-index shift
    """
    initial_temperature: float = 273.15
    alpha: Optional[float] = 0.98
    cooling_step: Optional[float] = None
    min_temperature: float = 0.0
    max_fails: Optional[float] = None
    fail_exponent: float = 1.6
    near_scale: float = 0.005
    resize_probability: float = 0.01
    perturb_probability: float = 0.2
    perturb_sigma: float = 2.0


@dataclass
class GeneticConfig:
    """
    Genetic recombination.

    Attributes:
        population_size: Survivors kept each round (capped by the instance's request)
        pairs_per_round: Parent pairs drawn per survivor
        mutation_probability: Chance that a survivor spawns a mutant
        mutation_sigma: Stddev of the mutation swap count (mean is half the length)
        genome_bits: Bits per coordinate (continuous genomes only)
        outer_recombination_probability: Continuous only, chance of swapping a
            whole coordinate instead of a bit range
        big_mutation_probability: Continuous only, chance of inverting a whole coordinate
        bit_flip_probability: Continuous only, per-bit flip chance of a small mutation
    """
    population_size: int = 100
    pairs_per_round: int = 2
    mutation_probability: float = 0.05
    mutation_sigma: float = 3.0
    genome_bits: int = 40
    outer_recombination_probability: float = 1.0 / 3.0
    big_mutation_probability: float = 0.001
    bit_flip_probability: float = 0.001


@dataclass
class LocalSearchConfig:
    """
    Continuous random local search.

    Attributes:
        initial_scale: Neighbour radius as a fraction of the box length
        min_scale: Smallest radius before it resets
        shrink: Factor applied to the radius after ``patience`` failures
        patience: Consecutive failures before shrinking
    """
    initial_scale: float = 0.1
    min_scale: float = 1e-9
    shrink: float = 0.5
    patience: int = 100


def continuous_annealing_defaults() -> AnnealingConfig:
    """Continuous annealing cools linearly, one degree per round."""
    return AnnealingConfig(alpha=None, cooling_step=1.0)


def block_annealing_defaults() -> AnnealingConfig:
    return AnnealingConfig(alpha=0.9)


_SECTIONS = {
    'tabu': TabuConfig,
    'tour_tabu': TourTabuConfig,
    'annealing': AnnealingConfig,
    'continuous_annealing': AnnealingConfig,
    'block_annealing': AnnealingConfig,
    'genetic': GeneticConfig,
    'local_search': LocalSearchConfig,
}


# Sections whose defaults differ from their dataclass defaults.
_DEFAULT_FACTORIES = {
    'continuous_annealing': continuous_annealing_defaults,
    'block_annealing': block_annealing_defaults,
}


def default_configs() -> Dict[str, object]:
    return {name: _DEFAULT_FACTORIES.get(name, cls)() for name, cls in _SECTIONS.items()}


def load_config(path: str) -> Dict[str, object]:
    """
    Load algorithm parameters from a JSON file.

    The file holds one object per section (``tabu``, ``tour_tabu``,
    ``annealing`` for mazes and tours, ``continuous_annealing``,
    ``block_annealing``, ``genetic``, ``local_search``); missing sections and
    keys keep their defaults.

    Raises:
        ValueError: on unknown sections or keys
    """
    with Path(path).open('r') as f:
        data = json.load(f)

    configs = default_configs()
    for section, values in data.items():
        if section not in _SECTIONS:
            raise ValueError(f"unknown config section {section!r}")
        known = {f.name for f in fields(_SECTIONS[section])}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"unknown keys in {section!r}: {sorted(unknown)}")
        configs[section] = replace(configs[section], **values)
    return configs


def resolve_tabu(config: TabuConfig, height: int, width: int) -> TabuConfig:
    return replace(
        config,
        tabu_size=config.tabu_size if config.tabu_size is not None else min(height, width),
        max_fails=config.max_fails if config.max_fails is not None else height + width,
    )


def resolve_tour_tabu(config: TourTabuConfig, n: int) -> TourTabuConfig:
    return replace(config, max_fails=config.max_fails if config.max_fails is not None else 2 * n)


def resolve_maze_annealing(config: AnnealingConfig, height: int, width: int) -> AnnealingConfig:
    if config.max_fails is not None:
        return config
    return replace(config, max_fails=float(height + width) ** config.fail_exponent)
