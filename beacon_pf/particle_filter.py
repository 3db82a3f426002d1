#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
Beacon-PF Particle Filter Engine
═══════════════════════════════════════════════════════════════════════════════

Sequential Monte Carlo estimate of a 2-D target position from range-like
readings to fixed beacons. One step runs five phases strictly in order:

    1. predict    : Box-Muller random walk on every particle
    2. update     : multiply weights by per-beacon CDF likelihoods
    3. normalize  : scale weights to sum to 1
    4. resample   : multinomial draw over the ascending cumulative sums
    5. estimate   : unweighted mean of the resampled population

Each phase is a pure module-level function over explicit arrays; the
``BeaconParticleFilter`` engine owns the population and sequences them.

License: AGPL-3.0-or-later
═══════════════════════════════════════════════════════════════════════════════
"""

import math
import warnings
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .errors import CallerContractError, DegenerateStateError, InvalidParameterError
from .gaussian import Gaussian

Bounds = Tuple[Tuple[float, float], Tuple[float, float]]


# =============================================================================
# DATA MODEL
# =============================================================================

@dataclass
class Beacon:
    """Fixed anchor emitting a distance-like reading.

    ``measured_distance`` is overwritten once per step by the measurement
    producer; the filter only reads it.
    """
    label: str
    x: float
    y: float
    active: bool = True
    measured_distance: Optional[float] = None
    color: Optional[str] = None

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)


def active_beacons(beacons: Iterable[Beacon]) -> List[Beacon]:
    return [b for b in beacons if b.active]


def measurements_from_beacons(beacons: Iterable[Beacon]) -> Dict[str, float]:
    """Collect ``{label: measured_distance}`` from beacons that carry a reading."""
    return {b.label: b.measured_distance for b in beacons
            if b.active and b.measured_distance is not None}


class DegeneratePolicy(IntEnum):
    """Recovery when the total weight collapses after the update phase."""
    RAISE = 0    # restore prior weights, raise DegenerateStateError
    HOLD = 1     # restore prior weights, keep previous estimate, warn
    RESEED = 2   # reseed a uniform population within bounds, warn


@dataclass
class ParticleFilterConfig:
    """Particle filter configuration."""
    n_particles: int = 1000
    movement_std: float = 15.0          # random-walk std per axis per step
    signal_relative_std: float = 0.15   # range error std relative to reading
    bounds: Bounds = ((0.0, 1000.0), (0.0, 1000.0))
    initial_weight: float = 1.0
    degenerate_policy: DegeneratePolicy = DegeneratePolicy.RAISE
    reset_weights_after_resample: bool = False
    seed: Optional[int] = None

    def validate(self):
        """Raise InvalidParameterError on the first invalid field."""
        _check_particle_count(self.n_particles)
        if not self.movement_std >= 0:
            raise InvalidParameterError(
                f"movement_std must be >= 0 (but was {self.movement_std})",
                {"movement_std": self.movement_std})
        if not self.signal_relative_std > 0:
            raise InvalidParameterError(
                f"signal_relative_std must be > 0 (but was {self.signal_relative_std})",
                {"signal_relative_std": self.signal_relative_std})
        if not self.initial_weight > 0:
            raise InvalidParameterError(
                f"initial_weight must be > 0 (but was {self.initial_weight})",
                {"initial_weight": self.initial_weight})
        _check_bounds(self.bounds)


@dataclass
class StepResult:
    """Outcome of one filter step.

    Attributes:
        x, y: Point estimate
        uncertain: True when the step hit a degenerate weight distribution
        ess: Effective sample size after normalize (NaN if skipped)
        weight_sum: Total weight before normalize
        n_active: Number of active beacons used in the update
    """
    x: float
    y: float
    uncertain: bool = False
    ess: float = float('nan')
    weight_sum: float = float('nan')
    n_active: int = 0

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y])


def _check_particle_count(n: int):
    if not isinstance(n, (int, np.integer)) or isinstance(n, bool) or n <= 0:
        raise InvalidParameterError(
            f"Particle count must be a positive integer (but was {n!r})",
            {"n_particles": n})


def _check_bounds(bounds: Bounds):
    try:
        (x_lo, x_hi), (y_lo, y_hi) = bounds
    except (TypeError, ValueError):
        raise InvalidParameterError(
            "bounds must be ((x_min, x_max), (y_min, y_max))", {"bounds": bounds})
    if not (x_lo <= x_hi and y_lo <= y_hi):
        raise InvalidParameterError(
            f"bounds are inverted: {bounds}", {"bounds": bounds})


# =============================================================================
# PHASE FUNCTIONS
# =============================================================================

def box_muller_pairs(n: int, rng: np.random.RandomState) -> np.ndarray:
    """Draw n independent pairs of standard normals via Box-Muller.

    Returns:
        (n, 2) array; both columns come from the same (u, v) draw.
    """
    u = 1.0 - rng.random_sample(n)   # (0, 1], keeps log finite
    v = rng.random_sample(n)
    r = np.sqrt(-2.0 * np.log(u))
    theta = 2.0 * np.pi * v
    return np.column_stack([r * np.sin(theta), r * np.cos(theta)])


def uniform_population(n: int, bounds: Bounds, rng: np.random.RandomState,
                       initial_weight: float = 1.0) -> Tuple[np.ndarray, np.ndarray]:
    """Seed n particles uniformly within bounds, all with ``initial_weight``."""
    _check_particle_count(n)
    _check_bounds(bounds)
    (x_lo, x_hi), (y_lo, y_hi) = bounds
    positions = np.column_stack([
        rng.uniform(x_lo, x_hi, n),
        rng.uniform(y_lo, y_hi, n),
    ])
    weights = np.full(n, float(initial_weight))
    return positions, weights


def predict_particles(positions: np.ndarray, movement_std: float,
                      rng: np.random.RandomState) -> np.ndarray:
    """Undirected random walk: independent N(0, movement_std²) on x and y."""
    positions = np.asarray(positions, dtype=float)
    return positions + box_muller_pairs(len(positions), rng) * movement_std


def beacon_likelihood(positions: np.ndarray, beacon: Beacon, measured: float,
                      signal_relative_std: float) -> np.ndarray:
    """Per-particle likelihood of one beacon reading.

    Model is N(0, (measured * signal_relative_std)²) evaluated through its
    CDF at -|particle_distance - measured|, a one-sided saturating score
    (0.5 at a perfect match).
    """
    std = measured * signal_relative_std
    model = Gaussian(0.0, std ** 2)
    dist = np.hypot(positions[:, 0] - beacon.x, positions[:, 1] - beacon.y)
    return model.cdf(-np.abs(dist - measured))


def update_weights(positions: np.ndarray, weights: np.ndarray,
                   beacons: Sequence[Beacon], measurements: Mapping[str, float],
                   signal_relative_std: float) -> np.ndarray:
    """Multiply weights by the likelihood of every active beacon.

    With no active beacons the weights come back unchanged.
    """
    positions = np.asarray(positions, dtype=float)
    new_weights = np.array(weights, dtype=float, copy=True)
    for beacon in active_beacons(beacons):
        measured = _lookup_measurement(beacon, measurements)
        new_weights *= beacon_likelihood(positions, beacon, measured, signal_relative_std)
    return new_weights


def normalize_weights(weights: np.ndarray) -> Tuple[np.ndarray, float]:
    """Divide weights by their sum.

    Returns:
        (normalized_weights, total)

    Raises:
        DegenerateStateError: total is zero or not finite
    """
    weights = np.asarray(weights, dtype=float)
    total = float(np.sum(weights))
    if not (math.isfinite(total) and total > 0):
        raise DegenerateStateError(
            f"Total particle weight is {total}; cannot normalize",
            {"weight_sum": total, "n_particles": len(weights),
             "n_zero": int(np.count_nonzero(weights == 0))})
    return weights / total, total


def resample_particles(positions: np.ndarray, weights: np.ndarray,
                       rng: np.random.RandomState) -> Tuple[np.ndarray, np.ndarray]:
    """Multinomial resampling over ascending-sorted cumulative weights.

    Each output slot draws u ~ U[0, 1) and takes the first sorted particle
    whose cumulative upper bound exceeds u. The copied particles keep the
    source weight. Population size is preserved.
    """
    positions = np.asarray(positions, dtype=float)
    weights = np.asarray(weights, dtype=float)
    n = len(weights)
    if n == 0:
        return positions.copy(), weights.copy()

    order = np.argsort(weights, kind='stable')
    sorted_pos = positions[order]
    sorted_w = weights[order]
    cumsum = np.cumsum(sorted_w)

    u = rng.random_sample(n)
    indices = np.searchsorted(cumsum, u, side='right')
    # Rounding can leave cumsum[-1] a hair below 1
    indices = np.minimum(indices, n - 1)

    return sorted_pos[indices], sorted_w[indices]


def mean_position(positions: np.ndarray) -> Tuple[float, float]:
    """Unweighted mean of particle positions."""
    positions = np.asarray(positions, dtype=float)
    if len(positions) == 0:
        raise DegenerateStateError("Cannot estimate from an empty population",
                                   {"n_particles": 0})
    mean = positions.mean(axis=0)
    return float(mean[0]), float(mean[1])


def effective_sample_size(weights: np.ndarray) -> float:
    """1 / sum(w²) for normalized weights."""
    weights = np.asarray(weights, dtype=float)
    sq = float(np.sum(weights ** 2))
    return 1.0 / sq if sq > 0 else 0.0


def _lookup_measurement(beacon: Beacon, measurements: Mapping[str, float]) -> float:
    if beacon.label not in measurements or measurements[beacon.label] is None:
        raise CallerContractError(
            f"No measurement supplied for active beacon '{beacon.label}'",
            {"beacon": beacon.label, "supplied": sorted(measurements)})
    measured = float(measurements[beacon.label])
    if not (math.isfinite(measured) and measured > 0):
        raise CallerContractError(
            f"Measurement for beacon '{beacon.label}' must be finite and > 0 "
            f"(but was {measured})",
            {"beacon": beacon.label, "measured_distance": measured})
    return measured


# =============================================================================
# ENGINE
# =============================================================================

class BeaconParticleFilter:
    """
    Particle filter tracking one 2-D target against a set of beacons.

    The engine owns the particle population; beacons are shared with the
    measurement producer and only read here.

    Snapshot point: ``particles()`` reflects the last completed phase. After
    ``step()`` that is the resampled population, whose weights are the copied
    normalized source weights (uniform 1/N with
    ``reset_weights_after_resample``). ``normalized_weights()`` gives the
    pre-resample output of the last normalize.

    Example::

        pf = BeaconParticleFilter(ParticleFilterConfig(n_particles=500, seed=1))
        pf.configure([Beacon("b1", 200, 200), Beacon("b2", 320, 240)])
        result = pf.step({"b1": 110.0, "b2": 95.0})
    """

    def __init__(self, config: ParticleFilterConfig = None,
                 beacons: Sequence[Beacon] = None,
                 rng: np.random.RandomState = None):
        # Private copy; initialize() rewrites n_particles and bounds
        self.config = replace(config) if config is not None else ParticleFilterConfig()
        self.config.validate()
        self.rng = rng if rng is not None else np.random.RandomState(self.config.seed)

        self.beacons: List[Beacon] = []
        if beacons is not None:
            self.configure(beacons)

        self.positions: np.ndarray = None   # (n_particles, 2)
        self.weights: np.ndarray = None     # (n_particles,)
        self._normalized: Optional[np.ndarray] = None
        self._estimate: Optional[Tuple[float, float]] = None
        self.last_result: Optional[StepResult] = None

        self.initialize()

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def configure(self, beacons: Sequence[Beacon]):
        """Replace the beacon configuration."""
        beacons = list(beacons)
        labels = [b.label for b in beacons]
        if len(set(labels)) != len(labels):
            raise InvalidParameterError("Beacon labels must be unique", {"labels": labels})
        self.beacons = beacons

    def beacon(self, label: str) -> Beacon:
        for b in self.beacons:
            if b.label == label:
                return b
        raise CallerContractError(f"Unknown beacon '{label}'",
                                  {"beacon": label, "known": [b.label for b in self.beacons]})

    def set_beacon_position(self, label: str, x: float, y: float):
        b = self.beacon(label)
        b.x, b.y = float(x), float(y)

    def set_beacon_active(self, label: str, active: bool):
        self.beacon(label).active = bool(active)

    def initialize(self, n_particles: int = None, bounds: Bounds = None):
        """(Re)seed a uniform population with unnormalized weight each."""
        n = self.config.n_particles if n_particles is None else n_particles
        bounds = self.config.bounds if bounds is None else bounds
        self.positions, self.weights = uniform_population(
            n, bounds, self.rng, self.config.initial_weight)
        self.config.n_particles = n
        self.config.bounds = bounds
        self._normalized = None
        self._estimate = None

    @property
    def n_particles(self) -> int:
        return len(self.weights)

    # -------------------------------------------------------------------------
    # Phases
    # -------------------------------------------------------------------------

    def predict(self):
        self.positions = predict_particles(self.positions, self.config.movement_std, self.rng)

    def update(self, measurements: Mapping[str, float] = None):
        if measurements is None:
            measurements = measurements_from_beacons(self.beacons)
        self.weights = update_weights(self.positions, self.weights, self.beacons,
                                      measurements, self.config.signal_relative_std)

    def normalize(self) -> float:
        """Normalize weights in place; returns the pre-normalization total."""
        self.weights, total = normalize_weights(self.weights)
        self._normalized = self.weights.copy()
        return total

    def resample(self):
        self.positions, self.weights = resample_particles(self.positions, self.weights, self.rng)
        if self.config.reset_weights_after_resample:
            self.weights = np.full(self.n_particles, 1.0 / self.n_particles)

    def estimate_position(self) -> Tuple[float, float]:
        self._estimate = mean_position(self.positions)
        return self._estimate

    # -------------------------------------------------------------------------
    # Step
    # -------------------------------------------------------------------------

    def check_measurements(self, measurements: Mapping[str, float]):
        """Raise CallerContractError unless every active beacon has a usable reading."""
        for beacon in active_beacons(self.beacons):
            _lookup_measurement(beacon, measurements)

    def step(self, measurements: Mapping[str, float] = None) -> StepResult:
        """
        Advance the filter one tick.

        Args:
            measurements: {beacon label: observed distance}. When omitted,
                the ``measured_distance`` fields of the beacons are used;
                on that path the producer must overwrite every active
                beacon before each call, since a reading left over from an
                earlier tick cannot be told apart from a fresh one.

        Returns:
            StepResult with the new estimate

        Raises:
            CallerContractError: an active beacon has no usable reading
                (raised before any phase runs)
            DegenerateStateError: total weight collapsed and the policy is RAISE
        """
        if measurements is None:
            measurements = measurements_from_beacons(self.beacons)
        self.check_measurements(measurements)
        n_active = len(active_beacons(self.beacons))

        self.predict()
        prior = self.weights.copy()
        self.update(measurements)
        try:
            total = self.normalize()
        except DegenerateStateError as exc:
            self.weights = prior
            exc.context["n_active"] = n_active
            return self._recover(exc, n_active)

        ess = effective_sample_size(self.weights)
        self.resample()
        x, y = self.estimate_position()

        self.last_result = StepResult(x, y, uncertain=False, ess=ess,
                                      weight_sum=total, n_active=n_active)
        return self.last_result

    def _recover(self, exc: DegenerateStateError, n_active: int) -> StepResult:
        policy = self.config.degenerate_policy
        if policy == DegeneratePolicy.RAISE:
            raise exc

        if policy == DegeneratePolicy.RESEED:
            warnings.warn(f"{exc}; reseeding uniform population", RuntimeWarning)
            self.initialize()
            x, y = self.estimate_position()
        else:
            warnings.warn(f"{exc}; holding previous estimate", RuntimeWarning)
            if self._estimate is None:
                self._estimate = mean_position(self.positions)
            x, y = self._estimate

        self.last_result = StepResult(x, y, uncertain=True,
                                      weight_sum=exc.context.get("weight_sum", float('nan')),
                                      n_active=n_active)
        return self.last_result

    # -------------------------------------------------------------------------
    # Read-only accessors
    # -------------------------------------------------------------------------

    def estimate(self) -> Tuple[float, float]:
        """Last computed mean position; (nan, nan) before the first estimate."""
        if self._estimate is None:
            return float('nan'), float('nan')
        return self._estimate

    def particles(self) -> np.ndarray:
        """Copy of the population as an (n_particles, 3) array [x, y, p]."""
        return np.column_stack([self.positions, self.weights])

    def normalized_weights(self) -> Optional[np.ndarray]:
        return None if self._normalized is None else self._normalized.copy()

    def effective_sample_size(self) -> float:
        if self._normalized is None:
            return float('nan')
        return effective_sample_size(self._normalized)
