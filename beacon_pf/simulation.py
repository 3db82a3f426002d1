"""Beacon-PF synthetic scenario.

Reproducible measurement producer with ground truth, used by the demo and
the convergence tests. The target drifts along y; every active beacon
reports ``true_distance * (1 + noise)``.

Usage::

    scenario = BeaconScenario(seed=42)
    pf = BeaconParticleFilter(config, beacons=scenario.beacons)
    for _ in range(50):
        scenario.advance()
        pf.step(scenario.measure())

License: AGPL-3.0-or-later
"""

from typing import Dict, List, Optional, Sequence

import numpy as np

from .particle_filter import Beacon, active_beacons

# Floor for readings so large relative noise never yields a non-positive range
MIN_READING = 1e-6


def default_beacons() -> List[Beacon]:
    """Five-beacon layout; b4 and b5 start inactive."""
    return [
        Beacon("b1", 200.0, 200.0, active=True, color="#2069ac"),
        Beacon("b2", 320.0, 240.0, active=True, color="#358913"),
        Beacon("b3", 140.0, 300.0, active=True, color="#b10292"),
        Beacon("b4", 240.0, 100.0, active=False, color="#b1a602"),
        Beacon("b5", 900.0, 300.0, active=False, color="#b15402"),
    ]


class BeaconScenario:
    """Single target moving among fixed beacons.

    Args:
        seed: RandomState seed
        beacons: Beacon layout (default: ``default_beacons()``)
        start: Initial true position (x, y)
        movement_std: Std of the per-step y displacement
        signal_relative_std: Reading noise relative to true distance
    """

    def __init__(self, seed: int = 42, beacons: Optional[Sequence[Beacon]] = None,
                 start=(200.0, 310.0), movement_std: float = 15.0,
                 signal_relative_std: float = 0.15):
        self.rng = np.random.RandomState(seed)
        self.beacons = list(beacons) if beacons is not None else default_beacons()
        self.position = np.array(start, dtype=float)
        self.movement_std = movement_std
        self.signal_relative_std = signal_relative_std
        self.history: List[np.ndarray] = [self.position.copy()]

    def _approx_normal(self) -> float:
        """Sum of three U(-1, 1) draws (std 1, bounded at ±3)."""
        return float(np.sum(self.rng.uniform(-1.0, 1.0, 3)))

    def advance(self) -> np.ndarray:
        """Move the target one step along y and return its new position."""
        self.position[1] += self._approx_normal() * self.movement_std
        self.history.append(self.position.copy())
        return self.position.copy()

    def measure(self) -> Dict[str, float]:
        """Write a noisy reading into every active beacon and return them by label."""
        readings = {}
        for beacon in active_beacons(self.beacons):
            noise = self._approx_normal() * self.signal_relative_std
            true_distance = float(np.hypot(beacon.x - self.position[0],
                                           beacon.y - self.position[1]))
            beacon.measured_distance = max(true_distance * (1.0 + noise), MIN_READING)
            readings[beacon.label] = beacon.measured_distance
        return readings

    def error(self, estimate) -> float:
        """Euclidean distance from an estimate to the current true position."""
        return float(np.hypot(estimate[0] - self.position[0], estimate[1] - self.position[1]))
