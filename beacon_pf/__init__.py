"""Beacon-PF v1.0.0: 2-D beacon localisation with a particle filter.

Estimates the position of a moving target from noisy range-like readings to
fixed beacons using sequential Monte Carlo.

Quick Start::

    from beacon_pf import BeaconParticleFilter, ParticleFilterConfig, Beacon
    pf = BeaconParticleFilter(ParticleFilterConfig(n_particles=1000, seed=1))
    pf.configure([Beacon("b1", 200, 200), Beacon("b2", 320, 240)])
    for readings in measurement_stream:
        result = pf.step(readings)

Nexellum d.o.o.
"""

__version__ = "1.0.0"
__license__ = "AGPL-3.0-or-later"

# ---------------------------------------------------------------------------
# Gaussian utility
# ---------------------------------------------------------------------------
from .gaussian import (
    Gaussian,
    erfc,
    ierfc,
)

# ---------------------------------------------------------------------------
# Particle filter engine and phases
# ---------------------------------------------------------------------------
from .particle_filter import (
    Beacon,
    BeaconParticleFilter,
    DegeneratePolicy,
    ParticleFilterConfig,
    StepResult,
    active_beacons,
    measurements_from_beacons,
    box_muller_pairs,
    uniform_population,
    predict_particles,
    beacon_likelihood,
    update_weights,
    normalize_weights,
    resample_particles,
    mean_position,
    effective_sample_size,
)

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
from .errors import (
    BeaconFilterError,
    InvalidParameterError,
    DegenerateStateError,
    CallerContractError,
)

# ---------------------------------------------------------------------------
# Synthetic scenario
# ---------------------------------------------------------------------------
from .simulation import BeaconScenario, default_beacons

__all__ = [
    "__version__",
    "Gaussian", "erfc", "ierfc",
    "Beacon", "BeaconParticleFilter", "DegeneratePolicy", "ParticleFilterConfig",
    "StepResult", "active_beacons", "measurements_from_beacons",
    "box_muller_pairs", "uniform_population", "predict_particles",
    "beacon_likelihood", "update_weights", "normalize_weights",
    "resample_particles", "mean_position", "effective_sample_size",
    "BeaconFilterError", "InvalidParameterError", "DegenerateStateError",
    "CallerContractError",
    "BeaconScenario", "default_beacons",
]
