"""Beacon-PF error taxonomy.

Every error carries a ``kind`` tag and a ``context`` dict so an embedding
harness can report failures as structured data instead of NaN garbage.

License: AGPL-3.0-or-later
"""

from typing import Any, Dict, Optional


class BeaconFilterError(Exception):
    """Base class for all Beacon-PF errors."""

    kind = "beacon_filter_error"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = dict(context or {})

    def as_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": str(self), "context": dict(self.context)}


class InvalidParameterError(BeaconFilterError, ValueError):
    """Bad construction parameter (variance, particle count, config)."""

    kind = "invalid_parameter"


class DegenerateStateError(BeaconFilterError, ArithmeticError):
    """Weight distribution collapsed (zero or non-finite total weight)."""

    kind = "degenerate_state"


class CallerContractError(BeaconFilterError):
    """``step()`` was called with missing or unusable measurements."""

    kind = "caller_contract_violation"
