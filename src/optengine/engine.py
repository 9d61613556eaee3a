"""Pricing-engine contract shared by every method."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .core import AMERICAN, OptionParams, OptionSpec, PriceOutputs

__all__ = ["PricingEngine", "require_option_spec", "require_exercise"]


class PricingEngine(ABC):
    """One pricing method behind ``price(spec, params) -> PriceOutputs``.

    Engines hold only their configuration, fixed at construction; a call to
    ``price`` reads nothing but its arguments and that configuration.
    """

    @abstractmethod
    def price(self, spec: OptionSpec, params: OptionParams) -> PriceOutputs:
        """Value ``spec`` under ``params``."""

    def __repr__(self) -> str:
        cfg = ", ".join(f"{k}={v!r}" for k, v in self.config().items())
        return f"{type(self).__name__}({cfg})"

    def config(self) -> dict:
        """Engine configuration as a plain dict (for logging / reporting)."""
        return {}


def require_option_spec(spec, engine: str) -> None:
    """Reject anything but a vanilla ``OptionSpec``."""
    if not isinstance(spec, OptionSpec):
        raise ValueError(
            f"{engine} requires an OptionSpec, got {type(spec).__name__}"
        )


def require_exercise(spec, exercise: str, engine: str) -> None:
    """Reject a spec whose exercise style the engine does not support."""
    require_option_spec(spec, engine)
    if spec.exercise != exercise:
        style = "American" if exercise == AMERICAN else "European"
        raise ValueError(f"{engine} requires {style} exercise, got {spec.exercise!r}")
