"""Exchange controller exports."""

from .controller import ExchangeController, ExchangeOutcome, ExchangeState

__all__ = ["ExchangeController", "ExchangeOutcome", "ExchangeState"]
