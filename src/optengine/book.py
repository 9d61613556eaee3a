# book.py
# Batch pricing of a CSV portfolio.
#
# Input CSV format
# ----------------
#     id,S0,K,T,r,sigma,q,kind,method,american,exotic_type,barrier,barrier_type
#     1,100,110,0.5,0.05,0.20,0.0,call,bs,,,,
#     2,100,95,1.0,0.05,0.25,0.01,put,mc,,,,
#     3,100,105,0.5,0.05,0.20,0.0,put,binomial,true,,,
#     4,100,100,1.0,0.05,0.20,0.0,call,exotic,,barrier,120,up-and-out
#
# `american` is only read for lattice rows, the barrier columns only for
# exotic rows; blank cells take the defaults.
#
# Optional engine overrides: n_paths, n_steps, seed.

from __future__ import annotations
import csv
import json
import logging
from pathlib import Path

from .binomial import BinomialCRREngine
from .black_scholes import BlackScholesEngine
from .config import (
    DEFAULT_EXOTIC_PATHS, DEFAULT_EXOTIC_STEPS, DEFAULT_LSMC_PATHS, DEFAULT_LSMC_STEPS,
    DEFAULT_MC_PATHS, DEFAULT_MC_STEPS, DEFAULT_SEED, DEFAULT_TREE_STEPS,
)
from .core import AMERICAN, EUROPEAN, OptionParams, OptionSpec, PathDependentOptionSpec, Payoff
from .exotics import PathDependentMonteCarloEngine
from .lsmc import AmericanLSMCEngine
from .monte_carlo import EuropeanMonteCarloEngine
from .trinomial import TrinomialTreeEngine

logger = logging.getLogger(__name__)

METHODS = ("bs", "binomial", "trinomial", "mc", "lsmc", "exotic")
RESULT_FIELDS = ("id", "method", "price", "stderr",
                 "delta", "gamma", "vega", "theta", "rho")


def _field(row: dict, key: str, default=None) -> str:
    value = row.get(key)
    if value is None or str(value).strip() == "":
        if default is None:
            raise ValueError(f"missing column {key!r}")
        return str(default)
    return str(value).strip()


def _flag(row: dict, key: str) -> bool:
    return _field(row, key, "false").lower() in {"true", "1", "yes", "y"}


def _engine_for(row: dict, method: str):
    paths = lambda d: int(_field(row, "n_paths", d))
    steps = lambda d: int(_field(row, "n_steps", d))
    seed = int(_field(row, "seed", DEFAULT_SEED))

    if method == "bs":
        return BlackScholesEngine()
    if method == "binomial":
        return BinomialCRREngine(steps(DEFAULT_TREE_STEPS))
    if method == "trinomial":
        return TrinomialTreeEngine(steps(DEFAULT_TREE_STEPS))
    if method == "mc":
        return EuropeanMonteCarloEngine(paths(DEFAULT_MC_PATHS), steps(DEFAULT_MC_STEPS), seed)
    if method == "lsmc":
        return AmericanLSMCEngine(paths(DEFAULT_LSMC_PATHS), steps(DEFAULT_LSMC_STEPS), seed)
    if method == "exotic":
        return PathDependentMonteCarloEngine(
            paths(DEFAULT_EXOTIC_PATHS), steps(DEFAULT_EXOTIC_STEPS), seed)
    raise ValueError(f"unknown method {method!r}, expected one of {METHODS}")


def price_row(row: dict) -> dict:
    """Price a single portfolio row and return the result dict."""
    if row.get(None):
        # csv.DictReader files cells past the header under the None key
        raise ValueError(f"row has {len(row[None])} more field(s) than the header")
    method = _field(row, "method").lower()
    kind = _field(row, "kind").lower()
    params = OptionParams(
        S=float(_field(row, "S0")), K=float(_field(row, "K")),
        r=float(_field(row, "r")), q=float(_field(row, "q", 0.0)),
        sigma=float(_field(row, "sigma")), T=float(_field(row, "T")),
    )

    if method == "exotic":
        spec = PathDependentOptionSpec(
            _field(row, "exotic_type").lower(), kind, params.K,
            barrier=float(_field(row, "barrier", 0.0)),
            barrier_type=_field(row, "barrier_type", "up-and-out").lower(),
        )
    else:
        if method == "lsmc":
            exercise = AMERICAN
        elif method in ("binomial", "trinomial") and _flag(row, "american"):
            exercise = AMERICAN
        else:
            exercise = EUROPEAN
        spec = OptionSpec(Payoff(params.K, kind), exercise)

    out = _engine_for(row, method).price(spec, params)
    monte_carlo = method in ("mc", "lsmc", "exotic")
    return {
        "id": row.get("id", ""),
        "method": method,
        "price": out.value,
        "stderr": out.std_error if monte_carlo else None,
        **{g: (None if monte_carlo else getattr(out, g))
           for g in ("delta", "gamma", "vega", "theta", "rho")},
    }


def price_book(rows) -> list:
    """Price every row; a failing row is reported, not fatal."""
    results = []
    for i, row in enumerate(rows):
        try:
            results.append(price_row(row))
        except (ValueError, ArithmeticError) as exc:
            logger.warning("row %d (id=%s) failed: %s", i, row.get("id", "?"), exc)
            results.append({"id": row.get("id", ""), "method": row.get("method", ""),
                            "price": None, "error": str(exc)})
    return results


def read_book(path) -> list:
    with open(path, newline="") as f:
        return list(csv.DictReader(f))


def write_results(results: list, path) -> None:
    """JSON for a ``.json`` suffix, CSV otherwise."""
    path = Path(path)
    if path.suffix == ".json":
        with open(path, "w") as f:
            json.dump(results, f, indent=2, default=str)
        return

    fieldnames = list(RESULT_FIELDS)
    for res in results:
        for key in res:
            if key not in fieldnames:
                fieldnames.append(key)
    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(results)
