import argparse
import logging

from .binomial import BinomialCRREngine
from .book import price_book, read_book, write_results
from .black_scholes import BlackScholesEngine
from .config import (
    DEFAULT_BUMP, DEFAULT_EXOTIC_PATHS, DEFAULT_EXOTIC_STEPS, DEFAULT_LSMC_DEGREE,
    DEFAULT_LSMC_PATHS, DEFAULT_LSMC_STEPS, DEFAULT_MC_PATHS, DEFAULT_MC_STEPS,
    DEFAULT_SEED, DEFAULT_TREE_STEPS,
)
from .core import (
    AMERICAN, BARRIER_TYPES, CALL, EUROPEAN, EXOTIC_TYPES, PUT, UP_AND_OUT,
    OptionParams, OptionSpec, PathDependentOptionSpec, Payoff,
)
from .exotics import PathDependentMonteCarloEngine
from .lsmc import AmericanLSMCEngine
from .monte_carlo import EuropeanMonteCarloEngine
from .processes import VARIANCE_REDUCTION_MODES, VarianceReduction
from .trinomial import TrinomialTreeEngine

logger = logging.getLogger(__name__)


def _kind(s: str):
    s = s.lower()
    if s in {"call", "c"}:
        return CALL
    if s in {"put", "p"}:
        return PUT
    raise argparse.ArgumentTypeError("kind must be 'call' or 'put'")

def add_common(parser: argparse.ArgumentParser):
    parser.add_argument("--S0", type=float, required=True)
    parser.add_argument("--K", type=float, required=True)
    parser.add_argument("--T", type=float, required=True, help="years")
    parser.add_argument("--r", type=float, required=True, help="cont. risk-free")
    parser.add_argument("--sigma", type=float, required=True)
    parser.add_argument("--q", type=float, default=0.0, help="cont. dividend yield")
    parser.add_argument("--kind", type=_kind, default=CALL, help="call|put")

def add_mc(parser: argparse.ArgumentParser, n_paths: int, steps: int):
    parser.add_argument("--n-paths", dest="n_paths", type=int, default=n_paths)
    parser.add_argument("--steps", type=int, default=steps, help="time steps")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    parser.add_argument("--vr", choices=VARIANCE_REDUCTION_MODES,
                        default=VarianceReduction.NONE, help="variance reduction")

def _params(args) -> OptionParams:
    return OptionParams(S=args.S0, K=args.K, r=args.r, q=args.q, sigma=args.sigma, T=args.T)

def _spec(args, exercise=None) -> OptionSpec:
    if exercise is None:
        exercise = AMERICAN if getattr(args, "american", False) else EUROPEAN
    return OptionSpec(Payoff(args.K, args.kind), exercise)

def _greeks_line(out) -> str:
    return (f"{out.value:.10f}  (delta {out.delta:.6f}  gamma {out.gamma:.6f}"
            f"  vega {out.vega:.6f}  theta {out.theta:.6f}  rho {out.rho:.6f})")

def _mc_line(out) -> str:
    return f"{out.value:.10f}  (stderr {out.std_error:.10f})"

def cmd_bs(args):
    out = BlackScholesEngine().price(_spec(args, EUROPEAN), _params(args))
    print(_greeks_line(out))

def cmd_binomial(args):
    out = BinomialCRREngine(args.N, args.bump).price(_spec(args), _params(args))
    print(_greeks_line(out))

def cmd_trinomial(args):
    out = TrinomialTreeEngine(args.N, args.bump).price(_spec(args), _params(args))
    print(_greeks_line(out))

def cmd_mc(args):
    engine = EuropeanMonteCarloEngine(args.n_paths, args.steps, args.seed, args.vr)
    print(_mc_line(engine.price(_spec(args, EUROPEAN), _params(args))))

def cmd_lsmc(args):
    engine = AmericanLSMCEngine(args.n_paths, args.steps, args.seed, args.degree, args.vr)
    print(_mc_line(engine.price(_spec(args, AMERICAN), _params(args))))

def cmd_exotic(args):
    spec = PathDependentOptionSpec(args.type, args.kind, args.K,
                                   barrier=args.barrier, barrier_type=args.barrier_type)
    engine = PathDependentMonteCarloEngine(args.n_paths, args.steps, args.seed, args.vr)
    print(_mc_line(engine.price(spec, _params(args))))

def cmd_book(args):
    results = price_book(read_book(args.input))
    write_results(results, args.output)
    failed = sum(1 for res in results if res.get("price") is None)
    logger.info("priced %d positions, %d failed", len(results) - failed, failed)
    print(f"{len(results) - failed} priced, {failed} failed -> {args.output}")

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="optengine", description="Options pricing CLI")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    # BS
    p_bs = sub.add_parser("bs", help="Black-Scholes price and Greeks")
    add_common(p_bs)
    p_bs.set_defaults(func=cmd_bs)

    # Lattices
    for name, func, helptext in (
        ("binomial", cmd_binomial, "CRR binomial price"),
        ("trinomial", cmd_trinomial, "trinomial tree price"),
    ):
        p_tree = sub.add_parser(name, help=helptext)
        add_common(p_tree)
        p_tree.add_argument("--N", type=int, default=DEFAULT_TREE_STEPS)
        p_tree.add_argument("--bump", type=float, default=DEFAULT_BUMP,
                            help="log-spot shock for delta/gamma")
        p_tree.add_argument("--american", action="store_true")
        p_tree.set_defaults(func=func)

    # Monte Carlo (GBM terminal)
    p_mc = sub.add_parser("mc", help="European Monte Carlo price (GBM)")
    add_common(p_mc)
    add_mc(p_mc, DEFAULT_MC_PATHS, DEFAULT_MC_STEPS)
    p_mc.set_defaults(func=cmd_mc)

    # Longstaff-Schwartz
    p_lsmc = sub.add_parser("lsmc", help="American Longstaff-Schwartz price")
    add_common(p_lsmc)
    add_mc(p_lsmc, DEFAULT_LSMC_PATHS, DEFAULT_LSMC_STEPS)
    p_lsmc.add_argument("--degree", type=int, default=DEFAULT_LSMC_DEGREE,
                        help="Laguerre basis degree")
    p_lsmc.set_defaults(func=cmd_lsmc)

    # Path-dependent
    p_ex = sub.add_parser("exotic", help="Asian / barrier / lookback Monte Carlo price")
    add_common(p_ex)
    add_mc(p_ex, DEFAULT_EXOTIC_PATHS, DEFAULT_EXOTIC_STEPS)
    p_ex.add_argument("--type", choices=EXOTIC_TYPES, required=True)
    p_ex.add_argument("--barrier", type=float, default=0.0)
    p_ex.add_argument("--barrier-type", dest="barrier_type", choices=BARRIER_TYPES,
                      default=UP_AND_OUT)
    p_ex.set_defaults(func=cmd_exotic)

    # Batch
    p_book = sub.add_parser("book", help="price a CSV portfolio")
    p_book.add_argument("--input", required=True, help="portfolio CSV")
    p_book.add_argument("--output", required=True, help="output path (.csv or .json)")
    p_book.set_defaults(func=cmd_book)
    return p

def main(argv=None):
    p = build_parser()
    args = p.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        args.func(args)
    except ValueError as exc:
        p.error(str(exc))
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
