"""Run the CANSLIM checklist for the tickers on the command line (default: the S&P 500)."""
import sys

from canslim.pipeline import run_pipeline

universe = ",".join(sys.argv[1:]) if len(sys.argv) > 1 else "sp500"
run_pipeline(universe)
sys.exit(0)
