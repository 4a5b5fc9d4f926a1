"""Run ``python -m fibsterm``."""
from .client import main

main()
