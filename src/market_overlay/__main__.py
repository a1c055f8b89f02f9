"""Allow running the overlay server as: python -m market_overlay [--config path]."""

from market_overlay.api.runner import main

main()
