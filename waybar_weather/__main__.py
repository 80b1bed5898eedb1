# ABOUTME: Allows running the widget as `python -m waybar_weather`.
# ABOUTME: Delegates to the CLI entry point.

import sys

from waybar_weather.cli import main

sys.exit(main())
