"""Allow `python -m rlaunch`."""

from rlaunch.cli import main

raise SystemExit(main())
