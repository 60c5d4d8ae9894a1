"""Allow ``python -m ffkit``."""

from ffkit.cli import main

main()
