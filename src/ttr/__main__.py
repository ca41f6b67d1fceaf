"""Allow ``python -m ttr``."""

from ttr.cli import main

main()
