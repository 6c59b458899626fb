"""Allow ``python -m testa``."""

from testa.cli import main

main()
