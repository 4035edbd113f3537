"""Allow ``python -m create_fde_app``."""

from create_fde_app.cli import main

main()
