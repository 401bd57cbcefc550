"""Entry point: python -m planner"""

from planner.server import main

main()
