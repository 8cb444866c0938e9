"""buildplan package.

Incremental rebuild planning for a package repository:

- buildplan/state    : package snapshots, reference parsing, loaders, diffing
- buildplan/analysis : dependency graph, lifting, build order, cycle diagnosis
- buildplan/planning : composition of the above into one rebuild plan
- buildplan/push     : publishing the ordered plan to the build server

The CLI entry point lives in buildplan_cli.py; command flows live in cli/.
"""

__version__ = "0.4.0"
