# Shed board: project kanban board and decision map
#
# Components:
#   storage.py    - SQLite key/value store (one JSON document per key)
#   config.py     - YAML configuration
#   errors.py     - Exception hierarchy
#   kanban/       - Cards, board controller, remote snapshot sync
#   decisions/    - Decisions, options, link connectors, map controller
