# Decision map: strategic choices as nodes, options linking to other decisions
#
# Components:
#   schema.py      - Data model (Decision, Option, DecisionStatus)
#   store.py       - Persistence on the key/value store
#   geometry.py    - Rects, points and the Layout measurement interface
#   connectors.py  - Curves from a linked option to its target node
#   render.py      - Node projection, evaluation formatting
#   map.py         - Controller (mutations, toggle, links, drag)
