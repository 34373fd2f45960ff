# Kanban board: cards in status columns, shared-file sync, import/export
#
# Components:
#   schema.py  - Data model (Card, CardStatus, CardPriority, Snapshot)
#   store.py   - Persistence on the key/value store
#   sync.py    - Shared snapshot fetch, version reconciliation, import/export
#   render.py  - Column projection
#   board.py   - Controller (mutations, drag state)
