"""
Credit ledger ("utang") module.

Pure pieces (no DB): balance, status, allocation.
DB-backed services: history, queries.
Presentation edge: model (Qt table models), actions (ActionResult wrappers),
statement (printable HTML/PDF).

Submodules are imported directly; repositories import the pure pieces, so
this package keeps no eager imports.
"""
