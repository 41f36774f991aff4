"""
Progress Panel - Monthly bookkeeping progress for accounting firms

Tracks which monthly bookkeeping tasks are done for each client and
turns that into:
- Overall progress and clients needing attention
- A client x month progress matrix
- Task status composition
- Per-staff performance scorecards
- The client list with unattended months

Packages:
- records: input data model
- analytics: the aggregation engine (pure functions)
- data_access: data source contract and snapshot loading
- services: analysis facade
- api: FastAPI routes
"""

__version__ = "1.0.0"
