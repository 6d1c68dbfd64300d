"""
Data access layer.

Services talk to the database only through ``Persistence``, which executes
parametrized SQL and reports inserted ids and affected-row counts.
"""

from perfeval.crud.persistence import Persistence, row_to_dict

__all__ = ["Persistence", "row_to_dict"]
