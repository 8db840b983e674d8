"""
__init__.py — Package Initialization File
-----------------------------------------

This file marks the directory as a Python package.

Although intentionally left empty, its presence allows Python to recognize the folder
as part of the module structure. The ORM base, engine and session factory live in
`db.db`; the location term tables in `db.location_model`; the term store in
`db.term_store`.

No initialization logic is required at this level.
"""
