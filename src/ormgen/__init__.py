"""ormgen - compile annotated record definitions into CRUD database access code."""

__version__ = "0.1.0"
