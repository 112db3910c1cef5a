"""
Channel Hub Backend Package.

FastAPI service layer for the sales/marketing dashboard's channel management:
UTM sub-channel overlap validation and the sub-channel directory.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, and dependencies
    - models: Pydantic schemas and enums
    - services: Overlap validation and directory services
    - sql: Parameterized SQL queries
"""

__version__ = "1.0.0"
