from .user import Base, User  # noqa: F401  → registers the table with Base.metadata
