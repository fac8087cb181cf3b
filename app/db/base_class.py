from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    """Declarative base shared by every model; ``Base.metadata`` creates the schema."""
