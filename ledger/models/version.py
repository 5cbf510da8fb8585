from sqlalchemy import Column, Integer

from ledger.database.base import Base


class SchemaVersion(Base):
    __tablename__ = "versions"

    number = Column(Integer, primary_key=True, autoincrement=False)


__all__ = ["SchemaVersion"]
