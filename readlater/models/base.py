"""Base model class for all stored records."""

from pydantic import BaseModel


class DBModel(BaseModel):
    """Base model for rows read from the database."""

    class Config:
        """Pydantic config."""

        from_attributes = True
