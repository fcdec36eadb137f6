"""
Base models and configuration for the Drive downloader.

This module provides the foundation for all data models using Pydantic v2.
"""

from pydantic import BaseModel, ConfigDict


class BaseDriveModel(BaseModel):
    """
    Base model for all downloader data structures.

    Accepts both the Drive API's camelCase keys and the Python field names,
    so API responses can be validated without renaming.
    """

    model_config = ConfigDict(
        # Enable validation on assignment
        validate_assignment=True,
        # Drive responses use aliases, our own code uses field names
        populate_by_name=True,
        # Ignore extra fields returned by the API
        extra="ignore",
        # Validate default values
        validate_default=True,
        # Enable arbitrary types for Path objects
        arbitrary_types_allowed=True,
    )
