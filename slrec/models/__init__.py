"""Regression models for sea level reconstruction."""

from slrec.models.base_model import BaseModel, ModelArtifact

__all__ = ["BaseModel", "ModelArtifact"]
