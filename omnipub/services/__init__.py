"""Upload services: data model and rendering.

The processor and coordinator live in their own modules and are imported
from there (they depend on :mod:`omnipub.core`, which depends on the model).
"""

from .models import ArticleRecord, RenderedItem, RunSummary, UploadJob, UploadOutcome
from .renderer import render

__all__ = [
    "ArticleRecord",
    "RenderedItem",
    "RunSummary",
    "UploadJob",
    "UploadOutcome",
    "render",
]
