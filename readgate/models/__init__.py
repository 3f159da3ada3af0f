"""Database models."""
from readgate.models.user import User
from readgate.models.material import Material
from readgate.models.material_progress import MaterialPageProgress, PageProgress

__all__ = [
    "User",
    "Material",
    "MaterialPageProgress",
    "PageProgress",
]
