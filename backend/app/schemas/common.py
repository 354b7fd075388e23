"""
Base commune des schémas : les corps JSON sont en camelCase (maxMarks, dueDate...),
le snake_case reste accepté en entrée.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class FileReference(CamelModel):
    """Fichier stocké à distance. public_id et resource_type ne sont jamais exposés."""
    url: str
    original_name: str
    mimetype: Optional[str] = None
    size: int = 0


class MessageResponse(CamelModel):
    """Réponse générique pour les opérations sans contenu métier."""
    message: str
