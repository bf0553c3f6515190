# composition_service/application/dtos/base_dto.py

from pydantic import BaseModel, ConfigDict


class CustomBaseModel(BaseModel):
    """Base for every DTO: reads ORM attributes and trims strings."""
    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)
