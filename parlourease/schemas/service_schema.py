"""Service catalog data models."""

from pydantic import BaseModel, Field, field_validator

from parlourease.normalization import ICONS, ServiceGlyph, resolve_icon


class Service(BaseModel):
    """A catalog offering as read back from the store."""
    id: str
    name: str
    price: float
    duration: int
    icon: str = "Hand"

    @property
    def glyph(self) -> ServiceGlyph:
        return resolve_icon(self.icon)


class ServiceCreate(BaseModel):
    """Validated add-service form data."""
    name: str = Field(min_length=2)
    price: float = Field(gt=0)
    duration: int = Field(gt=0)
    icon: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Service name must be at least 2 characters.")
        return value

    @field_validator("icon")
    @classmethod
    def check_icon(cls, value: str) -> str:
        if value not in ICONS:
            raise ValueError(f"Please select an icon. Choose one of: {', '.join(ICONS)}")
        return value

    def to_document(self) -> dict:
        return {
            "name": self.name,
            "price": self.price,
            "duration": self.duration,
            "icon": self.icon,
        }
