import datetime as dt
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional

from models.category import Category


def parse_date(value):
    """Accepte 'YYYY-MM-DD' ou un datetime ISO complet (ex: '2023-04-15T00:00:00.000Z')"""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, str) and len(value.strip()) > 10:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return dt.datetime.fromisoformat(text).date()
        except ValueError:
            return value
    return value


def check_description(value):
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("description must not be empty")
    return value


class TransactionBase(BaseModel):
    amount: float = Field(allow_inf_nan=False)
    description: str
    date: dt.date

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, value):
        return parse_date(value)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value):
        return check_description(value)


class TransactionCreate(TransactionBase):
    category: Optional[Category] = None

    @model_validator(mode="after")
    def default_category(self):
        # Revenu si montant positif, sinon "Other"
        if self.category is None:
            self.category = Category.INCOME if self.amount > 0 else Category.OTHER
        return self


class TransactionUpdate(BaseModel):
    """Mise à jour partielle : seuls les champs fournis (non nuls) sont appliqués"""
    amount: Optional[float] = Field(default=None, allow_inf_nan=False)
    description: Optional[str] = None
    date: Optional[dt.date] = None
    category: Optional[Category] = None

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, value):
        return parse_date(value)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value):
        return check_description(value)

    def changes(self) -> dict:
        # amount=0 est une valeur valide, seul None signifie "non fourni"
        return self.model_dump(exclude_none=True)


class Transaction(TransactionBase):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    category: str
    created_at: Optional[dt.datetime] = Field(default=None, serialization_alias="createdAt")
    updated_at: Optional[dt.datetime] = Field(default=None, serialization_alias="updatedAt")

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, value):
        return str(value)
