import datetime as dt
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional

from models.category import Category


class BudgetBase(BaseModel):
    category: Category
    amount: float = Field(ge=0, allow_inf_nan=False)
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000)


class BudgetCreate(BudgetBase):
    @field_validator("category")
    @classmethod
    def not_income(cls, value):
        if value is Category.INCOME:
            raise ValueError("budgets cannot be set on the Income category")
        return value


class Budget(BudgetBase):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    created_at: Optional[dt.datetime] = Field(default=None, serialization_alias="createdAt")
    updated_at: Optional[dt.datetime] = Field(default=None, serialization_alias="updatedAt")

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, value):
        return str(value)
