# models/configs.py

from pydantic import BaseModel


class ConfigValue(BaseModel):
    key: str
    label: str
    sortOrder: int


class Config(BaseModel):
    """A named option list the client renders as a select"""

    key: str
    name: str
    value: list[ConfigValue]
