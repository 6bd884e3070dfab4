from pydantic import BaseModel, ConfigDict


class MenuItem(BaseModel):
    """Entry of the admin side menu"""

    label: str
    icon: str
    url: str

    model_config = ConfigDict(frozen=True)


class CrudColumn(BaseModel):
    name: str
    label: str
