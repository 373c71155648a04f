from pydantic import BaseModel, Field


class PriceTableBase(BaseModel):
    child: int = Field(ge=0)
    adult: int = Field(ge=0)


class PriceTableUpdate(PriceTableBase):
    pass


class PriceTableResponse(PriceTableBase):

    class Config:
        from_attributes = True
