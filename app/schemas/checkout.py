from pydantic import BaseModel, Field

class CheckoutSessionCreate(BaseModel):
    product_id: int = Field(..., gt=0)

class CheckoutSessionOut(BaseModel):
    id: str
    url: str
