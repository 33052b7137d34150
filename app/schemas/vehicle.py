from pydantic import BaseModel


class VehicleDetails(BaseModel):
    vin: str
    year: int
    make: str
    model: str
    trim: str
    body_style: str
    engine: str
    transmission: str
