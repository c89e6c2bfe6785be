from pydantic import BaseModel, ConfigDict, Field, StrictInt
from typing import Optional, Tuple
from datetime import datetime

RGB = Tuple[int, int, int]


class MeasurementCreate(BaseModel):
    """Body of POST /api/measurements, as sent by the sensor."""
    red: Optional[StrictInt] = None
    green: Optional[StrictInt] = None
    blue: Optional[StrictInt] = None

    def as_triple(self) -> Tuple[Optional[int], Optional[int], Optional[int]]:
        return (self.red, self.green, self.blue)


class RawMeasurement(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    red: int
    green: int
    blue: int
    created_at: datetime = Field(alias="createdAt")

    @property
    def triple(self) -> RGB:
        return (self.red, self.green, self.blue)


class HSL(BaseModel):
    model_config = ConfigDict(frozen=True)

    h: int = Field(ge=0, lt=360)
    s: int = Field(ge=0, le=100)
    l: int = Field(ge=0, le=100)


class LAB(BaseModel):
    model_config = ConfigDict(frozen=True)

    l: int = Field(ge=0, le=100)
    a: int
    b: int


class ProcessedColor(BaseModel):
    """Derived description of a (smoothed, calibrated) color. Never persisted."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rgb_averaged: RGB = Field(alias="rgbAveraged")
    hex: str
    hsl: Optional[HSL] = None
    lab: Optional[LAB] = None
    nearest_name: Optional[str] = Field(default=None, alias="nearestName")


class LiveColorResponse(BaseModel):
    measurement: RawMeasurement
    color: ProcessedColor
