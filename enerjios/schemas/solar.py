# -*- coding: utf-8 -*-
from typing import Optional, Literal

from pydantic import BaseModel, Field


class SolarProductionIn(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    system_capacity: float = Field(..., gt=0, le=500000)
    tilt: float = Field(30, ge=0, le=90)
    azimuth: float = Field(180, ge=0, lt=360)
    array_type: Literal[
        'fixed_open_rack', 'fixed_roof_mounted', 'one_axis', 'one_axis_backtracking', 'two_axis'
    ] = 'fixed_roof_mounted'
    module_type: Literal['standard', 'premium', 'thin_film'] = 'standard'
    losses: Optional[float] = Field(None, ge=-5, le=99)
