from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List


class LevelsRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    base_price: float = Field(gt=0, allow_inf_nan=False)
    symbol: str = Field(min_length=1)


class GenerateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    symbol: str = Field(min_length=1)


class LevelSetResponse(BaseModel):
    symbol: str
    base_price: float
    base: int
    raw_levels: List[int]
    adjusted_levels: List[int]
    labels: Dict[str, int]
    script: str
    provider: str = "direct"  # "direct" when the price came in the request
