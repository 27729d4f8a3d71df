from pydantic import BaseModel, Field


class RetrieveRequest(BaseModel):
    # Plain string: syntactic checks belong to the validator, not to request parsing
    url: str = Field(..., description="TikTok video URL, scheme optional")
