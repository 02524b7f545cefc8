"""
Pydantic response models for the portfolio API
"""
from pydantic import BaseModel, Field
from typing import List


class Link(BaseModel):
    """External link attached to a portfolio item"""
    label: str
    url: str


class PortfolioItem(BaseModel):
    """One retained spreadsheet row"""
    id: int = Field(..., ge=0, description="Zero-based position among retained rows")
    date: str = Field("", description="yyyy-MM-dd, the raw cell text, or empty")
    title: str
    description: str = ""
    image_url: str = Field("", alias="imageUrl")
    tags: List[str] = Field(default_factory=list)
    links: List[Link] = Field(default_factory=list)
    is_commision: bool = Field(False, alias="isCommision")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": 0,
                "date": "2024-04-01",
                "title": "Spring illustration",
                "description": "Key visual for a spring campaign",
                "imageUrl": "https://drive.google.com/open?id=1AbC",
                "tags": ["Illustration", "Key visual"],
                "links": [{"label": "Youtube", "url": "https://youtu.be/xyz"}],
                "isCommision": True
            }
        }


class ImageRecord(BaseModel):
    """Image file from the Drive folder, base64 encoded"""
    name: str = Field(..., description="Drive file id (https://drive.google.com/open?id={name})")
    mime_type: str = Field(..., alias="mimeType")
    data: str = Field(..., description="Base64 encoded file bytes")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "name": "1AbCdEf",
                "mimeType": "image/png",
                "data": "iVBORw0KGgo="
            }
        }


class ErrorResponse(BaseModel):
    """Error envelope returned in place of a result"""
    error: bool = True
    message: str
    status_code: int = Field(500, alias="statusCode")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "error": True,
                "message": "Internal server error: Sheet \"Portfolio\" not found",
                "statusCode": 500
            }
        }
