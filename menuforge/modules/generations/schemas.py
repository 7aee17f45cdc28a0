from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class GenerateRequest(BaseModel):
    generation_id: Optional[str] = None
    file_name: Optional[str] = None
    menu_text: str = Field(..., min_length=1)
    colors: List[str]
    size: str = Field(..., min_length=1)
    style_prompt: Optional[str] = None
    restaurant_name: Optional[str] = None
    slogan: Optional[str] = None
    themes: List[str] = []
    custom_theme_description: Optional[str] = None
    font_style: Optional[str] = None
    layout: Optional[str] = None
    general_description: Optional[str] = None


class GenerateResponse(BaseModel):
    html_variations: List[str]
    generation_id: Optional[str] = None


class GenerationCreate(BaseModel):
    file_name: str = Field(..., min_length=1)
    extracted_text: str = Field(..., min_length=1)
    colors: List[str] = []
    size: str = "a4"
    style_prompt: str = ""


class GenerationResponse(BaseModel):
    id: str
    user_id: str
    file_name: str
    extracted_text: str
    colors: List[str] = []
    size: str
    style_prompt: str = ""
    html_variations: Optional[List[str]] = None
    selected_variation: Optional[int] = None
    is_downloaded: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SelectVariationRequest(BaseModel):
    variation: int


class SelectVariationResponse(BaseModel):
    success: bool
