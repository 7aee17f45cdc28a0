from pydantic import BaseModel


class ExtractTextResponse(BaseModel):
    text: str
