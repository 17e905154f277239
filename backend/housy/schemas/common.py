from pydantic import BaseModel


class ActionResponse(BaseModel):
    success: bool = True
    error: str | None = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    code: str
