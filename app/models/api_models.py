from pydantic import BaseModel

# --- Outgoing Response Models ---

class SuccessResponse(BaseModel):
    success: bool = True

class BookingCreatedResponse(SuccessResponse):
    id: int

class ErrorResponse(BaseModel):
    error: str
