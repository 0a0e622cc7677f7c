"""Root greeting endpoint."""

from fastapi import APIRouter

from app.schemas.hello import HelloResponse

router = APIRouter(tags=["root"])

GREETING = HelloResponse(message="Hello World from GroceryNana Backend!")


@router.get("/", response_model=HelloResponse)
async def hello_world() -> HelloResponse:
    """Return the static greeting; never touches the database."""
    return GREETING
