from fastapi import APIRouter

from ..schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health():
	return HealthResponse(status="OK", message="CloseTheLoop API is running")
