from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness check")
def health():
    return {"status": "ok", "message": "Currency Converter API is running"}
