from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
async def health_check():
    return {
        "status": "ok",
        "name": "chat-export-service",
        "version": "0.1.0",
    }
