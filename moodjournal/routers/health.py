from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "mood-journal-api"}


@router.get("/health/connectivity")
async def connectivity_check(request: Request):
    """Remote store reachability as last seen by the connectivity probe."""
    gate = request.app.state.connectivity_gate
    if gate.is_online:
        return {"status": "online", "service": "supabase"}
    return {"status": "offline", "service": "supabase"}


@router.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Welcome to the Mood Journal API", "docs": "/docs"}
