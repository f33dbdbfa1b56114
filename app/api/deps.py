from fastapi import Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..models.practitioner import Practitioner
from ..services.availability_service import AvailabilityService

async def get_availability_service(
    db: Session = Depends(get_db)
) -> AvailabilityService:
    return AvailabilityService(db)

async def get_practitioner(
    practitioner_id: int,
    service: AvailabilityService = Depends(get_availability_service)
) -> Practitioner:
    """Resolve the practitioner named in the path, or 404."""
    return service.get_practitioner(practitioner_id)

# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Basic per-client rate limiting for write endpoints."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{request.url.path}:{client_ip}"
    
    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, settings.RATE_LIMIT_WINDOW_SECONDS, 1)
    else:
        if int(current_requests) >= settings.RATE_LIMIT_MAX_REQUESTS:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later."
            )
        redis_client.incr(key)
