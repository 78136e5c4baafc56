"""Service exception to HTTP response mapping."""

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException

from laundry.services.exceptions import ConflictError, NotFoundError, StoreUnavailable, ValidationError


@contextmanager
def service_errors() -> Iterator[None]:
    """Translate service exceptions raised inside the block into HTTPException.

    Usage:
        with service_errors():
            order = await service.get_order(ticket_number)
    """
    try:
        yield
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail="Storage temporarily unavailable, try again") from e
