from fastapi import HTTPException

from mealplan.utilities.errors import PlanAccessError, PlanNotFoundError, PlanStateError


def to_http_error(error: Exception) -> HTTPException:
    if isinstance(error, PlanNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, PlanAccessError):
        return HTTPException(status_code=403, detail=str(error))
    if isinstance(error, PlanStateError):
        return HTTPException(status_code=400, detail=str(error))
    return HTTPException(status_code=500, detail="Internal error")
