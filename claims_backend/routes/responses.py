from fastapi import Response, status

from claims_backend.schemas import ActionResult

ERROR_STATUS_CODES = {
    'validation': status.HTTP_400_BAD_REQUEST,
    'authorization': status.HTTP_403_FORBIDDEN,
    'not_found': status.HTTP_404_NOT_FOUND,
    'conflict': status.HTTP_409_CONFLICT,
    'internal': status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def respond(result: ActionResult, response: Response, success_status: int = status.HTTP_200_OK) -> dict:
    """Set the HTTP status from the result's error kind and return the result body."""
    if result.success:
        response.status_code = success_status
    else:
        response.status_code = ERROR_STATUS_CODES.get(result.error, status.HTTP_400_BAD_REQUEST)
    body = result.model_dump()
    return {key: value for key, value in body.items() if value is not None}
