"""OpenAPI response descriptions shared by the entity routers."""

from invoicer.schemas.api import ErrorResponse

_ERRORS = {
    400: {"description": "Invalid request parameter", "model": ErrorResponse},
    401: {"description": "Missing or invalid API token", "model": ErrorResponse},
    429: {"description": "Hourly request limit reached", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}

LIST_RESPONSES = {
    200: {"description": "Envelope with the page of records under `data` and pagination under `meta`"},
    **_ERRORS,
}

ITEM_RESPONSES = {
    200: {"description": "Envelope with the record under `data`"},
    404: {"description": "Record not found", "model": ErrorResponse},
    **_ERRORS,
}
