from rest_framework.response import Response
from rest_framework import status as http_status


#utility classes and functions to facilitate having consistent api responses
class SuccessResponse(Response):
    def __init__(self, data=None, message=None, status=200, **kwargs):
        resp = {"status": "success", "data": data, "message": message, "success": True}
        super().__init__(data=resp, status=status, **kwargs)


class ErrorResponse(Response):
    def __init__(self, data=None, message=None, status=400, **kwargs):
        resp = {"status": "error", "data": data, "error": message, "success": False}
        super().__init__(data=resp, status=status, **kwargs)


def ledger_error_response(exc):
    """
    Translate a common.exceptions.LedgerError raised by a service into an ErrorResponse
    carrying the status code the error declares.
    """
    return ErrorResponse(message=str(exc), status=getattr(exc, "status_code", http_status.HTTP_400_BAD_REQUEST))


def format_first_error(errors, with_key=True):
    """
    Gets the first message in a serializer.errors, optionally prefixed with the field name

    Parameters:
    errors: The error messages of a serializer i.e serializer.errors
    """
    if isinstance(errors, list):
        return str(errors[0])
    field, error_list = next(iter(errors.items()))
    if isinstance(error_list, list):
        return f"({field}) {error_list[0]}" if with_key else str(error_list[0])
    return format_first_error(error_list, with_key=with_key)
