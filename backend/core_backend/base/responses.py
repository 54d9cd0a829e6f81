from rest_framework import status as http_status
from rest_framework.response import Response


def service_response(result, data=None, status=http_status.HTTP_200_OK):
    """
    Render a ServiceResult as a tagged success payload.

    data overrides result.data, typically with serialized output.
    """
    return Response(
        {
            "success": True,
            "data": result.data if data is None else data,
            "warnings": result.warnings_as_dicts(),
        },
        status=status,
    )
