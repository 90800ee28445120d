"""
Global exception handler for consistent API error responses.
Follows DRF convention and returns uniform structure.
"""
import logging
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
from rest_framework.exceptions import ValidationError
from django.core.exceptions import PermissionDenied, ValidationError as DjangoValidationError
from django.conf import settings

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Custom exception handler that returns:
    { "detail": str, "code": str, "field": str (validation only), "errors": dict (validation only) }
    """
    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, ValidationError):
            response.data = _validation_payload(exc.detail)
            return response
        data = response.data if isinstance(response.data, dict) else {'detail': str(response.data)}
        response.data = {
            'detail': _get_detail(exc) if 'detail' not in data else str(data['detail']),
            'code': _get_code(exc),
        }
        return response

    if isinstance(exc, PermissionDenied):
        return Response(
            {'detail': str(exc) or 'Permission denied', 'code': 'permission_denied'},
            status=status.HTTP_403_FORBIDDEN
        )
    if isinstance(exc, DjangoValidationError):
        return Response(
            {'detail': ' '.join(exc.messages), 'code': 'validation_error'},
            status=status.HTTP_400_BAD_REQUEST
        )

    request = context.get('request') if context else None
    logger.exception('Unhandled exception path=%s: %s', getattr(request, 'path', 'unknown'), exc)
    error_detail = 'An internal error occurred.'
    if settings.DEBUG:
        error_detail = f'An internal error occurred: {str(exc)}'
    # Never expose stack traces to clients
    return Response(
        {'detail': error_detail, 'code': 'internal_error'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def _first_error(detail, prefix=''):
    """Walk nested serializer errors and return (field_path, message) of the first one."""
    if isinstance(detail, dict):
        for key, value in detail.items():
            if isinstance(key, int):
                path = f'{prefix}[{key}]' if prefix else str(key)
            else:
                path = key if not prefix else f'{prefix}.{key}'
            if key == 'non_field_errors':
                path = prefix
            return _first_error(value, path)
        return prefix, 'Invalid input.'
    if isinstance(detail, list):
        for i, value in enumerate(detail):
            if isinstance(value, dict) and value:
                return _first_error(value, f'{prefix}[{i}]' if prefix else str(i))
            if isinstance(value, list) and value:
                return _first_error(value, prefix)
            if value:
                return prefix, str(value)
        return prefix, 'Invalid input.'
    return prefix, str(detail)


def _validation_payload(detail):
    field, message = _first_error(detail)
    payload = {
        'detail': f'{field}: {message}' if field else message,
        'code': 'validation_error',
    }
    if field:
        payload['field'] = field
    if isinstance(detail, dict):
        payload['errors'] = detail
    return payload


def _get_detail(exc):
    if hasattr(exc, 'detail'):
        d = exc.detail
        if isinstance(d, list):
            return str(d[0]) if d else 'Error'
        if isinstance(d, dict):
            return str(d.get('detail', d))
        return str(d)
    return str(exc)


def _get_code(exc):
    codes = {
        'AuthenticationFailed': 'invalid_credentials',
        'NotAuthenticated': 'unauthenticated',
        'InvalidToken': 'unauthenticated',
        'NotFound': 'not_found',
        'Http404': 'not_found',
        'PermissionDenied': 'permission_denied',
        'MethodNotAllowed': 'method_not_allowed',
    }
    name = type(exc).__name__
    if name in codes:
        return codes[name]
    return getattr(exc, 'default_code', None) or 'error'
