import logging
import time

logger = logging.getLogger(__name__)


class RequestLogMiddleware:
    """Log API mutations with their outcome and duration."""
    LOGGED_METHODS = ('POST', 'PUT', 'PATCH', 'DELETE')

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.method not in self.LOGGED_METHODS or not (request.path or '').startswith('/api/'):
            return self.get_response(request)
        started = time.monotonic()
        response = self.get_response(request)
        user = getattr(request, 'user', None)
        logger.info(
            '%s %s -> %s in %.0fms (user=%s)',
            request.method,
            request.path,
            response.status_code,
            (time.monotonic() - started) * 1000,
            getattr(user, 'username', None) or '-',
        )
        return response
