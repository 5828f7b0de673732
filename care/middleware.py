class CaseInsensitiveApiPathMiddleware:
    """Lower-case ``/api/...`` paths so ``/api/Notification/unread-count`` resolves.

    Only the path is rewritten; the query string is left untouched.
    """
    PREFIX = '/api/'

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path_info or ''
        if path[:len(self.PREFIX)].lower() == self.PREFIX and path != path.lower():
            request.path_info = path.lower()
            request.path = request.path.lower()
        return self.get_response(request)
