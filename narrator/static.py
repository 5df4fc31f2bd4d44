"""
Static file serving for the built frontend.
"""
from starlette.exceptions import HTTPException
from starlette.staticfiles import StaticFiles
from starlette.types import Scope


class FrontendStaticFiles(StaticFiles):
    """
    Serves the built frontend, falling back to ``index.html`` for unknown paths
    so client-side routes load the app instead of a 404.
    """

    def __init__(self, directory: str):
        super().__init__(directory=directory, html=True)

    async def get_response(self, path: str, scope: Scope):
        try:
            return await super().get_response(path, scope)
        except HTTPException as e:
            if e.status_code != 404:
                raise
            return await super().get_response('index.html', scope)
