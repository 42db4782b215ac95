import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Cookie, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from backend import Backend
from shoplist.auth_gate import Decision
from shoplist.db_helpers import CORS_ALLOW_ORIGINS, HOST, PORT
from shoplist.errors import AuthError

logger = logging.getLogger("shoplist_server")

SESSION_COOKIE = "session_token"
COOKIE_MAX_AGE = 24 * 3600


class LoginRequest(BaseModel):
    pin: str = ""


class NameRequest(BaseModel):
    name: str = ""


class AddItemRequest(BaseModel):
    list_id: int
    name: str = ""


class ForgetRequest(BaseModel):
    list_id: int
    name: str


def _see_other(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def create_app(backend: Optional[Backend] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.backend is None:
            app.state.backend = Backend()
        logger.info(f"Server ready (PIN enabled: {app.state.backend.auth.enabled})")
        yield
        if app.state.backend is not None:
            app.state.backend.close()

    app = FastAPI(title="Shopping Lists", version="1.0.0", lifespan=lifespan)
    app.state.backend = backend

    if CORS_ALLOW_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=CORS_ALLOW_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def get_backend(request: Request) -> Backend:
        return request.app.state.backend

    def protected(
        backend: Backend = Depends(get_backend),
        session_token: Optional[str] = Cookie(default=None),
    ) -> Backend:
        if backend.auth.authorize(session_token) is Decision.DENY:
            raise HTTPException(status_code=303, headers={"Location": "/login"})
        return backend

    # --- Auth ---

    @app.get("/login")
    def login_page(backend: Backend = Depends(get_backend)):
        return {"pin_enabled": backend.auth.enabled}

    @app.post("/login")
    def login(req: LoginRequest, backend: Backend = Depends(get_backend)):
        try:
            token = backend.auth.authenticate(req.pin)
        except AuthError as e:
            return JSONResponse(status_code=401, content={"detail": str(e)})

        response = JSONResponse(content={"status": "success"})
        response.set_cookie(
            key=SESSION_COOKIE,
            value=token,
            max_age=COOKIE_MAX_AGE,
            httponly=True,
            path="/",
        )
        return response

    @app.api_route("/logout", methods=["GET", "POST"])
    def logout(
        backend: Backend = Depends(get_backend),
        session_token: Optional[str] = Cookie(default=None),
    ):
        backend.auth.logout(session_token)
        response = _see_other("/login")
        response.delete_cookie(SESSION_COOKIE, path="/")
        return response

    # --- Pages ---

    @app.get("/")
    def index(backend: Backend = Depends(protected)):
        list_id = backend.landing_list_id()
        if list_id is None:
            return _see_other("/manage")
        return _see_other(f"/list/{list_id}")

    @app.get("/manage")
    def manage(backend: Backend = Depends(protected)):
        return backend.page_data(0, show_manager=True)

    @app.get("/list/{list_id}")
    def list_view(list_id: int, backend: Backend = Depends(protected)):
        return backend.page_data(list_id)

    # --- Lists ---

    @app.post("/lists/add")
    def create_list(req: NameRequest, backend: Backend = Depends(protected)):
        backend.create_list(req.name)
        return _see_other("/manage")

    @app.post("/lists/edit/{list_id}")
    def edit_list(list_id: int, req: NameRequest, backend: Backend = Depends(protected)):
        backend.rename_list(list_id, req.name)
        return _see_other("/manage")

    @app.post("/lists/delete/{list_id}")
    def delete_list(list_id: int, backend: Backend = Depends(protected)):
        backend.delete_list(list_id)
        return _see_other("/manage")

    # --- Items ---

    @app.post("/items/add")
    def add_item(req: AddItemRequest, backend: Backend = Depends(protected)):
        return backend.add_item(req.list_id, req.name)

    @app.post("/items/edit/{item_id}")
    def edit_item(item_id: int, req: NameRequest, backend: Backend = Depends(protected)):
        return backend.rename_item(item_id, req.name)

    @app.post("/items/toggle/{item_id}")
    def toggle_item(item_id: int, backend: Backend = Depends(protected)):
        return backend.toggle_item(item_id)

    @app.post("/items/delete/{item_id}")
    def delete_item(item_id: int, backend: Backend = Depends(protected)):
        return backend.delete_item(item_id)

    @app.post("/items/forget/{item_id}")
    def forget_item(item_id: int, backend: Backend = Depends(protected)):
        return backend.forget_item(item_id)

    @app.post("/memory/forget")
    def forget_suggestion(req: ForgetRequest, backend: Backend = Depends(protected)):
        return backend.forget_suggestion(req.list_id, req.name)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
