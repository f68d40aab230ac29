from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatrelay import config
from chatrelay.api.logs import router as logs_router
from chatrelay.api.presence import router as presence_router
from chatrelay.api.ws_chat import router as ws_chat_router
from chatrelay.chat.relay import ChatRelay
from chatrelay.logging.ndjson import init_logging, log_event


def create_app() -> FastAPI:
    config.load_dotenvs()
    init_logging()
    app = FastAPI(title="Chat Relay", version="0.1.0")
    # One relay per process: every /chat connection shares this registry.
    app.state.relay = ChatRelay()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_exceptions(request, call_next):  # type: ignore[no-untyped-def]
        try:
            return await call_next(request)
        except Exception as e:  # noqa: BLE001
            log_event(
                level="error",
                event="api.exception",
                data={"method": request.method, "path": str(request.url.path), "error": str(e)},
            )
            raise

    log_event(level="info", event="app.startup", data={"corsOrigins": config.cors_origins()})

    app.include_router(presence_router)
    app.include_router(logs_router)
    app.include_router(ws_chat_router)
    return app


app = create_app()
