from typing import List

from fastapi import APIRouter, FastAPI, Request, status

from ladder_helper.models.schema_models import StrandedSessionSchema

ops_router = APIRouter()


class OpsAPI:
    @staticmethod
    @ops_router.get("/health")
    async def health(request: Request):
        return {
            "status": "ok",
            "worker_id": request.app.state.worker_id,
            "in_flight": request.app.state.dispatcher.in_flight,
        }

    @staticmethod
    @ops_router.get("/sessions/stranded", response_model=List[StrandedSessionSchema])
    async def list_stranded_sessions(request: Request):
        return await request.app.state.store.read_stranded_sessions()

    @staticmethod
    @ops_router.post("/sessions/{main_bot_game_id}/replay", status_code=status.HTTP_202_ACCEPTED)
    async def replay_session(main_bot_game_id: str, request: Request):
        """Dispatch one claim attempt; only pending sessions will be played."""
        request.app.state.dispatcher.dispatch(main_bot_game_id)
        return {"dispatched": main_bot_game_id}


def create_ops_app(store, dispatcher, worker_id: str) -> FastAPI:
    app = FastAPI(title="ladder-helper ops")
    app.state.store = store
    app.state.dispatcher = dispatcher
    app.state.worker_id = worker_id
    app.include_router(ops_router)
    return app
