import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException

from ..sequencer.runner import SequencerRunner
from .models import BaseResponse, RunnerStatus

logger = logging.getLogger(__name__)


def init_app(runner: Optional[SequencerRunner] = None) -> FastAPI:
    """Create and configure the status API for a sequencer run"""
    app = FastAPI(
        title="PnP Control API",
        description="Pick and place sequencer status",
        version="1.0.0",
    )
    app.state.runner = runner

    def get_runner() -> SequencerRunner:
        """Dependency injection for the sequencer runner"""
        if app.state.runner is None:
            raise HTTPException(
                status_code=503,
                detail="Sequencer runner not initialized",
            )
        return app.state.runner

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        runner = app.state.runner
        return {
            "status": "healthy" if runner is not None else "starting",
            "running": runner.is_running if runner else False,
        }

    @app.get("/api/state", response_model=RunnerStatus)
    async def get_state(runner: SequencerRunner = Depends(get_runner)):
        """Current sequencer state and loop timing"""
        return runner.get_state()

    @app.post("/api/quit", response_model=BaseResponse)
    async def quit_run(runner: SequencerRunner = Depends(get_runner)):
        """Request a cooperative stop of the control loop"""
        runner.request_quit()
        logger.info("Quit requested through API")
        return BaseResponse(status="success", message="Quit requested")

    return app
