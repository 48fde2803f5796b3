# Deploy on Replit/Render: set secrets and run 'uvicorn server:app --host=0.0.0.0 --port=8000'
import logging

from standup_pulse.api import create_app

logging.basicConfig(level=logging.INFO, handlers=[logging.StreamHandler()])
logger = logging.getLogger("standup_pulse")

app = create_app()

__all__ = ["app"]
