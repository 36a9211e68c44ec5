"""HTTP service mode."""

from reposcope.service.app import create_app, run_service

__all__ = ["create_app", "run_service"]
