"""Headless browser sessions."""

from event_pipeline.browser.session import Session, SessionManager, should_block_request

__all__ = ["Session", "SessionManager", "should_block_request"]
