"""
Shared fixtures: fake requests sessions that replay a scripted redirect chain.
"""

from unittest.mock import MagicMock

import pytest


def _make_response(status_code, location=None):
    response = MagicMock()
    response.status_code = status_code
    response.headers = {'Location': location} if location is not None else {}
    return response


@pytest.fixture
def redirect_chain():
    """
    Build a fake session from a list of steps.

    Each step is a (status_code, location) tuple, or an exception instance to
    raise from session.get().
    """
    def _build(*steps):
        side_effect = []
        for step in steps:
            if isinstance(step, BaseException):
                side_effect.append(step)
            else:
                side_effect.append(_make_response(*step))
        session = MagicMock()
        session.get.side_effect = side_effect
        return session
    return _build
