"""Общие фикстуры тестов."""

from __future__ import annotations

import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_logging_disable():
    logging.disable(logging.NOTSET)
    yield
    logging.disable(logging.NOTSET)
