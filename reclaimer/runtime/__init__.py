"""Доступ к Docker daemon через docker SDK (проверка доступности, оценка места)."""
