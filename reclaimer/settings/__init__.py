"""Подсистема настроек: группы, валидаторы и реестр config.json."""
