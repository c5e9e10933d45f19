"""
Тестовый набор typed dispatch core

Содержит:
- tests/unit/          : Unit-тесты отдельных модулей
"""
