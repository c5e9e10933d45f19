"""
Core — value types, толерантные сравнения, конфигурация и ошибки.

Строительные блоки для диспетчера и factory registry; о конкретных
операциях пакет ничего не знает.
"""
