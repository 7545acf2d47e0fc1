"""Core module - acceso al servidor Redis.

Estructura:
- domain/  → Contratos (fuente de estado)
- redis/   → Conexión redis-py y parsing de INFO
"""
