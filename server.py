"""
Diary Proxy
===========
Запуск: python server.py
Настройки берутся из окружения (OPENROUTER_API_KEY, FRONTEND_API_KEY, ...).
"""

from diary_proxy.server import main

if __name__ == "__main__":
    main()
